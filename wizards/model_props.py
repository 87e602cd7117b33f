# wizards/model_props.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional
import os

import commentjson
from dotenv import load_dotenv

load_dotenv()

WIZARD_MODELS_PATH = os.getenv("WIZARD_MODELS_PATH")
LLM_TIMEOUT = float(os.getenv("LLM_TIMEOUT", "60"))


@dataclass(frozen=True)
class ModelProps:
    model_name: str
    temperature: Optional[float] = None


# One entry per generation purpose. WIZARD_MODELS_PATH may override any of them.
DEFAULT_MODEL_TABLE: Dict[str, Dict[str, Any]] = {
    "purpose": {"model": "gpt-4o-mini"},
    "audience": {"model": "gpt-4o-mini"},
    "event_field": {"model": "gpt-4o", "temperature": 0.3},
    "event_field_analysis": {"model": "gpt-4o-mini", "temperature": 0.2},
    "bento_ranking": {"model": "gpt-4o-mini", "temperature": 0.4},
    "frame_content": {"model": "gpt-4o", "temperature": 0.5},
    "frame_generator": {"model": "gpt-4o", "temperature": 0.7},
    "frame_helper": {"model": "gpt-4o"},
    "assistant": {"model": "gpt-4o-mini"},
}


def _load_model_table(path: str | None) -> Dict[str, Dict[str, Any]]:
    """
    Merge the JSON-with-comments override file (if any) over DEFAULT_MODEL_TABLE.
    Fails fast on a missing file or a malformed entry.
    """
    table = {k: dict(v) for k, v in DEFAULT_MODEL_TABLE.items()}
    if not path:
        return table

    cfg_path = Path(path)
    if not cfg_path.exists():
        raise FileNotFoundError(f"Wizard model config file not found at '{cfg_path}'.")

    with cfg_path.open("r", encoding="utf-8") as f:
        data = commentjson.load(f)

    if not isinstance(data, dict):
        raise ValueError("Wizard model config must be a JSON object keyed by purpose")

    for key, entry in data.items():
        if key not in table:
            raise ValueError(f"Wizard model config: unknown purpose '{key}'")
        if not isinstance(entry, dict) or not isinstance(entry.get("model"), str) or not entry["model"].strip():
            raise ValueError(f"Wizard model config: purpose '{key}' needs a non-empty 'model'")
        temperature = entry.get("temperature")
        if temperature is not None and not isinstance(temperature, (int, float)):
            raise ValueError(f"Wizard model config: purpose '{key}' has a non-numeric temperature")
        table[key] = {"model": entry["model"].strip(), "temperature": temperature}

    return table


MODEL_TABLE: Dict[str, Dict[str, Any]] = _load_model_table(WIZARD_MODELS_PATH)


def get_model_props(purpose: str) -> ModelProps:
    entry = MODEL_TABLE.get(purpose)
    if entry is None:
        raise ValueError(f"get_model_props: no model configured for purpose '{purpose}'")
    return ModelProps(model_name=entry["model"], temperature=entry.get("temperature"))


def is_openai_model(model_name) -> bool:
    prefixes = ("gpt-", "gpt4", "o1", "o3", "o4")
    return any(model_name.startswith(p) for p in prefixes)
