# wizards/response_formatter.py
from typing import Any, Dict, List, Optional


def button(text: str, action: str) -> Dict[str, str]:
    return {"text": text, "action": action}


def assistant(
    text: Optional[str] = None,
    *,
    id: Optional[str] = None,
    buttons: Optional[List[Dict[str, str]]] = None,
    value: Optional[str] = None,
    options: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    msg: Dict[str, Any] = {"role": "assistant"}
    if id:
        msg["id"] = id
    if text is not None:
        msg["text"] = text
    if buttons:
        msg["buttons"] = buttons
    if value is not None:
        msg["value"] = value
    if options:
        msg["options"] = options
    return msg


def save_action(entity: str, field: str, value: str) -> Dict[str, str]:
    return {"type": f"save_{entity}_field", "field": field, "value": value}


def wizard_response(
    ui: Optional[List[Dict[str, Any]]],
    next_step: str,
    *,
    state: Optional[Dict[str, Any]] = None,
    data: Optional[Dict[str, Any]] = None,
    actions: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """
    Shape a step result into the reply contract:
      {ok, ui, data?, actions?, next_step, state?}
    Optional keys are left out entirely when empty.
    """
    out: Dict[str, Any] = {"ok": True, "ui": list(ui or [])}
    if data:
        out["data"] = data
    if actions:
        out["actions"] = actions
    out["next_step"] = next_step
    if state is not None:
        out["state"] = state
    return out
