# wizards/assistant.py
"""
The "Ugglan" assistant chat and the tips bank lookup it draws inspiration from.
"""
import json
import logging
from typing import Any, Dict, List, Optional

from wizards.errors import MissingInputError, WizardError
from wizards.llm_client import LlmFactory, history_to_messages
from wizards.prompts import ASSISTANT_SYSTEM, HOPA_PRIMER, LANGUAGE_RULES, NO_TIPS_FOUND
from wizards.utils import Utils

logger = logging.getLogger("ollo_backend")


class TipsSearch(Utils):

    def __init__(self, llm_for: LlmFactory = None, store=None):
        self.llm_for = llm_for
        self.store = store

    def handle(self, body: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        query = str((body or {}).get("query") or "").strip()
        if not query:
            raise MissingInputError("Missing 'query'. Provide it in JSON body or query param.")
        results = self.store.search_tips(query)
        logger.info("[tips_search] query=%r hits=%d", query, len(results))
        return {"ok": True, "results": results}


class AssistantChat(Utils):

    def __init__(self, llm_for: LlmFactory, store=None):
        self.llm_for = llm_for
        self.store = store

    def _tips_for(self, message: str) -> List[Dict[str, Any]]:
        try:
            return self.store.search_tips(message)
        except WizardError as e:
            logger.warning("[uggla] tips lookup failed, answering without tips: %s", e)
            return []

    def _tips_block(self, tips: List[Dict[str, Any]]) -> str:
        if not tips:
            return NO_TIPS_FOUND
        return "\n\n".join(f"• {t.get('title') or ''}\n{t.get('content') or ''}".strip() for t in tips)

    def handle(self, body: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        body = body or {}
        message = str(body.get("message") or "").strip()
        if not message:
            raise MissingInputError("Missing user message")

        tips = self._tips_for(message)
        app_context = body.get("context") or {}
        system = self.unsafe_string_format(
            ASSISTANT_SYSTEM,
            HOPA=HOPA_PRIMER,
            LANGUAGE_RULES=LANGUAGE_RULES,
            APP_CONTEXT=json.dumps(app_context, ensure_ascii=False, indent=2),
            TIPS=self._tips_block(tips),
        )
        history = history_to_messages(body.get("history"))
        reply = self.llm_for("assistant").generate(system, message, history=history)
        return {"ok": True, "reply": reply, "tips_used": len(tips)}
