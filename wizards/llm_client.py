import asyncio
import logging
import os
from typing import Any, Callable, Dict, List, Optional

import openai
from openai import OpenAI
from langchain_google_vertexai import ChatVertexAI
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from wizards.errors import GenerationFailedError, GenerationTimeoutError
from wizards.model_props import LLM_TIMEOUT, ModelProps, get_model_props, is_openai_model

logger = logging.getLogger("ollo_backend")

PROJECT_ID = os.getenv("GOOGLE_CLOUD_PROJECT", "your-project-id")
REGION = os.getenv("GOOGLE_CLOUD_REGION", "us-central1")


def _is_timeout_error(e: Exception) -> bool:
    if isinstance(e, (asyncio.TimeoutError, TimeoutError, openai.APITimeoutError)):
        return True
    msg = repr(e)
    return "TimeoutError" in msg or "timed out" in msg.lower() or "DEADLINE_EXCEEDED" in msg


class BaseLlmClient:
    """
    Token usage accounting shared by the provider back-ends.
    """

    last_usage: Optional[Dict[str, int]]

    def _add_usage(self, inc: Dict[str, int]) -> None:
        if self.last_usage is None:
            self.last_usage = dict(inc)
        else:
            for k, v in inc.items():
                self.last_usage[k] = (self.last_usage.get(k, 0) or 0) + (v or 0)
        logger.debug("[LLM] %s usage %s (accrued %s)", self.model_name, inc, self.last_usage)

    def _merge_usage(self, resp: Any) -> None:
        usage = getattr(resp, "usage", None)
        if usage is None:
            return
        self._add_usage({
            "prompt_token_count": getattr(usage, "input_tokens", 0) or 0,
            "candidates_token_count": getattr(usage, "output_tokens", 0) or 0,
            "total_token_count": getattr(usage, "total_tokens", 0) or 0,
        })

    def _merge_vertex_usage(self, usage_metadata: Any) -> None:
        if not usage_metadata:
            return

        def get(*keys: str) -> int:
            for k in keys:
                if isinstance(usage_metadata, dict):
                    v = usage_metadata.get(k)
                else:
                    v = getattr(usage_metadata, k, None)
                if v:
                    return int(v)
            return 0

        self._add_usage({
            "prompt_token_count": get("prompt_token_count", "input_tokens"),
            "candidates_token_count": get("candidates_token_count", "output_tokens"),
            "total_token_count": get("total_token_count", "total_tokens"),
        })


class ChatLlmClient(BaseLlmClient):
    """
    Single point of contact with the completion provider:

        text = chat_llm.generate(system, user, history=[...])

    Under the hood:
    - OpenAI (gpt-*): Responses API with input=[{role, content}, ...]
    - anything else: ChatVertexAI.invoke(messages)

    No retries and no caching here; a provider error becomes
    GenerationFailedError and a timeout becomes GenerationTimeoutError.
    """

    def __init__(
        self,
        model_name: str,
        *,
        temperature: float | None = None,
        timeout: float | None = None,
        vertex_project: str = PROJECT_ID,
        vertex_region: str = REGION,
    ):
        self.provider = "openai" if is_openai_model(model_name) else "vertex"
        self.model_name = model_name
        self.temperature = temperature
        self._timeout = timeout
        self.last_usage: Optional[Dict[str, int]] = None

        if self.provider == "openai":
            self._vertex = None
            client_kwargs: Dict[str, Any] = {"max_retries": 0}
            if timeout is not None:
                client_kwargs["timeout"] = timeout
            self._client = OpenAI(**client_kwargs)
        else:
            self._client = None
            vertex_kwargs: Dict[str, Any] = {
                "project": vertex_project,
                "location": vertex_region,
                "model_name": model_name,
                "timeout": timeout,
                "max_retries": 0,
            }
            if temperature is not None:
                vertex_kwargs["temperature"] = temperature
            self._vertex = ChatVertexAI(**vertex_kwargs)

    @classmethod
    def from_props(cls, props: ModelProps, timeout: float | None = LLM_TIMEOUT) -> "ChatLlmClient":
        return cls(props.model_name, temperature=props.temperature, timeout=timeout)

    def _to_openai_messages(self, messages: List[BaseMessage]) -> List[Dict[str, str]]:
        out: List[Dict[str, str]] = []
        for m in messages:
            if isinstance(m, SystemMessage):
                role = "system"
            elif isinstance(m, AIMessage):
                role = "assistant"
            else:
                role = "user"
            out.append({"role": role, "content": str(m.content)})
        return out

    def _invoke_once(self, messages: List[BaseMessage]) -> str:
        if self.provider == "vertex":
            resp = self._vertex.invoke(messages)

            usage_md = getattr(resp, "usage_metadata", None)
            if usage_md is None:
                rm = getattr(resp, "response_metadata", None)
                if isinstance(rm, dict):
                    usage_md = rm.get("usage_metadata")
            self._merge_vertex_usage(usage_md)

            if isinstance(resp, str):
                return resp.strip()
            return str(getattr(resp, "content", "") or "").strip()

        params: Dict[str, Any] = {}
        if self.temperature is not None:
            params["temperature"] = self.temperature
        resp = self._client.responses.create(
            model=self.model_name,
            input=self._to_openai_messages(messages),
            **params,
        )
        self._merge_usage(resp)

        text = getattr(resp, "output_text", "") or ""
        return text.strip()

    def invoke(self, messages: List[BaseMessage]) -> str:
        try:
            return self._invoke_once(messages)
        except Exception as e:
            if _is_timeout_error(e):
                logger.warning("[LLM] %s timed out after %ss", self.model_name, self._timeout)
                raise GenerationTimeoutError(f"Completion provider timed out: {e}") from e
            logger.warning("[LLM] %s call failed: %r", self.model_name, e)
            raise GenerationFailedError(f"Completion provider failed: {e}") from e

    def generate(self, system: str, user: str, history: Optional[List[BaseMessage]] = None) -> str:
        messages: List[BaseMessage] = [SystemMessage(content=system)]
        messages.extend(history or [])
        messages.append(HumanMessage(content=user))
        return self.invoke(messages)


def history_to_messages(history) -> List[BaseMessage]:
    """
    Turn a client-supplied [{"role": "user"|"assistant", "content": "..."}] list
    into langchain messages. Unknown roles and empty contents are skipped.
    """
    out: List[BaseMessage] = []
    for item in history or []:
        if not isinstance(item, dict):
            continue
        content = str(item.get("content") or item.get("text") or "").strip()
        if not content:
            continue
        role = (item.get("role") or "").strip().lower()
        if role == "user":
            out.append(HumanMessage(content=content))
        elif role == "assistant":
            out.append(AIMessage(content=content))
    return out


def default_llm_for(purpose: str) -> ChatLlmClient:
    return ChatLlmClient.from_props(get_model_props(purpose))


LlmFactory = Callable[[str], ChatLlmClient]
