# wizards/backend.py

import json
import logging
import threading
import traceback
from typing import Any, Dict, Optional

from sqlalchemy.orm import sessionmaker

from wizards.assistant import AssistantChat, TipsSearch
from wizards.audience_flow import AudienceFlow
from wizards.db_helpers import create_session_factory
from wizards.errors import UnknownEndpointError, WizardError
from wizards.event_data_wizard import EventDataWizard
from wizards.event_store import EventStore
from wizards.frame_flow import FrameFlow
from wizards.frame_tools import FrameGenerator, FrameHelper
from wizards.llm_client import LlmFactory, default_llm_for
from wizards.purpose_flow import PurposeFlow
from wizards.utils import Utils

logger = logging.getLogger("ollo_backend")

ENDPOINTS = {
    "purpose_flow": PurposeFlow,
    "audience_flow": AudienceFlow,
    "event_data_wizard": EventDataWizard,
    "frame_ollo_flow": FrameFlow,
    "frame_generator": FrameGenerator,
    "frame_helper": FrameHelper,
    "tips_search": TipsSearch,
    "uggla": AssistantChat,
}


class Backend(Utils):
    """
    Routes one request body to the handler registered for its endpoint.
    Handlers are built per request; the session factory is built once, lazily,
    so endpoints that never touch the datastore don't need it configured.
    """

    def __init__(self, llm_for: LlmFactory = default_llm_for, session_factory: Optional[sessionmaker] = None):
        self.llm_for = llm_for
        self._session_factory = session_factory
        self._store: Optional[EventStore] = None
        self._lock = threading.Lock()

    @property
    def store(self) -> EventStore:
        if self._store is None:
            with self._lock:
                if self._store is None:
                    if self._session_factory is None:
                        self._session_factory = create_session_factory()
                    self._store = EventStore(self._session_factory)
        return self._store

    def _preview(self, data) -> str:
        try:
            return json.dumps(data, indent=2, ensure_ascii=False)
        except (TypeError, ValueError):
            return str(data)

    def process_request(self, endpoint: str, body: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        handler_cls = ENDPOINTS.get(endpoint)
        if handler_cls is None:
            raise UnknownEndpointError(f"Unknown endpoint: {endpoint}")

        logger.debug(f"process_request {endpoint} request {self._preview(body)}")
        try:
            response_data = handler_cls(self.llm_for, _LazyStore(self)).handle(body or {})
        except WizardError as e:
            logger.info("[%s] %s (%s)", endpoint, e, e.status_code)
            raise
        except Exception as e:
            logger.error(f"Error while processing {endpoint}: {e}")
            traceback.print_exc()
            raise WizardError(str(e) or e.__class__.__name__) from e

        logger.debug(f"response {self._preview(response_data)}")
        return response_data


class _LazyStore:
    """Defers building the datastore connection until a handler actually reads."""

    def __init__(self, backend: Backend):
        self._backend = backend

    def __getattr__(self, name):
        return getattr(self._backend.store, name)
