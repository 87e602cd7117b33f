# wizards/event_store.py

import logging
from typing import Any, Dict, List

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from wizards.entities import Bento, Event, Tip
from wizards.errors import RecordNotFoundError, WizardError

logger = logging.getLogger("ollo_backend")

CANDIDATE_BENTO_LIMIT = 30
TIPS_LIMIT = 5

_BENTO_CARD_COLUMNS = (
    "id", "name", "short_description", "purpose_category", "hopa_profiles",
    "eng_level", "nfi_index", "effects",
)


def _bento_card(bento: Bento) -> Dict[str, Any]:
    return {c: getattr(bento, c) for c in _BENTO_CARD_COLUMNS}


class EventStore:
    """
    Read-only access to events, the bento library and the tips bank.
    Writes never happen here; wizards describe them as save actions.
    """

    def __init__(self, session_factory: sessionmaker):
        self.SessionFactory = session_factory

    def _run(self, what: str, fn):
        session = self.SessionFactory()
        try:
            return fn(session)
        except SQLAlchemyError as e:
            logger.error("[DB] %s failed: %s", what, e)
            raise WizardError(f"Datastore error while loading {what}") from e
        finally:
            session.close()

    def get_event_context(self, event_id: str) -> Dict[str, str]:
        def q(session):
            event = session.get(Event, str(event_id))
            if event is None:
                raise RecordNotFoundError(f"Could not load event context: {event_id}")
            return {
                "event_name": event.name or "",
                "subtitle": event.subtitle or "",
                "target_group": event.target_group or "",
                "previous_feedback": event.previous_feedback or "",
                "purpose": event.purpose or "",
                "audience_profile": event.audience_profile or "",
                "program_notes": event.program_notes or "",
            }

        return self._run("event context", q)

    def fetch_candidate_bentos(self, limit: int = CANDIDATE_BENTO_LIMIT) -> List[Dict[str, Any]]:
        def q(session):
            rows = session.query(Bento).order_by(Bento.id).limit(limit).all()
            return [_bento_card(b) for b in rows]

        return self._run("candidate bentos", q)

    def get_bento(self, bento_id: str) -> Dict[str, Any]:
        def q(session):
            bento = session.get(Bento, str(bento_id))
            if bento is None:
                raise RecordNotFoundError(f"Bento not found: {bento_id}")
            out = _bento_card(bento)
            out.update({
                "description": bento.description or bento.short_description or "",
                "category": bento.category or bento.purpose_category or "",
                "type": bento.type or "",
                "duration_minutes": bento.duration_minutes,
                "reflection_notes": bento.reflection_notes,
                "interaction_notes": bento.interaction_notes,
                "steps": [
                    {"label": getattr(bento, f"step_{i}"), "duration": getattr(bento, f"step_{i}_duration")}
                    for i in range(1, 6)
                    if getattr(bento, f"step_{i}")
                ],
            })
            return out

        return self._run("bento", q)

    def search_bentos(self, query: str) -> List[Dict[str, Any]]:
        def q(session):
            rows = (
                session.query(Bento)
                .filter(Bento.name.ilike(f"%{query}%"))
                .order_by(Bento.name)
                .all()
            )
            return [_bento_card(b) for b in rows]

        return self._run("bento search", q)

    def search_tips(self, query: str, limit: int = TIPS_LIMIT) -> List[Dict[str, Any]]:
        def q(session):
            pattern = f"%{query}%"
            rows = (
                session.query(Tip)
                .filter(or_(Tip.title.ilike(pattern), Tip.content.ilike(pattern), Tip.tags.ilike(pattern)))
                .order_by(Tip.id)
                .limit(limit)
                .all()
            )
            return [{"id": t.id, "title": t.title, "content": t.content, "tags": t.tags} for t in rows]

        return self._run("tips", q)
