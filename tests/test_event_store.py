import pytest
from sqlalchemy.exc import OperationalError

from wizards.errors import RecordNotFoundError, WizardError
from wizards.event_store import EventStore


def test_event_context(store):
    ctx = store.get_event_context("ev-1")
    assert ctx["event_name"] == "Höstkickoff"
    assert ctx["previous_feedback"] == ""
    assert set(ctx) == {
        "event_name", "subtitle", "target_group", "previous_feedback",
        "purpose", "audience_profile", "program_notes",
    }


def test_missing_event(store):
    with pytest.raises(RecordNotFoundError) as exc:
        store.get_event_context("nope")
    assert exc.value.status_code == 404


def test_candidate_bentos_are_cards(store):
    bentos = store.fetch_candidate_bentos()
    assert [b["id"] for b in bentos] == ["b-1", "b-2"]
    assert bentos[1]["hopa_profiles"] == ["Visionärer", "Analytiker"]
    assert "description" not in bentos[0]
    assert len(store.fetch_candidate_bentos(limit=1)) == 1


def test_get_bento_lists_filled_steps(store):
    bento = store.get_bento("b-1")
    assert bento["steps"] == [
        {"label": "Introduktion", "duration": 5},
        {"label": "Promenad", "duration": 15},
    ]
    assert bento["category"] == "Samtal"
    assert store.get_bento("b-2")["description"] == "Snabb idégenerering i grupp."


def test_search_bentos_by_name(store):
    assert [b["id"] for b in store.search_bentos("walk")] == ["b-1"]
    assert store.search_bentos("finns inte") == []


def test_search_tips_limit(store):
    assert len(store.search_tips("a", limit=1)) == 1


def test_datastore_errors_become_wizard_errors():
    def broken_factory():
        class Session:
            def get(self, *a, **kw):
                raise OperationalError("SELECT 1", {}, Exception("connection refused"))

            def close(self):
                pass

        return Session()

    with pytest.raises(WizardError) as exc:
        EventStore(broken_factory).get_event_context("ev-1")
    assert exc.value.status_code == 500
    assert not isinstance(exc.value, RecordNotFoundError)
