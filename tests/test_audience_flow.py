import pytest

from conftest import FakeLlm, FakeLlmFactory
from wizards.audience_flow import AudienceFlow
from wizards.errors import MissingInputError

GOOD = "Deltagarna är nyfikna medarbetare som vill lära av varandra."


@pytest.fixture
def llm():
    return FakeLlm(GOOD)


@pytest.fixture
def flow(llm):
    return AudienceFlow(FakeLlmFactory(llm))


def test_scenario_a_start_without_audience(flow, llm):
    out = flow.handle({"step": "start", "context": {"has_audience": False}})
    assert out["next_step"] == "who"
    assert len(out["ui"]) == 1
    assert out["ui"][0]["role"] == "assistant"
    assert "data" not in out
    assert "actions" not in out
    assert llm.call_count == 0


def test_scenario_b_start_with_existing_audience(flow, llm):
    out = flow.handle({"step": "start", "context": {"has_audience": True, "existing_audience": "X"}})
    assert out["next_step"] == "refine"
    assert out["next_step"] != "who"
    assert {b["action"] for b in out["ui"][0]["buttons"]} == {"refine", "new"}
    assert out["state"]["existing_value"] == "X"
    assert llm.call_count == 0


def test_existing_audience_accepted_at_top_level(flow):
    out = flow.handle({"step": "start", "existing_audience": "X", "context": {"has_audience": True}})
    assert out["next_step"] == "refine"


def test_refine_existing_with_top_level_audience(flow, llm):
    out = flow.handle({
        "step": "refine_existing",
        "input": "Kortare",
        "existing_audience": "Alla medarbetare",
        "context": {"has_audience": True},
    })
    assert out["next_step"] == "refine"
    assert out["data"]["candidate"] == GOOD
    assert "Alla medarbetare" in llm.calls[0]["user"]
    assert llm.call_count == 1


def test_refine_existing_without_flag_is_missing_input(flow, llm):
    with pytest.raises(MissingInputError):
        flow.handle({"step": "refine_existing", "input": "Kortare", "existing_audience": "Alla medarbetare"})
    assert llm.call_count == 0


def test_scenario_c_finalize_uses_last_proposal(flow, llm):
    out = flow.handle({"step": "finalize", "state": {"last_proposal": "Y"}})
    assert out["actions"] == [{"type": "save_event_field", "field": "audience_profile", "value": "Y"}]
    assert out["next_step"] == "done"
    assert llm.call_count == 0


def test_new_discards_old_state(flow):
    out = flow.handle({"step": "new", "state": {"last_proposal": "gammal"}})
    assert out["next_step"] == "who"
    assert out["state"] == {}


def test_full_run(flow, llm):
    out = flow.handle({"step": "start"})
    out = flow.handle({"step": out["next_step"], "input": "Chefer i region syd", "state": out["state"]})
    assert out["next_step"] == "archetype"
    out = flow.handle({"step": out["next_step"], "input": "Analytiker", "state": out["state"]})
    assert out["next_step"] == "refine"
    assert out["data"]["candidate"] == GOOD
    assert out["state"]["who"] == "Chefer i region syd"
    assert out["state"]["archetype"] == "Analytiker"
    assert "ARKETYP: Analytiker" in llm.calls[0]["user"]

    out = flow.handle({"step": "finalize", "state": out["state"]})
    assert out["actions"][0]["value"] == GOOD


def test_missing_prefix_triggers_one_retry():
    llm = FakeLlm("Gruppen är blandad.", GOOD)
    flow = AudienceFlow(FakeLlmFactory(llm))
    out = flow.handle({"step": "propose", "state": {"who": "a", "archetype": "b"}})
    assert llm.call_count == 2
    assert out["data"]["candidate"] == GOOD
    assert "Deltagarna är" in llm.calls[1]["system"]


def test_propose_requires_both_answers(flow, llm):
    with pytest.raises(MissingInputError, match="archetype"):
        flow.handle({"step": "propose", "state": {"who": "a"}})
    assert llm.call_count == 0
