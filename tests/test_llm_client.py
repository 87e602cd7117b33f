from types import SimpleNamespace

import httpx
import openai
import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from wizards import llm_client
from wizards.errors import GenerationFailedError, GenerationTimeoutError
from wizards.llm_client import ChatLlmClient, history_to_messages
from wizards.model_props import ModelProps


class FakeResponses:
    def __init__(self, outcome):
        self.outcome = outcome
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


class FakeOpenAI:
    instances = []

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.responses = FakeResponses(FakeOpenAI.next_outcome)
        FakeOpenAI.instances.append(self)


class FakeVertex:
    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.calls = []

    def invoke(self, messages):
        self.calls.append(messages)
        return AIMessage(
            content="  Hej från Vertex  ",
            usage_metadata={"input_tokens": 3, "output_tokens": 4, "total_tokens": 7},
        )


@pytest.fixture
def openai_outcome(monkeypatch):
    def set_outcome(outcome):
        FakeOpenAI.next_outcome = outcome
        FakeOpenAI.instances = []
        monkeypatch.setattr(llm_client, "OpenAI", FakeOpenAI)

    return set_outcome


def response(text, input_tokens=10, output_tokens=5):
    usage = SimpleNamespace(input_tokens=input_tokens, output_tokens=output_tokens, total_tokens=input_tokens + output_tokens)
    return SimpleNamespace(output_text=text, usage=usage)


def test_openai_generate_sends_roles_and_trims(openai_outcome):
    openai_outcome(response("  Ett svar.\n"))
    client = ChatLlmClient("gpt-4o-mini", temperature=0.3, timeout=12)

    history = history_to_messages([{"role": "user", "content": "Hej"}, {"role": "assistant", "content": "Hallå"}])
    assert client.generate("SYS", "Fråga", history=history) == "Ett svar."

    fake = FakeOpenAI.instances[0]
    assert fake.kwargs == {"max_retries": 0, "timeout": 12}
    call = fake.responses.calls[0]
    assert call["model"] == "gpt-4o-mini"
    assert call["temperature"] == 0.3
    assert [m["role"] for m in call["input"]] == ["system", "user", "assistant", "user"]
    assert client.last_usage == {"prompt_token_count": 10, "candidates_token_count": 5, "total_token_count": 15}


def test_empty_completion_is_empty_string(openai_outcome):
    openai_outcome(SimpleNamespace(output_text=None, usage=None))
    assert ChatLlmClient("gpt-4o").generate("s", "u") == ""


def test_provider_error_maps_to_generation_failed(openai_outcome):
    openai_outcome(RuntimeError("500 from upstream"))
    with pytest.raises(GenerationFailedError) as exc:
        ChatLlmClient("gpt-4o").generate("s", "u")
    assert not isinstance(exc.value, GenerationTimeoutError)
    assert len(FakeOpenAI.instances[0].responses.calls) == 1


def test_timeout_maps_to_generation_timeout(openai_outcome):
    request = httpx.Request("POST", "https://api.openai.com/v1/responses")
    openai_outcome(openai.APITimeoutError(request=request))
    with pytest.raises(GenerationTimeoutError) as exc:
        ChatLlmClient("gpt-4o", timeout=1).generate("s", "u")
    assert exc.value.status_code == 504


def test_vertex_models_use_chat_vertex(monkeypatch):
    monkeypatch.setattr(llm_client, "ChatVertexAI", FakeVertex)
    client = ChatLlmClient.from_props(ModelProps("gemini-2.5-flash", 0.2), timeout=30)
    assert client.provider == "vertex"
    assert client.generate("SYS", "Hej") == "Hej från Vertex"

    assert client._vertex.kwargs["max_retries"] == 0
    assert client._vertex.kwargs["temperature"] == 0.2
    messages = client._vertex.calls[0]
    assert isinstance(messages[0], SystemMessage)
    assert isinstance(messages[-1], HumanMessage)
    assert client.last_usage["total_token_count"] == 7


def test_history_to_messages_skips_unknown_and_empty():
    msgs = history_to_messages([
        {"role": "user", "content": " a "},
        {"role": "assistant", "text": "b"},
        {"role": "user", "content": ""},
        {"role": "tool", "content": "c"},
        "not a dict",
    ])
    assert [type(m) for m in msgs] == [HumanMessage, AIMessage]
    assert [m.content for m in msgs] == ["a", "b"]
    assert history_to_messages(None) == []
