import pytest

from conftest import text_completion
from llm.llm_client import LLMClient, build_provider
from llm.providers.mock_provider import MockProvider
from llm.schemas import AssistantMessage, ChatCompletionRequest, UserMessage


def _request(**kwargs):
    return ChatCompletionRequest(messages=[UserMessage(content="hi")], **kwargs)


def test_complete_selects_model_per_purpose(fake_provider_factory, monkeypatch):
    monkeypatch.setenv("LLM_MODEL_CHAT", "chat-model")
    monkeypatch.setenv("LLM_MODEL_PLANNER", "plan-model")
    provider = fake_provider_factory(text_completion("a"), text_completion("b"))
    client = LLMClient(provider=provider)

    client.complete(_request(), purpose="chat")
    client.complete(_request(), purpose="planner")

    assert [r.model for r in provider.requests] == ["chat-model", "plan-model"]


def test_model_left_to_provider_when_purpose_model_unset(fake_provider_factory, monkeypatch):
    monkeypatch.delenv("LLM_MODEL_CHAT", raising=False)
    monkeypatch.delenv("LLM_MODEL_PLANNER", raising=False)
    provider = fake_provider_factory(text_completion("a"), text_completion("b"))
    client = LLMClient(provider=provider)

    client.complete(_request(), purpose="chat")
    client.complete(_request(), purpose="planner")

    assert [r.model for r in provider.requests] == [None, None]


def test_explicit_model_is_kept(fake_provider_factory):
    provider = fake_provider_factory(text_completion("a"))
    LLMClient(provider=provider).complete(_request(model="pinned"))
    assert provider.requests[0].model == "pinned"


def test_provider_errors_propagate(fake_provider_factory):
    provider = fake_provider_factory(RuntimeError("boom"))
    with pytest.raises(RuntimeError, match="boom"):
        LLMClient(provider=provider).complete(_request())


def test_build_provider_by_name(monkeypatch):
    assert isinstance(build_provider("mock"), MockProvider)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(RuntimeError, match="OPENAI_API_KEY"):
        build_provider("openai")
    with pytest.raises(ValueError):
        build_provider("nope")


def test_missing_credentials_fail_on_first_call(monkeypatch):
    monkeypatch.setenv("LLM_PROVIDER", "openai")
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    client = LLMClient()
    with pytest.raises(RuntimeError):
        client.complete(_request())


def test_mock_provider_echoes_draft():
    req = ChatCompletionRequest(messages=[AssistantMessage(content="<p>A</p>"), UserMessage(content="x")])
    out = MockProvider().complete(req)
    assert "<p>A</p>" in out.content
    assert out.tool_calls == []
