import logging
import os
import time
from typing import Optional

from api.metrics import LLM_CALLS_TOTAL, LLM_LATENCY_SECONDS
from llm.providers.base import LLMProvider
from llm.schemas import ChatCompletionRequest, Completion

logger = logging.getLogger(__name__)


def build_provider(name: Optional[str] = None) -> LLMProvider:
    name = (name or os.getenv("LLM_PROVIDER", "openai")).strip().lower()
    if name == "mock":
        from llm.providers.mock_provider import MockProvider

        return MockProvider()
    if name == "ollama":
        from llm.providers.ollama_provider import OllamaProvider

        return OllamaProvider()
    if name == "openai":
        from llm.providers.openai_provider import OpenAIProvider

        return OpenAIProvider()
    raise ValueError(f"Unknown LLM_PROVIDER: {name}")


class LLMClient:
    """Provider-agnostic chat-completion client with a per-purpose model knob."""

    def __init__(self, provider: Optional[LLMProvider] = None):
        self._provider = provider

    @property
    def provider(self) -> LLMProvider:
        # resolved on first call; provider construction fails without credentials
        if self._provider is None:
            self._provider = build_provider()
        return self._provider

    def _select_model_name(self, purpose: str) -> Optional[str]:
        if purpose == "planner":
            return os.getenv("LLM_MODEL_PLANNER") or None
        if purpose == "chat":
            return os.getenv("LLM_MODEL_CHAT") or None
        return None

    def complete(self, request: ChatCompletionRequest, purpose: str = "chat") -> Completion:
        if request.model is None:
            request = request.model_copy(update={"model": self._select_model_name(purpose)})

        start = time.time()
        logger.info(
            f"LLM call ({purpose}): model={request.model} messages={len(request.messages)} tools={len(request.tools)}"
        )
        try:
            completion = self.provider.complete(request)
        except Exception as e:
            LLM_CALLS_TOTAL.labels(purpose=purpose, status="error").inc()
            logger.error(f"LLM call ({purpose}) failed: {e}")
            raise

        LLM_CALLS_TOTAL.labels(purpose=purpose, status="ok").inc()
        LLM_LATENCY_SECONDS.labels(purpose=purpose).observe(time.time() - start)
        logger.info(f"LLM call ({purpose}) returned tool_calls={len(completion.tool_calls)}")
        return completion
