from __future__ import annotations
from abc import ABC, abstractmethod

from llm.schemas import ChatCompletionRequest, Completion


class LLMProvider(ABC):
    @abstractmethod
    def complete(self, request: ChatCompletionRequest) -> Completion:
        """
        Must return the first choice of the model output, with tool calls (if any)
        carrying their arguments as a JSON-encoded string.
        """
        raise NotImplementedError
