from __future__ import annotations
import os
from typing import Optional

import httpx

from llm.schemas import ChatCompletionRequest, Completion, ToolCall
from .base import LLMProvider


class OpenAIProvider(LLMProvider):
    def __init__(self, transport: Optional[httpx.BaseTransport] = None):
        self.api_key = os.getenv("OPENAI_API_KEY", "").strip()
        self.model = os.getenv("OPENAI_MODEL", "gpt-4o").strip()
        self.base_url = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1").strip()
        self.timeout_s = float(os.getenv("OPENAI_TIMEOUT_S", "60"))
        self._transport = transport

        if not self.api_key:
            raise RuntimeError("OPENAI_API_KEY is missing")

    def _payload(self, request: ChatCompletionRequest) -> dict:
        payload = {
            "model": request.model or self.model,
            "messages": request.wire_messages(),
            "temperature": request.temperature,
        }
        if request.tools:
            payload["tools"] = [t.to_wire() for t in request.tools]
        if request.tool_choice:
            payload["tool_choice"] = {
                "type": "function",
                "function": {"name": request.tool_choice},
            }
        return payload

    def complete(self, request: ChatCompletionRequest) -> Completion:
        url = f"{self.base_url}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        with httpx.Client(timeout=self.timeout_s, transport=self._transport) as client:
            r = client.post(url, headers=headers, json=self._payload(request))
            r.raise_for_status()
            data = r.json()

        message = data["choices"][0]["message"]
        return Completion(
            content=message.get("content"),
            tool_calls=[ToolCall.model_validate(tc) for tc in message.get("tool_calls") or []],
            raw=data,
        )
