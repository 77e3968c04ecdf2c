from __future__ import annotations
import json
import os
from typing import Optional

import httpx

from llm.schemas import ChatCompletionRequest, Completion, ToolCall, ToolFunction
from .base import LLMProvider


class OllamaProvider(LLMProvider):
    def __init__(self, transport: Optional[httpx.BaseTransport] = None):
        self.model = os.getenv("OLLAMA_MODEL", "llama3.1").strip()
        self.base_url = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434").strip()
        self._transport = transport

    def complete(self, request: ChatCompletionRequest) -> Completion:
        url = f"{self.base_url}/api/chat"
        messages = []
        for m in request.wire_messages():
            # Ollama expects tool-call arguments as objects, not strings
            for tc in m.get("tool_calls", []):
                tc["function"]["arguments"] = json.loads(tc["function"]["arguments"])
            m.pop("tool_call_id", None)
            messages.append(m)

        payload = {
            "model": request.model or self.model,
            "stream": False,
            "messages": messages,
            "options": {"temperature": request.temperature},
        }
        tools = request.tools
        if request.tool_choice:
            # no tool_choice support; offer only the forced function
            tools = [t for t in tools if t.name == request.tool_choice]
        if tools:
            payload["tools"] = [t.to_wire() for t in tools]

        with httpx.Client(timeout=60.0, transport=self._transport) as client:
            r = client.post(url, json=payload)
            r.raise_for_status()
            data = r.json()

        message = data["message"]
        tool_calls = []
        for i, tc in enumerate(message.get("tool_calls") or []):
            args = tc["function"].get("arguments", {})
            tool_calls.append(
                ToolCall(
                    id=f"call_{i}",
                    function=ToolFunction(
                        name=tc["function"]["name"],
                        arguments=args if isinstance(args, str) else json.dumps(args),
                    ),
                )
            )
        return Completion(content=message.get("content"), tool_calls=tool_calls, raw=data)
