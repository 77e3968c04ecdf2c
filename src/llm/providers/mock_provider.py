from __future__ import annotations
import json

from llm.providers.base import LLMProvider
from llm.schemas import AssistantMessage, ChatCompletionRequest, Completion, ToolCall, ToolFunction


class MockProvider(LLMProvider):
    def complete(self, request: ChatCompletionRequest) -> Completion:
        """
        Returns dummy responses based on the request shape.
        """
        # Forced planner function call
        if request.tool_choice == "parseTodaysSchedule":
            arguments = json.dumps({
                "mainTasks": [
                    {"name": "Write newsletter", "priority": "high"},
                    {"name": "Inbox zero", "priority": "low"},
                ],
                "subtasks": [
                    {"description": "Outline the three main stories", "time": 0.5, "mainTaskName": "Write newsletter"},
                    {"description": "Draft the copy", "time": 1, "mainTaskName": "Write newsletter"},
                    {"description": "Proofread and schedule the send", "time": 0.5, "mainTaskName": "Write newsletter"},
                    {"description": "Archive newsletters and receipts", "time": 0.25, "mainTaskName": "Inbox zero"},
                    {"description": "Reply to anything under two minutes", "time": 0.5, "mainTaskName": "Inbox zero"},
                    {"description": "Flag the rest for tomorrow", "time": 0.25, "mainTaskName": "Inbox zero"},
                ],
            })
            return Completion(
                tool_calls=[ToolCall(id="call_mock", function=ToolFunction(name=request.tool_choice, arguments=arguments))]
            )

        # Chat edit: echo back the current draft
        draft = ""
        for message in request.messages:
            if isinstance(message, AssistantMessage) and message.content and not message.tool_calls:
                draft = message.content
        return Completion(content=f"<!-- mock edit -->\n{draft}")
