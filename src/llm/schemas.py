from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from mailcraft.models import CamelModel


# --- chat-completion wire models -------------------------------------------

class ToolFunction(BaseModel):
    name: str
    # JSON-encoded string, as sent by the provider
    arguments: str = "{}"


class ToolCall(BaseModel):
    id: str
    type: Literal["function"] = "function"
    function: ToolFunction


class SystemMessage(BaseModel):
    role: Literal["system"] = "system"
    content: str


class UserMessage(BaseModel):
    role: Literal["user"] = "user"
    content: str


class AssistantMessage(BaseModel):
    role: Literal["assistant"] = "assistant"
    content: Optional[str] = None
    tool_calls: Optional[List[ToolCall]] = None


class ToolResultMessage(BaseModel):
    role: Literal["tool"] = "tool"
    tool_call_id: str
    content: str


ChatMessage = Annotated[
    Union[SystemMessage, UserMessage, AssistantMessage, ToolResultMessage],
    Field(discriminator="role"),
]


class ToolSpec(BaseModel):
    name: str
    description: str
    parameters: Dict[str, Any]

    def to_wire(self) -> Dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


class ChatCompletionRequest(BaseModel):
    model: Optional[str] = None
    messages: List[ChatMessage]
    tools: List[ToolSpec] = Field(default_factory=list)
    # name of a function the model is forced to call
    tool_choice: Optional[str] = None
    temperature: float = 0.0

    def wire_messages(self) -> List[Dict[str, Any]]:
        return [m.model_dump(exclude_none=True) for m in self.messages]


class Completion(BaseModel):
    content: Optional[str] = None
    tool_calls: List[ToolCall] = Field(default_factory=list)
    raw: Dict[str, Any] = Field(default_factory=dict)

    @property
    def first_tool_call(self) -> Optional[ToolCall]:
        return self.tool_calls[0] if self.tool_calls else None


# --- planner function-call output ------------------------------------------

Priority = Literal["low", "medium", "high"]
PRIORITY_RANK: Dict[str, int] = {"low": 0, "medium": 1, "high": 2}


class MainTask(CamelModel):
    name: str
    priority: Priority = "medium"


class Subtask(CamelModel):
    description: str
    # hours, e.g. 0.5
    time: Optional[float] = None
    # the model may omit it; such subtasks end up as orphans
    main_task_name: Optional[str] = None


class GeneratedSchedule(CamelModel):
    main_tasks: List[MainTask] = Field(default_factory=list)
    subtasks: List[Subtask] = Field(default_factory=list)

    def sorted_by_priority(self) -> "GeneratedSchedule":
        """Copy with main tasks ordered high -> medium -> low (stable for ties)."""
        ordered = sorted(
            self.main_tasks, key=lambda t: PRIORITY_RANK[t.priority], reverse=True
        )
        return self.model_copy(update={"main_tasks": ordered})
