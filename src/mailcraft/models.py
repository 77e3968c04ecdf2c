from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional, List

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts and emits camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChatTurn(CamelModel):
    role: Literal["user", "assistant"]
    content: str


class EmailDraft(CamelModel):
    html: str = ""


class BrandProfile(CamelModel):
    primary_color: str = ""
    secondary_color: str = ""
    logo_url: str = ""
    tone: str = ""
    other_details: str = ""

    def prompt_lines(self) -> List[str]:
        labels = [
            ("Primary Color", self.primary_color),
            ("Secondary Color", self.secondary_color),
            ("Brand Logo URL", self.logo_url),
            ("Tone", self.tone),
            ("Other Brand Details", self.other_details),
        ]
        return [f"{label}: {value}" for label, value in labels if value]


class ChatRequest(CamelModel):
    system_prompt: str = ""
    receiver_profile_details: str = ""
    sender_profile_details: str = ""
    purpose: str = ""
    user_message: str
    logo_url: str = ""
    user_chat_history: List[ChatTurn] = Field(default_factory=list)
    email_content: str = ""
    brand: Optional[BrandProfile] = None


class ChatResult(CamelModel):
    success: bool
    response: str


SubscriptionStatus = Optional[str]


class User(CamelModel):
    id: str = Field(..., min_length=1)
    email: Optional[str] = None
    credits: int = 3
    subscription_status: SubscriptionStatus = None


class Task(CamelModel):
    id: str
    user_id: str
    description: str = Field(..., min_length=1)
    is_done: bool = False
    # estimated hours
    time: float = Field(1.0, ge=0)
    created_at: datetime = Field(default_factory=datetime.now)

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("description must not be blank")
        return v2


class GptResponse(CamelModel):
    id: str
    user_id: str
    content: str
    created_at: datetime = Field(default_factory=datetime.now)


class CustomTemplate(CamelModel):
    name: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)
