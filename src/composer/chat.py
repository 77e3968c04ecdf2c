"""
Conversational email editing.

One chat turn is at most two upstream calls: the first may ask for an image
through the ``search_unsplash`` tool, the second folds the resolved image URL
back into the final HTML.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import List, Optional, Protocol

from api.metrics import TOOL_CALLS_TOTAL
from billing.credits import CreditCharge, CreditGate
from llm.llm_client import LLMClient
from llm.schemas import (
    AssistantMessage,
    ChatCompletionRequest,
    ChatMessage,
    SystemMessage,
    ToolResultMessage,
    ToolSpec,
    UserMessage,
)
from mailcraft.errors import Unauthorized, UpstreamFailure
from mailcraft.models import ChatRequest, ChatResult, User

logger = logging.getLogger(__name__)

SEARCH_UNSPLASH = ToolSpec(
    name="search_unsplash",
    description=(
        "Provide an image URL. Only call this function when there is a new requirement "
        "or replacement of image, don't call when image position needs to be changed."
    ),
    parameters={
        "type": "object",
        "properties": {
            "query": {
                "type": "string",
                "description": "The search query for the image",
            }
        },
        "required": ["query"],
    },
)


class ImageSearch(Protocol):
    def search(self, query: str) -> str: ...


def build_messages(request: ChatRequest) -> List[ChatMessage]:
    """System context, prior turns, the current draft as the model's own output, then the new instruction."""
    system_lines = [
        request.system_prompt,
        f"Receiver Profile: {request.receiver_profile_details}",
        f"Sender Profile: {request.sender_profile_details}",
        f"Purpose: {request.purpose}",
        f"Logo URL: {request.logo_url}",
    ]
    if request.brand is not None:
        system_lines.extend(request.brand.prompt_lines())

    messages: List[ChatMessage] = [SystemMessage(content="\n".join(system_lines))]
    for turn in request.user_chat_history:
        if turn.role == "user":
            messages.append(UserMessage(content=turn.content))
        else:
            messages.append(AssistantMessage(content=turn.content))
    messages.append(AssistantMessage(content=request.email_content))
    messages.append(UserMessage(content=request.user_message))
    return messages


class ChatOrchestrator:
    def __init__(
        self,
        llm_client: LLMClient,
        image_search: ImageSearch,
        credit_gate: Optional[CreditGate] = None,
    ):
        self.llm_client = llm_client
        self.image_search = image_search
        # only set when chat edits are billed
        self.credit_gate = credit_gate

    async def update_chat(self, user: Optional[User], request: ChatRequest) -> ChatResult:
        if user is None:
            raise Unauthorized()

        charge: Optional[CreditCharge] = None
        if self.credit_gate is not None:
            charge = await self.credit_gate.charge(user)

        try:
            response = await asyncio.to_thread(self._run, request)
        except Exception as e:
            logger.error(f"Error in update_chat for user {user.id}: {e}")
            if charge is not None:
                await self.credit_gate.refund(user, charge)
            raise UpstreamFailure(f"An unexpected error occurred: {e}") from e

        return ChatResult(success=True, response=response)

    def _run(self, request: ChatRequest) -> str:
        messages = build_messages(request)
        first = self.llm_client.complete(
            ChatCompletionRequest(messages=messages, tools=[SEARCH_UNSPLASH], temperature=0),
            purpose="chat",
        )

        tool_call = first.first_tool_call
        if tool_call is None:
            return first.content or ""

        if len(first.tool_calls) > 1:
            logger.warning(f"Model requested {len(first.tool_calls)} tool calls; only the first is honoured")

        TOOL_CALLS_TOTAL.labels(tool=tool_call.function.name).inc()
        if tool_call.function.name != SEARCH_UNSPLASH.name:
            raise UpstreamFailure(f"Model requested unknown tool: {tool_call.function.name}")

        query = json.loads(tool_call.function.arguments)["query"]
        image_url = self.image_search.search(query)
        logger.info(f"search_unsplash({query!r}) resolved to {image_url}")

        follow_up = messages + [
            AssistantMessage(content=first.content or "", tool_calls=[tool_call]),
            ToolResultMessage(
                tool_call_id=tool_call.id,
                content=json.dumps({"query": query, "image_url": image_url}),
            ),
        ]
        second = self.llm_client.complete(
            ChatCompletionRequest(messages=follow_up, temperature=0),
            purpose="chat",
        )
        return second.content or ""
