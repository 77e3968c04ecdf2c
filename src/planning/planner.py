from __future__ import annotations

import asyncio
import json
import logging
from typing import List, Optional

from billing.credits import CreditGate
from llm.llm_client import LLMClient
from llm.schemas import (
    ChatCompletionRequest,
    GeneratedSchedule,
    SystemMessage,
    ToolSpec,
    UserMessage,
)
from mailcraft.errors import Unauthorized, UpstreamFailure
from mailcraft.models import GptResponse, Task, User
from storage.response_store import GptResponseStore
from storage.task_store import TaskStore

logger = logging.getLogger(__name__)

PLANNER_SYSTEM_PROMPT = (
    "you are an expert daily planner. you will be given a list of main tasks and an estimated "
    "time to complete each task. You will also receive the total amount of hours to be worked "
    "that day. Your job is to return a detailed plan of how to achieve those tasks by breaking "
    "each task down into at least 3 subtasks each. MAKE SURE TO ALWAYS CREATE AT LEAST 3 "
    "SUBTASKS FOR EACH MAIN TASK PROVIDED BY THE USER! YOU WILL BE REWARDED IF YOU DO."
)

PARSE_TODAYS_SCHEDULE = ToolSpec(
    name="parseTodaysSchedule",
    description="parses the days tasks and returns a schedule",
    parameters={
        "type": "object",
        "properties": {
            "mainTasks": {
                "type": "array",
                "description": "Name of main tasks provided by user, ordered by priority",
                "items": {
                    "type": "object",
                    "properties": {
                        "name": {
                            "type": "string",
                            "description": "Name of main task provided by user",
                        },
                        "priority": {
                            "type": "string",
                            "enum": ["low", "medium", "high"],
                            "description": "task priority",
                        },
                    },
                },
            },
            "subtasks": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "description": {
                            "type": "string",
                            "description": (
                                "detailed breakdown and description of sub-task related to main task. "
                                'e.g., "Prepare your learning session by first reading through the documentation"'
                            ),
                        },
                        "time": {
                            "type": "number",
                            "description": "time allocated for a given subtask in hours, e.g. 0.5",
                        },
                        "mainTaskName": {
                            "type": "string",
                            "description": "name of main task related to subtask",
                        },
                    },
                },
            },
        },
        "required": ["mainTasks", "subtasks"],
    },
)


def _format_hours(hours: float) -> str:
    # "8" rather than "8.0"; fractional budgets keep every digit
    return str(int(hours)) if float(hours).is_integer() else str(hours)


def build_planner_request(hours: float, tasks: List[Task]) -> ChatCompletionRequest:
    parsed_tasks = [{"description": t.description, "time": t.time} for t in tasks]
    user_prompt = (
        f"I will work {_format_hours(hours)} hours today. Here are the tasks I have to complete: "
        f"{json.dumps(parsed_tasks)}. Please help me plan my day by breaking the tasks down "
        "into actionable subtasks with time and priority status."
    )
    return ChatCompletionRequest(
        messages=[
            SystemMessage(content=PLANNER_SYSTEM_PROMPT),
            UserMessage(content=user_prompt),
        ],
        tools=[PARSE_TODAYS_SCHEDULE],
        tool_choice=PARSE_TODAYS_SCHEDULE.name,
        temperature=1,
    )


class PlannerOrchestrator:
    """AI daily planner: stored tasks + hours budget -> GeneratedSchedule."""

    def __init__(
        self,
        llm_client: LLMClient,
        task_store: TaskStore,
        response_store: GptResponseStore,
        credit_gate: CreditGate,
    ):
        self.llm_client = llm_client
        self.task_store = task_store
        self.response_store = response_store
        self.credit_gate = credit_gate

    async def generate_plan(self, user: Optional[User], hours: float) -> GeneratedSchedule:
        if user is None:
            raise Unauthorized()

        tasks = await self.task_store.list_for_user(user.id)
        charge = await self.credit_gate.charge(user)

        try:
            request = build_planner_request(hours, tasks)
            completion = await asyncio.to_thread(self.llm_client.complete, request, "planner")

            tool_call = completion.first_tool_call
            if tool_call is None or not tool_call.function.arguments:
                raise UpstreamFailure("Bad response from OpenAI")

            gpt_args = tool_call.function.arguments
            logger.info(f"Planner function call arguments for user {user.id}: {gpt_args[:200]}")
            await self.response_store.create(user.id, gpt_args)

            schedule = GeneratedSchedule.model_validate_json(gpt_args)
        except Exception as e:
            logger.error(f"Error generating plan for user {user.id}: {e}")
            await self.credit_gate.refund(user, charge)
            message = e.message if isinstance(e, UpstreamFailure) else str(e)
            raise UpstreamFailure(message or "Internal server error") from e

        return schedule.sorted_by_priority()

    async def list_gpt_responses(self, user: Optional[User]) -> List[GptResponse]:
        if user is None:
            raise Unauthorized()
        return await self.response_store.list_for_user(user.id)
