import os
from typing import Optional

from fastapi import Depends, Header

from api import state
from billing.credits import CreditGate
from catalog.template_catalog import TemplateCatalog
from composer.chat import ChatOrchestrator
from llm.llm_client import LLMClient
from mailcraft.errors import Unauthorized
from mailcraft.models import User
from planning.planner import PlannerOrchestrator
from storage.response_store import GptResponseStore
from storage.task_store import TaskStore
from storage.template_store import CustomTemplateStore
from storage.user_store import UserStore

# Configuration
CHAT_REQUIRES_CREDITS = os.getenv("CHAT_REQUIRES_CREDITS", "false").lower() in {"1", "true", "yes"}


def get_user_store() -> UserStore:
    return state.user_store


def get_task_store() -> TaskStore:
    return state.task_store


def get_gpt_response_store() -> GptResponseStore:
    return state.gpt_response_store


def get_custom_template_store() -> CustomTemplateStore:
    return state.custom_template_store


def get_llm_client() -> LLMClient:
    if state.llm_client is None:
        state.llm_client = LLMClient()
    return state.llm_client


def get_image_search():
    return state.image_search


def get_credit_gate(user_store: UserStore = Depends(get_user_store)) -> CreditGate:
    return CreditGate(user_store=user_store)


async def get_current_user(
    x_user_id: Optional[str] = Header(default=None),
    user_store: UserStore = Depends(get_user_store),
) -> Optional[User]:
    """Identity is asserted upstream (auth proxy) via X-User-Id; unknown ids are anonymous."""
    if not x_user_id:
        return None
    return await user_store.get(x_user_id)


async def require_user(user: Optional[User] = Depends(get_current_user)) -> User:
    if user is None:
        raise Unauthorized()
    return user


def get_chat_orchestrator(
    llm_client: LLMClient = Depends(get_llm_client),
    image_search=Depends(get_image_search),
    credit_gate: CreditGate = Depends(get_credit_gate),
) -> ChatOrchestrator:
    return ChatOrchestrator(
        llm_client=llm_client,
        image_search=image_search,
        credit_gate=credit_gate if CHAT_REQUIRES_CREDITS else None,
    )


def get_planner(
    llm_client: LLMClient = Depends(get_llm_client),
    task_store: TaskStore = Depends(get_task_store),
    response_store: GptResponseStore = Depends(get_gpt_response_store),
    credit_gate: CreditGate = Depends(get_credit_gate),
) -> PlannerOrchestrator:
    return PlannerOrchestrator(
        llm_client=llm_client,
        task_store=task_store,
        response_store=response_store,
        credit_gate=credit_gate,
    )


def get_template_catalog(
    custom_store: CustomTemplateStore = Depends(get_custom_template_store),
) -> TemplateCatalog:
    return TemplateCatalog(custom_store=custom_store)
