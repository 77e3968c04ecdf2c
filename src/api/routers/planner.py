import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from api.dependencies import get_current_user, get_planner
from mailcraft.models import User
from planning.planner import PlannerOrchestrator
from planning.schedule_view import build_schedule_view

router = APIRouter()
logger = logging.getLogger(__name__)


class PlanIn(BaseModel):
    hours: float = Field(..., gt=0, le=24)


@router.post("/plan")
async def generate_plan(
    payload: PlanIn,
    user: Optional[User] = Depends(get_current_user),
    planner: PlannerOrchestrator = Depends(get_planner),
) -> dict:
    """Generate today's schedule from the caller's stored tasks."""
    schedule = await planner.generate_plan(user, payload.hours)
    view = build_schedule_view(schedule)
    return {
        "schedule": schedule.model_dump(by_alias=True),
        "view": view.model_dump(by_alias=True),
    }


@router.get("/gpt-responses")
async def get_gpt_responses(
    user: Optional[User] = Depends(get_current_user),
    planner: PlannerOrchestrator = Depends(get_planner),
) -> dict:
    responses = await planner.list_gpt_responses(user)
    return {"responses": [r.model_dump(by_alias=True, mode="json") for r in responses]}
