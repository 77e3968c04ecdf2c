import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import ConfigDict, Field

from api.dependencies import get_task_store, require_user
from mailcraft.models import CamelModel, User
from storage.task_store import TaskStore

router = APIRouter()
logger = logging.getLogger(__name__)


class CreateTaskIn(CamelModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    description: str = Field(..., min_length=1)
    time: float = Field(1.0, ge=0)


class UpdateTaskIn(CamelModel):
    is_done: Optional[bool] = None
    time: Optional[float] = Field(default=None, ge=0)


@router.get("/tasks")
async def get_tasks(
    user: User = Depends(require_user),
    task_store: TaskStore = Depends(get_task_store),
) -> dict:
    """All of the caller's tasks, newest first."""
    tasks = await task_store.list_for_user(user.id)
    return {
        "tasks": [t.model_dump(by_alias=True, mode="json") for t in tasks],
        "total": len(tasks),
    }


@router.post("/tasks")
async def create_task(
    payload: CreateTaskIn,
    user: User = Depends(require_user),
    task_store: TaskStore = Depends(get_task_store),
) -> dict:
    task = await task_store.create(user.id, payload.description, time=payload.time)
    logger.info(f"Task {task.id} created for user {user.id}")
    return {"status": "created", "task": task.model_dump(by_alias=True, mode="json")}


@router.patch("/tasks/{task_id}")
async def update_task(
    task_id: str,
    payload: UpdateTaskIn,
    user: User = Depends(require_user),
    task_store: TaskStore = Depends(get_task_store),
) -> dict:
    task = await task_store.update(user.id, task_id, is_done=payload.is_done, time=payload.time)
    return {"status": "updated", "task": task.model_dump(by_alias=True, mode="json")}


@router.delete("/tasks/{task_id}")
async def delete_task(
    task_id: str,
    user: User = Depends(require_user),
    task_store: TaskStore = Depends(get_task_store),
) -> dict:
    task = await task_store.delete(user.id, task_id)
    logger.info(f"Task {task.id} deleted for user {user.id}")
    return {"status": "deleted", "task": task.model_dump(by_alias=True, mode="json")}
