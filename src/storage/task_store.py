from __future__ import annotations

import threading
import uuid
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from mailcraft.errors import TaskNotFound
from mailcraft.models import Task
from storage import db


class TaskStore(ABC):
    @abstractmethod
    async def create(self, user_id: str, description: str, time: float = 1.0) -> Task:
        raise NotImplementedError

    @abstractmethod
    async def update(
        self,
        user_id: str,
        task_id: str,
        is_done: Optional[bool] = None,
        time: Optional[float] = None,
    ) -> Task:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, user_id: str, task_id: str) -> Task:
        raise NotImplementedError

    @abstractmethod
    async def list_for_user(self, user_id: str) -> List[Task]:
        """Newest first."""
        raise NotImplementedError


class InMemoryTaskStore(TaskStore):
    def __init__(self):
        self._tasks: Dict[str, Task] = {}
        self._lock = threading.Lock()

    def _owned(self, user_id: str, task_id: str) -> Task:
        task = self._tasks.get(task_id)
        if task is None or task.user_id != user_id:
            raise TaskNotFound(task_id)
        return task

    async def create(self, user_id: str, description: str, time: float = 1.0) -> Task:
        task = Task(id=str(uuid.uuid4()), user_id=user_id, description=description, time=time)
        with self._lock:
            self._tasks[task.id] = task
        return task

    async def update(self, user_id, task_id, is_done=None, time=None) -> Task:
        with self._lock:
            task = self._owned(user_id, task_id)
            changes = {}
            if is_done is not None:
                changes["is_done"] = is_done
            if time is not None:
                changes["time"] = time
            task = task.model_copy(update=changes)
            self._tasks[task_id] = task
            return task

    async def delete(self, user_id: str, task_id: str) -> Task:
        with self._lock:
            task = self._owned(user_id, task_id)
            del self._tasks[task_id]
            return task

    async def list_for_user(self, user_id: str) -> List[Task]:
        with self._lock:
            tasks = [t for t in self._tasks.values() if t.user_id == user_id]
        # dict preserves insertion order; reverse keeps newest first on timestamp ties
        return sorted(reversed(tasks), key=lambda t: t.created_at, reverse=True)


class PostgresTaskStore(TaskStore):
    @staticmethod
    def _from_record(record) -> Task:
        return Task(
            id=record["id"],
            user_id=record["user_id"],
            description=record["description"],
            is_done=record["is_done"],
            time=record["time"],
            created_at=record["created_at"],
        )

    async def create(self, user_id: str, description: str, time: float = 1.0) -> Task:
        record = await db.fetchrow(
            """
            INSERT INTO tasks (id, user_id, description, time)
            VALUES ($1, $2, $3, $4)
            RETURNING *
            """,
            str(uuid.uuid4()),
            user_id,
            description.strip(),
            time,
        )
        return self._from_record(record)

    async def update(self, user_id, task_id, is_done=None, time=None) -> Task:
        record = await db.fetchrow(
            """
            UPDATE tasks SET
                is_done = COALESCE($3, is_done),
                time = COALESCE($4, time)
            WHERE id = $1 AND user_id = $2
            RETURNING *
            """,
            task_id,
            user_id,
            is_done,
            time,
        )
        if record is None:
            raise TaskNotFound(task_id)
        return self._from_record(record)

    async def delete(self, user_id: str, task_id: str) -> Task:
        record = await db.fetchrow(
            "DELETE FROM tasks WHERE id = $1 AND user_id = $2 RETURNING *",
            task_id,
            user_id,
        )
        if record is None:
            raise TaskNotFound(task_id)
        return self._from_record(record)

    async def list_for_user(self, user_id: str) -> List[Task]:
        records = await db.fetch(
            "SELECT * FROM tasks WHERE user_id = $1 ORDER BY created_at DESC",
            user_id,
        )
        return [self._from_record(r) for r in records]
