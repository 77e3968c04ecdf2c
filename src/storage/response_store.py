from __future__ import annotations

import threading
import uuid
from abc import ABC, abstractmethod
from typing import List

from mailcraft.models import GptResponse
from storage import db


class GptResponseStore(ABC):
    """Audit trail of raw planner function-call payloads."""

    @abstractmethod
    async def create(self, user_id: str, content: str) -> GptResponse:
        raise NotImplementedError

    @abstractmethod
    async def list_for_user(self, user_id: str) -> List[GptResponse]:
        raise NotImplementedError


class InMemoryGptResponseStore(GptResponseStore):
    def __init__(self):
        self._items: List[GptResponse] = []
        self._lock = threading.Lock()

    async def create(self, user_id: str, content: str) -> GptResponse:
        item = GptResponse(id=str(uuid.uuid4()), user_id=user_id, content=content)
        with self._lock:
            self._items.append(item)
        return item

    async def list_for_user(self, user_id: str) -> List[GptResponse]:
        with self._lock:
            return [i for i in self._items if i.user_id == user_id]


class PostgresGptResponseStore(GptResponseStore):
    async def create(self, user_id: str, content: str) -> GptResponse:
        record = await db.fetchrow(
            "INSERT INTO gpt_responses (id, user_id, content) VALUES ($1, $2, $3) RETURNING *",
            str(uuid.uuid4()),
            user_id,
            content,
        )
        return GptResponse(**dict(record))

    async def list_for_user(self, user_id: str) -> List[GptResponse]:
        records = await db.fetch(
            "SELECT * FROM gpt_responses WHERE user_id = $1 ORDER BY created_at",
            user_id,
        )
        return [GptResponse(**dict(r)) for r in records]
