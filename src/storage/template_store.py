from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Dict, List

from mailcraft.models import CustomTemplate
from storage import db


class CustomTemplateStore(ABC):
    """Per-user uploaded templates. Entries are appended, never de-duplicated."""

    @abstractmethod
    async def add(self, user_id: str, template: CustomTemplate) -> CustomTemplate:
        raise NotImplementedError

    @abstractmethod
    async def list_for_user(self, user_id: str) -> List[CustomTemplate]:
        raise NotImplementedError


class InMemoryCustomTemplateStore(CustomTemplateStore):
    def __init__(self):
        self._items: Dict[str, List[CustomTemplate]] = defaultdict(list)
        self._lock = threading.Lock()

    async def add(self, user_id: str, template: CustomTemplate) -> CustomTemplate:
        with self._lock:
            self._items[user_id].append(template)
        return template

    async def list_for_user(self, user_id: str) -> List[CustomTemplate]:
        with self._lock:
            return list(self._items.get(user_id, []))


class PostgresCustomTemplateStore(CustomTemplateStore):
    async def add(self, user_id: str, template: CustomTemplate) -> CustomTemplate:
        await db.execute(
            "INSERT INTO custom_templates (user_id, name, url) VALUES ($1, $2, $3)",
            user_id,
            template.name,
            template.url,
        )
        return template

    async def list_for_user(self, user_id: str) -> List[CustomTemplate]:
        records = await db.fetch(
            "SELECT name, url FROM custom_templates WHERE user_id = $1 ORDER BY id",
            user_id,
        )
        return [CustomTemplate(name=r["name"], url=r["url"]) for r in records]
