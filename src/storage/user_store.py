"""
User records and the credits balance.

Credits are consumed with a single compare-and-decrement so two concurrent
requests for the same user can never both spend the last credit.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional

from mailcraft.models import User
from storage import db

logger = logging.getLogger(__name__)


class UserStore(ABC):
    @abstractmethod
    async def get(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    @abstractmethod
    async def upsert(self, user: User) -> User:
        raise NotImplementedError

    @abstractmethod
    async def try_consume_credit(self, user_id: str) -> bool:
        """Decrement credits by one iff the balance is positive."""
        raise NotImplementedError

    @abstractmethod
    async def add_credits(self, user_id: str, amount: int = 1) -> int:
        """Increment credits and return the new balance."""
        raise NotImplementedError


class InMemoryUserStore(UserStore):
    def __init__(self):
        self._users: Dict[str, User] = {}
        self._lock = threading.Lock()

    async def get(self, user_id: str) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            return user.model_copy() if user else None

    async def upsert(self, user: User) -> User:
        with self._lock:
            self._users[user.id] = user.model_copy()
        return user

    async def try_consume_credit(self, user_id: str) -> bool:
        with self._lock:
            user = self._users.get(user_id)
            if user is None or user.credits <= 0:
                return False
            user.credits -= 1
            return True

    async def add_credits(self, user_id: str, amount: int = 1) -> int:
        with self._lock:
            user = self._users[user_id]
            user.credits += amount
            return user.credits


class PostgresUserStore(UserStore):
    @staticmethod
    def _from_record(record) -> User:
        return User(
            id=record["id"],
            email=record["email"],
            credits=record["credits"],
            subscription_status=record["subscription_status"],
        )

    async def get(self, user_id: str) -> Optional[User]:
        record = await db.fetchrow(
            "SELECT id, email, credits, subscription_status FROM users WHERE id = $1",
            user_id,
        )
        return self._from_record(record) if record else None

    async def upsert(self, user: User) -> User:
        query = """
            INSERT INTO users (id, email, credits, subscription_status)
            VALUES ($1, $2, $3, $4)
            ON CONFLICT (id) DO UPDATE SET
                email = EXCLUDED.email,
                credits = EXCLUDED.credits,
                subscription_status = EXCLUDED.subscription_status
        """
        await db.execute(query, user.id, user.email, user.credits, user.subscription_status)
        return user

    async def try_consume_credit(self, user_id: str) -> bool:
        remaining = await db.fetchval(
            "UPDATE users SET credits = credits - 1 WHERE id = $1 AND credits > 0 RETURNING credits",
            user_id,
        )
        return remaining is not None

    async def add_credits(self, user_id: str, amount: int = 1) -> int:
        return await db.fetchval(
            "UPDATE users SET credits = credits + $2 WHERE id = $1 RETURNING credits",
            user_id,
            amount,
        )
