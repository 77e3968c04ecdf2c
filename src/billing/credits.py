from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from api.metrics import CREDITS_CONSUMED_TOTAL, CREDITS_RESTORED_TOTAL
from mailcraft.errors import PaymentRequired
from mailcraft.models import User
from storage.user_store import UserStore

logger = logging.getLogger(__name__)

INVALID_SUBSCRIPTION_STATUSES = {"deleted", "past_due"}


def has_valid_subscription(status: Optional[str]) -> bool:
    return bool(status) and status not in INVALID_SUBSCRIPTION_STATUSES


@dataclass(frozen=True)
class CreditCharge:
    user_id: str
    charged: bool


@dataclass(frozen=True)
class CreditGate:
    """Gates paid features on credits or an active subscription."""

    user_store: UserStore

    async def charge(self, user: User) -> CreditCharge:
        """Spend one credit up front, or let a subscriber through uncharged.

        Raises PaymentRequired without touching the balance when neither applies.
        """
        if await self.user_store.try_consume_credit(user.id):
            CREDITS_CONSUMED_TOTAL.inc()
            logger.info(f"Consumed one credit for user {user.id}")
            return CreditCharge(user_id=user.id, charged=True)

        if has_valid_subscription(user.subscription_status):
            return CreditCharge(user_id=user.id, charged=False)

        logger.info(f"User {user.id} is out of credits and has no valid subscription")
        raise PaymentRequired()

    async def refund(self, user: User, charge: CreditCharge) -> None:
        """Compensate a failed call. Users with any subscription status are not refunded."""
        if not charge.charged or user.subscription_status:
            return
        balance = await self.user_store.add_credits(user.id, 1)
        CREDITS_RESTORED_TOTAL.inc()
        logger.info(f"Restored one credit for user {user.id} (balance={balance})")
