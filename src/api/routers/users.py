from fastapi import APIRouter, Depends

from api.dependencies import require_user
from billing.credits import has_valid_subscription
from mailcraft.models import User

router = APIRouter()


@router.get("/me")
async def get_me(user: User = Depends(require_user)) -> dict:
    return {
        **user.model_dump(by_alias=True),
        "hasValidSubscription": has_valid_subscription(user.subscription_status),
    }
