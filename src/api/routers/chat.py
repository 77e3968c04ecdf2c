import logging
from typing import Optional

from fastapi import APIRouter, Depends

from api.dependencies import get_chat_orchestrator, get_current_user
from composer.chat import ChatOrchestrator
from mailcraft.models import ChatRequest, User

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/chat")
async def update_chat(
    payload: ChatRequest,
    user: Optional[User] = Depends(get_current_user),
    orchestrator: ChatOrchestrator = Depends(get_chat_orchestrator),
) -> dict:
    """Apply one chat instruction to the current email draft and return the new HTML."""
    logger.info(
        f"Chat update: history={len(payload.user_chat_history)} turns, "
        f"draft={len(payload.email_content)} chars, message={payload.user_message[:50]!r}"
    )
    result = await orchestrator.update_chat(user, payload)
    return result.model_dump(by_alias=True)
