"""Message endpoint: the transport for the router."""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request

from cognify.auth import get_optional_user
from cognify.schemas.messages import MessageEnvelope
from cognify.services.router import MessageRouter

router = APIRouter()


def get_router(request: Request) -> MessageRouter:
    return request.app.state.router


@router.post("")
async def post_message(
    envelope: MessageEnvelope,
    message_router: MessageRouter = Depends(get_router),
    user_id: Optional[str] = Depends(get_optional_user),
) -> Dict[str, Any]:
    """Dispatch one request. Failures come back as `success: false`, never as HTTP errors."""
    return await message_router.dispatch(
        envelope.type, envelope.data, envelope.conversation_key, user_id=user_id
    )
