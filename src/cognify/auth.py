"""Request dependencies for the signed-in user."""

from typing import Optional

from fastapi import Request


async def get_optional_user(request: Request) -> Optional[str]:
    """User ID set by AuthMiddleware, or None for anonymous callers."""
    return getattr(request.state, "user_id", None)
