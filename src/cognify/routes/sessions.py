"""Session snapshot and tab-close endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from cognify.services.sessions import SessionStore

router = APIRouter()


def get_store(request: Request) -> SessionStore:
    return request.app.state.store


@router.get("/{key}")
async def get_session(key: str, store: SessionStore = Depends(get_store)) -> Dict[str, Any]:
    """Current session for a conversation key, recovered from the durable mirror if needed."""
    async with store.lock(key):
        if not store.contains(key) and await store.recover(key) is None:
            raise HTTPException(status_code=404, detail="Session not found")
        return store.get(key).to_wire()


@router.delete("/{key}", status_code=204)
async def delete_session(key: str, store: SessionStore = Depends(get_store)) -> Response:
    await store.discard(key)
    return Response(status_code=204)
