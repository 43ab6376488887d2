"""Generation backend credential endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Request

from cognify.clients.gemini import GenerationClient
from cognify.schemas.messages import CredentialCheck, CredentialsUpdate
from cognify.services.credentials import CredentialStore, check_credential

router = APIRouter()


def get_credentials(request: Request) -> CredentialStore:
    return request.app.state.credentials


def get_client(request: Request) -> GenerationClient:
    return request.app.state.generation_client


@router.put("")
async def update_credentials(
    update: CredentialsUpdate,
    credentials: CredentialStore = Depends(get_credentials),
) -> Dict[str, Any]:
    credentials.update(api_key=update.api_key, model=update.model)
    return {"configured": credentials.configured, "model": credentials.model}


@router.post("/validate")
async def validate_credentials(
    client: GenerationClient = Depends(get_client),
) -> Dict[str, Any]:
    """Probe the backend with one tiny call and classify the key."""
    check: CredentialCheck = await check_credential(client)
    return check.to_wire()
