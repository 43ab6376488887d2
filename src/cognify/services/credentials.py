"""Credential store for the generation backend and key validation."""

import logging
from typing import TYPE_CHECKING, Optional

from cognify import errors
from cognify.config import Settings
from cognify.schemas.messages import CredentialCheck

if TYPE_CHECKING:
    from cognify.clients.gemini import GenerationClient

logger = logging.getLogger(__name__)


class CredentialStore:
    """Holds the backend API key and model id. Seeded from settings."""

    def __init__(self, api_key: Optional[str], model: str):
        self._api_key = api_key or None
        self._model = model

    @classmethod
    def from_settings(cls, settings: Settings) -> "CredentialStore":
        return cls(settings.gemini_api_key, settings.gemini_model)

    @property
    def api_key(self) -> Optional[str]:
        return self._api_key

    @property
    def model(self) -> str:
        return self._model

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def update(self, api_key: Optional[str] = None, model: Optional[str] = None) -> None:
        if api_key is not None:
            self._api_key = api_key.strip() or None
            logger.info("Generation API key %s", "updated" if self._api_key else "cleared")
        if model:
            self._model = model


async def check_credential(client: "GenerationClient") -> CredentialCheck:
    """Probe the backend with a tiny prompt and classify the outcome.

    Quota exhaustion means the key itself was accepted, so it is reported as a
    warning rather than an invalid key.
    """
    from cognify.clients.gemini import GenerationOptions
    from cognify.prompts import CREDENTIAL_PROBE

    try:
        await client.generate(
            CREDENTIAL_PROBE, GenerationOptions(temperature=0.0, max_tokens=5)
        )
    except errors.NotConfigured as exc:
        return CredentialCheck(status="not_configured", message=exc.message)
    except errors.BackendError as exc:
        if exc.reason == errors.FailureReason.QUOTA_EXHAUSTED:
            return CredentialCheck(
                status="quota_exhausted",
                message="API key accepted but its quota is exhausted. "
                "Wait for the quota to reset or use another project key.",
            )
        return CredentialCheck(status="invalid", message=exc.message)
    except errors.CognifyError as exc:
        logger.warning("Credential probe inconclusive: %s", exc.message)
        return CredentialCheck(status="invalid", message=exc.message)
    return CredentialCheck(status="valid", message="API key is valid")
