"""Generation backend (Gemini) API client."""

import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel

from cognify import errors
from cognify.config import Settings, get_settings
from cognify.services.credentials import CredentialStore
from cognify.services.prompt_builder import extract_metadata, strip_metadata_block
from cognify.services.rate_limiter import SlidingWindowRateLimiter

logger = logging.getLogger(__name__)


class GenerationOptions(BaseModel):
    """Pass-through generation knobs. Unset values fall back to settings."""

    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    top_p: Optional[float] = None
    top_k: Optional[int] = None
    system_instruction: Optional[str] = None


class GenerationResult(BaseModel):
    """Display text plus the structured block the model attached, if any."""

    text: str
    metadata: Optional[Dict[str, Any]] = None


class GenerationClient:
    """Client for the generative-language backend.

    Performs exactly one HTTP call per `generate`. Retries are the caller's
    decision.
    """

    def __init__(
        self,
        rate_limiter: SlidingWindowRateLimiter,
        credentials: CredentialStore,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self.rate_limiter = rate_limiter
        self.credentials = credentials
        self.base_url = self.settings.gemini_base
        self.timeout = httpx.Timeout(self.settings.generation_timeout)
        self._transport = transport

    async def generate(
        self, prompt: str, options: Optional[GenerationOptions] = None
    ) -> GenerationResult:
        """Generate text for a prompt."""
        options = options or GenerationOptions()

        if not self.rate_limiter.allow():
            raise errors.RateLimitExceeded(self.rate_limiter.retry_after())

        api_key = self.credentials.api_key
        if not api_key:
            raise errors.NotConfigured()

        url = f"{self.base_url}/models/{self.credentials.model}:generateContent"
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    url,
                    json=self._build_request(prompt, options),
                    headers=self._get_headers(api_key),
                )
        except httpx.TimeoutException as exc:
            logger.error("Generation request timed out: %s", exc)
            raise errors.GenerationTimeout() from exc
        except httpx.TransportError as exc:
            logger.error("Generation backend unreachable: %s", exc)
            raise errors.BackendError(f"Generation backend unreachable: {exc}") from exc

        if not response.is_success:
            raise self._backend_error(response)

        try:
            payload = response.json()
        except ValueError as exc:
            logger.error("Generation backend returned a non-JSON body: %s", exc)
            raise errors.BackendError(
                "Malformed backend response", status_code=response.status_code
            ) from exc
        if not isinstance(payload, dict):
            raise errors.BackendError(
                "Malformed backend response", status_code=response.status_code
            )
        text = self._first_candidate_text(payload)
        return GenerationResult(
            text=strip_metadata_block(text),
            metadata=extract_metadata(text),
        )

    def _build_request(self, prompt: str, options: GenerationOptions) -> Dict[str, Any]:
        settings = self.settings
        body: Dict[str, Any] = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": (
                    options.temperature
                    if options.temperature is not None
                    else settings.temperature
                ),
                "maxOutputTokens": options.max_tokens or settings.max_output_tokens,
                "topP": options.top_p if options.top_p is not None else settings.top_p,
                "topK": options.top_k if options.top_k is not None else settings.top_k,
            },
            "safetySettings": [
                {
                    "category": "HARM_CATEGORY_HARASSMENT",
                    "threshold": "BLOCK_MEDIUM_AND_ABOVE",
                },
                {
                    "category": "HARM_CATEGORY_HATE_SPEECH",
                    "threshold": "BLOCK_MEDIUM_AND_ABOVE",
                },
            ],
        }
        if options.system_instruction:
            body["systemInstruction"] = {
                "parts": [{"text": options.system_instruction}]
            }
        return body

    def _backend_error(self, response: httpx.Response) -> errors.BackendError:
        message = response.reason_phrase or f"HTTP {response.status_code}"
        status = None
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
            message = payload["error"].get("message") or message
            status = payload["error"].get("status")

        reason = errors.classify_backend_failure(response.status_code, status, message)
        logger.error(
            "Generation backend error %s (%s, %s): %s",
            response.status_code,
            status,
            reason.value,
            message,
        )
        return errors.BackendError(message, status_code=response.status_code, reason=reason)

    @staticmethod
    def _first_candidate_text(payload: Dict[str, Any]) -> str:
        candidates = payload.get("candidates") or []
        if not candidates:
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts if isinstance(part, dict))

    def _get_headers(self, api_key: str) -> Dict[str, str]:
        """Get headers for API calls."""
        return {
            "x-goog-api-key": api_key,
            "X-Service": "cognify-mentor",
            "Content-Type": "application/json",
        }
