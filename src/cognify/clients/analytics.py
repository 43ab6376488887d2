"""Analytics and report sink API client."""

from typing import Any, Dict, Optional

import httpx

from cognify.config import Settings, get_settings


class AnalyticsClient:
    """Client for the remote store behind the progress dashboard."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self.base_url = self.settings.analytics_base
        self.timeout = httpx.Timeout(30.0)
        self._transport = transport

    async def log_interaction(self, user_id: str, interaction: Dict[str, Any]) -> None:
        """Record a hint or chat interaction."""
        await self._post(f"/users/{user_id}/interactions", interaction)

    async def save_interview_report(
        self, user_id: str, report: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Store a finished interview report."""
        return await self._post(f"/users/{user_id}/interviews", report)

    async def log_problem_solved(
        self, user_id: str, problem: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Record a solved problem with its session stats."""
        return await self._post(f"/users/{user_id}/activities", problem)

    async def sync_progress(self, user_id: str, progress: Dict[str, Any]) -> None:
        """Push client-side progress counters."""
        await self._post(f"/users/{user_id}/progress", progress)

    async def get_user_stats(self, user_id: str) -> Dict[str, Any]:
        """Get aggregate stats used for recommendations."""
        async with httpx.AsyncClient(
            timeout=self.timeout, transport=self._transport
        ) as client:
            response = await client.get(
                f"{self.base_url}/users/{user_id}/stats",
                headers=self._get_headers(),
            )
            response.raise_for_status()
            return response.json()

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        async with httpx.AsyncClient(
            timeout=self.timeout, transport=self._transport
        ) as client:
            response = await client.post(
                f"{self.base_url}{path}",
                json=payload,
                headers=self._get_headers(),
            )
            response.raise_for_status()
            if not response.content:
                return {}
            return response.json()

    def _get_headers(self) -> Dict[str, str]:
        """Get headers for API calls."""
        return {
            "X-Service": "cognify-mentor",
            "Content-Type": "application/json",
        }
