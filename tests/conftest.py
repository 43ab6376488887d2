"""
Pytest configuration and shared fixtures for the Cognify test suite.
"""

import json
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import httpx
import jwt
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

# Set test environment before importing app
os.environ["COGNIFY_ENVIRONMENT"] = "test"
os.environ["COGNIFY_DB_URL"] = "sqlite+aiosqlite:///:memory:"
# Set test JWT secret for testing
os.environ["COGNIFY_JWT_PUBLIC_KEY"] = "test-secret"
os.environ["COGNIFY_JWT_ALGORITHM"] = "HS256"  # Use HS256 for testing
os.environ["COGNIFY_GEMINI_API_KEY"] = "test-key"
# Keep the local limiter out of the way unless a test builds its own
os.environ["COGNIFY_RATE_LIMIT_REQUESTS"] = "999999"
# Set mock URLs for external services to avoid network calls
os.environ["COGNIFY_GEMINI_BASE"] = "http://mock-gemini:8080/v1beta"
os.environ["COGNIFY_ANALYTICS_BASE"] = "http://mock-analytics:8080"

from cognify.clients.analytics import AnalyticsClient  # noqa: E402
from cognify.clients.gemini import GenerationClient  # noqa: E402
from cognify.config import Settings, get_settings  # noqa: E402
from cognify.db.base import Database  # noqa: E402
from cognify.db.session_records import SessionRecordRepository  # noqa: E402
from cognify.services.credentials import CredentialStore  # noqa: E402
from cognify.services.interview import InterviewEngine  # noqa: E402
from cognify.services.rate_limiter import SlidingWindowRateLimiter  # noqa: E402
from cognify.services.router import MessageRouter  # noqa: E402
from cognify.services.sessions import SessionStore  # noqa: E402
from cognify.services.tutor import TutorService  # noqa: E402

settings = get_settings()


def model_reply(text: str, metadata: Optional[Dict[str, Any]] = None) -> str:
    """Model output with an optional trailing metadata block."""
    if metadata is None:
        return text
    return f"{text}\n\n```json\n{json.dumps(metadata)}\n```"


class ScriptedBackend:
    """Stands in for the generation backend behind httpx.MockTransport.

    Replies are served in order. Once the script runs out every call gets
    `default`.
    """

    def __init__(self, default: str = "What is the first thing you would check?"):
        self.default = default
        self.script: List[httpx.Response] = []
        self.requests: List[httpx.Request] = []

    def reply(self, text: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        self.script.append(self._candidate(model_reply(text, metadata)))

    def fail(self, status_code: int, message: str, status: str = "UNKNOWN") -> None:
        self.script.append(
            httpx.Response(
                status_code,
                json={
                    "error": {"code": status_code, "message": message, "status": status}
                },
            )
        )

    @property
    def bodies(self) -> List[Dict[str, Any]]:
        return [json.loads(request.content) for request in self.requests]

    @property
    def prompts(self) -> List[str]:
        return [body["contents"][0]["parts"][0]["text"] for body in self.bodies]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.script:
            return self.script.pop(0)
        return self._candidate(self.default)

    @staticmethod
    def _candidate(text: str) -> httpx.Response:
        return httpx.Response(
            200, json={"candidates": [{"content": {"parts": [{"text": text}]}}]}
        )


class RecordingSink:
    """Stands in for the analytics sink and records every request."""

    def __init__(self):
        self.stats: Dict[str, Any] = {"problemsSolved": 12, "weakTopics": ["graphs"]}
        self.requests: List[httpx.Request] = []
        self.status_code = 200

    @property
    def paths(self) -> List[str]:
        return [request.url.path for request in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"detail": "sink error"})
        if request.method == "GET":
            return httpx.Response(200, json=self.stats)
        return httpx.Response(200, json={"ok": True})


@pytest.fixture
def test_settings():
    """Settings pinned for tests regardless of the process environment."""
    return Settings(
        environment="test",
        db_url="sqlite+aiosqlite:///:memory:",
        gemini_api_key="test-key",
        gemini_base="http://mock-gemini:8080/v1beta",
        analytics_base="http://mock-analytics:8080",
        jwt_public_key="test-secret",
        jwt_algorithm="HS256",
        rate_limit_requests=999999,
    )


@pytest.fixture
def backend():
    return ScriptedBackend()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest_asyncio.fixture
async def database(test_settings):
    """In-memory SQLite database with tables created."""
    db = Database(test_settings)
    await db.init()
    yield db
    await db.close()


@pytest.fixture
def repository(database):
    return SessionRecordRepository(database)


@pytest.fixture
def store(repository):
    return SessionStore(repository=repository)


@pytest.fixture
def credentials(test_settings):
    return CredentialStore.from_settings(test_settings)


@pytest.fixture
def generation_client(backend, credentials, test_settings):
    return GenerationClient(
        SlidingWindowRateLimiter(test_settings.rate_limit_requests, 60),
        credentials,
        test_settings,
        transport=httpx.MockTransport(backend),
    )


@pytest.fixture
def analytics(sink, test_settings):
    return AnalyticsClient(test_settings, transport=httpx.MockTransport(sink))


@pytest.fixture
def tutor(generation_client):
    return TutorService(generation_client)


@pytest.fixture
def interviews(generation_client, test_settings):
    return InterviewEngine(generation_client, test_settings)


@pytest.fixture
def message_router(store, tutor, interviews, analytics, credentials, test_settings):
    return MessageRouter(
        store, tutor, interviews, analytics, credentials, test_settings
    )


@pytest.fixture
def test_user_id():
    """Test user ID for authentication."""
    return "550e8400-e29b-41d4-a716-446655440000"


@pytest.fixture
def test_jwt_token(test_user_id):
    """Create a test JWT token."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": test_user_id,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "exp": now + timedelta(hours=1),
        "iat": now,
    }

    # Use test secret for signing
    return jwt.encode(
        payload,
        "test-secret",  # Must match COGNIFY_JWT_PUBLIC_KEY
        algorithm="HS256",  # Must match COGNIFY_JWT_ALGORITHM
    )


@pytest.fixture
def app(test_settings, backend, sink):
    """Create test app instance wired to the scripted backends."""
    from cognify.server import create_app

    return create_app(
        test_settings,
        generation_transport=httpx.MockTransport(backend),
        analytics_transport=httpx.MockTransport(sink),
    )


@pytest.fixture
def client(app):
    """Create a test client for the FastAPI app."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_client(client, test_jwt_token):
    """Create an authenticated test client."""
    client.headers["Authorization"] = f"Bearer {test_jwt_token}"
    return client


@pytest.fixture
def sample_problem_data():
    """Problem data as scraped from a practice site."""
    return {
        "title": "Two Sum",
        "difficulty": "Easy",
        "description": "Given an array of integers nums and an integer target, "
        "return indices of the two numbers such that they add up to target.",
        "constraints": "2 <= nums.length <= 10^4",
        "examples": [{"input": "nums = [2,7,11,15], target = 9", "output": "[0,1]"}],
        "tags": ["Array", "Hash Table"],
    }
