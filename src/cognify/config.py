"""Configuration settings for the Cognify mentor service."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="COGNIFY_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Application
    app_name: str = "Cognify AI Mentor"
    debug: bool = False
    environment: str = "development"

    # Durable session mirror
    # Default to Postgres; tests override via COGNIFY_DB_URL
    db_url: str = "postgresql+asyncpg://localhost/cognify"
    db_pool_size: int = 10
    db_max_overflow: int = 20

    # Generation backend
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.5-flash"
    gemini_base: str = "https://generativelanguage.googleapis.com/v1beta"
    generation_timeout: float = 30.0  # seconds
    temperature: float = 0.7
    max_output_tokens: int = 400
    top_p: float = 0.8
    top_k: int = 40

    # Analytics / report sink
    analytics_base: str = "https://analytics.cognify-ai.web.app"

    # Auth
    jwt_issuer: str = "cognify-ai.web.app"
    jwt_audience: str = "cognify"
    jwt_algorithm: str = "RS256"
    jwt_public_key: Optional[str] = None

    # CORS
    cors_origins: list[str] = [
        "https://leetcode.com",
        "https://www.codechef.com",
        "https://codeforces.com",
        "https://www.geeksforgeeks.org",
        "https://cognify-ai.web.app",
        "http://localhost:5173",
    ]

    # Rate limiting in front of the generation backend
    rate_limit_requests: int = 60
    rate_limit_window: int = 60  # seconds

    # Hint budget
    hint_window_minutes: int = 15
    interview_hint_budget: int = 3
    hint_snapshot_chars: int = 200

    # Mock interview
    interview_duration_minutes: int = 45
    interview_quality_threshold: float = 70.0
    interview_min_questions: int = 2
    interview_recent_evaluations: int = 3
    code_snapshot_chars: int = 300

    # Session lifecycle
    session_retention_hours: int = 24
    sweep_interval_minutes: int = 60


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
