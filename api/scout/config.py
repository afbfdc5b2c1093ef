from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv


def _load_env() -> None:
    """Load api/.env, then the repo-root .env, then .env in the working directory.

    Variables that are already set always win.
    """
    here = Path(__file__).resolve()
    for env_file in (here.parents[1] / ".env", here.parents[2] / ".env"):
        if env_file.is_file():
            load_dotenv(dotenv_path=env_file, override=False)
    load_dotenv(override=False)


_load_env()


@dataclass
class Settings:
    # Base
    app_name: str = "applicant-scout-api"
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")

    # CORS/frontends
    cors_origins: list[str] = field(
        default_factory=lambda: os.getenv(
            "CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173"
        ).split(",")
    )

    # Gemini (generateContent with the google_search tool)
    gemini_api_key: str | None = field(
        default_factory=lambda: os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
    )
    gemini_model: str = field(default_factory=lambda: os.getenv("GEMINI_MODEL", "gemini-2.5-flash"))
    gemini_base_url: str = field(
        default_factory=lambda: os.getenv(
            "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
        )
    )
    gemini_timeout: float = field(default_factory=lambda: float(os.getenv("GEMINI_TIMEOUT", "120")))

    # Source links that point at the search tool's redirector instead of the page itself
    redirector_marker: str = field(
        default_factory=lambda: os.getenv("REDIRECTOR_MARKER", "vertexaisearch.cloud.google.com")
    )

    # Placeholder avatars, keyed by applicant name
    placeholder_image_base: str = field(
        default_factory=lambda: os.getenv("PLACEHOLDER_IMAGE_BASE", "https://picsum.photos/seed")
    )

    # Browser sessions live in memory only
    session_ttl_seconds: float = field(default_factory=lambda: float(os.getenv("SESSION_TTL_SECONDS", "1800")))
    max_sessions: int = field(default_factory=lambda: int(os.getenv("MAX_SESSIONS", "500")))


def get_settings() -> Settings:
    return Settings()
