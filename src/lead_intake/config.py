"""Configuration via environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

load_dotenv()

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class AuthConfig:
    """Identity provider configuration."""

    use_mock: bool
    api_key: str | None = None
    timeout: float = 10.0


def get_database_url() -> str:
    """Return the DATABASE_URL from the environment.

    ``memory://`` selects the in-process store used for local runs.
    """
    url = os.environ.get("DATABASE_URL")
    if not url:
        msg = "DATABASE_URL environment variable is required"
        raise ValueError(msg)
    return url


def get_export_path() -> Path:
    """Return the RECEIPT_EXPORT_PATH, defaulting to ./data/receipts.

    Always resolves to an absolute path to avoid issues if the
    working directory changes during execution.
    """
    return Path(os.environ.get("RECEIPT_EXPORT_PATH", "./data/receipts")).resolve()


def get_display_timezone() -> ZoneInfo:
    """Return the timezone receipts are displayed in.

    Defaults to America/Sao_Paulo.
    """
    name = os.environ.get("DISPLAY_TIMEZONE", "America/Sao_Paulo")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        msg = f"DISPLAY_TIMEZONE is not a known timezone: {name}"
        raise ValueError(msg) from exc


def get_reviews_limit() -> int:
    """Return how many reviews the public page lists (REVIEWS_LIMIT, default 20)."""
    limit = int(os.environ.get("REVIEWS_LIMIT", "20"))
    if limit < 1:
        msg = "REVIEWS_LIMIT must be a positive integer"
        raise ValueError(msg)
    return limit


def get_log_level() -> str:
    return os.environ.get("LOG_LEVEL", "INFO").upper()


def get_auth_config() -> AuthConfig:
    """Build identity provider configuration from environment variables.

    USE_MOCK_AUTH=true signs everyone in as a fixed test user.
    Otherwise FIREBASE_API_KEY is required.
    Optional: AUTH_TIMEOUT (seconds, default 10)
    """
    use_mock = os.environ.get("USE_MOCK_AUTH", "false").strip().lower() in _TRUTHY
    timeout = float(os.environ.get("AUTH_TIMEOUT", "10"))

    if use_mock:
        return AuthConfig(use_mock=True, timeout=timeout)

    api_key = os.environ.get("FIREBASE_API_KEY")
    if not api_key:
        msg = "FIREBASE_API_KEY environment variable is required unless USE_MOCK_AUTH is set"
        raise ValueError(msg)

    return AuthConfig(use_mock=False, api_key=api_key, timeout=timeout)
