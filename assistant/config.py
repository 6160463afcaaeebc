"""Centralized configuration for the assistant core."""
from __future__ import annotations

import os
from typing import Final


ASSISTANT_NAME: Final[str] = os.getenv("ASSISTANT_NAME", "Neurova AI")

PORTFOLIO_API_URL: Final[str] = os.getenv(
    "PORTFOLIO_API_URL",
    "https://portfolio-backend-ykvn.onrender.com",
).rstrip("/")
HTTP_TIMEOUT_SEC: Final[float] = float(os.getenv("HTTP_TIMEOUT_SEC", "10"))

# off | backend | openai
AI_QUERY_PROVIDER: Final[str] = (os.getenv("AI_QUERY_PROVIDER") or "off").strip().lower()
OPENAI_MODEL: Final[str] = os.getenv("OPENAI_MODEL", "gpt-4o-mini")

SNAPSHOT_TTL_SEC: Final[int] = int(os.getenv("SNAPSHOT_TTL_SEC", "300"))
SESSION_TTL_SEC: Final[int] = int(os.getenv("SESSION_TTL_SEC", str(30 * 60)))

INTERACTION_LOG_FILE: Final[str] = os.getenv("INTERACTION_LOG_FILE", "")


__all__ = [
    "AI_QUERY_PROVIDER",
    "ASSISTANT_NAME",
    "HTTP_TIMEOUT_SEC",
    "INTERACTION_LOG_FILE",
    "OPENAI_MODEL",
    "PORTFOLIO_API_URL",
    "SESSION_TTL_SEC",
    "SNAPSHOT_TTL_SEC",
]
