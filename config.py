"""Application configuration defaults."""
from __future__ import annotations

import os
from urllib.parse import urlparse

from assistant.responders.remote import PROVIDERS


def _truthy(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "on", "yes"}


class ConfigValidationError(RuntimeError):
    """Raised when required configuration is missing or unsafe."""


def _app_env() -> str:
    return (os.getenv("APP_ENV") or "development").strip().lower()


def validate_required_env() -> None:
    """
    Fail fast when required environment variables are missing or unsafe.

    - development is lenient so the service runs locally without secrets
    - staging/production require a real SECRET_KEY and a usable backend URL
    - the OpenAI provider requires OPENAI_API_KEY in every strict environment
    """

    env = _app_env()
    if env not in {"development", "testing", "staging", "production"}:
        raise ConfigValidationError(f"Unsupported APP_ENV value: {env!r}")

    if env in {"development", "testing"}:
        return

    errors: list[str] = []

    def require(key: str, *, unsafe_values: set[str] | None = None) -> None:
        value = os.getenv(key, "").strip()
        if not value:
            errors.append(f"{key} is required in {env} environments")
            return
        if unsafe_values and value in unsafe_values:
            errors.append(f"{key} must not use an unsafe default value ({value})")

    require("SECRET_KEY", unsafe_values={"dev-secret"})

    api_url = os.getenv("PORTFOLIO_API_URL", "").strip()
    if api_url and urlparse(api_url).scheme not in {"http", "https"}:
        errors.append("PORTFOLIO_API_URL must be an http(s) URL")

    provider = (os.getenv("AI_QUERY_PROVIDER") or "off").strip().lower()
    if provider not in PROVIDERS:
        errors.append(f"AI_QUERY_PROVIDER must be one of {', '.join(PROVIDERS)} (got {provider!r})")
    if provider == "openai":
        require("OPENAI_API_KEY")

    if errors:
        raise ConfigValidationError(
            "Configuration validation failed:\n - " + "\n - ".join(errors)
        )


class BaseConfig:
    APP_ENV = _app_env()
    TESTING = False

    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")

    # Portfolio backend
    PORTFOLIO_API_URL = os.getenv("PORTFOLIO_API_URL", "https://portfolio-backend-ykvn.onrender.com")
    HTTP_TIMEOUT_SEC = float(os.getenv("HTTP_TIMEOUT_SEC", "10"))

    # Assistant
    ASSISTANT_NAME = os.getenv("ASSISTANT_NAME", "Neurova AI")
    AI_QUERY_PROVIDER = (os.getenv("AI_QUERY_PROVIDER") or "off").strip().lower()
    SNAPSHOT_TTL_SEC = int(os.getenv("SNAPSHOT_TTL_SEC", "300"))
    SESSION_TTL_SEC = int(os.getenv("SESSION_TTL_SEC", str(30 * 60)))
    INTERACTION_LOG_FILE = os.getenv("INTERACTION_LOG_FILE", "")

    # OpenAI
    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
    OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")

    # CORS for the embedded widget
    ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    SPEECH_ENABLED = _truthy(os.getenv("SPEECH_ENABLED", "1"))

    # display
    ENV_NAME = APP_ENV


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    APP_ENV = "development"


class TestingConfig(BaseConfig):
    DEBUG = False
    TESTING = True
    APP_ENV = "testing"
    AI_QUERY_PROVIDER = "off"
    INTERACTION_LOG_FILE = ""


class StagingConfig(BaseConfig):
    DEBUG = False
    APP_ENV = "staging"


class ProductionConfig(BaseConfig):
    DEBUG = False
    APP_ENV = "production"


def get_config():
    validate_required_env()
    env = _app_env()
    if env == "production":
        return ProductionConfig
    if env == "staging":
        return StagingConfig
    if env == "testing":
        return TestingConfig
    return DevelopmentConfig
