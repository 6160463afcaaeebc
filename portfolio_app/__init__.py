import logging
import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from dotenv import load_dotenv
from flask import Flask, jsonify, request

from assistant.conversation import ConversationSession, SessionRegistry
from assistant.responder import IntentResponder
from assistant.responders.remote import RemoteResponder, build_remote_responder
from config import get_config
from services.portfolio_api import (
    PortfolioAPIClient,
    PortfolioAPISettings,
    SnapshotCache,
    load_snapshot,
)

load_dotenv()

EXTENSION_KEY = "portfolio_assistant"


@dataclass
class AssistantState:
    """Objects shared by every request of one application instance."""

    api_client: PortfolioAPIClient
    snapshots: SnapshotCache
    responder: IntentResponder
    sessions: SessionRegistry
    speech_enabled: bool = True


def get_state(app: Flask) -> AssistantState:
    return app.extensions[EXTENSION_KEY]


def _build_state(app: Flask, api_client: Optional[PortfolioAPIClient], remote: Optional[RemoteResponder]) -> AssistantState:
    cfg = app.config
    client = api_client or PortfolioAPIClient(
        PortfolioAPISettings(
            base_url=cfg["PORTFOLIO_API_URL"],
            timeout=float(cfg["HTTP_TIMEOUT_SEC"]),
        )
    )
    if remote is None:
        try:
            remote = build_remote_responder(
                cfg.get("AI_QUERY_PROVIDER"),
                api_client=client,
                model=cfg.get("OPENAI_MODEL", "gpt-4o-mini"),
                timeout=float(cfg["HTTP_TIMEOUT_SEC"]),
                api_key=cfg.get("OPENAI_API_KEY") or None,
            )
        except Exception:
            app.logger.exception("remote responder disabled: provider=%s", cfg.get("AI_QUERY_PROVIDER"))
            remote = None
    snapshots = SnapshotCache(lambda: load_snapshot(client), ttl_seconds=cfg["SNAPSHOT_TTL_SEC"])
    responder = IntentResponder(remote=remote, log_path=cfg.get("INTERACTION_LOG_FILE") or "")

    def _new_session(*, speaker_name: Optional[str] = None) -> ConversationSession:
        return ConversationSession(
            snapshots.get,
            responder,
            speaker_name=speaker_name,
            assistant_name=cfg["ASSISTANT_NAME"],
        )

    return AssistantState(
        api_client=client,
        snapshots=snapshots,
        responder=responder,
        sessions=SessionRegistry(_new_session, ttl_seconds=cfg["SESSION_TTL_SEC"]),
        speech_enabled=bool(cfg.get("SPEECH_ENABLED", True)),
    )


def _parse_origins(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = list(value or ())
    origins = tuple(item.strip().rstrip("/") for item in items if item and item.strip())
    return origins or ("*",)


def _cors_origin(allowed: tuple[str, ...], origin: Optional[str]) -> Optional[str]:
    """Value for ``Access-Control-Allow-Origin``, or ``None`` to omit it."""

    if "*" in allowed:
        return "*"
    if origin and origin.rstrip("/") in allowed:
        return origin
    return None


def _log_environment_config(app: Flask, state: AssistantState) -> None:
    important_env_keys = [
        "OPENAI_API_KEY",
        "PORTFOLIO_API_URL",
        "AI_QUERY_PROVIDER",
        "INTERACTION_LOG_FILE",
        "PORT",
    ]
    present_keys = [key for key in important_env_keys if os.getenv(key)]
    app.logger.info(
        "startup.env_keys_present=%s",
        ",".join(sorted(present_keys)) if present_keys else "none",
    )
    app.logger.info(
        "startup.config APP_ENV=%s PORTFOLIO_API_URL=%s AI_QUERY_PROVIDER=%s remote=%s interaction_log_set=%s",
        app.config.get("APP_ENV"),
        app.config.get("PORTFOLIO_API_URL"),
        app.config.get("AI_QUERY_PROVIDER"),
        type(state.responder.remote).__name__ if state.responder.remote else "none",
        bool(app.config.get("INTERACTION_LOG_FILE")),
    )


def create_app(
    overrides: Mapping[str, Any] | None = None,
    *,
    api_client: Optional[PortfolioAPIClient] = None,
    remote: Optional[RemoteResponder] = None,
) -> Flask:
    app = Flask(__name__)
    app.config.from_object(get_config())
    if overrides:
        app.config.update(overrides)
    app.json.ensure_ascii = False

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    state = _build_state(app, api_client, remote)
    app.extensions[EXTENSION_KEY] = state

    @app.get("/healthz")
    def _healthz():
        resp = jsonify({"ok": True})
        resp.headers["Cache-Control"] = "no-store"
        return resp

    allowed_origins = _parse_origins(app.config.get("ALLOWED_ORIGINS"))

    @app.after_request
    def _cors_headers(resp):
        if request.path.startswith("/api/"):
            origin = _cors_origin(allowed_origins, request.headers.get("Origin"))
            if origin:
                resp.headers["Access-Control-Allow-Origin"] = origin
            resp.vary.add("Origin")
            resp.headers["Access-Control-Allow-Headers"] = "Content-Type"
            resp.headers["Access-Control-Allow-Methods"] = "GET, POST, DELETE, OPTIONS"
            resp.headers["Cache-Control"] = "no-store"
        return resp

    from .chat_api import bp as chat_bp

    if chat_bp.name not in app.blueprints:
        app.register_blueprint(chat_bp)

    _log_environment_config(app, state)
    return app


__all__ = ["AssistantState", "EXTENSION_KEY", "create_app", "get_state"]
