"""JSON API blueprint for the chat widget."""
from __future__ import annotations

from typing import Any, Dict, Optional

from flask import Blueprint, current_app, jsonify, request

from assistant.conversation import (
    ConversationBusyError,
    ConversationClosedError,
    ConversationSession,
    EmptyMessageError,
)
from assistant.responders.fallback import FallbackResponder
from assistant.speech import sanitize_for_speech

from . import get_state

bp = Blueprint("chat_api", __name__, url_prefix="/api/chat")

MAX_MESSAGE_CHARS = 2000


def _error(code: str, status: int):
    return jsonify({"ok": False, "error": code}), status


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _speaker(data: Dict[str, Any]) -> Optional[str]:
    value = data.get("speaker")
    if not isinstance(value, str):
        return None
    return value.strip() or None


def _session_payload(session: ConversationSession) -> Dict[str, Any]:
    return {
        "ok": True,
        "session_id": session.session_id,
        "messages": [turn.to_dict() for turn in session.transcript],
    }


@bp.post("/sessions")
def open_session():
    data = _json_body()
    state = get_state(current_app)
    session = state.sessions.create(speaker_name=_speaker(data))
    current_app.logger.info("chat.session_opened id=%s", session.session_id)
    payload = _session_payload(session)
    payload["suggestions"] = list(FallbackResponder().respond().quick_replies)
    return jsonify(payload), 201


@bp.get("/sessions/<session_id>")
def show_session(session_id: str):
    session = get_state(current_app).sessions.get(session_id)
    if session is None:
        return _error("session_not_found", 404)
    return jsonify(_session_payload(session))


@bp.post("/sessions/<session_id>/messages")
def post_message(session_id: str):
    state = get_state(current_app)
    session = state.sessions.get(session_id)
    if session is None:
        return _error("session_not_found", 404)

    data = _json_body()
    message = data.get("message")
    if not isinstance(message, str) or not message.strip():
        return _error("empty_message", 400)
    if len(message) > MAX_MESSAGE_CHARS:
        return _error("message_too_long", 413)

    try:
        reply = session.send(message, speaker_name=_speaker(data))
    except EmptyMessageError:
        return _error("empty_message", 400)
    except ConversationBusyError:
        return _error("reply_pending", 409)
    except ConversationClosedError:
        return _error("session_closed", 410)

    if reply is None:
        return _error("session_closed", 410)

    payload = _session_payload(session)
    payload["reply"] = reply
    if state.speech_enabled:
        spoken = sanitize_for_speech(reply)
        if spoken:
            payload["speech"] = spoken
    return jsonify(payload)


@bp.post("/sessions/<session_id>/refresh")
def refresh_session(session_id: str):
    state = get_state(current_app)
    session = state.sessions.get(session_id)
    if session is None:
        return _error("session_not_found", 404)
    state.snapshots.invalidate()
    try:
        session.refresh()
    except ConversationBusyError:
        return _error("reply_pending", 409)
    return jsonify(_session_payload(session))


@bp.delete("/sessions/<session_id>")
def close_session(session_id: str):
    if not get_state(current_app).sessions.close(session_id):
        return _error("session_not_found", 404)
    current_app.logger.info("chat.session_closed id=%s", session_id)
    return "", 204
