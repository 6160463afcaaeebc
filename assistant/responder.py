"""Entry point turning one visitor message into one reply string.

``respond`` always returns non-empty text.  When a remote responder is
configured it gets exactly one attempt; any failure is logged and the local
rules answer instead, so a broken AI endpoint is invisible to the visitor.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from assistant.config import INTERACTION_LOG_FILE
from assistant.logging_utils import InteractionLog, InteractionLogEntry
from assistant.responders.fallback import CAPABILITY_MENU
from assistant.responders.local import LocalResponder
from assistant.responders.remote import RemoteQueryError, RemoteResponder
from assistant.schemas import KnowledgeSnapshot, ResponderOutput, coerce_snapshot

logger = logging.getLogger(__name__)


APOLOGY_MESSAGE = "Sorry, something went wrong on my side. Please try asking again."


def build_remote_context(snapshot: KnowledgeSnapshot, speaker_name: Optional[str] = None) -> Dict[str, Any]:
    context: Dict[str, Any] = {"snapshot": snapshot.to_context()}
    speaker = (speaker_name or "").strip()
    if speaker:
        context["speakerName"] = speaker
    return context


@dataclass
class _ReplyTrace:
    remote: Optional[str] = None
    errors: List[str] = field(default_factory=list)


def remote_label(remote: RemoteResponder | None) -> Optional[str]:
    if remote is None:
        return None
    return getattr(remote, "name", None) or type(remote).__name__


class IntentResponder:
    """Combine optional remote delegation with the local rule table."""

    def __init__(
        self,
        *,
        local: LocalResponder | None = None,
        remote: RemoteResponder | None = None,
        log_path: str | Path | None = None,
    ):
        self.local = local or LocalResponder()
        self.remote = remote
        path = log_path if log_path is not None else INTERACTION_LOG_FILE
        self.interaction_log = InteractionLog(path) if path else None

    def reply(
        self,
        message: str | None,
        snapshot: KnowledgeSnapshot | None = None,
        speaker_name: Optional[str] = None,
        *,
        session_id: str = "",
    ) -> ResponderOutput:
        """Return a :class:`ResponderOutput`; never raises."""

        started = time.perf_counter()
        trace = _ReplyTrace()
        try:
            output = self._reply(message, snapshot, speaker_name, trace)
        except Exception as exc:
            logger.exception("responder failed")
            trace.errors.append(str(exc) or exc.__class__.__name__)
            output = ResponderOutput(message=APOLOGY_MESSAGE, intent="error", source="apology")

        self._record(output, message, session_id, started, trace)
        return output

    def respond(
        self,
        message: str | None,
        snapshot: KnowledgeSnapshot | None = None,
        speaker_name: Optional[str] = None,
    ) -> str:
        return self.reply(message, snapshot, speaker_name).message

    def _reply(
        self,
        message: str | None,
        snapshot: KnowledgeSnapshot | None,
        speaker_name: Optional[str],
        trace: _ReplyTrace,
    ) -> ResponderOutput:
        text = (message or "").strip()
        knowledge = coerce_snapshot(snapshot)
        if not text:
            return ResponderOutput(message=CAPABILITY_MENU, intent="help", source="local")

        if self.remote is not None:
            trace.remote = remote_label(self.remote)
            try:
                answer = self.remote.answer(text, build_remote_context(knowledge, speaker_name))
            except RemoteQueryError as exc:
                logger.warning("remote responder failed, using local rules: %s", exc)
                trace.errors.append(str(exc))
            except Exception as exc:
                logger.exception("remote responder raised unexpectedly, using local rules")
                trace.errors.append(str(exc) or exc.__class__.__name__)
            else:
                if isinstance(answer, str) and answer.strip():
                    return ResponderOutput(message=answer, intent="remote", source="remote")

        return self.local.answer(text, knowledge, speaker_name)

    def _record(
        self,
        output: ResponderOutput,
        message: str | None,
        session_id: str,
        started: float,
        trace: _ReplyTrace,
    ) -> None:
        if self.interaction_log is None:
            return
        entry = InteractionLogEntry.from_output(
            output,
            query=message,
            session_id=session_id,
            latency_ms=(time.perf_counter() - started) * 1000.0,
            remote=trace.remote,
            errors=trace.errors,
        )
        try:
            self.interaction_log.append(entry)
        except OSError:
            logger.warning("failed to write interaction log to %s", self.interaction_log.path, exc_info=True)


def respond(
    message: str | None,
    snapshot: KnowledgeSnapshot | None = None,
    speaker_name: Optional[str] = None,
    *,
    remote: RemoteResponder | None = None,
) -> str:
    """Module-level convenience wrapper around :class:`IntentResponder`."""

    return IntentResponder(remote=remote, log_path="").respond(message, snapshot, speaker_name)


__all__ = ["APOLOGY_MESSAGE", "IntentResponder", "build_remote_context", "respond"]
