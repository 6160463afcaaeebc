"""Conversation sessions: transcript, serialised sends and liveness."""
from __future__ import annotations

import logging
import threading
import time
import uuid
from typing import Callable, Dict, Optional, Tuple

from assistant.config import ASSISTANT_NAME, SESSION_TTL_SEC
from assistant.responder import IntentResponder
from assistant.schemas import ConversationTurn, KnowledgeSnapshot

logger = logging.getLogger(__name__)


class ConversationError(RuntimeError):
    """Base class for conversation state errors."""


class ConversationClosedError(ConversationError):
    pass


class ConversationBusyError(ConversationError):
    pass


class EmptyMessageError(ConversationError, ValueError):
    pass


def welcome_message(snapshot: KnowledgeSnapshot, assistant_name: str = ASSISTANT_NAME) -> str:
    subject = f"{snapshot.name}'s" if snapshot.name else "the portfolio owner's"
    return (
        f"Hi! I'm {assistant_name}. I can help you learn about {subject} projects, "
        "skills, and experience. What would you like to know?"
    )


class ConversationSession:
    """One chat widget lifetime, from open to close.

    The snapshot is loaded once in :meth:`open` and only replaced by an
    explicit :meth:`refresh` between sends.  A reply that arrives after
    :meth:`close` is dropped instead of being appended.
    """

    def __init__(
        self,
        loader: Callable[[], KnowledgeSnapshot],
        responder: IntentResponder | None = None,
        *,
        speaker_name: Optional[str] = None,
        session_id: Optional[str] = None,
        assistant_name: str = ASSISTANT_NAME,
        time_func: Callable[[], float] = time.monotonic,
    ):
        self.session_id = session_id or uuid.uuid4().hex
        self.speaker_name = speaker_name
        self.assistant_name = assistant_name
        self._loader = loader
        self._responder = responder or IntentResponder()
        self._time = time_func
        self._send_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._turns: list[ConversationTurn] = []
        self._snapshot = KnowledgeSnapshot.empty()
        self._opened = False
        self._closed = False
        self.last_active = self._time()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def open(self) -> "ConversationSession":
        if self._closed:
            raise ConversationClosedError(self.session_id)
        if self._opened:
            return self
        self._snapshot = self._load()
        with self._state_lock:
            self._turns.append(
                ConversationTurn(role="assistant", content=welcome_message(self._snapshot, self.assistant_name))
            )
            self._opened = True
        return self

    def close(self) -> None:
        with self._state_lock:
            self._closed = True

    @property
    def is_open(self) -> bool:
        return self._opened and not self._closed

    @property
    def is_busy(self) -> bool:
        return self._send_lock.locked()

    @property
    def snapshot(self) -> KnowledgeSnapshot:
        return self._snapshot

    @property
    def transcript(self) -> Tuple[ConversationTurn, ...]:
        with self._state_lock:
            return tuple(self._turns)

    def refresh(self) -> KnowledgeSnapshot:
        """Reload the snapshot; refused while a send is in flight."""

        if not self._send_lock.acquire(blocking=False):
            raise ConversationBusyError(self.session_id)
        try:
            self._snapshot = self._load()
            return self._snapshot
        finally:
            self._send_lock.release()

    def _load(self) -> KnowledgeSnapshot:
        try:
            return self._loader()
        except Exception:
            logger.warning("snapshot load failed for session %s", self.session_id, exc_info=True)
            return KnowledgeSnapshot.empty()

    # ------------------------------------------------------------------
    # Messaging
    # ------------------------------------------------------------------
    def send(self, message: str, *, speaker_name: Optional[str] = None) -> Optional[str]:
        """Append ``message`` and the reply; ``None`` if closed meanwhile."""

        text = (message or "").strip()
        if not text:
            raise EmptyMessageError("message must not be empty")
        if not self.is_open:
            raise ConversationClosedError(self.session_id)
        if not self._send_lock.acquire(blocking=False):
            raise ConversationBusyError(self.session_id)
        try:
            with self._state_lock:
                self._turns.append(ConversationTurn(role="user", content=text))
            self.last_active = self._time()

            if speaker_name is not None:
                self.speaker_name = speaker_name
            output = self._responder.reply(
                text,
                self._snapshot,
                self.speaker_name,
                session_id=self.session_id,
            )

            with self._state_lock:
                if self._closed:
                    logger.info("discarding reply for closed session %s", self.session_id)
                    return None
                self._turns.append(ConversationTurn(role="assistant", content=output.message))
            self.last_active = self._time()
            return output.message
        finally:
            self._send_lock.release()

    def is_expired(self, ttl_seconds: float) -> bool:
        return ttl_seconds > 0 and self._time() - self.last_active >= ttl_seconds


class SessionRegistry:
    """Thread-safe in-memory map of live conversation sessions."""

    def __init__(
        self,
        factory: Callable[..., ConversationSession],
        *,
        ttl_seconds: float = SESSION_TTL_SEC,
    ):
        self._factory = factory
        self._ttl = ttl_seconds
        self._lock = threading.Lock()
        self._sessions: Dict[str, ConversationSession] = {}

    def create(self, *, speaker_name: Optional[str] = None) -> ConversationSession:
        session = self._factory(speaker_name=speaker_name).open()
        with self._lock:
            self._purge_expired()
            self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> Optional[ConversationSession]:
        with self._lock:
            self._purge_expired()
            return self._sessions.get(session_id)

    def close(self, session_id: str) -> bool:
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.close()
        return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _purge_expired(self) -> None:
        expired = [
            key
            for key, session in self._sessions.items()
            if not session.is_busy and session.is_expired(self._ttl)
        ]
        for key in expired:
            self._sessions.pop(key).close()


__all__ = [
    "ConversationBusyError",
    "ConversationClosedError",
    "ConversationError",
    "ConversationSession",
    "EmptyMessageError",
    "SessionRegistry",
    "welcome_message",
]
