"""JSON-lines log of answered chat messages.

One line per reply: which intent answered, whether the remote AI was tried
and how it went, and how long the reply took.  Session ids are stored as a
short digest so the log cannot be joined back to live sessions.
"""
from __future__ import annotations

import datetime as _dt
import hashlib
import json
import threading
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from assistant.schemas import ResponderOutput

SESSION_DIGEST_CHARS = 16


def anonymize_session(session_id: str | None) -> str:
    if not session_id:
        return ""
    return hashlib.sha256(session_id.encode("utf-8")).hexdigest()[:SESSION_DIGEST_CHARS]


@dataclass(frozen=True)
class InteractionLogEntry:
    timestamp: str
    session: str
    intent: str
    source: str
    remote: Optional[str]
    query_chars: int
    reply_chars: int
    latency_ms: float
    errors: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_output(
        cls,
        output: ResponderOutput,
        *,
        query: str | None,
        session_id: str = "",
        latency_ms: float = 0.0,
        remote: Optional[str] = None,
        errors: Iterable[str] = (),
        when: Optional[_dt.datetime] = None,
    ) -> "InteractionLogEntry":
        stamp = when or _dt.datetime.now(_dt.timezone.utc)
        return cls(
            timestamp=stamp.isoformat(timespec="seconds"),
            session=anonymize_session(session_id),
            intent=output.intent,
            source=output.source,
            remote=remote,
            query_chars=len((query or "").strip()),
            reply_chars=len(output.message),
            latency_ms=round(latency_ms, 1),
            errors=tuple(text for text in (str(item) for item in errors) if text),
        )

    def to_json(self) -> str:
        data = asdict(self)
        data["errors"] = list(self.errors)
        return json.dumps(data, ensure_ascii=False)


class InteractionLog:
    """Append-only JSONL file shared by every session of the process."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def append(self, entry: InteractionLogEntry) -> InteractionLogEntry:
        line = entry.to_json() + "\n"
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as fh:
                fh.write(line)
        return entry


__all__ = ["InteractionLog", "InteractionLogEntry", "anonymize_session"]
