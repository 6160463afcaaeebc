"""Text preparation for the text-to-speech side channel.

Only the spoken copy is cleaned; the reply shown in the transcript keeps
its icons.
"""
from __future__ import annotations

import re

SPOKEN_EMOJI: tuple[str, ...] = (
    "🎨", "⚙", "☁", "💾", "🤖", "🔧", "✨",
    "👋", "📍", "🚀", "🔗", "🎓", "📚",
    "📞", "📧", "📱", "👤", "💼", "🛠",
)
VARIATION_SELECTOR = "\ufe0f"

_EMOJI_RE = re.compile("|".join(re.escape(item) for item in SPOKEN_EMOJI + (VARIATION_SELECTOR,)))
_SPACES_RE = re.compile(r"\s{2,}")


def sanitize_for_speech(text: str | None) -> str:
    """Strip icons and collapse whitespace so only content is read aloud.

    A reply made only of icons yields ``""``; there is nothing to speak.
    """

    cleaned = _EMOJI_RE.sub("", text or "")
    return _SPACES_RE.sub(" ", cleaned).strip()


__all__ = ["SPOKEN_EMOJI", "sanitize_for_speech"]
