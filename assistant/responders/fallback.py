"""Fallback responder returning the capability menu."""
from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Dict, List, Sequence


CAPABILITY_MENU = (
    "I can help you learn about:\n\n"
    "• 💼 Work Experience\n"
    "• 🚀 Projects\n"
    "• 🛠️ Skills & Technologies\n"
    "• 🎓 Education\n"
    "• 📞 Contact Information\n\n"
    "Just ask me anything specific!"
)


@dataclass(frozen=True)
class FallbackResponderResult:
    """Structured result produced by :class:`FallbackResponder`."""

    message: str
    quick_replies: Sequence[Dict[str, str]]


class FallbackResponder:
    """Responder that guides the user when no intent matches."""

    class Action(StrEnum):
        EXPERIENCE = "experience"
        PROJECTS = "projects"
        SKILLS = "skills"
        EDUCATION = "education"
        CONTACT = "contact"

    _MENU: List[Dict[str, str]] = [
        {"label": "Work Experience", "payload": "Tell me about your work experience", "action": Action.EXPERIENCE.value},
        {"label": "Projects", "payload": "What projects have you built?", "action": Action.PROJECTS.value},
        {"label": "Skills", "payload": "What skills do you have?", "action": Action.SKILLS.value},
        {"label": "Education", "payload": "Where did you study?", "action": Action.EDUCATION.value},
        {"label": "Contact", "payload": "How can I contact you?", "action": Action.CONTACT.value},
    ]

    def respond(self, message: str | None = None) -> FallbackResponderResult:
        """Return the capability menu with quick-reply suggestions."""

        _ = message
        return FallbackResponderResult(
            message=CAPABILITY_MENU,
            quick_replies=[dict(item) for item in self._MENU],
        )


__all__ = ["CAPABILITY_MENU", "FallbackResponder", "FallbackResponderResult"]
