"""Intent detection helpers for the portfolio assistant."""
from __future__ import annotations

from dataclasses import dataclass
import unicodedata
from typing import Callable, Iterable, Optional, Tuple


def _normalize(text: str | None) -> str:
    """Return a lower-cased NFKC-normalised string for matching."""

    if text is None:
        return ""
    return unicodedata.normalize("NFKC", str(text)).strip().lower()


def normalize_for_matching(text: str | None) -> str:
    """Public helper exposing the normalisation used for intent checks."""

    return _normalize(text)


# --- Trigger dictionaries -------------------------------------------------

GREETING_PREFIXES: tuple[str, ...] = ("hi", "hello", "hey", "greetings")
SKILLS_KEYWORDS: tuple[str, ...] = ("skill", "technology", "tech stack")
EXPERIENCE_KEYWORDS: tuple[str, ...] = ("experience", "work", "job")
PROJECTS_KEYWORDS: tuple[str, ...] = ("project",)
EDUCATION_KEYWORDS: tuple[str, ...] = ("education", "degree", "college", "study", "university")
CONTACT_KEYWORDS: tuple[str, ...] = ("contact", "email", "phone", "reach", "hire")
ABOUT_KEYWORDS: tuple[str, ...] = ("about", "who", "introduce", "bio")
HELP_KEYWORDS: tuple[str, ...] = ("help", "what can")

DEFAULT_INTENT = "default"


def _contains_any(normalized: str, keywords: Iterable[str]) -> bool:
    return any(keyword in normalized for keyword in keywords)


def is_greeting(text: str | None) -> bool:
    """Return ``True`` if the message opens with a greeting word.

    Prefix matching only: ``"history"`` counts because it starts with
    ``"hi"``, while ``"oh hi"`` does not.
    """

    normalized = _normalize(text)
    return normalized.startswith(GREETING_PREFIXES)


def is_skills_query(text: str | None) -> bool:
    return _contains_any(_normalize(text), SKILLS_KEYWORDS)


def is_experience_query(text: str | None) -> bool:
    return _contains_any(_normalize(text), EXPERIENCE_KEYWORDS)


def is_projects_query(text: str | None) -> bool:
    return _contains_any(_normalize(text), PROJECTS_KEYWORDS)


def is_education_query(text: str | None) -> bool:
    return _contains_any(_normalize(text), EDUCATION_KEYWORDS)


def is_contact_query(text: str | None) -> bool:
    return _contains_any(_normalize(text), CONTACT_KEYWORDS)


def is_about_query(text: str | None) -> bool:
    return _contains_any(_normalize(text), ABOUT_KEYWORDS)


def is_help_query(text: str | None) -> bool:
    return _contains_any(_normalize(text), HELP_KEYWORDS)


IntentRule = Tuple[str, Callable[[Optional[str]], bool]]

# Evaluated top to bottom; the first predicate that matches decides the intent.
INTENT_RULES: tuple[IntentRule, ...] = (
    ("greeting", is_greeting),
    ("skills", is_skills_query),
    ("experience", is_experience_query),
    ("projects", is_projects_query),
    ("education", is_education_query),
    ("contact", is_contact_query),
    ("about", is_about_query),
    ("help", is_help_query),
)

PRIORITY_ORDER: tuple[str, ...] = tuple(label for label, _ in INTENT_RULES)


@dataclass
class IntentDetector:
    """Keyword-based intent detection over an ordered rule table."""

    rules: tuple[IntentRule, ...] = INTENT_RULES

    def detect(self, message: str | None) -> str:
        """Return the intent label for ``message`` or ``"default"``."""

        if not _normalize(message):
            return DEFAULT_INTENT
        for label, predicate in self.rules:
            if predicate(message):
                return label
        return DEFAULT_INTENT

    def matches(self, message: str | None) -> list[str]:
        """Return every label whose keywords appear in ``message``."""

        return [label for label, predicate in self.rules if predicate(message)]


def get_intent_detector() -> IntentDetector:
    """Factory for the intent detector."""

    return IntentDetector()


__all__ = [
    "ABOUT_KEYWORDS",
    "CONTACT_KEYWORDS",
    "DEFAULT_INTENT",
    "EDUCATION_KEYWORDS",
    "EXPERIENCE_KEYWORDS",
    "GREETING_PREFIXES",
    "HELP_KEYWORDS",
    "INTENT_RULES",
    "IntentDetector",
    "PRIORITY_ORDER",
    "PROJECTS_KEYWORDS",
    "SKILLS_KEYWORDS",
    "get_intent_detector",
    "is_about_query",
    "is_contact_query",
    "is_education_query",
    "is_experience_query",
    "is_greeting",
    "is_help_query",
    "is_projects_query",
    "is_skills_query",
    "normalize_for_matching",
]
