"""Shared schemas for the portfolio assistant.

Payloads coming back from the portfolio backend are loosely shaped JSON.  The
``from_payload`` helpers coerce them into frozen dataclasses so that every
formatting rule can branch on explicit ``None``/empty values instead of
probing dictionaries.  Coercion never raises: missing or malformed fields
collapse to ``""``, ``()`` or ``None``.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, Literal, Mapping, Optional, Tuple


def _text(value: Any) -> str:
    """Return ``value`` as a stripped string, mapping ``None`` to ``""``."""

    if value is None or isinstance(value, (dict, list, tuple, set)):
        return ""
    if isinstance(value, bool):
        return ""
    return str(value).strip()


def _optional_text(value: Any) -> Optional[str]:
    text = _text(value)
    return text or None


def _items(value: Any) -> Tuple[str, ...]:
    """Coerce a list-ish value into a tuple of non-empty strings."""

    if value is None:
        return ()
    if isinstance(value, str):
        parts: Iterable[Any] = value.split(",")
    elif isinstance(value, (list, tuple)):
        parts = value
    else:
        return ()
    cleaned = (_text(part) for part in parts)
    return tuple(item for item in cleaned if item)


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _records(value: Any) -> Tuple[Mapping[str, Any], ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(item for item in value if isinstance(item, Mapping))


@dataclass(frozen=True, slots=True)
class SkillGroup:
    category: str
    items: Tuple[str, ...] = ()

    @classmethod
    def from_payload(cls, payload: Any) -> "SkillGroup":
        data = _mapping(payload)
        return cls(category=_text(data.get("category")), items=_items(data.get("items")))


@dataclass(frozen=True, slots=True)
class ExperienceEntry:
    role: str = ""
    company: str = ""
    duration: str = ""
    description: str = ""
    tech: Tuple[str, ...] = ()

    @classmethod
    def from_payload(cls, payload: Any) -> "ExperienceEntry":
        data = _mapping(payload)
        return cls(
            role=_text(data.get("role")),
            company=_text(data.get("company")),
            duration=_text(data.get("duration")),
            description=_text(data.get("description")),
            tech=_items(data.get("tech")),
        )


@dataclass(frozen=True, slots=True)
class EducationEntry:
    degree: str = ""
    institution: str = ""
    year: str = ""
    cgpa: Optional[str] = None
    highlights: Tuple[str, ...] = ()

    @classmethod
    def from_payload(cls, payload: Any) -> "EducationEntry":
        data = _mapping(payload)
        return cls(
            degree=_text(data.get("degree")),
            institution=_text(data.get("institution")),
            year=_text(data.get("year")),
            cgpa=_optional_text(data.get("cgpa")),
            highlights=_items(data.get("highlights")),
        )


@dataclass(frozen=True, slots=True)
class ProjectEntry:
    title: str = ""
    description: str = ""
    tech: Tuple[str, ...] = ()
    github: Optional[str] = None
    website: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "ProjectEntry":
        data = _mapping(payload)
        return cls(
            title=_text(data.get("title") or data.get("name")),
            description=_text(data.get("description")),
            tech=_items(data.get("tech")),
            github=_optional_text(data.get("github")),
            website=_optional_text(data.get("website")),
        )


@dataclass(frozen=True, slots=True)
class KnowledgeSnapshot:
    """Read-only bundle of portfolio facts used to render a reply."""

    name: str = ""
    email: str = ""
    phone: str = ""
    about: str = ""
    skill_groups: Tuple[SkillGroup, ...] = ()
    experience: Tuple[ExperienceEntry, ...] = ()
    education: Tuple[EducationEntry, ...] = ()
    projects: Tuple[ProjectEntry, ...] = ()

    @classmethod
    def empty(cls) -> "KnowledgeSnapshot":
        return cls()

    @classmethod
    def from_payloads(
        cls,
        profile: Any = None,
        skills: Any = None,
        experience: Any = None,
        education: Any = None,
        projects: Any = None,
    ) -> "KnowledgeSnapshot":
        """Build a snapshot from the raw backend payloads."""

        data = _mapping(profile)
        return cls(
            name=_text(data.get("name")),
            email=_text(data.get("email")),
            phone=_text(data.get("phone")),
            about=_text(data.get("about")),
            skill_groups=tuple(SkillGroup.from_payload(item) for item in _records(skills)),
            experience=tuple(ExperienceEntry.from_payload(item) for item in _records(experience)),
            education=tuple(EducationEntry.from_payload(item) for item in _records(education)),
            projects=tuple(ProjectEntry.from_payload(item) for item in _records(projects)),
        )

    @property
    def is_empty(self) -> bool:
        return self == KnowledgeSnapshot()

    def to_context(self) -> Dict[str, Any]:
        """Return a JSON-ready representation for remote delegation."""

        payload = asdict(self)
        payload["skillGroups"] = payload.pop("skill_groups")
        return payload


def coerce_snapshot(value: Any) -> KnowledgeSnapshot:
    """Return ``value`` as a :class:`KnowledgeSnapshot`.

    Accepts an existing snapshot, ``None`` or a flat mapping shaped like
    :meth:`KnowledgeSnapshot.to_context` (camelCase or snake_case keys).
    """

    if isinstance(value, KnowledgeSnapshot):
        return value
    data = _mapping(value)
    if not data:
        return KnowledgeSnapshot.empty()
    skills = data.get("skillGroups")
    if skills is None:
        skills = data.get("skill_groups")
    return KnowledgeSnapshot.from_payloads(
        profile=data,
        skills=skills,
        experience=data.get("experience"),
        education=data.get("education"),
        projects=data.get("projects"),
    )


Role = Literal["user", "assistant"]


@dataclass(frozen=True, slots=True)
class ConversationTurn:
    role: Role
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True, slots=True)
class ResponderOutput:
    """Reply text plus how it was produced."""

    message: str
    intent: str
    source: str = "local"


__all__ = [
    "ConversationTurn",
    "EducationEntry",
    "ExperienceEntry",
    "KnowledgeSnapshot",
    "ProjectEntry",
    "ResponderOutput",
    "SkillGroup",
    "coerce_snapshot",
]
