"""Rule-based responder used when remote delegation is off or fails."""
from __future__ import annotations

import logging
import re
from typing import Callable, Dict, List, Optional

from assistant.intent import DEFAULT_INTENT, IntentDetector, get_intent_detector, normalize_for_matching
from assistant.responders.fallback import CAPABILITY_MENU
from assistant.schemas import (
    EducationEntry,
    ExperienceEntry,
    KnowledgeSnapshot,
    ProjectEntry,
    ResponderOutput,
    coerce_snapshot,
)


logger = logging.getLogger(__name__)


SKILLS_LOADING_MESSAGE = "I'm still loading skills from the server. Please try again in a moment."

GENERIC_EXPERIENCE_MESSAGE = (
    "I don't have the detailed work history loaded right now, but the portfolio "
    "covers hands-on experience building full-stack web applications, backend APIs "
    "and databases, cloud deployments and AI-powered features. Ask me about "
    "projects or skills in the meantime!"
)

GENERIC_PROJECTS_MESSAGE = (
    "Here are a few highlights from the portfolio:\n\n"
    "1. Full-stack web applications\n"
    "2. Backend services and automation tools\n"
    "3. AI-powered assistants and integrations\n\n"
    "Project details are still loading. Ask again in a moment for the full list!"
)

GENERIC_EDUCATION_MESSAGE = (
    "Education details aren't available right now. The portfolio owner has an "
    "academic background in computer science and keeps learning through "
    "hands-on projects and certifications."
)

GENERIC_ABOUT_MESSAGE = "A passionate developer who enjoys building web applications and AI-powered tools."

AVAILABILITY_MESSAGE = "Feel free to reach out for collaborations or opportunities!"

CONTACT_MISSING_MESSAGE = "Contact details haven't loaded yet. You can also use the contact form on this site."

# Checked in order; the first fragment found in the category decides the icon.
SKILL_EMOJI_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("front",), "🎨"),
    (("back",), "⚙️"),
    (("database", "db"), "💾"),
    (("cloud",), "☁️"),
    (("ai", "ml"), "🤖"),
    (("tool", "dev"), "🔧"),
)
DEFAULT_SKILL_EMOJI = "✨"

# Titles shorter than this are too ambiguous to match inside free text.
MIN_PROJECT_TITLE_CHARS = 3
_LIST_REQUEST_RE = re.compile(r"\bprojects\b")


def skill_emoji(category: str | None) -> str:
    """Return the icon used for a skill category line."""

    lowered = (category or "").lower()
    for fragments, emoji in SKILL_EMOJI_RULES:
        if any(fragment in lowered for fragment in fragments):
            return emoji
    return DEFAULT_SKILL_EMOJI


def _possessive(snapshot: KnowledgeSnapshot, fallback: str) -> str:
    return f"{snapshot.name}'s" if snapshot.name else fallback


def _contact_lines(snapshot: KnowledgeSnapshot) -> List[str]:
    lines = []
    if snapshot.email:
        lines.append(f"📧 Email: {snapshot.email}")
    if snapshot.phone:
        lines.append(f"📱 Phone: {snapshot.phone}")
    return lines


# --- Formatting handlers ---------------------------------------------------


def greeting_reply(message: str, snapshot: KnowledgeSnapshot, speaker_name: Optional[str] = None) -> str:
    speaker = (speaker_name or "").strip()
    salutation = f"Hello {speaker}!" if speaker else "Hello!"
    subject = f"{snapshot.name}'s portfolio" if snapshot.name else "this portfolio"
    return (
        f"{salutation} 👋 I'm here to tell you about {subject}. You can ask me about:\n\n"
        "• Skills and technologies\n"
        "• Work experience\n"
        "• Projects\n"
        "• Education\n"
        "• Contact information\n\n"
        "What would you like to know?"
    )


def skills_reply(message: str, snapshot: KnowledgeSnapshot, speaker_name: Optional[str] = None) -> str:
    lines = [
        f"{skill_emoji(group.category)} {group.category or 'Other'}: {', '.join(group.items)}"
        for group in snapshot.skill_groups
        if group.items
    ]
    if not lines:
        return SKILLS_LOADING_MESSAGE
    header = f"Here are {_possessive(snapshot, 'the')} skills:"
    return "\n\n".join([header, *lines])


def _experience_block(index: int, entry: ExperienceEntry) -> str:
    if entry.role and entry.company:
        heading = f"{entry.role} at {entry.company}"
    else:
        heading = entry.role or entry.company or "Role"
    lines = [f"{index}. 📍 {heading}"]
    if entry.duration:
        lines.append(f"   {entry.duration}")
    if entry.description:
        lines.append(f"   {entry.description}")
    if entry.tech:
        lines.append(f"   Tech: {', '.join(entry.tech)}")
    return "\n".join(lines)


def experience_reply(message: str, snapshot: KnowledgeSnapshot, speaker_name: Optional[str] = None) -> str:
    if not snapshot.experience:
        return GENERIC_EXPERIENCE_MESSAGE
    blocks = [_experience_block(idx, entry) for idx, entry in enumerate(snapshot.experience, start=1)]
    header = f"Here's {_possessive(snapshot, 'the')} work experience:"
    return "\n\n".join([header, *blocks])


def _project_detail_lines(project: ProjectEntry, indent: str = "") -> List[str]:
    lines = []
    if project.description:
        lines.append(f"{indent}{project.description}")
    if project.tech:
        lines.append(f"{indent}Tech: {', '.join(project.tech)}")
    if project.github:
        lines.append(f"{indent}GitHub: {project.github}")
    if project.website:
        lines.append(f"{indent}Website: {project.website}")
    return lines


def find_named_project(message: str | None, projects: tuple[ProjectEntry, ...]) -> Optional[ProjectEntry]:
    """Return the project whose title appears in ``message`` as whole words.

    The longest matching title wins so that "Nyra" does not shadow
    "Nyra Mobile" when both exist.  A message asking about "projects" in
    the plural always gets the list.
    """

    normalized = normalize_for_matching(message)
    if _LIST_REQUEST_RE.search(normalized):
        return None
    best: Optional[ProjectEntry] = None
    for project in projects:
        title = normalize_for_matching(project.title)
        if len(title) < MIN_PROJECT_TITLE_CHARS:
            continue
        if not re.search(rf"(?<!\w){re.escape(title)}(?!\w)", normalized):
            continue
        if best is None or len(title) > len(normalize_for_matching(best.title)):
            best = project
    return best


def projects_reply(message: str, snapshot: KnowledgeSnapshot, speaker_name: Optional[str] = None) -> str:
    if not snapshot.projects:
        return GENERIC_PROJECTS_MESSAGE

    named = find_named_project(message, snapshot.projects)
    if named is not None:
        details = _project_detail_lines(named)
        if not details:
            return f"🚀 {named.title}"
        return f"🚀 {named.title}\n\n" + "\n".join(details)

    blocks = []
    for idx, project in enumerate(snapshot.projects, start=1):
        lines = [f"{idx}. {project.title or 'Untitled project'}"]
        lines.extend(_project_detail_lines(project, indent="   "))
        blocks.append("\n".join(lines))
    header = f"Here are {_possessive(snapshot, 'the')} notable projects:"
    footer = "Ask about a specific project for more details!"
    return "\n\n".join([header, *blocks, footer])


def _education_block(entry: EducationEntry) -> str:
    lines = [f"🎓 {entry.degree or 'Education'}"]
    if entry.institution and entry.year:
        lines.append(f"{entry.institution} ({entry.year})")
    elif entry.institution or entry.year:
        lines.append(entry.institution or entry.year)
    if entry.cgpa:
        lines.append(f"CGPA: {entry.cgpa}")
    if entry.highlights:
        lines.append(f"Highlights: {', '.join(entry.highlights)}")
    return "\n".join(lines)


def education_reply(message: str, snapshot: KnowledgeSnapshot, speaker_name: Optional[str] = None) -> str:
    if not snapshot.education:
        return GENERIC_EDUCATION_MESSAGE
    blocks = [_education_block(entry) for entry in snapshot.education]
    return "\n\n".join(["📚 Education:", *blocks])


def contact_reply(message: str, snapshot: KnowledgeSnapshot, speaker_name: Optional[str] = None) -> str:
    lines = _contact_lines(snapshot)
    body = "\n".join(lines) if lines else CONTACT_MISSING_MESSAGE
    return "\n\n".join(["📞 Contact Information:", body, AVAILABILITY_MESSAGE])


def about_reply(message: str, snapshot: KnowledgeSnapshot, speaker_name: Optional[str] = None) -> str:
    heading = f"👤 About {snapshot.name}:" if snapshot.name else "👤 About:"
    parts = [heading, snapshot.about or GENERIC_ABOUT_MESSAGE]
    lines = _contact_lines(snapshot)
    if lines:
        parts.append("\n".join(lines))
    return "\n\n".join(parts)


def capability_reply(message: str, snapshot: KnowledgeSnapshot, speaker_name: Optional[str] = None) -> str:
    return CAPABILITY_MENU


Handler = Callable[[str, KnowledgeSnapshot, Optional[str]], str]

HANDLERS: Dict[str, Handler] = {
    "greeting": greeting_reply,
    "skills": skills_reply,
    "experience": experience_reply,
    "projects": projects_reply,
    "education": education_reply,
    "contact": contact_reply,
    "about": about_reply,
    "help": capability_reply,
    DEFAULT_INTENT: capability_reply,
}


class LocalResponder:
    """Deterministic responder mapping an intent to a formatted reply."""

    def __init__(self, detector: IntentDetector | None = None, handlers: Dict[str, Handler] | None = None):
        self.detector = detector or get_intent_detector()
        self.handlers = dict(handlers or HANDLERS)

    def answer(
        self,
        message: str | None,
        snapshot: KnowledgeSnapshot | None = None,
        speaker_name: Optional[str] = None,
    ) -> ResponderOutput:
        """Return a :class:`ResponderOutput` for ``message``."""

        knowledge = coerce_snapshot(snapshot)
        text = (message or "").strip()
        intent = self.detector.detect(text)
        handler = self.handlers.get(intent, capability_reply)
        try:
            reply = handler(text, knowledge, speaker_name)
        except Exception:
            logger.exception("local responder failed: intent=%s", intent)
            reply = CAPABILITY_MENU
        return ResponderOutput(message=reply or CAPABILITY_MENU, intent=intent, source="local")


__all__ = [
    "AVAILABILITY_MESSAGE",
    "GENERIC_ABOUT_MESSAGE",
    "GENERIC_EDUCATION_MESSAGE",
    "GENERIC_EXPERIENCE_MESSAGE",
    "GENERIC_PROJECTS_MESSAGE",
    "HANDLERS",
    "LocalResponder",
    "SKILLS_LOADING_MESSAGE",
    "SKILL_EMOJI_RULES",
    "find_named_project",
    "skill_emoji",
]
