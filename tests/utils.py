"""Shared sample payloads and HTTP doubles for the test-suite."""
from __future__ import annotations

from assistant.schemas import KnowledgeSnapshot


SAMPLE_PROFILE = {
    "name": "Chandru",
    "email": "chandru@example.com",
    "phone": "+91 90000 00000",
    "about": "Full-stack developer who builds AI-assisted web products.",
}

SAMPLE_SKILLS = [
    {"category": "Frontend", "items": ["React", "Tailwind CSS"]},
    {"category": "Backend Development", "items": ["Node.js", "Express"]},
    {"category": "Databases", "items": ["MongoDB", "PostgreSQL"]},
    {"category": "Cloud Infra", "items": ["AWS", "Render"]},
    {"category": "AI/ML", "items": ["OpenAI API"]},
    {"category": "Misc", "items": ["Figma"]},
    {"category": "Empty group", "items": []},
]

SAMPLE_EXPERIENCE = [
    {
        "role": "Software Engineer Intern",
        "company": "Acme Labs",
        "duration": "Jan 2024 - Jun 2024",
        "description": "Built internal dashboards.",
        "tech": ["React", "Flask"],
    },
    {"role": "Freelance Developer", "company": "", "duration": "", "description": "", "tech": []},
]

SAMPLE_EDUCATION = [
    {
        "degree": "B.E. Computer Science",
        "institution": "Anna University",
        "year": 2024,
        "cgpa": 8.6,
        "highlights": ["Hackathon winner", "Student mentor"],
    },
    {"degree": "Higher Secondary", "institution": "City School", "year": "2020", "highlights": []},
]

SAMPLE_PROJECTS = [
    {
        "title": "UptimeEye",
        "description": "Website uptime monitoring with alerts.",
        "tech": ["Node.js", "MongoDB"],
        "github": "https://github.com/example/uptimeeye",
        "website": "https://uptimeeye.example.com",
    },
    {"title": "Rydirect", "description": "URL shortener with analytics."},
]



def make_snapshot() -> KnowledgeSnapshot:
    return KnowledgeSnapshot.from_payloads(
        profile=SAMPLE_PROFILE,
        skills=SAMPLE_SKILLS,
        experience=SAMPLE_EXPERIENCE,
        education=SAMPLE_EDUCATION,
        projects=SAMPLE_PROJECTS,
    )


class DummyResponse:
    def __init__(self, status_code=200, payload=None, invalid_json=False):
        self.status_code = status_code
        self._payload = payload
        self._invalid_json = invalid_json

    def json(self):
        if self._invalid_json:
            raise ValueError("not json")
        return self._payload


class DummySession:
    """Minimal stand-in for ``requests.Session`` keyed by request path."""

    def __init__(self, routes, host="backend.test"):
        self.routes = routes
        self.host = host
        self.headers = {}
        self.calls = []

    def request(self, method, url, json=None, timeout=None):
        path = url.split(self.host, 1)[1]
        self.calls.append((method, path, json, timeout))
        result = self.routes.get((method, path))
        if isinstance(result, Exception):
            raise result
        if result is None:
            return DummyResponse(status_code=404, payload={"message": "not found"})
        return result


def full_routes():
    return {
        ("GET", "/api/profile"): DummyResponse(payload=SAMPLE_PROFILE),
        ("GET", "/api/skills"): DummyResponse(payload=SAMPLE_SKILLS),
        ("GET", "/api/experience"): DummyResponse(payload=SAMPLE_EXPERIENCE),
        ("GET", "/api/education"): DummyResponse(payload=SAMPLE_EDUCATION),
        ("GET", "/api/portfolio"): DummyResponse(payload=SAMPLE_PROJECTS),
    }
