"""Portfolio assistant core: intent detection and reply generation."""

from . import config, conversation, intent, logging_utils, responder, schemas, speech  # noqa: F401
from .responder import IntentResponder, respond
from .schemas import KnowledgeSnapshot

__all__ = [
    "IntentResponder",
    "KnowledgeSnapshot",
    "config",
    "conversation",
    "intent",
    "logging_utils",
    "respond",
    "responder",
    "schemas",
    "speech",
]
