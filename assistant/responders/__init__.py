"""Responder package exposing the local, fallback and remote responders."""
from __future__ import annotations

from .fallback import FallbackResponder
from .local import LocalResponder
from .remote import BackendAIResponder, OpenAIResponder, build_remote_responder

__all__ = [
    "BackendAIResponder",
    "FallbackResponder",
    "LocalResponder",
    "OpenAIResponder",
    "build_remote_responder",
]
