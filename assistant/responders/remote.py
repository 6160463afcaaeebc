"""Remote delegation: ask an external AI before falling back to local rules."""
from __future__ import annotations

import json
import os
from typing import Any, Dict, Mapping, Optional, Protocol

from assistant.config import AI_QUERY_PROVIDER, ASSISTANT_NAME, OPENAI_MODEL


REMOTE_PLACEHOLDER_MESSAGE = "I'm not sure how to answer that yet, but feel free to ask about skills, projects or experience."

PROVIDERS: tuple[str, ...] = ("off", "backend", "openai")


class RemoteQueryError(RuntimeError):
    """The remote endpoint failed; callers fall back to local rules."""


class RemoteResponder(Protocol):
    def answer(self, question: str, context: Mapping[str, Any]) -> str:
        ...


class AIQueryClient(Protocol):
    def query_ai(self, question: str, context: Mapping[str, Any] | None = None) -> Dict[str, Any]:
        ...


def _answer_text(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        return REMOTE_PLACEHOLDER_MESSAGE
    return value


class BackendAIResponder:
    """Delegate to the portfolio backend's ``/api/ai-query`` endpoint."""

    name = "backend"

    def __init__(self, client: AIQueryClient):
        self.client = client

    def answer(self, question: str, context: Mapping[str, Any]) -> str:
        try:
            data = self.client.query_ai(question, context)
        except Exception as exc:
            raise RemoteQueryError(f"ai-query failed: {exc}") from exc
        return _answer_text(data.get("answer") if isinstance(data, Mapping) else None)


def _system_prompt(context: Mapping[str, Any]) -> str:
    snapshot = context.get("snapshot") or {}
    speaker = context.get("speakerName")
    lines = [
        f"You are {ASSISTANT_NAME}, a friendly assistant embedded in a personal portfolio site.",
        "Answer questions about the portfolio owner using only the JSON facts below.",
        "Keep answers short. If the facts do not cover the question, say so politely.",
    ]
    if speaker:
        lines.append(f"The visitor's name is {speaker}.")
    lines.append("FACTS: " + json.dumps(snapshot, ensure_ascii=False))
    return "\n".join(lines)


class OpenAIResponder:
    """Ask an OpenAI chat model directly with the snapshot as grounding."""

    name = "openai"

    def __init__(
        self,
        client: Any = None,
        *,
        model: str = OPENAI_MODEL,
        timeout: float | None = None,
        api_key: str | None = None,
    ):
        if client is None:
            from openai import OpenAI

            kwargs: Dict[str, Any] = {"api_key": api_key or os.getenv("OPENAI_API_KEY")}
            if timeout is not None:
                kwargs["timeout"] = timeout
            client = OpenAI(**kwargs)
        self.client = client
        self.model = model

    def answer(self, question: str, context: Mapping[str, Any]) -> str:
        messages = [
            {"role": "system", "content": _system_prompt(context)},
            {"role": "user", "content": question},
        ]
        try:
            resp = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=0.3,
            )
            content = resp.choices[0].message.content
        except Exception as exc:
            raise RemoteQueryError(f"openai query failed: {exc}") from exc
        return _answer_text(content)


def build_remote_responder(
    provider: str | None = None,
    *,
    api_client: Optional[AIQueryClient] = None,
    openai_client: Any = None,
    model: str = OPENAI_MODEL,
    timeout: float | None = None,
    api_key: str | None = None,
) -> Optional[RemoteResponder]:
    """Return the configured remote responder, or ``None`` when disabled."""

    name = (provider or AI_QUERY_PROVIDER or "off").strip().lower()
    if name in {"", "off", "none", "0", "false"}:
        return None
    if name == "backend":
        if api_client is None:
            raise ValueError("backend AI provider requires an API client")
        return BackendAIResponder(api_client)
    if name == "openai":
        return OpenAIResponder(openai_client, model=model, timeout=timeout, api_key=api_key)
    raise ValueError(f"Unsupported AI query provider: {name!r}")


__all__ = [
    "BackendAIResponder",
    "OpenAIResponder",
    "PROVIDERS",
    "REMOTE_PLACEHOLDER_MESSAGE",
    "RemoteQueryError",
    "RemoteResponder",
    "build_remote_responder",
]
