import json

import pytest

from assistant.responder import APOLOGY_MESSAGE, IntentResponder, build_remote_context, respond
from assistant.responders.fallback import CAPABILITY_MENU
from assistant.responders.local import GENERIC_EXPERIENCE_MESSAGE, LocalResponder
from assistant.responders.remote import (
    REMOTE_PLACEHOLDER_MESSAGE,
    BackendAIResponder,
    RemoteQueryError,
)
from assistant.schemas import KnowledgeSnapshot


class FailingRemote:
    def __init__(self, exc=None):
        self.calls = 0
        self.exc = exc or RemoteQueryError("status=503")

    def answer(self, question, context):
        self.calls += 1
        raise self.exc


class RecordingRemote:
    def __init__(self, answer="Remote says hi"):
        self.calls = []
        self._answer = answer

    def answer(self, question, context):
        self.calls.append((question, context))
        return self._answer


MESSAGES = [
    "hi",
    "what are your skills",
    "work experience?",
    "projects",
    "education",
    "contact",
    "about",
    "help",
    "zzz",
    "!",
]


@pytest.mark.parametrize("message", MESSAGES)
def test_respond_always_returns_text_for_empty_snapshot(message, empty_snapshot):
    reply = respond(message, empty_snapshot, None)

    assert isinstance(reply, str)
    assert reply.strip()


def test_respond_tolerates_missing_snapshot():
    assert respond("skills", None, None)
    assert respond("work", {"experience": "not a list"}, None) == GENERIC_EXPERIENCE_MESSAGE


def test_respond_is_idempotent(snapshot):
    for message in MESSAGES:
        assert respond(message, snapshot, "Asha") == respond(message, snapshot, "Asha")


def test_empty_input_returns_menu(snapshot):
    assert respond("", snapshot) == CAPABILITY_MENU
    assert respond("   ", snapshot) == CAPABILITY_MENU
    assert respond(None, snapshot) == CAPABILITY_MENU


def test_remote_failure_matches_local_output(snapshot):
    remote = FailingRemote()

    delegated = respond("what are your skills", snapshot, None, remote=remote)
    local_only = respond("what are your skills", snapshot, None)

    assert delegated == local_only
    assert remote.calls == 1


def test_unexpected_remote_exception_is_swallowed(snapshot):
    remote = FailingRemote(exc=KeyError("answer"))

    reply = IntentResponder(remote=remote, log_path="").reply("who are you", snapshot)

    assert reply.source == "local"
    assert reply.intent == "about"


def test_remote_success_is_returned_verbatim(snapshot):
    remote = RecordingRemote("  Chandru knows React.  ")

    output = IntentResponder(remote=remote, log_path="").reply("skills?", snapshot, "Asha")

    assert output.message == "  Chandru knows React.  "
    assert output.source == "remote"
    assert len(remote.calls) == 1
    question, context = remote.calls[0]
    assert question == "skills?"
    assert context["speakerName"] == "Asha"
    assert context["snapshot"]["name"] == "Chandru"


def test_remote_not_called_for_empty_input(snapshot):
    remote = RecordingRemote()

    assert respond("  ", snapshot, remote=remote) == CAPABILITY_MENU
    assert remote.calls == []


def test_backend_responder_placeholder_when_answer_missing(snapshot):
    class Client:
        def __init__(self, payload):
            self.payload = payload

        def query_ai(self, question, context=None):
            return self.payload

    assert BackendAIResponder(Client({"answer": ""})).answer("q", {}) == REMOTE_PLACEHOLDER_MESSAGE
    assert BackendAIResponder(Client({})).answer("q", {}) == REMOTE_PLACEHOLDER_MESSAGE
    assert BackendAIResponder(Client({"answer": "ok"})).answer("q", {}) == "ok"


def test_backend_responder_wraps_client_errors():
    class Client:
        def query_ai(self, question, context=None):
            raise ConnectionError("down")

    with pytest.raises(RemoteQueryError):
        BackendAIResponder(Client()).answer("q", {})


def test_build_remote_context_omits_blank_speaker(snapshot):
    context = build_remote_context(snapshot, "  ")

    assert "speakerName" not in context
    assert context["snapshot"]["skillGroups"][0]["category"] == "Frontend"
    json.dumps(context)


def test_local_crash_returns_apology(snapshot, monkeypatch):
    def _crash(self, message, snapshot=None, speaker_name=None):
        raise RuntimeError("broken")

    monkeypatch.setattr(LocalResponder, "answer", _crash)

    output = IntentResponder(log_path="").reply("skills", snapshot)

    assert output.message == APOLOGY_MESSAGE
    assert output.source == "apology"


def test_interaction_log_written(tmp_path, snapshot):
    log_path = tmp_path / "logs" / "interactions.jsonl"
    responder = IntentResponder(remote=FailingRemote(), log_path=log_path)

    responder.reply("what are your skills", snapshot, session_id="session-1")

    data = json.loads(log_path.read_text(encoding="utf-8").strip())
    assert data["intent"] == "skills"
    assert data["source"] == "local"
    assert data["errors"] == ["status=503"]
    assert data["remote"] == "FailingRemote"
    assert data["session"] and data["session"] != "session-1"


def test_interaction_log_names_builtin_remote(tmp_path, snapshot):
    class Client:
        def query_ai(self, question, context=None):
            return {"answer": "From the backend"}

    log_path = tmp_path / "interactions.jsonl"
    responder = IntentResponder(remote=BackendAIResponder(Client()), log_path=log_path)

    responder.reply("skills", snapshot)
    responder.reply("", snapshot)

    first, second = [json.loads(line) for line in log_path.read_text(encoding="utf-8").splitlines()]
    assert (first["remote"], first["source"]) == ("backend", "remote")
    assert (second["remote"], second["intent"]) == (None, "help")


def test_snapshot_from_dict_payload_does_not_raise():
    snapshot = KnowledgeSnapshot.from_payloads(
        profile="oops",
        skills=[None, 3, {"category": None, "items": "a, b"}],
        experience=[{"tech": None}],
        education=[{"highlights": 5}],
        projects=[{"github": ""}],
    )

    assert snapshot.skill_groups[0].items == ("a", "b")
    assert snapshot.projects[0].github is None
    for message in MESSAGES:
        assert respond(message, snapshot)


@pytest.mark.parametrize("answer", [{"answer": "x"}, ["x"], 42, "   ", ""])
def test_non_text_remote_answer_falls_back_to_local(answer, snapshot):
    reply = respond("what are your skills", snapshot, remote=RecordingRemote(answer))

    assert isinstance(reply, str)
    assert reply == respond("what are your skills", snapshot)
