import pytest

from portfolio_app import create_app, get_state
from services.portfolio_api import PortfolioAPIClient, PortfolioAPISettings
from tests.utils import DummySession, full_routes


def _make_app(overrides=None, **kwargs):
    session = DummySession(full_routes())
    client = PortfolioAPIClient(PortfolioAPISettings(base_url="http://backend.test"), session=session)
    config = {"TESTING": True}
    config.update(overrides or {})
    return create_app(config, api_client=client, **kwargs), session


@pytest.fixture
def client():
    app, _ = _make_app()
    return app.test_client()


def _open(client, **body):
    response = client.post("/api/chat/sessions", json=body)
    assert response.status_code == 201
    return response.get_json()


def test_healthz_returns_json_ok(client):
    response = client.get("/healthz")

    assert response.status_code == 200
    assert response.get_json() == {"ok": True}
    assert response.headers["Cache-Control"] == "no-store"


def test_open_session_greets_with_owner_name(client):
    payload = _open(client)

    assert payload["ok"] is True
    assert payload["session_id"]
    assert len(payload["messages"]) == 1
    welcome = payload["messages"][0]
    assert welcome["role"] == "assistant"
    assert welcome["content"].startswith("Hi! I'm Neurova AI.")
    assert "Chandru's projects" in welcome["content"]
    assert [item["action"] for item in payload["suggestions"]][0] == "experience"


def test_post_message_returns_reply_and_speech(client):
    session_id = _open(client, speaker="Asha")["session_id"]

    response = client.post(f"/api/chat/sessions/{session_id}/messages", json={"message": "hello"})

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["reply"].startswith("Hello Asha! 👋")
    assert payload["speech"].startswith("Hello Asha!")
    assert "👋" not in payload["speech"]
    assert [turn["role"] for turn in payload["messages"]] == ["assistant", "user", "assistant"]
    assert response.headers["Access-Control-Allow-Origin"] == "*"


def test_speech_can_be_disabled():
    app, _ = _make_app({"SPEECH_ENABLED": False})
    client = app.test_client()
    session_id = _open(client)["session_id"]

    payload = client.post(f"/api/chat/sessions/{session_id}/messages", json={"message": "skills"}).get_json()

    assert payload["reply"].startswith("Here are Chandru's skills:")
    assert "speech" not in payload


def test_remote_answer_is_used_when_configured():
    class Remote:
        def answer(self, question, context):
            return f"remote: {question}"

    app, _ = _make_app(remote=Remote())
    client = app.test_client()
    session_id = _open(client)["session_id"]

    payload = client.post(f"/api/chat/sessions/{session_id}/messages", json={"message": "skills"}).get_json()

    assert payload["reply"] == "remote: skills"


@pytest.mark.parametrize("body", [{}, {"message": ""}, {"message": "   "}, {"message": 5}])
def test_empty_message_is_rejected(client, body):
    session_id = _open(client)["session_id"]

    response = client.post(f"/api/chat/sessions/{session_id}/messages", json=body)

    assert response.status_code == 400
    assert response.get_json() == {"ok": False, "error": "empty_message"}


def test_overlong_message_is_rejected(client):
    session_id = _open(client)["session_id"]

    response = client.post(f"/api/chat/sessions/{session_id}/messages", json={"message": "x" * 2001})

    assert response.status_code == 413
    assert response.get_json()["error"] == "message_too_long"


def test_unknown_session_returns_404(client):
    assert client.get("/api/chat/sessions/missing").status_code == 404
    response = client.post("/api/chat/sessions/missing/messages", json={"message": "hi"})
    assert response.status_code == 404
    assert response.get_json()["error"] == "session_not_found"


def test_show_session_returns_transcript(client):
    session_id = _open(client)["session_id"]
    client.post(f"/api/chat/sessions/{session_id}/messages", json={"message": "contact"})

    payload = client.get(f"/api/chat/sessions/{session_id}").get_json()

    assert payload["session_id"] == session_id
    assert len(payload["messages"]) == 3
    assert "chandru@example.com" in payload["messages"][-1]["content"]


def test_close_session_then_404(client):
    session_id = _open(client)["session_id"]

    assert client.delete(f"/api/chat/sessions/{session_id}").status_code == 204
    assert client.delete(f"/api/chat/sessions/{session_id}").status_code == 404
    response = client.post(f"/api/chat/sessions/{session_id}/messages", json={"message": "hi"})
    assert response.status_code == 404


def test_snapshot_is_cached_across_sessions():
    app, session = _make_app()
    client = app.test_client()

    _open(client)
    _open(client)

    assert len(session.calls) == 5


def test_refresh_reloads_snapshot():
    app, session = _make_app()
    client = app.test_client()
    session_id = _open(client)["session_id"]

    response = client.post(f"/api/chat/sessions/{session_id}/refresh")

    assert response.status_code == 200
    assert len(session.calls) == 10
    assert get_state(app).sessions.get(session_id).snapshot.name == "Chandru"


def test_cors_wildcard_by_default(client):
    response = client.post("/api/chat/sessions", json={}, headers={"Origin": "https://site.example"})

    assert response.headers["Access-Control-Allow-Origin"] == "*"
    assert "Origin" in response.headers["Vary"]


def test_cors_echoes_only_listed_origins():
    app, _ = _make_app({"ALLOWED_ORIGINS": "https://a.example, https://b.example/"})
    client = app.test_client()

    allowed = client.post("/api/chat/sessions", json={}, headers={"Origin": "https://b.example"})
    assert allowed.headers["Access-Control-Allow-Origin"] == "https://b.example"
    assert "Origin" in allowed.headers["Vary"]

    other = client.post("/api/chat/sessions", json={}, headers={"Origin": "https://evil.example"})
    assert "Access-Control-Allow-Origin" not in other.headers

    missing = client.post("/api/chat/sessions", json={})
    assert "Access-Control-Allow-Origin" not in missing.headers


def test_non_ascii_reply_is_not_escaped(client):
    session_id = _open(client)["session_id"]

    response = client.post(f"/api/chat/sessions/{session_id}/messages", json={"message": "hello"})

    assert "👋".encode("utf-8") in response.data


def test_openai_key_override_reaches_client(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    app, _ = _make_app({"AI_QUERY_PROVIDER": "openai", "OPENAI_API_KEY": "sk-override"})

    remote = get_state(app).responder.remote
    assert remote.client.api_key == "sk-override"


def test_icon_only_reply_has_no_speech():
    class Remote:
        def answer(self, question, context):
            return "🤖"

    app, _ = _make_app(remote=Remote())
    client = app.test_client()
    session_id = _open(client)["session_id"]

    payload = client.post(f"/api/chat/sessions/{session_id}/messages", json={"message": "hi"}).get_json()

    assert payload["reply"] == "🤖"
    assert "speech" not in payload
