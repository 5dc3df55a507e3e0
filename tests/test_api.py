"""HTTP API tests (FastAPI TestClient, in-memory storage, manual ticks)."""

import time

import pytest
from fastapi.testclient import TestClient

import config
from api.app import create_app
from api.session import SessionStore
from codetype.services.session_controller import SessionController
from codetype.services.storage import StorageError


@pytest.fixture
def snippet(storage, python_language):
    return storage.create_code_snippet(python_language.id, "Tiny", "print(1)", "beginner")


class TestAuth:
    def test_user_requires_login(self, client):
        assert client.get("/api/auth/user").status_code == 401

    def test_login_logout(self, client):
        r = client.get("/api/login")
        assert r.json()["id"] == config.MOCK_USER_ID
        assert client.get("/api/auth/user").json()["username"] == config.MOCK_USERNAME
        client.get("/api/logout")
        assert client.get("/api/auth/user").status_code == 401

    def test_session_cookie_issued(self, client):
        r = client.get("/api/languages")
        assert "codetype_session" in r.cookies


class TestCatalogue:
    def test_languages(self, client):
        names = [l["name"] for l in client.get("/api/languages").json()]
        assert "python" in names

    def test_language_404(self, client):
        assert client.get("/api/languages/nope").status_code == 404

    def test_snippets_and_random(self, client, python_language):
        snippets = client.get(f"/api/languages/{python_language.id}/snippets").json()
        assert len(snippets) == python_language.snippet_count
        r = client.get(f"/api/languages/{python_language.id}/snippets/random", params={"difficulty": "beginner"})
        assert r.status_code == 200
        assert r.json()["difficulty"] == "beginner"

    def test_random_404(self, client, python_language):
        r = client.get(f"/api/languages/{python_language.id}/snippets/random", params={"difficulty": "advanced"})
        assert r.status_code == 404

    def test_snippet_404(self, client):
        assert client.get("/api/snippets/nope").status_code == 404


class TestResults:
    def test_requires_login(self, client, snippet):
        body = {"snippet_id": snippet.id, "wpm": 40, "accuracy": 95, "time_spent": 30, "errors": 1}
        assert client.post("/api/test-results", json=body).status_code == 401

    def test_invalid_body(self, logged_in, snippet):
        body = {"snippet_id": snippet.id, "wpm": -1, "accuracy": 150, "time_spent": 30, "errors": 1}
        assert logged_in.post("/api/test-results", json=body).status_code == 422

    def test_unknown_snippet(self, logged_in):
        body = {"snippet_id": "nope", "wpm": 40, "accuracy": 95, "time_spent": 30, "errors": 1}
        assert logged_in.post("/api/test-results", json=body).status_code == 404

    def test_submit_updates_history_stats_and_leaderboard(self, logged_in, snippet):
        uid = config.MOCK_USER_ID
        body = {"snippet_id": snippet.id, "wpm": 40.4, "accuracy": 95, "time_spent": 30, "errors": 1}
        r = logged_in.post("/api/test-results", json=body)
        assert r.status_code == 200
        assert r.json()["wpm"] == 40

        history = logged_in.get(f"/api/users/{uid}/test-results").json()
        assert len(history) == 1
        stats = logged_in.get(f"/api/users/{uid}/stats").json()
        assert stats["total_tests"] == 1
        board = logged_in.get("/api/leaderboard").json()
        assert board[0]["rank"] == 1
        assert board[0]["user"]["id"] == uid
        assert logged_in.get(f"/api/users/{uid}/proficiency").json()[0]["tests_completed"] == 1
        assert logged_in.get(f"/api/users/{uid}/achievements").json()

    def test_profile(self, logged_in, snippet):
        uid = config.MOCK_USER_ID
        assert logged_in.get(f"/api/users/{uid}/profile").json()["global_rank"] is None
        body = {"snippet_id": snippet.id, "wpm": 40, "accuracy": 95, "time_spent": 30, "errors": 1}
        logged_in.post("/api/test-results", json=body)
        profile = logged_in.get(f"/api/users/{uid}/profile").json()
        assert profile["stats"]["total_tests"] == 1
        assert profile["global_rank"] == 1
        assert profile["recent_results"][0]["snippet_id"] == snippet.id
        assert profile["user"]["username"] == config.MOCK_USERNAME

    def test_other_users_data_forbidden(self, logged_in):
        for path in ("test-results", "stats", "achievements", "proficiency", "profile"):
            assert logged_in.get(f"/api/users/someone-else/{path}").status_code == 403

    def test_stats_created_when_missing(self, logged_in):
        stats = logged_in.get(f"/api/users/{config.MOCK_USER_ID}/stats").json()
        assert stats["total_tests"] == 0
        assert stats["average_wpm"] == 0

    def test_achievements_catalogue(self, client):
        assert len(client.get("/api/achievements").json()) >= 1


class TestTypingSession:
    def test_no_session(self, client):
        assert client.get("/api/typing/state").status_code == 404
        assert client.post("/api/typing/input", json={"value": "a"}).status_code == 404

    def test_start_requires_target(self, client):
        assert client.post("/api/typing/start", json={}).status_code == 400

    def test_start_unknown_snippet(self, client):
        assert client.post("/api/typing/start", json={"snippet_id": "nope"}).status_code == 404

    def test_full_attempt_is_persisted_once(self, logged_in, snippet):
        r = logged_in.post("/api/typing/start", json={"snippet_id": snippet.id})
        assert r.status_code == 200
        assert r.json()["state"]["phase"] == "idle"
        assert r.json()["snippet"]["code"] == "print(1)"

        state = logged_in.post("/api/typing/input", json={"value": "print"}).json()["state"]
        assert state["phase"] == "running"
        assert state["progress_percent"] == pytest.approx(62.5)

        state = logged_in.post("/api/typing/input", json={"value": "print(2)"}).json()["state"]
        assert state["phase"] == "complete"
        assert state["error_count"] == 1
        assert state["result"]["errors"] == 1

        logged_in.post("/api/typing/input", json={"value": "print(2)"})
        history = logged_in.get(f"/api/users/{config.MOCK_USER_ID}/test-results").json()
        assert len(history) == 1
        assert history[0]["snippet_id"] == snippet.id

    def test_anonymous_attempt_not_persisted(self, client, storage, snippet):
        client.post("/api/typing/start", json={"snippet_id": snippet.id})
        state = client.post("/api/typing/input", json={"value": "print(1)"}).json()["state"]
        assert state["phase"] == "complete"
        assert storage.get_leaderboard() == []

    def test_start_by_language(self, client, python_language):
        r = client.post("/api/typing/start", json={"language_id": python_language.id, "difficulty": "beginner"})
        assert r.json()["snippet"]["difficulty"] == "beginner"

    def test_tick(self, client, snippet):
        client.post("/api/typing/start", json={"snippet_id": snippet.id})
        client.post("/api/typing/input", json={"value": "p"})
        state = client.post("/api/typing/tick").json()["state"]
        assert state["phase"] == "running"
        assert state["time_remaining_ms"] <= config.SESSION_DURATION_MS

    def test_reset_same_snippet(self, client, snippet):
        client.post("/api/typing/start", json={"snippet_id": snippet.id})
        client.post("/api/typing/input", json={"value": "pr"})
        r = client.post("/api/typing/reset", json={})
        assert r.json()["state"]["phase"] == "idle"
        assert r.json()["state"]["typed_length"] == 0
        assert r.json()["snippet"]["id"] == snippet.id

    def test_reset_next_snippet(self, client, snippet, app):
        client.post("/api/typing/start", json={"snippet_id": snippet.id})
        sid = client.cookies.get("codetype_session")
        old = app.state.sessions.get(sid, "controller")
        r = client.post("/api/typing/reset", json={"next_snippet": True})
        assert r.status_code == 200
        assert r.json()["state"]["phase"] == "idle"
        assert app.state.sessions.get(sid, "controller") is not old

    def test_auto_tick_timer_closed_on_replace(self, storage, snippet):
        app = create_app(storage=storage, auto_tick=True, seed=False)
        with TestClient(app) as c:
            c.post("/api/typing/start", json={"snippet_id": snippet.id})
            c.post("/api/typing/input", json={"value": "p"})
            sid = c.cookies.get("codetype_session")
            first = app.state.sessions.get(sid, "controller")
            assert first.timer_active
            c.post("/api/typing/start", json={"snippet_id": snippet.id})
            assert not first.timer_active

    def test_shutdown_stops_timers_and_cleanup(self, storage, snippet):
        app = create_app(storage=storage, auto_tick=True, seed=False)
        with TestClient(app) as c:
            c.post("/api/typing/start", json={"snippet_id": snippet.id})
            c.post("/api/typing/input", json={"value": "p"})
            controller = app.state.sessions.get(c.cookies.get("codetype_session"), "controller")
            assert controller.timer_active
            assert not app.state.stop_cleanup.is_set()

        assert not controller.timer_active
        assert controller.phase.value == "running"
        assert app.state.stop_cleanup.is_set()


class TestRoot:
    def test_service_info(self, client):
        r = client.get("/")
        assert r.status_code == 200
        assert r.json()["name"] == "codetype"


class TestErrors:
    def test_storage_error_becomes_500(self, app, client, monkeypatch):
        def broken():
            raise StorageError("disk full")

        monkeypatch.setattr(app.state.storage, "get_languages", broken)
        r = client.get("/api/languages")
        assert r.status_code == 500


class TestSessionStore:
    def test_expiry_closes_controller(self, clock):
        store = SessionStore(ttl=0)
        sid = store.create_session()
        closed = []

        class Spy(SessionController):
            def close(self):
                closed.append(True)

        store.put(sid, "controller", Spy("abc", clock=clock))
        time.sleep(0.01)
        assert store.cleanup_expired() == 1
        assert closed == [True]
        assert len(store) == 0

    def test_reset_keeps_login(self):
        store = SessionStore()
        sid = store.create_session()
        store.put(sid, "user_id", "u1")
        store.put(sid, "controller", None)
        store.reset(sid)
        assert store.get(sid, "user_id") == "u1"

    def test_unknown_session(self):
        store = SessionStore()
        assert store.get_session("missing") is None
        assert store.get("missing", "user_id", "dflt") == "dflt"
