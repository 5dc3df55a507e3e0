"""
api/session.py — 멀티유저 인메모리 세션 (쿠키 기반)

각 사용자에게 UUID 세션 ID를 발급하고, 세션별로 독립된 상태를 유지.
TTL 경과 시 자동 만료. 앱 팩토리가 SessionStore 인스턴스를 만들어
app.state.sessions에 둔다.

세션 값:
  user_id    — 모의 로그인한 사용자 ID (없으면 None)
  controller — 진행 중인 SessionController (없으면 None)
"""

import threading
import time
import uuid
from typing import Any

import config


def _new_state() -> dict[str, Any]:
    return {
        "user_id": None,
        "controller": None,
    }


def _close_controller(state: dict[str, Any]) -> None:
    controller = state.get("controller")
    if controller is not None:
        controller.close()


class SessionStore:
    def __init__(self, ttl: int = config.SESSION_TTL):
        self.ttl = ttl
        self._lock = threading.Lock()
        self._sessions: dict[str, dict[str, Any]] = {}
        self._timestamps: dict[str, float] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def create_session(self) -> str:
        """새 세션을 생성하고 세션 ID를 반환."""
        sid = uuid.uuid4().hex
        with self._lock:
            self._sessions[sid] = _new_state()
            self._timestamps[sid] = time.time()
        return sid

    def get_session(self, sid: str) -> dict[str, Any] | None:
        """세션 ID로 세션 데이터를 가져옴. 만료되었거나 없으면 None."""
        with self._lock:
            if sid not in self._sessions:
                return None
            if time.time() - self._timestamps[sid] > self.ttl:
                _close_controller(self._sessions.pop(sid))
                del self._timestamps[sid]
                return None
            self._timestamps[sid] = time.time()  # 접근 시 갱신
            return self._sessions[sid]

    def get(self, sid: str, key: str, default=None):
        """세션에서 값 읽기."""
        session = self.get_session(sid)
        if session is None:
            return default
        return session.get(key, default)

    def put(self, sid: str, key: str, value) -> None:
        """세션에 값 쓰기."""
        with self._lock:
            if sid in self._sessions:
                self._sessions[sid][key] = value
                self._timestamps[sid] = time.time()

    def replace_controller(self, sid: str, controller) -> None:
        """진행 중인 세션을 새 컨트롤러로 교체 (이전 것은 타이머 정지)."""
        with self._lock:
            if sid not in self._sessions:
                controller.close()
                return
            _close_controller(self._sessions[sid])
            self._sessions[sid]["controller"] = controller
            self._timestamps[sid] = time.time()

    def reset(self, sid: str) -> None:
        """세션 초기화 (로그인 상태는 유지)."""
        with self._lock:
            if sid in self._sessions:
                saved_user = self._sessions[sid].get("user_id")
                _close_controller(self._sessions[sid])
                self._sessions[sid] = _new_state()
                self._sessions[sid]["user_id"] = saved_user
                self._timestamps[sid] = time.time()

    def cleanup_expired(self) -> int:
        """만료된 세션을 정리. 제거된 수 반환."""
        now = time.time()
        removed = 0
        with self._lock:
            expired = [sid for sid, ts in self._timestamps.items() if now - ts > self.ttl]
            for sid in expired:
                _close_controller(self._sessions.pop(sid))
                del self._timestamps[sid]
                removed += 1
        return removed

    def close_all(self) -> None:
        with self._lock:
            for state in self._sessions.values():
                _close_controller(state)
