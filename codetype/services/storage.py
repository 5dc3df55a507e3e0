"""
services/storage.py

sqlite 기반 영속 계층.
앱 시작 시 Storage 인스턴스를 하나 만들어 API/뷰에 직접 넘겨 준다 (전역 싱글턴 없음).
여러 스레드(요청 처리, 세션 타이머)에서 호출되므로 커넥션 접근은 락으로 직렬화한다.
"""

import os
import random
import sqlite3
import threading
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from codetype.models.record_model import (
    Achievement, LanguageProficiency, LeaderboardEntry, TestResultRecord,
    User, UserAchievement, UserStats,
)
from codetype.models.snippet_model import CodeSnippet, Language


class StorageError(RuntimeError):
    """저장소 작업 실패."""


_SCHEMA = """
CREATE TABLE IF NOT EXISTS users(
    id TEXT PRIMARY KEY,
    email TEXT UNIQUE,
    first_name TEXT,
    last_name TEXT,
    profile_image_url TEXT,
    username TEXT UNIQUE,
    created_at TEXT,
    updated_at TEXT
);
CREATE TABLE IF NOT EXISTS languages(
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL UNIQUE,
    display_name TEXT NOT NULL,
    icon TEXT NOT NULL,
    snippet_count INTEGER DEFAULT 0
);
CREATE TABLE IF NOT EXISTS code_snippets(
    id TEXT PRIMARY KEY,
    language_id TEXT NOT NULL REFERENCES languages(id),
    title TEXT NOT NULL,
    code TEXT NOT NULL,
    difficulty TEXT NOT NULL,
    created_at TEXT
);
CREATE TABLE IF NOT EXISTS test_results(
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL REFERENCES users(id),
    snippet_id TEXT NOT NULL REFERENCES code_snippets(id),
    wpm REAL NOT NULL,
    accuracy REAL NOT NULL,
    time_spent INTEGER NOT NULL,
    errors INTEGER NOT NULL,
    completed_at TEXT
);
CREATE TABLE IF NOT EXISTS user_stats(
    user_id TEXT PRIMARY KEY REFERENCES users(id),
    total_tests INTEGER DEFAULT 0,
    average_wpm REAL DEFAULT 0,
    average_accuracy REAL DEFAULT 0,
    best_wpm REAL DEFAULT 0,
    best_accuracy REAL DEFAULT 0,
    global_rank INTEGER,
    updated_at TEXT
);
CREATE TABLE IF NOT EXISTS achievements(
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL UNIQUE,
    description TEXT NOT NULL,
    icon TEXT NOT NULL,
    condition TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS user_achievements(
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL REFERENCES users(id),
    achievement_id TEXT NOT NULL REFERENCES achievements(id),
    earned_at TEXT,
    UNIQUE(user_id, achievement_id)
);
CREATE TABLE IF NOT EXISTS language_proficiency(
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL REFERENCES users(id),
    language_id TEXT NOT NULL REFERENCES languages(id),
    average_wpm REAL DEFAULT 0,
    average_accuracy REAL DEFAULT 0,
    tests_completed INTEGER DEFAULT 0,
    proficiency_level TEXT DEFAULT 'beginner',
    updated_at TEXT,
    UNIQUE(user_id, language_id)
);
"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return uuid.uuid4().hex


class Storage:
    def __init__(self, db_path: str = ":memory:"):
        if db_path != ":memory:":
            os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
        self.db_path = db_path
        self._lock = threading.RLock()
        try:
            self._conn = sqlite3.connect(db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.executescript(_SCHEMA)
        except sqlite3.Error as e:
            raise StorageError(str(e))

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    # ── 내부 헬퍼 ────────────────────────────────────────────────────────

    def _execute(self, sql: str, params: tuple = ()) -> None:
        with self._lock:
            try:
                self._conn.execute(sql, params)
                self._conn.commit()
            except sqlite3.Error as e:
                self._conn.rollback()
                raise StorageError(str(e))

    def _fetchall(self, sql: str, params: tuple = ()) -> List[sqlite3.Row]:
        with self._lock:
            try:
                return self._conn.execute(sql, params).fetchall()
            except sqlite3.Error as e:
                raise StorageError(str(e))

    def _fetchone(self, sql: str, params: tuple = ()) -> Optional[sqlite3.Row]:
        rows = self._fetchall(sql, params)
        return rows[0] if rows else None

    # ── 사용자 ───────────────────────────────────────────────────────────

    def get_user(self, user_id: str) -> Optional[User]:
        row = self._fetchone("SELECT * FROM users WHERE id=?", (user_id,))
        return User(**dict(row)) if row else None

    def upsert_user(self, user_id: str, username: Optional[str] = None, email: Optional[str] = None,
                    first_name: Optional[str] = None, last_name: Optional[str] = None,
                    profile_image_url: Optional[str] = None) -> User:
        now = _now()
        self._execute(
            """
            INSERT INTO users(id, username, email, first_name, last_name, profile_image_url, created_at, updated_at)
            VALUES (?,?,?,?,?,?,?,?)
            ON CONFLICT(id) DO UPDATE SET
                username=excluded.username, email=excluded.email,
                first_name=excluded.first_name, last_name=excluded.last_name,
                profile_image_url=excluded.profile_image_url, updated_at=excluded.updated_at
            """,
            (user_id, username, email, first_name, last_name, profile_image_url, now, now),
        )
        return self.get_user(user_id)

    # ── 언어 ─────────────────────────────────────────────────────────────

    def get_languages(self) -> List[Language]:
        rows = self._fetchall("SELECT * FROM languages ORDER BY display_name ASC")
        return [Language(**dict(r)) for r in rows]

    def get_language(self, language_id: str) -> Optional[Language]:
        row = self._fetchone("SELECT * FROM languages WHERE id=?", (language_id,))
        return Language(**dict(row)) if row else None

    def get_language_by_name(self, name: str) -> Optional[Language]:
        row = self._fetchone("SELECT * FROM languages WHERE name=?", (name,))
        return Language(**dict(row)) if row else None

    def create_language(self, name: str, display_name: str, icon: str = "") -> Language:
        language_id = _new_id()
        self._execute(
            "INSERT INTO languages(id, name, display_name, icon, snippet_count) VALUES (?,?,?,?,0)",
            (language_id, name, display_name, icon),
        )
        return self.get_language(language_id)

    # ── 스니펫 ───────────────────────────────────────────────────────────

    def get_code_snippets(self, language_id: str) -> List[CodeSnippet]:
        rows = self._fetchall(
            "SELECT * FROM code_snippets WHERE language_id=? ORDER BY title ASC", (language_id,)
        )
        return [CodeSnippet(**dict(r)) for r in rows]

    def get_code_snippet(self, snippet_id: str) -> Optional[CodeSnippet]:
        row = self._fetchone("SELECT * FROM code_snippets WHERE id=?", (snippet_id,))
        return CodeSnippet(**dict(row)) if row else None

    def get_random_code_snippet(self, language_id: str, difficulty: Optional[str] = None) -> Optional[CodeSnippet]:
        snippets = self.get_code_snippets(language_id)
        if difficulty:
            snippets = [s for s in snippets if s.difficulty == difficulty]
        if not snippets:
            return None
        return random.choice(snippets)

    def create_code_snippet(self, language_id: str, title: str, code: str, difficulty: str) -> CodeSnippet:
        # 저장 전에 모델 검증 (난이도 등)
        snippet = CodeSnippet(
            id=_new_id(), language_id=language_id, title=title, code=code, difficulty=difficulty,
        )
        with self._lock:
            try:
                self._conn.execute(
                    "INSERT INTO code_snippets(id, language_id, title, code, difficulty, created_at) "
                    "VALUES (?,?,?,?,?,?)",
                    (snippet.id, language_id, title, code, difficulty, _now()),
                )
                self._conn.execute(
                    "UPDATE languages SET snippet_count = snippet_count + 1 WHERE id=?", (language_id,)
                )
                self._conn.commit()
            except sqlite3.Error as e:
                self._conn.rollback()
                raise StorageError(str(e))
        return self.get_code_snippet(snippet.id)

    # ── 결과 ─────────────────────────────────────────────────────────────

    def create_test_result(self, user_id: str, snippet_id: str, wpm: float, accuracy: float,
                           time_spent: int, errors: int) -> TestResultRecord:
        result_id = _new_id()
        self._execute(
            "INSERT INTO test_results(id, user_id, snippet_id, wpm, accuracy, time_spent, errors, completed_at) "
            "VALUES (?,?,?,?,?,?,?,?)",
            (result_id, user_id, snippet_id, wpm, accuracy, time_spent, errors, _now()),
        )
        row = self._fetchone("SELECT * FROM test_results WHERE id=?", (result_id,))
        return TestResultRecord(**dict(row))

    def get_user_test_results(self, user_id: str, limit: Optional[int] = 10) -> List[TestResultRecord]:
        """최신순. limit=None이면 전체."""
        sql = "SELECT * FROM test_results WHERE user_id=? ORDER BY completed_at DESC, rowid DESC"
        if limit is None:
            rows = self._fetchall(sql, (user_id,))
        else:
            rows = self._fetchall(sql + " LIMIT ?", (user_id, limit))
        return [TestResultRecord(**dict(r)) for r in rows]

    def get_user_language_results(self, user_id: str, language_id: str) -> List[TestResultRecord]:
        rows = self._fetchall(
            """
            SELECT r.* FROM test_results r
            JOIN code_snippets s ON s.id = r.snippet_id
            WHERE r.user_id=? AND s.language_id=?
            ORDER BY r.completed_at DESC, r.rowid DESC
            """,
            (user_id, language_id),
        )
        return [TestResultRecord(**dict(r)) for r in rows]

    # ── 통계 ─────────────────────────────────────────────────────────────

    def get_user_stats(self, user_id: str) -> Optional[UserStats]:
        row = self._fetchone("SELECT * FROM user_stats WHERE user_id=?", (user_id,))
        return UserStats(**dict(row)) if row else None

    def update_user_stats(self, stats: UserStats) -> UserStats:
        self._execute(
            """
            INSERT INTO user_stats(user_id, total_tests, average_wpm, average_accuracy,
                                   best_wpm, best_accuracy, global_rank, updated_at)
            VALUES (?,?,?,?,?,?,?,?)
            ON CONFLICT(user_id) DO UPDATE SET
                total_tests=excluded.total_tests, average_wpm=excluded.average_wpm,
                average_accuracy=excluded.average_accuracy, best_wpm=excluded.best_wpm,
                best_accuracy=excluded.best_accuracy, global_rank=excluded.global_rank,
                updated_at=excluded.updated_at
            """,
            (stats.user_id, stats.total_tests, stats.average_wpm, stats.average_accuracy,
             stats.best_wpm, stats.best_accuracy, stats.global_rank, _now()),
        )
        return self.get_user_stats(stats.user_id)

    def get_leaderboard(self, limit: int = 50) -> List[LeaderboardEntry]:
        rows = self._fetchall(
            """
            SELECT s.*, u.id AS u_id, u.username AS u_username, u.email AS u_email,
                   u.first_name AS u_first_name, u.last_name AS u_last_name,
                   u.profile_image_url AS u_profile_image_url
            FROM user_stats s
            JOIN users u ON u.id = s.user_id
            ORDER BY s.average_wpm DESC, s.best_wpm DESC
            LIMIT ?
            """,
            (limit,),
        )
        entries = []
        for r in rows:
            d = dict(r)
            user = User(**{k[2:]: d.pop(k) for k in list(d) if k.startswith("u_")})
            entries.append(LeaderboardEntry(**d, user=user))
        return entries

    def get_user_rank(self, user_id: str) -> Optional[int]:
        """리더보드 정렬 기준의 순위. 기록이 없으면 None. 동점은 같은 순위."""
        stats = self.get_user_stats(user_id)
        if stats is None or stats.total_tests == 0:
            return None
        row = self._fetchone(
            """
            SELECT COUNT(*) AS ahead FROM user_stats s
            JOIN users u ON u.id = s.user_id
            WHERE s.average_wpm > ? OR (s.average_wpm = ? AND s.best_wpm > ?)
            """,
            (stats.average_wpm, stats.average_wpm, stats.best_wpm),
        )
        return row["ahead"] + 1

    # ── 업적 ─────────────────────────────────────────────────────────────

    def get_achievements(self) -> List[Achievement]:
        return [Achievement(**dict(r)) for r in self._fetchall("SELECT * FROM achievements ORDER BY name")]

    def create_achievement(self, name: str, description: str, icon: str, condition: str) -> Achievement:
        achievement_id = _new_id()
        self._execute(
            "INSERT INTO achievements(id, name, description, icon, condition) VALUES (?,?,?,?,?)",
            (achievement_id, name, description, icon, condition),
        )
        return Achievement(id=achievement_id, name=name, description=description, icon=icon, condition=condition)

    def get_user_achievements(self, user_id: str) -> List[UserAchievement]:
        rows = self._fetchall(
            """
            SELECT ua.*, a.name, a.description, a.icon, a.condition
            FROM user_achievements ua
            JOIN achievements a ON a.id = ua.achievement_id
            WHERE ua.user_id=?
            ORDER BY ua.earned_at
            """,
            (user_id,),
        )
        result = []
        for r in rows:
            achievement = Achievement(
                id=r["achievement_id"], name=r["name"], description=r["description"],
                icon=r["icon"], condition=r["condition"],
            )
            result.append(UserAchievement(
                id=r["id"], user_id=r["user_id"], achievement_id=r["achievement_id"],
                earned_at=r["earned_at"], achievement=achievement,
            ))
        return result

    def award_achievement(self, user_id: str, achievement_id: str) -> UserAchievement:
        """이미 받은 업적이면 기존 레코드를 그대로 돌려준다."""
        self._execute(
            "INSERT OR IGNORE INTO user_achievements(id, user_id, achievement_id, earned_at) VALUES (?,?,?,?)",
            (_new_id(), user_id, achievement_id, _now()),
        )
        row = self._fetchone(
            "SELECT * FROM user_achievements WHERE user_id=? AND achievement_id=?", (user_id, achievement_id)
        )
        return UserAchievement(**dict(row))

    # ── 언어 숙련도 ──────────────────────────────────────────────────────

    def get_user_language_proficiency(self, user_id: str) -> List[LanguageProficiency]:
        rows = self._fetchall("SELECT * FROM language_proficiency WHERE user_id=?", (user_id,))
        return [LanguageProficiency(**dict(r)) for r in rows]

    def update_language_proficiency(self, proficiency: LanguageProficiency) -> LanguageProficiency:
        self._execute(
            """
            INSERT INTO language_proficiency(id, user_id, language_id, average_wpm, average_accuracy,
                                             tests_completed, proficiency_level, updated_at)
            VALUES (?,?,?,?,?,?,?,?)
            ON CONFLICT(user_id, language_id) DO UPDATE SET
                average_wpm=excluded.average_wpm, average_accuracy=excluded.average_accuracy,
                tests_completed=excluded.tests_completed, proficiency_level=excluded.proficiency_level,
                updated_at=excluded.updated_at
            """,
            (proficiency.id or _new_id(), proficiency.user_id, proficiency.language_id,
             proficiency.average_wpm, proficiency.average_accuracy, proficiency.tests_completed,
             proficiency.proficiency_level, _now()),
        )
        row = self._fetchone(
            "SELECT * FROM language_proficiency WHERE user_id=? AND language_id=?",
            (proficiency.user_id, proficiency.language_id),
        )
        return LanguageProficiency(**dict(row))
