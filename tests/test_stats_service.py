"""Tests for codetype.services.stats_service and result_sink."""

import json

import pytest

from codetype.models import record_model, session_state
from codetype.models.record_model import Achievement, LeaderboardEntry, User, UserStats
from codetype.services.result_sink import StorageResultSink
from codetype.services.stats_service import (
    aggregate_language_proficiency,
    aggregate_user_stats,
    assign_ranks,
    build_user_profile,
    evaluate_achievements,
    parse_condition,
    proficiency_level,
    record_test_result,
)


def _record(wpm, accuracy, rid="r"):
    return record_model.TestResultRecord(id=rid, user_id="u", snippet_id="s", wpm=wpm, accuracy=accuracy,
                                         time_spent=10, errors=0)


def _result(snippet_id, wpm, accuracy, time_spent=20, errors=0):
    return session_state.TestResult(snippet_id=snippet_id, wpm=wpm, accuracy=accuracy,
                                    time_spent=time_spent, errors=errors)


def _achievement(aid, metric, gte):
    return Achievement(id=aid, name=aid, description=aid, condition=json.dumps({"metric": metric, "gte": gte}))


class TestAggregateUserStats:
    def test_no_results(self):
        stats = aggregate_user_stats("u", [])
        assert stats.total_tests == 0
        assert stats.average_wpm == 0

    def test_averages_and_bests(self):
        stats = aggregate_user_stats("u", [_record(40, 90), _record(60, 100)], global_rank=3)
        assert stats.total_tests == 2
        assert stats.average_wpm == 50
        assert stats.average_accuracy == 95
        assert stats.best_wpm == 60
        assert stats.best_accuracy == 100
        assert stats.global_rank == 3


class TestProficiency:
    @pytest.mark.parametrize("wpm, level", [(0, "beginner"), (49.9, "beginner"), (50, "intermediate"),
                                            (79, "intermediate"), (80, "advanced")])
    def test_levels(self, wpm, level):
        assert proficiency_level(wpm) == level

    def test_aggregate(self):
        p = aggregate_language_proficiency("u", "py", [_record(90, 100), _record(70, 80)])
        assert p.tests_completed == 2
        assert p.average_wpm == 80
        assert p.proficiency_level == "advanced"


class TestAchievements:
    def test_parse_condition_rejects_garbage(self):
        assert parse_condition("not json") is None
        assert parse_condition('{"metric": "height", "gte": 1}') is None
        assert parse_condition('{"metric": "wpm", "gte": "fast"}') is None
        assert parse_condition('[1, 2]') is None

    def test_evaluate(self):
        achievements = [
            _achievement("first", "total_tests", 1),
            _achievement("fast", "wpm", 60),
            _achievement("perfect", "accuracy", 100),
            Achievement(id="broken", name="b", description="b", condition="{"),
        ]
        stats = UserStats(user_id="u", total_tests=1, best_wpm=70, best_accuracy=100)
        earned = evaluate_achievements(achievements, stats, _record(70, 95))
        assert earned == ["first", "fast"]

    def test_latest_metrics_need_latest(self):
        stats = UserStats(user_id="u", total_tests=5, best_wpm=200)
        assert evaluate_achievements([_achievement("fast", "wpm", 60)], stats) == []


def test_assign_ranks():
    user = User(id="u")
    entries = [LeaderboardEntry(user_id="u", user=user, average_wpm=w) for w in (90, 80)]
    assert [e.rank for e in assign_ranks(entries)] == [1, 2]


class TestRecordTestResult:
    @pytest.fixture
    def setup(self, storage, python_language):
        user = storage.upsert_user("u1", username="alice")
        snippet = storage.get_code_snippets(python_language.id)[0]
        return storage, user, snippet

    def test_persists_and_updates_stats(self, setup):
        storage, user, snippet = setup
        record_test_result(storage, user.id, _result(snippet.id, 65, 100, time_spent=30))
        record_test_result(storage, user.id, _result(snippet.id, 35, 90, time_spent=40, errors=2))
        stats = storage.get_user_stats(user.id)
        assert stats.total_tests == 2
        assert stats.average_wpm == 50
        assert stats.best_wpm == 65
        proficiency = storage.get_user_language_proficiency(user.id)
        assert proficiency[0].language_id == snippet.language_id
        assert proficiency[0].proficiency_level == "intermediate"
        names = {ua.achievement.name for ua in storage.get_user_achievements(user.id)}
        assert {"First Steps", "Speed Demon", "Perfectionist"} <= names

    def test_stats_cover_every_result(self, setup):
        storage, user, snippet = setup
        # 조회 기본 limit보다 많이 저장해도 집계는 전체 기준
        for _ in range(12):
            record_test_result(storage, user.id, _result(snippet.id, 40, 95, errors=1))
        record_test_result(storage, user.id, _result(snippet.id, 14, 95, errors=1))
        stats = storage.get_user_stats(user.id)
        assert stats.total_tests == 13
        assert stats.average_wpm == pytest.approx(38)

    def test_unknown_snippet(self, setup):
        storage, user, _ = setup
        with pytest.raises(ValueError):
            record_test_result(storage, user.id, _result("missing", 1, 1, time_spent=1))


class TestBuildUserProfile:
    def test_empty_profile(self, storage):
        storage.upsert_user("u1", username="alice")
        profile = build_user_profile(storage, "u1")
        assert profile.user.username == "alice"
        assert profile.stats.total_tests == 0
        assert profile.global_rank is None
        assert profile.proficiency == []
        assert profile.achievements == []
        assert profile.recent_results == []

    def test_profile_after_results(self, storage, python_language):
        storage.upsert_user("u1", username="alice")
        storage.upsert_user("u2", username="bob")
        snippet = storage.get_code_snippets(python_language.id)[0]
        record_test_result(storage, "u2", _result(snippet.id, 90, 100))
        for wpm in (30, 40, 50, 60, 70, 80):
            record_test_result(storage, "u1", _result(snippet.id, wpm, 95))

        profile = build_user_profile(storage, "u1")
        assert profile.stats.total_tests == 6
        assert profile.global_rank == 2
        assert build_user_profile(storage, "u2").global_rank == 1
        assert profile.proficiency[0].language_id == python_language.id
        assert [r.wpm for r in profile.recent_results] == [80, 70, 60, 50, 40]
        assert "First Steps" in {ua.achievement.name for ua in profile.achievements}

class TestStorageResultSink:
    def test_records_result(self, storage, python_language):
        storage.upsert_user("u1")
        snippet = storage.get_code_snippets(python_language.id)[0]
        sink = StorageResultSink(storage, "u1")
        sink(_result(snippet.id, 20, 99.5, time_spent=12, errors=1))
        assert len(storage.get_user_test_results("u1")) == 1

    def test_failure_is_logged_not_raised(self, storage, caplog):
        sink = StorageResultSink(storage, "u1")
        sink(_result(None, 20, 99.5, time_spent=12, errors=1))
        assert "결과 저장 실패" in caplog.text
