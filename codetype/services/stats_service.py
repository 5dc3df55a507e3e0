"""
services/stats_service.py

결과 이력 집계(사용자 통계, 언어 숙련도, 업적, 리더보드 순위).
집계 함수는 순수 함수, record_test_result()만 저장소를 갱신한다.
"""

import json
import logging
from typing import Dict, List, Optional, Sequence

from codetype.models.record_model import (
    Achievement, LanguageProficiency, LeaderboardEntry, TestResultRecord, UserProfile, UserStats,
)
from codetype.models.session_state import TestResult
from codetype.services.storage import Storage

logger = logging.getLogger(__name__)

ADVANCED_WPM = 80.0
INTERMEDIATE_WPM = 50.0

ACHIEVEMENT_METRICS = ("total_tests", "best_wpm", "best_accuracy", "wpm", "accuracy")


def aggregate_user_stats(
    user_id: str,
    results: Sequence[TestResultRecord],
    global_rank: Optional[int] = None,
) -> UserStats:
    """
    전체 결과 이력으로 사용자 통계를 만든다.

    Returns:
        UserStats. 결과가 없으면 모든 값이 0.
    """
    if not results:
        return UserStats(user_id=user_id, global_rank=global_rank)

    total = len(results)
    return UserStats(
        user_id=user_id,
        total_tests=total,
        average_wpm=sum(r.wpm for r in results) / total,
        average_accuracy=sum(r.accuracy for r in results) / total,
        best_wpm=max(r.wpm for r in results),
        best_accuracy=max(r.accuracy for r in results),
        global_rank=global_rank,
    )


def proficiency_level(average_wpm: float) -> str:
    """평균 WPM 기준 숙련도: 80 이상 advanced, 50 이상 intermediate."""
    if average_wpm >= ADVANCED_WPM:
        return "advanced"
    if average_wpm >= INTERMEDIATE_WPM:
        return "intermediate"
    return "beginner"


def aggregate_language_proficiency(
    user_id: str,
    language_id: str,
    results: Sequence[TestResultRecord],
) -> LanguageProficiency:
    if not results:
        return LanguageProficiency(user_id=user_id, language_id=language_id)
    total = len(results)
    average_wpm = sum(r.wpm for r in results) / total
    return LanguageProficiency(
        user_id=user_id,
        language_id=language_id,
        average_wpm=average_wpm,
        average_accuracy=sum(r.accuracy for r in results) / total,
        tests_completed=total,
        proficiency_level=proficiency_level(average_wpm),
    )


def parse_condition(condition: str) -> Optional[Dict[str, object]]:
    """
    업적 조건 JSON 파싱. 형식이 잘못되었거나 알 수 없는 metric이면 None.
    """
    try:
        data = json.loads(condition)
    except (TypeError, ValueError):
        return None
    if not isinstance(data, dict) or data.get("metric") not in ACHIEVEMENT_METRICS:
        return None
    if not isinstance(data.get("gte"), (int, float)):
        return None
    return data


def evaluate_achievements(
    achievements: Sequence[Achievement],
    stats: UserStats,
    latest: Optional[TestResultRecord] = None,
) -> List[str]:
    """
    조건을 만족한 업적 ID 리스트를 반환한다 (원본 순서 유지).

    wpm / accuracy metric은 방금 저장된 결과(latest) 기준,
    나머지는 누적 통계 기준으로 판정한다.
    """
    values: Dict[str, float] = {
        "total_tests": stats.total_tests,
        "best_wpm": stats.best_wpm,
        "best_accuracy": stats.best_accuracy,
    }
    if latest is not None:
        values["wpm"] = latest.wpm
        values["accuracy"] = latest.accuracy

    earned: List[str] = []
    for a in achievements:
        cond = parse_condition(a.condition)
        if cond is None:
            logger.warning(f"업적 조건 형식 오류: {a.name} ({a.condition})")
            continue
        value = values.get(cond["metric"])
        if value is not None and value >= cond["gte"]:
            earned.append(a.id)
    return earned


def assign_ranks(entries: Sequence[LeaderboardEntry]) -> List[LeaderboardEntry]:
    """이미 정렬된 리더보드에 1부터 순위를 매긴다."""
    return [e.model_copy(update={"rank": i}) for i, e in enumerate(entries, start=1)]


def record_test_result(storage: Storage, user_id: str, result: TestResult) -> TestResultRecord:
    """
    완료된 세션 결과를 저장하고 통계, 언어 숙련도, 업적을 갱신한다.

    Raises:
        ValueError:   snippet_id가 없거나 존재하지 않는 스니펫.
        StorageError: 저장 실패.
    """
    snippet = storage.get_code_snippet(result.snippet_id) if result.snippet_id else None
    if snippet is None:
        raise ValueError(f"존재하지 않는 스니펫입니다: {result.snippet_id}")

    record = storage.create_test_result(
        user_id=user_id,
        snippet_id=snippet.id,
        wpm=result.wpm,
        accuracy=result.accuracy,
        time_spent=result.time_spent,
        errors=result.errors,
    )

    current = storage.get_user_stats(user_id)
    all_results = storage.get_user_test_results(user_id, limit=None)
    stats = storage.update_user_stats(
        aggregate_user_stats(user_id, all_results, current.global_rank if current else None)
    )

    language_results = storage.get_user_language_results(user_id, snippet.language_id)
    storage.update_language_proficiency(
        aggregate_language_proficiency(user_id, snippet.language_id, language_results)
    )

    for achievement_id in evaluate_achievements(storage.get_achievements(), stats, record):
        storage.award_achievement(user_id, achievement_id)

    logger.info(f"결과 저장: user={user_id}, snippet={snippet.id}, {result.wpm} WPM")
    return record


def build_user_profile(storage: Storage, user_id: str, recent_limit: int = 5) -> UserProfile:
    """
    사용자 프로필 조회.

    Args:
        recent_limit: 최근 결과 개수.

    Returns:
        UserProfile. 숙련도는 평균 WPM 내림차순, 통계가 없으면 0으로 채운다.
    """
    proficiency = sorted(
        storage.get_user_language_proficiency(user_id),
        key=lambda p: p.average_wpm,
        reverse=True,
    )
    return UserProfile(
        user=storage.get_user(user_id),
        stats=storage.get_user_stats(user_id) or UserStats(user_id=user_id),
        global_rank=storage.get_user_rank(user_id),
        proficiency=proficiency,
        achievements=storage.get_user_achievements(user_id),
        recent_results=storage.get_user_test_results(user_id, limit=recent_limit),
    )
