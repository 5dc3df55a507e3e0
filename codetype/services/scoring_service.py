"""
services/scoring_service.py

타자 입력 채점 로직.
순수 Python 함수로 구성 — UI 코드, 전역 상태 변경 없음.
매 키 입력/타이머 틱마다 호출해도 상태가 누적되지 않는다.
"""

import math

from codetype.models.session_state import ScoreSnapshot

CHARS_PER_WORD = 5
MS_PER_MINUTE = 60_000


def count_errors(typed: str, reference: str) -> int:
    """
    틀린 위치 수를 센다.

    위치 i는 i < len(reference) 이고 typed[i] == reference[i] 일 때만 정답.
    그 외(오타, 기준 텍스트 길이를 넘는 초과 입력)는 모두 오답.
    """
    limit = min(len(typed), len(reference))
    matched = sum(1 for i in range(limit) if typed[i] == reference[i])
    return len(typed) - matched


def calculate_accuracy(typed_length: int, error_count: int) -> float:
    """
    정확도(%)를 반환한다.

    입력이 비어 있으면 100.0, 그 외에는 (입력 길이 - 오답 수) / 입력 길이.
    결과는 0.0 ~ 100.0 범위로 고정.
    """
    if typed_length == 0:
        return 100.0
    accuracy = 100.0 * (typed_length - error_count) / typed_length
    return max(0.0, min(100.0, accuracy))


def calculate_wpm(typed_length: int, elapsed_ms: float) -> float:
    """
    WPM = (입력 글자 수 / 5) / 경과 분.
    경과 시간이 0 이하이면 0.0 (0으로 나누기 방지).
    """
    if elapsed_ms <= 0:
        return 0.0
    return (typed_length / CHARS_PER_WORD) / (elapsed_ms / MS_PER_MINUTE)


def compute_score(typed: str, reference: str, elapsed_ms: float) -> ScoreSnapshot:
    """
    입력 텍스트를 기준 텍스트와 비교해 채점 스냅샷을 만든다.

    Args:
        typed:      지금까지의 전체 입력 (기준보다 짧거나 길어도 됨).
        reference:  따라 칠 기준 텍스트.
        elapsed_ms: 세션 시작 후 경과 시간 (ms, 0 이상).

    Returns:
        ScoreSnapshot(wpm, accuracy_percent, error_count)
        wpm은 반올림하지 않은 실수값.
    """
    error_count = count_errors(typed, reference)
    return ScoreSnapshot(
        wpm=calculate_wpm(len(typed), elapsed_ms),
        accuracy_percent=calculate_accuracy(len(typed), error_count),
        error_count=error_count,
    )


def progress_percent(typed: str, reference: str) -> float:
    """진행률(%). 기준 텍스트가 비어 있으면 0.0."""
    if not reference:
        return 0.0
    return 100.0 * len(typed) / len(reference)


def display_wpm(wpm: float) -> int:
    """표시/저장용 WPM. 0.5는 올림."""
    return int(math.floor(wpm + 0.5))
