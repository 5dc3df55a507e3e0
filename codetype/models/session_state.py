"""
models/session_state.py

타자 세션 진행 상태를 담는 모델.
Pydantic BaseModel 기반 — 직렬화/역직렬화 및 타입 안전성 확보.
UI 코드 없음.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Phase(str, Enum):
    """세션 단계. IDLE → RUNNING → COMPLETE 순으로만 진행한다."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETE = "complete"


class ScoreSnapshot(BaseModel):
    """
    채점 결과 스냅샷. (입력, 기준 텍스트, 경과 시간)만으로 다시 계산되며
    단독으로 저장되지 않는다.
    """

    model_config = ConfigDict(frozen=True)

    wpm: float = Field(default=0.0, ge=0, description="분당 단어 수 (5자 = 1단어)")
    accuracy_percent: float = Field(default=100.0, ge=0, le=100, description="정확도 (%)")
    error_count: int = Field(default=0, ge=0, description="틀린 위치 수")


class SessionState(BaseModel):
    """
    한 번의 타자 시도 전체 상태.

    Attributes:
        phase:             현재 단계.
        start_timestamp:   첫 입력 시각 (clock() 기준 초). IDLE이면 None.
        typed_input:       지금까지 입력된 전체 텍스트.
        elapsed_ms:        시작 후 경과 시간 (ms). RUNNING 동안 감소하지 않는다.
        wpm / accuracy_percent / error_count: 마지막 이벤트 시점의 채점 값.
        time_remaining_ms: 제한 시간 - 경과 시간 (0 미만으로 내려가지 않음).
    """

    phase: Phase = Phase.IDLE
    start_timestamp: Optional[float] = None
    typed_input: str = ""
    elapsed_ms: float = Field(default=0.0, ge=0)
    wpm: float = 0.0
    accuracy_percent: float = 100.0
    error_count: int = 0
    time_remaining_ms: float = Field(default=0.0, ge=0)


class TestResult(BaseModel):
    """
    세션 완료 시 결과 수신자에게 한 번만 전달되는 완료 이벤트.
    """

    snippet_id: Optional[str] = None
    wpm: int = Field(..., ge=0)
    accuracy: float = Field(..., ge=0, le=100)
    time_spent: int = Field(..., ge=0, description="소요 시간 (초)")
    errors: int = Field(..., ge=0)
    forced: bool = Field(default=False, description="시간 초과로 강제 종료되었는지 여부")


class SessionView(BaseModel):
    """매 틱/입력마다 UI에 내보내는 표시용 값."""

    phase: Phase
    snippet_id: Optional[str] = None
    wpm: int
    accuracy_percent: float
    error_count: int
    elapsed_ms: float
    time_remaining_ms: float
    progress_percent: float
    typed_length: int
    reference_length: int
    result: Optional[TestResult] = None
