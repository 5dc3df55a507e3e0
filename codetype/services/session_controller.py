"""
services/session_controller.py

한 번의 타자 시도를 관리하는 상태 머신.

  IDLE ──(첫 비어있지 않은 입력)──▶ RUNNING ──(끝까지 입력 / 시간 초과)──▶ COMPLETE

- 모든 수치는 scoring_service.compute_score()로 계산한다.
- 입력 이벤트는 델타가 아니라 "현재 전체 텍스트"다. 붙여넣기, 중간 삭제 등
  임의의 교체를 허용한다.
- COMPLETE는 종료 상태 — 이후 입력/틱은 무시한다.
- 타이머는 RUNNING을 벗어나는 모든 경로(완료, reset, close)에서 정지한다.
"""

import logging
import threading
import time
from typing import Callable, Optional

from codetype.models.session_state import Phase, SessionState, SessionView, TestResult
from codetype.services.scoring_service import compute_score, display_wpm, progress_percent
from codetype.services.session_timer import SessionTimer

logger = logging.getLogger(__name__)

SESSION_DURATION_MS = 120_000
TICK_INTERVAL_SEC = 1.0

ResultSink = Callable[[TestResult], None]
TimerFactory = Callable[[float, Callable[[], None]], SessionTimer]


class SessionController:
    """
    Args:
        reference_text:    따라 칠 기준 텍스트 (변경하지 않음).
        snippet_id:        결과 레코드에 실어 보낼 스니펫 ID.
        on_complete:       완료 시 TestResult를 한 번 받는 결과 수신자.
        clock:             초 단위 단조 시계 (테스트에서 교체).
        timer_factory:     주기 틱 타이머 생성자. None이면 자동 틱 없이
                           외부에서 tick()을 호출해야 한다.
        duration_ms:       세션 제한 시간.
        tick_interval_sec: 자동 틱 간격.
    """

    def __init__(
        self,
        reference_text: str,
        snippet_id: Optional[str] = None,
        *,
        on_complete: Optional[ResultSink] = None,
        clock: Callable[[], float] = time.monotonic,
        timer_factory: Optional[TimerFactory] = None,
        duration_ms: int = SESSION_DURATION_MS,
        tick_interval_sec: float = TICK_INTERVAL_SEC,
    ):
        self._lock = threading.RLock()
        self._on_complete = on_complete
        self._clock = clock
        self._timer_factory = timer_factory
        self._timer: Optional[SessionTimer] = None
        self._timer_generation = 0
        self.duration_ms = duration_ms
        self.tick_interval_sec = tick_interval_sec
        self.reference_text = reference_text
        self.snippet_id = snippet_id
        self.state = self._fresh_state()
        self.result: Optional[TestResult] = None

    # ── 조회 ─────────────────────────────────────────────────────────────

    @property
    def phase(self) -> Phase:
        return self.state.phase

    @property
    def is_complete(self) -> bool:
        return self.state.phase is Phase.COMPLETE

    @property
    def timer_active(self) -> bool:
        return self._timer is not None

    def view(self) -> SessionView:
        with self._lock:
            s = self.state
            return SessionView(
                phase=s.phase,
                snippet_id=self.snippet_id,
                wpm=display_wpm(s.wpm),
                accuracy_percent=s.accuracy_percent,
                error_count=s.error_count,
                elapsed_ms=s.elapsed_ms,
                time_remaining_ms=s.time_remaining_ms,
                progress_percent=progress_percent(s.typed_input, self.reference_text),
                typed_length=len(s.typed_input),
                reference_length=len(self.reference_text),
                result=self.result,
            )

    # ── 이벤트 ───────────────────────────────────────────────────────────

    def input_change(self, value: str) -> SessionView:
        """현재 입력 전체를 받아 상태를 갱신한다."""
        with self._lock:
            phase = self.state.phase
            if phase is Phase.COMPLETE:
                return self.view()

            if phase is Phase.IDLE:
                if not value:
                    return self.view()
                self._start(value)
            else:
                self._refresh_time()
                if self.state.time_remaining_ms == 0:
                    # 시간이 이미 끝났으면 늦게 온 입력은 반영하지 않는다
                    self._complete(forced=True)
                    return self.view()
                self.state.typed_input = value
                self._rescore()

            if len(self.state.typed_input) >= len(self.reference_text):
                self._complete(forced=False)
            return self.view()

    def tick(self) -> SessionView:
        """타이머 틱. 새 입력이 없어도 경과 시간 기준으로 다시 채점한다."""
        with self._lock:
            if self.state.phase is not Phase.RUNNING:
                return self.view()
            self._refresh_time()
            self._rescore()
            if self.state.time_remaining_ms == 0:
                self._complete(forced=True)
            return self.view()

    def reset(self, reference_text: Optional[str] = None, snippet_id: Optional[str] = None) -> SessionView:
        """
        어느 단계에서든 IDLE로 되돌린다.
        reference_text를 주면 새 텍스트(다음 스니펫)로 교체한다.
        """
        with self._lock:
            self._stop_timer()
            if reference_text is not None:
                self.reference_text = reference_text
                self.snippet_id = snippet_id
            self.state = self._fresh_state()
            self.result = None
            return self.view()

    def close(self) -> None:
        """세션 폐기. 타이머만 정지하고 상태는 그대로 둔다."""
        with self._lock:
            self._stop_timer()

    def __enter__(self) -> "SessionController":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ── 내부 ─────────────────────────────────────────────────────────────

    def _fresh_state(self) -> SessionState:
        return SessionState(time_remaining_ms=self.duration_ms)

    def _start(self, value: str) -> None:
        self.state.phase = Phase.RUNNING
        self.state.start_timestamp = self._clock()
        self.state.typed_input = value
        self.state.elapsed_ms = 0.0
        self.state.time_remaining_ms = self.duration_ms
        self._rescore()
        self._start_timer()

    def _refresh_time(self) -> None:
        elapsed = (self._clock() - self.state.start_timestamp) * 1000.0
        self.state.elapsed_ms = max(self.state.elapsed_ms, elapsed)
        self.state.time_remaining_ms = max(0.0, self.duration_ms - self.state.elapsed_ms)

    def _rescore(self) -> None:
        snap = compute_score(self.state.typed_input, self.reference_text, self.state.elapsed_ms)
        self.state.wpm = snap.wpm
        self.state.accuracy_percent = snap.accuracy_percent
        self.state.error_count = snap.error_count

    def _complete(self, forced: bool) -> None:
        self._stop_timer()
        self._rescore()
        self.state.phase = Phase.COMPLETE
        self.result = TestResult(
            snippet_id=self.snippet_id,
            wpm=display_wpm(self.state.wpm),
            accuracy=self.state.accuracy_percent,
            time_spent=int(self.state.elapsed_ms / 1000.0 + 0.5),
            errors=self.state.error_count,
            forced=forced,
        )
        logger.info(
            f"세션 완료 (snippet={self.snippet_id}, forced={forced}): "
            f"{self.result.wpm} WPM, {self.result.accuracy:.1f}%, 오타 {self.result.errors}"
        )
        self._emit(self.result)

    def _emit(self, result: TestResult) -> None:
        if self._on_complete is None:
            return
        try:
            self._on_complete(result)
        except Exception:
            # 재시도는 결과 수신자 책임
            logger.exception("결과 전달 실패")

    def _start_timer(self) -> None:
        if self._timer_factory is None:
            return
        self._timer_generation += 1
        generation = self._timer_generation
        self._timer = self._timer_factory(self.tick_interval_sec, lambda: self._on_timer(generation))
        self._timer.start()

    def _stop_timer(self) -> None:
        self._timer_generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timer(self, generation: int) -> None:
        with self._lock:
            if generation != self._timer_generation:
                return
            self.tick()
