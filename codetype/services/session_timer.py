"""
services/session_timer.py

세션 타이머 — 데몬 스레드에서 일정 간격으로 콜백을 호출한다.
cancel() 이후에는 새 틱을 만들지 않는다.
"""

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


class SessionTimer:
    def __init__(self, interval_sec: float, callback: Callable[[], None]):
        self.interval_sec = interval_sec
        self._callback = callback
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._loop, name="session-timer", daemon=True)
        self._thread.start()

    def cancel(self) -> None:
        """타이머 정지. 여러 번 호출해도 안전."""
        self._stop.set()

    @property
    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop.is_set()

    def _loop(self) -> None:
        # wait()가 True면 cancel 된 것
        while not self._stop.wait(self.interval_sec):
            try:
                self._callback()
            except Exception:
                logger.exception("세션 타이머 콜백 오류")
                self._stop.set()
