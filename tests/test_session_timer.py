"""Tests for codetype.services.session_timer."""

import threading

from codetype.services.session_timer import SessionTimer


class TestSessionTimer:
    def test_calls_back_periodically(self):
        fired = threading.Event()
        timer = SessionTimer(0.01, fired.set)
        timer.start()
        try:
            assert fired.wait(2.0)
            assert timer.is_alive
        finally:
            timer.cancel()
        assert not timer.is_alive

    def test_cancel_is_idempotent(self):
        timer = SessionTimer(0.01, lambda: None)
        timer.start()
        timer.cancel()
        timer.cancel()
        assert not timer.is_alive

    def test_cancel_before_start(self):
        calls = []
        timer = SessionTimer(0.01, lambda: calls.append(1))
        timer.cancel()
        timer.start()
        timer._thread.join(1.0)
        assert calls == []

    def test_callback_error_stops_timer(self):
        done = threading.Event()

        def boom():
            done.set()
            raise RuntimeError("boom")

        timer = SessionTimer(0.01, boom)
        timer.start()
        assert done.wait(2.0)
        timer._thread.join(1.0)
        assert not timer.is_alive
