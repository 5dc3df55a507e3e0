"""
views/components/timer.py

남은 세션 시간을 렌더링하는 컴포넌트.
세션 제한 시간: 기본 2분 (120,000ms).
"""

import streamlit as st

_WARNING_MS = 10_000    # 10초 미만이면 빨간색
_CAUTION_MS = 60_000    # 1분 미만이면 노란색


def format_time(ms: float) -> str:
    """ms → m:ss (올림 없이 초 단위 절삭)."""
    seconds = int(max(0.0, ms) // 1000)
    return f"{seconds // 60}:{seconds % 60:02d}"


def render(time_remaining_ms: float) -> bool:
    """
    남은 시간 표시.

    Returns:
        True  — 시간이 남아 있음
        False — 시간 초과
    """
    if time_remaining_ms < _WARNING_MS:
        css_class = "timer-display timer-warning"
    elif time_remaining_ms < _CAUTION_MS:
        css_class = "timer-display timer-caution"
    else:
        css_class = "timer-display"

    st.markdown(
        f'<div class="{css_class}">⏱ {format_time(time_remaining_ms)}</div>',
        unsafe_allow_html=True,
    )

    if time_remaining_ms <= 0:
        st.warning("⏰ 시간이 종료되었습니다.")
        return False
    return True
