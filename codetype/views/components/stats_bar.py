"""
views/components/stats_bar.py

WPM / 정확도 / 오타 / 진행률 표시 줄.
"""

from __future__ import annotations

import streamlit as st

from codetype.models.session_state import SessionView


def render(view: SessionView) -> None:
    c1, c2, c3 = st.columns(3)
    c1.metric("WPM", f"{view.wpm}")
    c2.metric("정확도", f"{view.accuracy_percent:.1f}%")
    c3.metric("오타", f"{view.error_count}")
    st.progress(min(1.0, view.progress_percent / 100.0))
