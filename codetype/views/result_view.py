"""
views/result_view.py — 연습 결과 화면

표시 내용:
  - 최종 WPM (대형 숫자)
  - 정확도 / 오타 / 소요 시간
  - 시간 초과 여부
  - 다시 하기 / 다음 스니펫 / 홈으로 버튼
"""

from __future__ import annotations

import streamlit as st

from codetype.services.session_controller import SessionController
from codetype.views.context import next_snippet, retry


def _stat_card(col, label: str, value: str, color: str) -> None:
    with col:
        st.markdown(
            f"<div style='text-align:center;'>"
            f"<p style='font-size:1.6rem; font-weight:700; color:{color}; margin:0;'>{value}</p>"
            f"<p style='font-size:0.8rem; color:#9ca3af;'>{label}</p></div>",
            unsafe_allow_html=True,
        )


def _go_home() -> None:
    controller: SessionController | None = st.session_state.get("controller")
    if controller is not None:
        controller.close()
    st.session_state.controller = None
    st.session_state.snippet = None
    st.session_state.page = "home"


def render() -> None:
    """결과 화면 렌더링."""

    controller: SessionController | None = st.session_state.get("controller")
    result = controller.result if controller is not None else None

    if result is None:
        st.warning("결과 정보가 없습니다.")
        if st.button("홈으로", type="primary"):
            _go_home()
            st.rerun()
        return

    _, col, _ = st.columns([0.8, 2.5, 0.8])

    with col:
        st.markdown('<div class="ct-card">', unsafe_allow_html=True)
        st.markdown(f'<p class="score-big">{result.wpm}</p>', unsafe_allow_html=True)
        st.markdown(
            "<p style='text-align:center; font-size:0.9rem; color:#9ca3af; "
            "margin-top:-8px; margin-bottom:16px;'>WPM</p>",
            unsafe_allow_html=True,
        )
        if result.forced:
            st.info("⏰ 시간 초과로 종료되었습니다. 입력한 부분까지만 채점했습니다.")

        s1, s2, s3 = st.columns(3)
        _stat_card(s1, "정확도", f"{result.accuracy:.1f}%", "#10b981")
        _stat_card(s2, "오타", str(result.errors), "#ef4444")
        minutes, seconds = divmod(result.time_spent, 60)
        _stat_card(s3, "소요 시간", f"{minutes}:{seconds:02d}", "#3b82f6")

        st.markdown('<hr class="ct-divider">', unsafe_allow_html=True)

        b1, b2, b3 = st.columns(3)
        with b1:
            if st.button("다시 하기", use_container_width=True):
                retry()
                st.rerun()
        with b2:
            if st.button("다음 스니펫", type="primary", use_container_width=True):
                if next_snippet():
                    st.rerun()
        with b3:
            if st.button("홈으로", use_container_width=True):
                _go_home()
                st.rerun()

        st.markdown('</div>', unsafe_allow_html=True)
