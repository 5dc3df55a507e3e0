"""
views/home_view.py — 홈 / 시작 화면

기능:
  - 언어 선택 (스니펫 수 표시)
  - 난이도 선택 (전체 / beginner / intermediate / advanced)
  - 연습 시작, 리더보드 / 프로필 이동
"""

from __future__ import annotations

import streamlit as st

from codetype.models.snippet_model import DIFFICULTIES
from codetype.views.context import get_storage, next_snippet

_ALL = "전체"


def render() -> None:
    """홈 화면 렌더링."""
    storage = get_storage()
    languages = storage.get_languages()

    _, col, _ = st.columns([1, 2.2, 1])

    with col:
        st.markdown('<div class="ct-card">', unsafe_allow_html=True)
        st.markdown('<div class="icon-circle">⌨️</div>', unsafe_allow_html=True)
        st.markdown('<p class="ct-title">CodeType</p>', unsafe_allow_html=True)
        st.markdown(
            '<p class="ct-subtitle">코드를 따라 치면서 속도와 정확도를 측정합니다</p>',
            unsafe_allow_html=True,
        )

        if not languages:
            st.warning("등록된 언어가 없습니다.")
            st.markdown('</div>', unsafe_allow_html=True)
            return

        labels = {f"{lang.icon} {lang.display_name} ({lang.snippet_count})": lang.id for lang in languages}
        choice = st.radio("언어", list(labels), horizontal=True)
        difficulty = st.selectbox("난이도", [_ALL, *DIFFICULTIES])

        st.markdown("<br>", unsafe_allow_html=True)
        if st.button("연습 시작 →", type="primary", use_container_width=True):
            st.session_state.language_id = labels[choice]
            st.session_state.difficulty = None if difficulty == _ALL else difficulty
            if next_snippet():
                st.rerun()
            else:
                st.error("선택한 조건에 맞는 스니펫이 없습니다.")

        b1, b2 = st.columns(2)
        with b1:
            if st.button("🏆 리더보드", use_container_width=True):
                st.session_state.page = "leaderboard"
                st.rerun()
        with b2:
            if st.button("👤 내 프로필", use_container_width=True):
                st.session_state.page = "profile"
                st.rerun()

        st.markdown('</div>', unsafe_allow_html=True)
