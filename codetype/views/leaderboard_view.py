"""
views/leaderboard_view.py — 전체 리더보드 (평균 WPM 순)
"""

from __future__ import annotations

import streamlit as st

import config
from codetype.services.stats_service import assign_ranks
from codetype.views.context import get_storage


def render() -> None:
    st.markdown('<p class="ct-title">🏆 Leaderboard</p>', unsafe_allow_html=True)

    entries = assign_ranks(get_storage().get_leaderboard(config.LEADERBOARD_LIMIT))
    if not entries:
        st.info("아직 기록이 없습니다. 첫 번째 기록의 주인공이 되어 보세요!")
    else:
        st.dataframe(
            [
                {
                    "순위": e.rank,
                    "사용자": e.user.username or e.user_id,
                    "평균 WPM": round(e.average_wpm, 1),
                    "최고 WPM": round(e.best_wpm, 1),
                    "평균 정확도": f"{e.average_accuracy:.1f}%",
                    "테스트 수": e.total_tests,
                }
                for e in entries
            ],
            hide_index=True,
            use_container_width=True,
        )

    if st.button("← 홈으로"):
        st.session_state.page = "home"
        st.rerun()
