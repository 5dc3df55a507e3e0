"""
views/typing_view.py — 타자 연습 화면

레이아웃:
  - st.sidebar : 남은 시간 + 스니펫 정보 + 다시 하기 / 다음 스니펫
  - 메인 영역  : 기준 코드 + 입력창 + 실시간 WPM / 정확도 / 오타

상태 관리:
  - st.session_state.controller (SessionController)
  - 입력창 변경 이벤트 → controller.input_change(전체 텍스트)
  - 1초마다 fragment 재실행 → controller.tick()
"""

from __future__ import annotations

import streamlit as st

from codetype.services.session_controller import SessionController
from codetype.views.components import stats_bar
from codetype.views.components import timer as tmr
from codetype.views.context import next_snippet, retry


def _input_key() -> str:
    return f"typing_input_{st.session_state.input_version}"


def _on_input_change() -> None:
    controller: SessionController = st.session_state.controller
    controller.input_change(st.session_state[_input_key()])


def _go_to_result() -> None:
    st.session_state.page = "result"
    st.rerun()


@st.fragment(run_every=1.0)
def _live_panel() -> None:
    """매초 틱하면서 남은 시간/점수를 다시 그린다."""
    controller: SessionController = st.session_state.controller
    view = controller.tick()
    tmr.render(view.time_remaining_ms)
    stats_bar.render(view)
    if controller.is_complete:
        _go_to_result()


def render() -> None:
    """연습 화면 렌더링."""

    # ── 세션 가드 ──────────────────────────────────────────────────────────
    controller: SessionController | None = st.session_state.get("controller")
    snippet = st.session_state.get("snippet")
    if controller is None or snippet is None:
        st.warning("진행 중인 연습이 없습니다. 홈 화면으로 돌아가세요.")
        if st.button("홈으로", type="primary"):
            st.session_state.page = "home"
            st.rerun()
        return

    if controller.is_complete:
        _go_to_result()

    # ── 사이드바 ───────────────────────────────────────────────────────────
    with st.sidebar:
        st.markdown(f"### {snippet.title}")
        st.caption(f"난이도: {snippet.difficulty} · {len(snippet.code)}자")
        st.markdown('<hr class="ct-divider">', unsafe_allow_html=True)

        if st.button("↺ 다시 하기", use_container_width=True):
            retry()
            st.rerun()
        if st.button("다음 스니펫 →", type="primary", use_container_width=True):
            if next_snippet():
                st.rerun()
            else:
                st.error("다른 스니펫이 없습니다.")
        if st.button("홈으로", use_container_width=True):
            controller.close()
            st.session_state.page = "home"
            st.rerun()

    # ── 메인 영역 ─────────────────────────────────────────────────────────
    _live_panel()

    st.code(snippet.code, language=None)
    st.text_area(
        "입력",
        key=_input_key(),
        height=260,
        on_change=_on_input_change,
        placeholder="여기에 위 코드를 그대로 입력하세요. 첫 입력부터 시간이 흐릅니다.",
        label_visibility="collapsed",
    )
    st.caption("Ctrl+Enter 또는 입력창 밖을 클릭하면 입력이 반영됩니다.")
