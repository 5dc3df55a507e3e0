"""
streamlit_app.py — CodeType 연습 화면 진입점

실행: streamlit run codetype/streamlit_app.py
페이지 전환은 st.session_state.page 값으로 한다 (home / typing / result / leaderboard / profile).
"""

import os
import sys

# ── 패키지 경로 설정 (반드시 최상단) ──────────────────────────────────────────
_BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _BASE_DIR not in sys.path:
    sys.path.insert(0, _BASE_DIR)

import streamlit as st

from codetype.views import home_view, leaderboard_view, profile_view, result_view, typing_view
from codetype.views.context import init_state

_CSS = """
<style>
.ct-card { padding: 8px 4px; }
.ct-title { text-align:center; font-size:1.8rem; font-weight:800; color:#1a1a2e; margin-bottom:4px; }
.ct-subtitle { text-align:center; font-size:0.95rem; color:#6b7280; margin-bottom:20px; }
.ct-divider { border:none; border-top:1px solid #e5e7eb; margin:16px 0; }
.icon-circle { width:64px; height:64px; margin:0 auto 12px; border-radius:50%;
               background:#eef2ff; display:flex; align-items:center; justify-content:center;
               font-size:1.8rem; }
.score-big { text-align:center; font-size:4rem; font-weight:800; color:#3b82f6; margin:0; }
.timer-display { font-family:monospace; font-size:1.6rem; font-weight:700; color:#06b6d4; }
.timer-caution { color:#f59e0b; }
.timer-warning { color:#ef4444; }
</style>
"""

_PAGES = {
    "home": home_view.render,
    "typing": typing_view.render,
    "result": result_view.render,
    "leaderboard": leaderboard_view.render,
    "profile": profile_view.render,
}


def main() -> None:
    st.set_page_config(page_title="CodeType", page_icon="⌨️", layout="wide")
    st.markdown(_CSS, unsafe_allow_html=True)
    init_state()
    _PAGES.get(st.session_state.page, home_view.render)()


main()
