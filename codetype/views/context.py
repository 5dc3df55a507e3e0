"""
views/context.py — streamlit 화면 공용 상태

- Storage는 프로세스당 하나 (st.cache_resource)
- SessionController는 브라우저 세션마다 하나 (st.session_state.controller)
"""

from __future__ import annotations

import streamlit as st

import config
from codetype.models.snippet_model import CodeSnippet
from codetype.services.result_sink import StorageResultSink
from codetype.services.seed_data import initialize_default_data
from codetype.services.session_controller import SessionController
from codetype.services.storage import Storage


@st.cache_resource
def get_storage() -> Storage:
    storage = Storage(config.DB_PATH)
    initialize_default_data(storage)
    storage.upsert_user(config.MOCK_USER_ID, username=config.MOCK_USERNAME, email=config.MOCK_EMAIL)
    return storage


def init_state() -> None:
    defaults = {
        "page": "home",
        "language_id": None,
        "difficulty": None,
        "snippet": None,
        "controller": None,
        "input_version": 0,
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


def start_session(snippet: CodeSnippet) -> None:
    """이전 세션을 폐기하고 새 스니펫으로 세션을 만든다."""
    old: SessionController | None = st.session_state.get("controller")
    if old is not None:
        old.close()
    st.session_state.snippet = snippet
    st.session_state.controller = SessionController(
        snippet.code,
        snippet.id,
        on_complete=StorageResultSink(get_storage(), config.MOCK_USER_ID),
        duration_ms=config.SESSION_DURATION_MS,
    )
    # 입력창 위젯 키를 바꿔서 이전 입력을 비운다
    st.session_state.input_version += 1
    st.session_state.page = "typing"


def next_snippet() -> bool:
    """같은 언어/난이도에서 새 스니펫으로 시작. 스니펫이 없으면 False."""
    storage = get_storage()
    snippet = storage.get_random_code_snippet(
        st.session_state.language_id, st.session_state.difficulty
    )
    if snippet is None:
        return False
    start_session(snippet)
    return True


def retry() -> None:
    """같은 스니펫으로 다시 시작."""
    controller: SessionController | None = st.session_state.controller
    if controller is not None:
        controller.reset()
    st.session_state.input_version += 1
    st.session_state.page = "typing"
