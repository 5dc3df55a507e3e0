"""
api/routes.py — FastAPI 엔드포인트
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel, Field

import config
from codetype.models.record_model import UserStats
from codetype.models.session_state import SessionView, TestResult
from codetype.models.snippet_model import CodeSnippet
from codetype.services.result_sink import StorageResultSink
from codetype.services.scoring_service import display_wpm
from codetype.services.session_controller import SessionController
from codetype.services.session_timer import SessionTimer
from codetype.services.stats_service import assign_ranks, build_user_profile, record_test_result
from codetype.services.storage import Storage

router = APIRouter()

logger = logging.getLogger(__name__)

# ── Pydantic request / response bodies ───────────────────────────────────────

class TestResultBody(BaseModel):
    snippet_id: str = Field(..., min_length=1)
    wpm: float = Field(..., ge=0)
    accuracy: float = Field(..., ge=0, le=100)
    time_spent: int = Field(..., ge=0)
    errors: int = Field(..., ge=0)

class StartTypingBody(BaseModel):
    snippet_id: Optional[str] = None
    language_id: Optional[str] = None
    difficulty: Optional[str] = None

class InputBody(BaseModel):
    value: str = ""

class ResetBody(BaseModel):
    next_snippet: bool = False
    difficulty: Optional[str] = None

class TypingSessionResponse(BaseModel):
    snippet: Optional[CodeSnippet] = None
    state: SessionView


# ── 헬퍼 ─────────────────────────────────────────────────────────────────────

def _storage(request: Request) -> Storage:
    return request.app.state.storage


def _sid(request: Request) -> str:
    return request.state.session_id


def _current_user_id(request: Request) -> Optional[str]:
    return request.app.state.sessions.get(_sid(request), "user_id")


def _require_user(request: Request) -> str:
    user_id = _current_user_id(request)
    if not user_id:
        raise HTTPException(status_code=401, detail="로그인이 필요합니다.")
    return user_id


def _require_self(request: Request, user_id: str) -> None:
    """사용자 본인 데이터만 조회 가능."""
    if _require_user(request) != user_id:
        raise HTTPException(status_code=403, detail="접근 권한이 없습니다.")


def _controller(request: Request) -> SessionController:
    controller = request.app.state.sessions.get(_sid(request), "controller")
    if controller is None:
        raise HTTPException(status_code=404, detail="진행 중인 타자 세션이 없습니다.")
    return controller


def _new_controller(request: Request, snippet: CodeSnippet) -> SessionController:
    user_id = _current_user_id(request)
    sink = StorageResultSink(_storage(request), user_id) if user_id else None
    controller = SessionController(
        snippet.code,
        snippet.id,
        on_complete=sink,
        timer_factory=SessionTimer if request.app.state.auto_tick else None,
        duration_ms=config.SESSION_DURATION_MS,
        tick_interval_sec=config.TICK_INTERVAL_SEC,
    )
    request.app.state.sessions.replace_controller(_sid(request), controller)
    return controller


def _pick_snippet(storage: Storage, language_id: str, difficulty: Optional[str]) -> CodeSnippet:
    if storage.get_language(language_id) is None:
        raise HTTPException(status_code=404, detail="언어를 찾을 수 없습니다.")
    snippet = storage.get_random_code_snippet(language_id, difficulty)
    if snippet is None:
        raise HTTPException(status_code=404, detail="스니펫이 없습니다.")
    return snippet


def _typing_response(request: Request, controller: SessionController) -> TypingSessionResponse:
    snippet = _storage(request).get_code_snippet(controller.snippet_id) if controller.snippet_id else None
    return TypingSessionResponse(snippet=snippet, state=controller.view())


# ── 인증 (모의 로그인) ───────────────────────────────────────────────────────

@router.get("/api/login")
async def login(request: Request):
    user = _storage(request).upsert_user(
        config.MOCK_USER_ID,
        username=config.MOCK_USERNAME,
        email=config.MOCK_EMAIL,
    )
    request.app.state.sessions.put(_sid(request), "user_id", user.id)
    logger.info(f"모의 로그인: {user.id}")
    return user


@router.get("/api/logout")
async def logout(request: Request):
    request.app.state.sessions.put(_sid(request), "user_id", None)
    return {"ok": True}


@router.get("/api/auth/user")
async def get_auth_user(request: Request):
    user = _storage(request).get_user(_require_user(request))
    if user is None:
        raise HTTPException(status_code=404, detail="사용자를 찾을 수 없습니다.")
    return user


# ── 언어 / 스니펫 ───────────────────────────────────────────────────────────

@router.get("/api/languages")
async def get_languages(request: Request):
    return _storage(request).get_languages()


@router.get("/api/languages/{language_id}")
async def get_language(request: Request, language_id: str):
    language = _storage(request).get_language(language_id)
    if language is None:
        raise HTTPException(status_code=404, detail="언어를 찾을 수 없습니다.")
    return language


@router.get("/api/languages/{language_id}/snippets")
async def get_snippets(request: Request, language_id: str):
    return _storage(request).get_code_snippets(language_id)


@router.get("/api/languages/{language_id}/snippets/random")
async def get_random_snippet(request: Request, language_id: str, difficulty: Optional[str] = None):
    snippet = _storage(request).get_random_code_snippet(language_id, difficulty)
    if snippet is None:
        raise HTTPException(status_code=404, detail="스니펫이 없습니다.")
    return snippet


@router.get("/api/snippets/{snippet_id}")
async def get_snippet(request: Request, snippet_id: str):
    snippet = _storage(request).get_code_snippet(snippet_id)
    if snippet is None:
        raise HTTPException(status_code=404, detail="스니펫을 찾을 수 없습니다.")
    return snippet


# ── 결과 / 통계 ─────────────────────────────────────────────────────────────

@router.post("/api/test-results")
async def create_test_result(request: Request, body: TestResultBody):
    user_id = _require_user(request)
    storage = _storage(request)
    if storage.get_code_snippet(body.snippet_id) is None:
        raise HTTPException(status_code=404, detail="스니펫을 찾을 수 없습니다.")
    result = TestResult(
        snippet_id=body.snippet_id,
        wpm=display_wpm(body.wpm),
        accuracy=body.accuracy,
        time_spent=body.time_spent,
        errors=body.errors,
    )
    return record_test_result(storage, user_id, result)


@router.get("/api/users/{user_id}/test-results")
async def get_test_results(
    request: Request, user_id: str, limit: int = Query(config.RESULTS_LIMIT, ge=1, le=1000)
):
    _require_self(request, user_id)
    return _storage(request).get_user_test_results(user_id, limit)


@router.get("/api/users/{user_id}/stats")
async def get_user_stats(request: Request, user_id: str):
    _require_self(request, user_id)
    storage = _storage(request)
    stats = storage.get_user_stats(user_id)
    if stats is None:
        # 통계가 없으면 0으로 초기화해서 생성
        stats = storage.update_user_stats(UserStats(user_id=user_id))
    return stats


@router.get("/api/users/{user_id}/achievements")
async def get_user_achievements(request: Request, user_id: str):
    _require_self(request, user_id)
    return _storage(request).get_user_achievements(user_id)


@router.get("/api/users/{user_id}/proficiency")
async def get_user_proficiency(request: Request, user_id: str):
    _require_self(request, user_id)
    return _storage(request).get_user_language_proficiency(user_id)


@router.get("/api/users/{user_id}/profile")
async def get_user_profile(request: Request, user_id: str):
    _require_self(request, user_id)
    return build_user_profile(_storage(request), user_id)


@router.get("/api/leaderboard")
async def get_leaderboard(request: Request, limit: int = Query(config.LEADERBOARD_LIMIT, ge=1, le=500)):
    return assign_ranks(_storage(request).get_leaderboard(limit))


@router.get("/api/achievements")
async def get_achievements(request: Request):
    return _storage(request).get_achievements()


# ── 타자 세션 ───────────────────────────────────────────────────────────────

@router.post("/api/typing/start", response_model=TypingSessionResponse)
async def start_typing(request: Request, body: StartTypingBody):
    storage = _storage(request)
    if body.snippet_id:
        snippet = storage.get_code_snippet(body.snippet_id)
        if snippet is None:
            raise HTTPException(status_code=404, detail="스니펫을 찾을 수 없습니다.")
    elif body.language_id:
        snippet = _pick_snippet(storage, body.language_id, body.difficulty)
    else:
        raise HTTPException(status_code=400, detail="snippet_id 또는 language_id가 필요합니다.")

    controller = _new_controller(request, snippet)
    return TypingSessionResponse(snippet=snippet, state=controller.view())


@router.post("/api/typing/input", response_model=TypingSessionResponse)
async def typing_input(request: Request, body: InputBody):
    controller = _controller(request)
    controller.input_change(body.value)
    return _typing_response(request, controller)


@router.post("/api/typing/tick", response_model=TypingSessionResponse)
async def typing_tick(request: Request):
    controller = _controller(request)
    controller.tick()
    return _typing_response(request, controller)


@router.post("/api/typing/reset", response_model=TypingSessionResponse)
async def typing_reset(request: Request, body: ResetBody):
    controller = _controller(request)
    if not body.next_snippet:
        controller.reset()
        return _typing_response(request, controller)

    storage = _storage(request)
    current = storage.get_code_snippet(controller.snippet_id) if controller.snippet_id else None
    if current is None:
        raise HTTPException(status_code=400, detail="다음 스니펫을 고를 언어 정보가 없습니다.")
    snippet = _pick_snippet(storage, current.language_id, body.difficulty)
    controller = _new_controller(request, snippet)
    return TypingSessionResponse(snippet=snippet, state=controller.view())


@router.get("/api/typing/state", response_model=TypingSessionResponse)
async def typing_state(request: Request):
    return _typing_response(request, _controller(request))


@router.post("/api/reset")
async def reset_session(request: Request):
    request.app.state.sessions.reset(_sid(request))
    return {"ok": True}
