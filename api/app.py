"""
api/app.py — FastAPI 앱 인스턴스 + 세션 미들웨어 + 서비스 정보
"""

import logging
import threading
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
from api.routes import router
from api.session import SessionStore
from codetype.services.seed_data import initialize_default_data
from codetype.services.storage import Storage, StorageError

SESSION_COOKIE = "codetype_session"

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI):
    """
    시작: 만료 세션 정리 스레드 기동.
    종료: 정리 스레드 정지 + 남은 세션의 타이머 전부 정지.
    """
    stop_cleanup = app.state.stop_cleanup

    def _cleanup_loop():
        while not stop_cleanup.wait(config.SESSION_CLEANUP_INTERVAL):
            removed = app.state.sessions.cleanup_expired()
            if removed:
                logger.info(f"만료 세션 {removed}개 정리")

    t = threading.Thread(target=_cleanup_loop, daemon=True)
    t.start()
    try:
        yield
    finally:
        stop_cleanup.set()
        t.join(timeout=1.0)
        app.state.sessions.close_all()
        logger.info("서버 종료: 세션 타이머 정리 완료")


def create_app(
    storage: Storage | None = None,
    sessions: SessionStore | None = None,
    auto_tick: bool = True,
    seed: bool = True,
) -> FastAPI:
    """
    Args:
        storage:   영속 계층. 없으면 config.DB_PATH의 sqlite 파일을 연다.
        sessions:  쿠키 세션 저장소. 없으면 새로 만든다.
        auto_tick: True면 서버 측 타이머가 진행 중인 세션을 1초마다 틱한다.
                   False면 클라이언트가 /api/typing/tick을 호출해야 한다.
        seed:      기본 언어/스니펫/업적 채우기 여부.
    """
    app = FastAPI(title="CodeType", docs_url=None, redoc_url=None, lifespan=_lifespan)

    app.state.storage = storage or Storage(config.DB_PATH)
    app.state.sessions = sessions or SessionStore()
    app.state.auto_tick = auto_tick
    app.state.stop_cleanup = threading.Event()

    if seed:
        initialize_default_data(app.state.storage)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 세션 미들웨어: 쿠키에서 세션 ID를 읽고, 없으면 새로 발급
    @app.middleware("http")
    async def session_middleware(request: Request, call_next):
        store: SessionStore = request.app.state.sessions
        sid = request.cookies.get(SESSION_COOKIE)
        if not sid or store.get_session(sid) is None:
            sid = store.create_session()

        request.state.session_id = sid
        response: Response = await call_next(request)
        response.set_cookie(
            key=SESSION_COOKIE,
            value=sid,
            httponly=True,
            samesite="lax",
            max_age=store.ttl,
        )
        return response

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error(f"저장소 오류 ({request.url.path}): {exc}")
        return JSONResponse(status_code=500, content={"detail": "데이터 처리 중 오류가 발생했습니다."})

    app.include_router(router)

    # 루트 → 서비스 정보
    @app.get("/")
    async def service_info():
        return {"name": "codetype", "docs": "/docs", "api": "/api"}

    return app
