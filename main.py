"""
main.py — CodeType 서버 진입점
"""

import os
import socket
import subprocess
import sys
import time
import threading
import logging
import traceback

# ── 패키지 경로 설정 (반드시 최상단) ──────────────────────────────────────────
_BASE_DIR = os.path.dirname(os.path.abspath(__file__))
if _BASE_DIR not in sys.path:
    sys.path.insert(0, _BASE_DIR)

from config import BASE_DIR, LOG_FILE, DEFAULT_HOST, DEFAULT_PORT, DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)


# ── 로깅 설정 ────────────────────────────────────────────────────────────────

def setup_logging() -> None:
    try:
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
            handlers=[
                logging.FileHandler(LOG_FILE, encoding='utf-8'),
                logging.StreamHandler(sys.stdout)
            ]
        )
    except PermissionError:
        # 로그 파일 점유 시 콘솔 출력만 사용
        logging.basicConfig(level=logging.INFO)


# ── 서버 및 네트워크 유틸 ───────────────────────────────────────────────────

def _find_free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind((DEFAULT_HOST, 0))
        return s.getsockname()[1]


def _port_available(port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        try:
            s.bind((DEFAULT_HOST, port))
            return True
        except OSError:
            return False


def _wait_for_server(port: int, timeout: float = DEFAULT_TIMEOUT) -> bool:
    deadline = time.time() + timeout
    while time.time() < deadline:
        try:
            with socket.create_connection((DEFAULT_HOST, port), timeout=0.5):
                return True
        except OSError:
            time.sleep(0.1)
    return False


def _open_browser(url: str) -> None:
    import webbrowser
    logger.info(f"브라우저 열기: {url}")
    webbrowser.open(url)


def _start_server(port: int) -> None:
    try:
        import uvicorn
        from api.app import create_app
        logger.info(f"Uvicorn 서버 시작 - Port: {port}")
        app = create_app()
        uvicorn.run(app, host=DEFAULT_HOST, port=port, log_level="warning")
    except Exception:
        logger.error(f"서버 오류 발생:\n{traceback.format_exc()}")


def _start_ui() -> int:
    """streamlit 연습 화면 실행 (`codetype-server ui`)."""
    app_path = os.path.join(BASE_DIR, "codetype", "streamlit_app.py")
    return subprocess.call([sys.executable, "-m", "streamlit", "run", app_path])


# ── 메인 실행 ────────────────────────────────────────────────────────────────

def main() -> int:
    setup_logging()
    os.chdir(BASE_DIR)

    if len(sys.argv) > 1 and sys.argv[1] == "ui":
        logger.info("=== CodeType practice UI ===")
        return _start_ui()

    logger.info("=== CodeType API Server Started ===")
    port = DEFAULT_PORT if _port_available(DEFAULT_PORT) else _find_free_port()
    server_thread = threading.Thread(target=_start_server, args=(port,), daemon=True)
    server_thread.start()

    if not _wait_for_server(port):
        logger.error("서버 시작 제한 시간을 초과했습니다. 기존 프로세스를 종료해 보세요.")
        return 1

    logger.info("서버 준비 완료. 브라우저를 엽니다.")
    _open_browser(f"http://{DEFAULT_HOST}:{port}")

    # 메인 스레드 유지
    try:
        while server_thread.is_alive():
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("사용자에 의해 종료되었습니다.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
