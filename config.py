import os

# 기본 디렉토리 설정
BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# 경로 설정
LOG_FILE = os.path.join(BASE_DIR, "launch.log")
DB_PATH = os.getenv("CODETYPE_DB", os.path.join(BASE_DIR, "data", "codetype.db"))

# 서버 설정
DEFAULT_HOST = os.getenv("HOST", "127.0.0.1")
DEFAULT_PORT = int(os.getenv("PORT", "8000"))
DEFAULT_TIMEOUT = 15.0

# 타자 세션 설정
SESSION_DURATION_MS = 120_000   # 세션당 제한 시간 (2분)
TICK_INTERVAL_SEC = 1.0         # 타이머 틱 간격

# 쿠키 세션 설정
SESSION_TTL = 7 * 24 * 3600        # 1주
SESSION_CLEANUP_INTERVAL = 300     # 만료 세션 정리 주기 (5분)

# 리더보드 / 이력 조회 기본값
LEADERBOARD_LIMIT = 50
RESULTS_LIMIT = 10

# 모의 로그인 사용자
MOCK_USER_ID = "mock-user-12345"
MOCK_USERNAME = "GuestCoder"
MOCK_EMAIL = "guest@codetype.pro"
