"""
services/result_sink.py

SessionController의 완료 이벤트를 저장소에 기록하는 결과 수신자.
한 번만 시도하며 재시도하지 않는다.
"""

import logging

from codetype.models.session_state import TestResult
from codetype.services.stats_service import record_test_result
from codetype.services.storage import Storage, StorageError

logger = logging.getLogger(__name__)


class StorageResultSink:
    def __init__(self, storage: Storage, user_id: str):
        self.storage = storage
        self.user_id = user_id

    def __call__(self, result: TestResult) -> None:
        try:
            record_test_result(self.storage, self.user_id, result)
        except (StorageError, ValueError) as e:
            logger.error(f"결과 저장 실패 (user={self.user_id}): {e}")
