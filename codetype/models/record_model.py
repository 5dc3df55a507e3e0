"""
models/record_model.py

저장소에 영속되는 사용자/결과/통계/업적 레코드 모델.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class User(BaseModel):
    id: str
    username: Optional[str] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TestResultRecord(BaseModel):
    """저장된 타자 결과 한 건."""

    id: str
    user_id: str
    snippet_id: str
    wpm: float = Field(..., ge=0)
    accuracy: float = Field(..., ge=0, le=100)
    time_spent: int = Field(..., ge=0, description="소요 시간 (초)")
    errors: int = Field(..., ge=0)
    completed_at: Optional[datetime] = None


class UserStats(BaseModel):
    """사용자별 누적 통계. 결과가 저장될 때마다 전체 이력에서 다시 집계한다."""

    user_id: str
    total_tests: int = 0
    average_wpm: float = 0.0
    average_accuracy: float = 0.0
    best_wpm: float = 0.0
    best_accuracy: float = 0.0
    global_rank: Optional[int] = None
    updated_at: Optional[datetime] = None


class LeaderboardEntry(UserStats):
    rank: int = 0
    user: User


class Achievement(BaseModel):
    """
    업적 정의.

    condition은 JSON 문자열: {"metric": "best_wpm", "gte": 60}
    metric은 total_tests / best_wpm / best_accuracy / wpm / accuracy 중 하나.
    """

    id: str
    name: str
    description: str
    icon: str = ""
    condition: str


class UserAchievement(BaseModel):
    id: str
    user_id: str
    achievement_id: str
    earned_at: Optional[datetime] = None
    achievement: Optional[Achievement] = None


class LanguageProficiency(BaseModel):
    id: str = ""
    user_id: str
    language_id: str
    average_wpm: float = 0.0
    average_accuracy: float = 0.0
    tests_completed: int = 0
    proficiency_level: str = "beginner"
    updated_at: Optional[datetime] = None


class UserProfile(BaseModel):
    """프로필 화면 한 장에 필요한 것 전부."""

    user: Optional[User] = None
    stats: UserStats
    global_rank: Optional[int] = Field(None, description="기록이 없으면 None (Unranked)")
    proficiency: List[LanguageProficiency] = Field(default_factory=list)
    achievements: List[UserAchievement] = Field(default_factory=list)
    recent_results: List[TestResultRecord] = Field(default_factory=list)
