from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

DIFFICULTIES = ("beginner", "intermediate", "advanced")


class Language(BaseModel):
    """
    연습 대상 프로그래밍 언어.
    """
    id: str = Field(
        ...,
        description="언어 ID (uuid hex)"
    )
    name: str = Field(
        ...,
        min_length=1,
        description="내부 이름 (예: python, javascript)"
    )
    display_name: str = Field(
        ...,
        min_length=1,
        description="화면 표시 이름 (예: Python, C++)"
    )
    icon: str = Field(
        "",
        description="표시용 아이콘 (이모지)"
    )
    snippet_count: int = Field(
        0,
        ge=0,
        description="등록된 스니펫 수"
    )


class CodeSnippet(BaseModel):
    """
    타자 연습용 코드 스니펫 모델.
    code는 공백/개행을 포함해 그대로 기준 텍스트로 사용된다 (정규화 없음).
    """
    id: str = Field(
        ...,
        description="스니펫 ID (uuid hex)"
    )
    language_id: str = Field(
        ...,
        description="소속 언어 ID"
    )
    title: str = Field(
        ...,
        min_length=1,
        description="스니펫 제목"
    )
    code: str = Field(
        ...,
        description="따라 칠 코드 본문"
    )
    difficulty: str = Field(
        ...,
        description="난이도 (beginner / intermediate / advanced)"
    )
    created_at: Optional[datetime] = Field(
        None,
        description="등록 시각"
    )

    @field_validator('difficulty')
    @classmethod
    def validate_difficulty(cls, v: str) -> str:
        """
        난이도는 정해진 세 단계 중 하나여야 한다.
        """
        if v not in DIFFICULTIES:
            raise ValueError(f"알 수 없는 난이도입니다: '{v}' (허용: {', '.join(DIFFICULTIES)})")
        return v
