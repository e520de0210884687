"""
매칭 모듈 패키지

공통 데이터 타입:
- AlignmentOp: 정렬 연산 종류 (match / substitution / insertion / deletion)
- AlignmentMode: 정렬 전략 (greedy / optimal)
- HintLevel: 힌트 레벨 (0=끔, 1=첫 글자, 2=부분 글자)
- AlignmentPair: 참조 단어와 사용자 단어의 정렬 결과 한 쌍
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional


class AlignmentOp(str, Enum):
    """단어 정렬 연산 종류입니다."""
    MATCH = "match"
    SUBSTITUTION = "substitution"
    INSERTION = "insertion"
    DELETION = "deletion"


class AlignmentMode(str, Enum):
    """
    단어 정렬 전략입니다.

    GREEDY: 입력 중 실시간 피드백용 (lookahead 탐색)
    OPTIMAL: 최종 통계 및 비교 리포트용 (동적 계획법 편집 거리)
    """
    GREEDY = "greedy"
    OPTIMAL = "optimal"


class HintLevel(IntEnum):
    """힌트 레벨입니다. 값이 클수록 더 많은 글자가 미리 공개됩니다."""
    OFF = 0
    FIRST_LETTER = 1
    PARTIAL_LETTERS = 2


@dataclass(frozen=True)
class AlignmentPair:
    """
    정렬 결과 한 쌍입니다.

    필드:
        reference_word: 참조 단어 원문 (insertion일 때만 None)
        user_word: 사용자 단어 원문 (deletion일 때만 None)
        op: 정렬 연산
        similarity: 퍼지 스코어 (0.0~1.0, insertion/deletion은 0.0)
    """
    reference_word: Optional[str]
    user_word: Optional[str]
    op: AlignmentOp
    similarity: float = 0.0

    def __post_init__(self) -> None:
        if (self.reference_word is None) != (self.op is AlignmentOp.INSERTION):
            raise ValueError(f"reference_word는 insertion일 때만 None이어야 합니다: {self}")
        if (self.user_word is None) != (self.op is AlignmentOp.DELETION):
            raise ValueError(f"user_word는 deletion일 때만 None이어야 합니다: {self}")

    @classmethod
    def matched(cls, reference_word: str, user_word: str, similarity: float = 1.0) -> "AlignmentPair":
        return cls(reference_word, user_word, AlignmentOp.MATCH, similarity)

    @classmethod
    def substituted(cls, reference_word: str, user_word: str, similarity: float) -> "AlignmentPair":
        return cls(reference_word, user_word, AlignmentOp.SUBSTITUTION, similarity)

    @classmethod
    def inserted(cls, user_word: str) -> "AlignmentPair":
        return cls(None, user_word, AlignmentOp.INSERTION)

    @classmethod
    def deleted(cls, reference_word: str) -> "AlignmentPair":
        return cls(reference_word, None, AlignmentOp.DELETION)
