"""
점수 모듈 패키지

공통 데이터 타입:
- SentenceResult: 제출된 문장 하나의 결과
- SentenceDetail: 리포트용 문장별 상세 (최적 정렬 결과 포함)
- DictationReport: 연습 전체 집계 리포트
"""

from dataclasses import dataclass, field
from typing import Optional

from dictation.matching import AlignmentPair
from dictation.text.normalizer import normalize


@dataclass(frozen=True)
class SentenceResult:
    """
    제출된 문장 하나의 결과입니다.

    건너뛴 문장은 SentenceResult를 만들지 않고 None으로 표현하여
    "미시도"와 "빈 입력으로 제출"을 구분합니다.

    필드:
        expected: 참조 문장 원문
        actual: 사용자 입력 원문
        is_correct: 정규화 후 두 문장이 같은지 여부
    """
    expected: str
    actual: str
    is_correct: bool

    @classmethod
    def evaluate(cls, expected: str, actual: str, check_capitalization: bool = False) -> "SentenceResult":
        """정규화 비교로 is_correct를 계산하여 SentenceResult를 만듭니다."""
        is_correct = (
            normalize(expected, preserve_case=check_capitalization)
            == normalize(actual, preserve_case=check_capitalization)
        )
        return cls(expected=expected, actual=actual, is_correct=is_correct)


@dataclass(frozen=True)
class SentenceDetail:
    """리포트용 문장별 상세입니다. pairs는 최적(DP) 정렬 결과입니다."""
    index: int
    expected: str
    actual: str
    is_correct: bool
    pairs: tuple[AlignmentPair, ...] = ()
    hint_corrected_words: int = 0


@dataclass(frozen=True)
class DictationReport:
    """
    받아쓰기 연습 전체 집계 리포트입니다.

    필드:
        total_words: 전체 스크립트의 참조 단어 수 (미시도 문장 포함)
        attempted_words: 시도한 문장의 참조 단어 수
        user_words: 사용자가 입력한 단어 수
        correct_words: 정답 단어 수 (match + 힌트 재분류된 substitution)
        substitutions: 오답 단어 수 (힌트 재분류 제외)
        insertions: 참조에 없는 사용자 단어 수
        deletions: 누락된 참조 단어 수
        hint_corrected_words: 힌트 규칙으로 정답 처리된 단어 수
        accuracy: 정확도 (%)
        completion: 완료율 (%) = attempted_words / total_words
        words_per_minute: 분당 입력 단어 수
        speed_factor: 속도 계수 (최대 2.5)
        max_hint_level_used: 연습 중 사용한 최대 힌트 레벨
        hint_multiplier: 힌트 감점 배율
        score: 최종 점수 (0~100 정수)
        elapsed_seconds: 경과 시간 (초)
        total_sentences: 전체 문장 수
        attempted_sentences: 시도한 문장 수
        correct_sentences: 정규화 기준 완전 정답 문장 수
        check_capitalization: 대소문자 검사 여부
        wer: 단어 오류율 (jiwer, 계산 불가 시 None)
        cer: 문자 오류율 (jiwer, 계산 불가 시 None)
        sentence_details: 문장별 상세
    """
    total_words: int
    attempted_words: int
    user_words: int
    correct_words: int
    substitutions: int
    insertions: int
    deletions: int
    hint_corrected_words: int
    accuracy: float
    completion: float
    words_per_minute: float
    speed_factor: float
    max_hint_level_used: int
    hint_multiplier: float
    score: int
    elapsed_seconds: float
    total_sentences: int
    attempted_sentences: int
    correct_sentences: int
    check_capitalization: bool = False
    wer: Optional[float] = None
    cer: Optional[float] = None
    sentence_details: tuple[SentenceDetail, ...] = field(default_factory=tuple)

    @property
    def mistakes(self) -> int:
        """오답 + 초과 단어 수입니다."""
        return self.substitutions + self.insertions
