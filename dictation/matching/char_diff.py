"""
문자 단위 비교 및 실시간 피드백 모듈입니다.

역할:
- 부분 일치 단어의 문자 단위 비교 (correct / incorrect / placeholder / extra)
- 그리디 정렬 결과를 입력창 아래 표시용 피드백 토큰 목록으로 변환

피드백 토큰 종류:
    correct  - 완전 일치 단어 (참조 단어 원문 표시)
    partial  - 부분 일치 단어 (문자 단위 비교 결과 포함)
    missing  - 누락 단어 (max(3, 글자 수) 길이의 밑줄, 힌트 레벨 > 0이면 힌트 표시)
    extra    - 참조에 없는 사용자 단어
    space    - 토큰 사이 공백

사용 예시:
    >>> tokens = build_live_feedback("Es ist kalt", "ist kalt")
    >>> [token.kind.value for token in tokens]
    ['missing', 'space', 'correct', 'space', 'correct']
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from dictation.config.schema import MatchingConfig
from dictation.matching import AlignmentOp, HintLevel
from dictation.matching.hint_corrector import HINT_PLACEHOLDER, reveal_hint
from dictation.matching.word_aligner import align_greedy
from dictation.text.normalizer import normalize, tokenize

# 입력이 참조보다 길 때 표시할 초과 문자 최대 개수
MAX_EXTRA_CHARS = 2
# 누락 단어 마스크 최소 길이
MIN_MISSING_MASK = 3


class CharStatus(str, Enum):
    """문자 단위 비교 결과 종류입니다."""
    CORRECT = "correct"
    INCORRECT = "incorrect"
    PLACEHOLDER = "placeholder"
    EXTRA = "extra"


class FeedbackKind(str, Enum):
    """실시간 피드백 토큰 종류입니다."""
    CORRECT = "correct"
    PARTIAL = "partial"
    MISSING = "missing"
    EXTRA = "extra"
    SPACE = "space"


@dataclass(frozen=True)
class CharDiff:
    """문자 하나의 비교 결과입니다. placeholder의 text는 항상 '_'입니다."""
    status: CharStatus
    text: str


@dataclass(frozen=True)
class FeedbackToken:
    """
    피드백 표시 토큰입니다.

    필드:
        kind: 토큰 종류
        text: 표시 문자열
        chars: partial 토큰의 문자 단위 비교 결과 (그 외 토큰은 빈 튜플)
    """
    kind: FeedbackKind
    text: str
    chars: tuple[CharDiff, ...] = ()


def compare_chars(expected: str, actual: str, check_capitalization: bool = False) -> list[CharDiff]:
    """
    참조 단어와 사용자 단어를 문자 위치별로 비교합니다.

    두 단어 모두 정규화(check_capitalization=True이면 대소문자 유지)한 뒤 비교합니다.
    사용자가 아직 입력하지 않은 위치는 placeholder('_'),
    참조보다 긴 부분은 최대 2글자까지 extra로 표시합니다.

    반환값:
        list[CharDiff]: 참조 길이 + 최대 2개 초과 문자
    """
    expected_chars = normalize(expected, preserve_case=check_capitalization)
    actual_chars = normalize(actual, preserve_case=check_capitalization)

    result: list[CharDiff] = []
    for index, expected_char in enumerate(expected_chars):
        if index >= len(actual_chars):
            result.append(CharDiff(CharStatus.PLACEHOLDER, HINT_PLACEHOLDER))
            continue
        actual_char = actual_chars[index]
        status = CharStatus.CORRECT if actual_char == expected_char else CharStatus.INCORRECT
        result.append(CharDiff(status, actual_char))

    overflow = actual_chars[len(expected_chars):len(expected_chars) + MAX_EXTRA_CHARS]
    result.extend(CharDiff(CharStatus.EXTRA, char) for char in overflow)
    return result


def _missing_text(reference_word: str, hint_level: HintLevel) -> str:
    if hint_level is not HintLevel.OFF:
        return reveal_hint(reference_word, hint_level)
    length = len(normalize(reference_word, preserve_case=True))
    return HINT_PLACEHOLDER * max(MIN_MISSING_MASK, length)


def build_live_feedback(
    expected_text: str,
    actual_text: str,
    check_capitalization: bool = False,
    hint_level: Union[HintLevel, int] = HintLevel.OFF,
    config: Optional[MatchingConfig] = None,
) -> list[FeedbackToken]:
    """
    입력 중인 문장에 대한 실시간 피드백 토큰 목록을 만듭니다.

    파라미터:
        expected_text: 참조 문장 원문
        actual_text: 사용자가 지금까지 입력한 문장
        check_capitalization: 대소문자 검사 여부
        hint_level: 누락 단어 자리에 힌트를 표시할 레벨
        config: 매칭 설정 (None이면 기본값)

    반환값:
        list[FeedbackToken]: 단어 토큰 사이에 space 토큰이 끼워진 목록
    """
    level = HintLevel(hint_level)
    pairs = align_greedy(tokenize(expected_text), tokenize(actual_text), check_capitalization, config)

    tokens: list[FeedbackToken] = []
    for pair in pairs:
        if tokens:
            tokens.append(FeedbackToken(FeedbackKind.SPACE, " "))

        if pair.op is AlignmentOp.MATCH:
            tokens.append(FeedbackToken(FeedbackKind.CORRECT, pair.reference_word))
        elif pair.op is AlignmentOp.SUBSTITUTION:
            chars = compare_chars(pair.reference_word, pair.user_word, check_capitalization)
            tokens.append(FeedbackToken(FeedbackKind.PARTIAL, pair.user_word, tuple(chars)))
        elif pair.op is AlignmentOp.DELETION:
            tokens.append(FeedbackToken(FeedbackKind.MISSING, _missing_text(pair.reference_word, level)))
        else:
            tokens.append(FeedbackToken(FeedbackKind.EXTRA, pair.user_word))

    return tokens
