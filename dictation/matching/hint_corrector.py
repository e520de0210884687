"""
힌트 보정 모듈입니다.

역할:
- 힌트 레벨별로 미리 공개되는 글자 수 계산
- 힌트로 공개된 글자를 제외한 나머지만 맞게 입력한 substitution을 정답으로 재분류
- 힌트 표시 문자열 생성 (공개 글자 + 밑줄)

공개 글자 수:
    레벨 0 -> 0
    레벨 1 -> 1
    레벨 2 -> 단어 길이 > 5 이면 3, 아니면 2

재분류 규칙 (공개 글자 수 v):
    - 사용자가 숨겨진 부분부터 입력: expected[v:] 가 사용자 단어로 시작
    - 사용자가 공개 글자까지 입력: expected 가 사용자 단어로 시작하고 len(user) > v
    두 경우 모두 힌트 밖의 글자를 1개 이상 입력해야 합니다.
    레벨 L의 판정은 레벨 1~L 중 하나라도 규칙을 만족하면 정답이므로,
    레벨 1에서 정답인 쌍은 레벨 2에서도 항상 정답입니다.

사용 예시:
    >>> pair = AlignmentPair.substituted("ist", "st", 0.5)
    >>> is_correct_with_hint(pair, 1)
    True
"""

from __future__ import annotations

from typing import Union

from dictation.matching import AlignmentOp, AlignmentPair, HintLevel
from dictation.text.normalizer import normalize

# 레벨 2에서 3글자를 공개하는 최소 단어 길이 (초과)
LONG_WORD_LENGTH = 5
HINT_PLACEHOLDER = "_"


def _as_hint_level(hint_level: Union[HintLevel, int]) -> HintLevel:
    try:
        return HintLevel(hint_level)
    except ValueError:
        raise ValueError(f"힌트 레벨은 0~2 범위여야 합니다. 입력값: {hint_level}") from None


def visible_letter_count(expected_word: str, hint_level: Union[HintLevel, int]) -> int:
    """
    힌트 레벨에서 미리 공개되는 글자 수를 반환합니다.

    단어 길이는 구두점을 제거한 정규화 형태 기준이며, 공개 글자 수는 단어 길이를 넘지 않습니다.

    예외:
        ValueError: 힌트 레벨이 0~2 범위를 벗어난 경우
    """
    level = _as_hint_level(hint_level)
    length = len(normalize(expected_word, preserve_case=True))

    if level is HintLevel.OFF:
        count = 0
    elif level is HintLevel.FIRST_LETTER:
        count = 1
    else:
        count = 3 if length > LONG_WORD_LENGTH else 2
    return min(count, length)


def _fills_hidden_part(expected: str, typed: str, visible: int) -> bool:
    if not typed:
        return False
    if expected[visible:].startswith(typed):
        return True
    return len(typed) > visible and expected.startswith(typed)


def is_correct_with_hint(
    pair: AlignmentPair,
    hint_level: Union[HintLevel, int],
    check_capitalization: bool = False,
) -> bool:
    """
    힌트 레벨을 고려하여 정렬 쌍의 정답 여부를 판정합니다.

    파라미터:
        pair: 정렬 결과 쌍
        hint_level: 연습 전체에 적용된 힌트 레벨 (0~2)
        check_capitalization: 대소문자 검사 여부

    반환값:
        bool: match이거나, 정규화 후 동일하거나, 힌트 규칙으로 재분류되면 True.
            insertion/deletion은 항상 False.

    예외:
        ValueError: 힌트 레벨이 0~2 범위를 벗어난 경우
    """
    level = _as_hint_level(hint_level)

    if pair.op is AlignmentOp.MATCH:
        return True
    if pair.op is not AlignmentOp.SUBSTITUTION:
        return False

    expected = normalize(pair.reference_word, preserve_case=check_capitalization)
    typed = normalize(pair.user_word, preserve_case=check_capitalization)
    if expected == typed:
        return True

    for current_level in range(HintLevel.FIRST_LETTER, level + 1):
        visible = visible_letter_count(pair.reference_word, current_level)
        if _fills_hidden_part(expected, typed, visible):
            return True
    return False


def reveal_hint(word: str, hint_level: Union[HintLevel, int]) -> str:
    """
    힌트 표시 문자열을 만듭니다.

    공개 글자는 원래 대소문자를 유지하고, 나머지 글자는 밑줄로 가립니다.

    사용 예시:
        >>> reveal_hint("Montagmorgen", 2)
        'Mon_________'
    """
    letters = normalize(word, preserve_case=True)
    visible = visible_letter_count(word, hint_level)
    return letters[:visible] + HINT_PLACEHOLDER * (len(letters) - visible)
