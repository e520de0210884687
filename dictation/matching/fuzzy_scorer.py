"""
퍼지 스코어러 모듈입니다.

역할:
- 두 단어의 유사도를 0.0~1.0 점수로 계산
- 정규화된 편집 거리(Levenshtein) + 도메인 보정 규칙 적용
- 그리디 정렬 후보 탐색 시 위치 패널티 적용

점수 사다리 (위에서부터 평가):
1. 완전 일치 (check_capitalization 반영)                     -> 1.0
2. 대소문자만 다름 (check_capitalization=True일 때)            -> 0.95
3. 합성어 포함 (짧은 쪽 길이 >= 4, 대소문자 무시 부분 문자열)   -> 0.85
4. Levenshtein 유사 (distance / 긴 단어 길이 < 0.6)          -> 0.5 + 0.4 * (1 - ratio), [0.5, 0.9]
5. 문자 위치 일치율 (4가 적용되지 않는 덜 유사한 단어)           -> 일치 위치 수 / 긴 단어 길이
6. 고빈도 기능어(in, ihr, ist, es, der, die, das) 대소문자 무시 일치 -> 최소 0.95
3과 4가 모두 적용되면 더 높은 점수를 사용합니다.

사용 예시:
    >>> word_similarity("schon", "schön")
    0.82
    >>> word_similarity("morgen", "Montagmorgen")
    0.85
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from dictation.config.schema import MatchingConfig
from dictation.text.normalizer import normalize

EXACT_SCORE = 1.0
CASE_ONLY_SCORE = 0.95
CONTAINMENT_SCORE = 0.85
LEVENSHTEIN_BASE_SCORE = 0.5
LEVENSHTEIN_SCORE_SPAN = 0.4
LEVENSHTEIN_MAX_SCORE = 0.9
SHORT_WORD_SCORE = 0.95

# "비슷한 단어"로 판단하는 최소 점수
SIMILARITY_THRESHOLD = 0.5
SIMILAR_DISTANCE_RATIO = 0.3

# 대소문자 무시 일치 시 0.95를 보장하는 고빈도 기능어
COMMON_SHORT_WORDS: frozenset[str] = frozenset({"in", "ihr", "ist", "es", "der", "die", "das"})

_DEFAULT_CONFIG = MatchingConfig()


def levenshtein_distance(a: str, b: str) -> int:
    """
    두 문자열의 문자 단위 Levenshtein 편집 거리를 계산합니다.

    삽입/삭제/치환 비용은 모두 1입니다. 메모리는 O(min(len(a), len(b)))만 사용합니다.
    """
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    previous_row = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current_row = [i]
        for j, char_b in enumerate(b, start=1):
            current_row.append(min(
                previous_row[j - 1] + (char_a != char_b),
                previous_row[j] + 1,
                current_row[j - 1] + 1,
            ))
        previous_row = current_row
    return previous_row[-1]


@lru_cache(maxsize=4096)
def _forms(word: str) -> tuple[str, str]:
    """(대소문자 유지 정규화형, 소문자 정규화형)을 반환합니다."""
    return normalize(word, preserve_case=True), normalize(word, preserve_case=False)


def _position_match_score(a: str, b: str) -> float:
    longer = max(len(a), len(b))
    if longer == 0:
        return 0.0
    matching = sum(1 for char_a, char_b in zip(a, b) if char_a == char_b)
    return matching / longer


def word_similarity(
    candidate: str,
    expected: str,
    check_capitalization: bool = False,
    config: Optional[MatchingConfig] = None,
) -> float:
    """
    사용자 단어(candidate)와 참조 단어(expected)의 유사도를 계산합니다.

    두 단어는 내부에서 정규화되므로 원문을 그대로 전달해도 됩니다.
    check_capitalization=True여도 대소문자만 다른 단어는 0.95로 "근접 오답"일 뿐이며,
    정답 여부는 정렬 단계에서 완전 일치 임계값으로 결정됩니다.

    파라미터:
        candidate: 사용자가 입력한 단어
        expected: 참조 단어
        check_capitalization: 대소문자 검사 여부
        config: 매칭 설정 (None이면 기본값)

    반환값:
        float: 0.0~1.0 유사도
    """
    settings = config or _DEFAULT_CONFIG
    candidate_cased, candidate_folded = _forms(candidate)
    expected_cased, expected_folded = _forms(expected)

    if check_capitalization:
        if candidate_cased == expected_cased:
            return EXACT_SCORE
        if candidate_folded == expected_folded:
            return CASE_ONLY_SCORE
        left, right = candidate_cased, expected_cased
    else:
        if candidate_folded == expected_folded:
            return EXACT_SCORE
        left, right = candidate_folded, expected_folded

    score = 0.0

    shorter, longer = sorted((candidate_folded, expected_folded), key=len)
    if len(shorter) >= settings.containment_min_length and shorter in longer:
        score = CONTAINMENT_SCORE

    longer_length = max(len(left), len(right))
    ratio = levenshtein_distance(left, right) / longer_length if longer_length else 1.0
    if ratio < settings.levenshtein_ratio_threshold:
        levenshtein_score = LEVENSHTEIN_BASE_SCORE + LEVENSHTEIN_SCORE_SPAN * (1.0 - ratio)
        levenshtein_score = min(LEVENSHTEIN_MAX_SCORE, max(LEVENSHTEIN_BASE_SCORE, levenshtein_score))
        score = max(score, levenshtein_score)
    elif score == 0.0:
        score = _position_match_score(left, right)

    # 고빈도 기능어는 대소문자만 틀려도 관대하게 처리
    if expected_folded in COMMON_SHORT_WORDS and candidate_folded == expected_folded:
        score = max(score, SHORT_WORD_SCORE)

    return round(score, 6)


def apply_position_penalty(
    score: float,
    offset: int,
    check_capitalization: bool = False,
    config: Optional[MatchingConfig] = None,
) -> float:
    """
    후보 단어가 현재 위치에서 offset만큼 떨어져 있을 때 점수를 감점합니다.

    감점: offset * 0.03 (대소문자 검사 모드는 offset * 0.01)
    감점으로 0.4 아래로 내려가지 않지만, 원래 0.4 미만인 점수를 끌어올리지도 않습니다.
    """
    if offset <= 0:
        return score

    settings = config or _DEFAULT_CONFIG
    per_offset = (
        settings.position_penalty_case_sensitive
        if check_capitalization
        else settings.position_penalty
    )
    floor = min(score, settings.position_penalty_floor)
    return round(max(score - offset * per_offset, floor), 6)


def are_similar_words(a: str, b: str, check_capitalization: bool = False) -> bool:
    """
    두 단어가 "비슷한 단어"인지 판단합니다.

    정규화 편집 거리 비율이 0.3 미만이거나 유사도 점수가 0.5 이상이면 True입니다.
    """
    _, a_folded = _forms(a)
    _, b_folded = _forms(b)
    longer_length = max(len(a_folded), len(b_folded))
    if longer_length and levenshtein_distance(a_folded, b_folded) / longer_length < SIMILAR_DISTANCE_RATIO:
        return True
    return word_similarity(a, b, check_capitalization) >= SIMILARITY_THRESHOLD
