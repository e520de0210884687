"""
단어 정렬 모듈입니다.

역할:
- 참조 단어 목록과 사용자 단어 목록을 AlignmentPair 목록으로 정렬
- GREEDY: 입력 중 실시간 피드백용 lookahead 정렬
- OPTIMAL: 최종 통계/비교 리포트용 동적 계획법 편집 거리 정렬
- 두 전략 모두 align_words(mode=...) 하나로 호출 가능

정렬 규칙 요약:
- 그리디: 참조 단어마다 다음 사용자 단어 최대 5개를 탐색하여 위치 패널티 적용 점수가
  가장 높은 후보를 선택. 점수 > 0.38이면 후보를 소비하고 건너뛴 사용자 단어는 insertion,
  아니면 참조 단어를 deletion으로 처리하고 사용자 커서는 그대로 유지.
  다음 참조 단어와 완전 일치하는 사용자 단어(offset > 0)에서는 탐색을 멈춤
- 최적: 퍼지 점수 >= 완전 일치 임계값이면 대각선 비용 0, 아니면 1.
  삽입/삭제 비용 1. 역추적 시 대각선 > insertion > deletion 순으로 선택하므로
  동일 비용 경로 중 빈칸(insertion/deletion)이 가장 왼쪽에 놓이는 경로가 선택됩니다.

사용 예시:
    >>> pairs = align_greedy(["Es", "ist", "kalt"], ["ist", "kalt"])
    >>> [pair.op.value for pair in pairs]
    ['deletion', 'match', 'match']
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Optional, Sequence, Union

from dictation.config.schema import MatchingConfig
from dictation.matching import AlignmentMode, AlignmentOp, AlignmentPair
from dictation.matching.fuzzy_scorer import apply_position_penalty, word_similarity

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG = MatchingConfig()


# =============================================================================
# 그리디 lookahead 정렬
# =============================================================================

def align_greedy(
    reference_words: Sequence[str],
    user_words: Sequence[str],
    check_capitalization: bool = False,
    config: Optional[MatchingConfig] = None,
) -> list[AlignmentPair]:
    """
    그리디 lookahead 방식으로 단어를 정렬합니다.

    파라미터:
        reference_words: 참조(정답) 단어 목록
        user_words: 사용자 입력 단어 목록
        check_capitalization: 대소문자 검사 여부
        config: 매칭 설정 (None이면 기본값)

    반환값:
        list[AlignmentPair]: 참조 순서를 따르는 정렬 결과.
            모든 참조 단어와 사용자 단어가 정확히 한 번씩 등장합니다.
    """
    settings = config or _DEFAULT_CONFIG
    pairs: list[AlignmentPair] = []
    user_index = 0

    for reference_index, reference_word in enumerate(reference_words):
        best_offset: Optional[int] = None
        best_score = -1.0
        best_similarity = 0.0
        next_reference = (
            reference_words[reference_index + 1] if reference_index + 1 < len(reference_words) else None
        )

        window = min(settings.lookahead_words, len(user_words) - user_index)
        for offset in range(window):
            candidate = user_words[user_index + offset]
            similarity = word_similarity(candidate, reference_word, check_capitalization, settings)
            # 다음 참조 단어와 완전 일치하는 사용자 단어는 그 단어 몫으로 남겨 두고 탐색 중단
            if (
                offset > 0
                and next_reference is not None
                and similarity < settings.exact_match_threshold
                and word_similarity(candidate, next_reference, check_capitalization, settings)
                >= settings.exact_match_threshold
            ):
                break
            score = apply_position_penalty(similarity, offset, check_capitalization, settings)
            if score > best_score:
                best_offset, best_score, best_similarity = offset, score, similarity
            # 완전 일치 이후 후보는 패널티 때문에 더 높을 수 없음
            if similarity >= settings.exact_match_threshold:
                break

        if best_offset is None or best_score <= settings.acceptance_threshold:
            pairs.append(AlignmentPair.deleted(reference_word))
            continue

        for skipped in user_words[user_index:user_index + best_offset]:
            pairs.append(AlignmentPair.inserted(skipped))

        user_word = user_words[user_index + best_offset]
        if best_similarity >= settings.exact_match_threshold:
            pairs.append(AlignmentPair.matched(reference_word, user_word, best_similarity))
        else:
            pairs.append(AlignmentPair.substituted(reference_word, user_word, best_similarity))
        user_index += best_offset + 1

    for remaining in user_words[user_index:]:
        pairs.append(AlignmentPair.inserted(remaining))

    return pairs


# =============================================================================
# 동적 계획법 최적 정렬
# =============================================================================

def align_exact(
    reference_words: Sequence[str],
    user_words: Sequence[str],
    check_capitalization: bool = False,
    config: Optional[MatchingConfig] = None,
) -> list[AlignmentPair]:
    """
    편집 거리 동적 계획법으로 최소 비용 정렬을 계산합니다.

    파라미터:
        reference_words: 참조(정답) 단어 목록
        user_words: 사용자 입력 단어 목록
        check_capitalization: 대소문자 검사 여부
        config: 매칭 설정 (None이면 기본값)

    반환값:
        list[AlignmentPair]: 최소 비용 경로를 따른 정렬 결과
    """
    settings = config or _DEFAULT_CONFIG
    rows, cols = len(reference_words), len(user_words)

    similarity = [
        [word_similarity(user_word, reference_word, check_capitalization, settings) for user_word in user_words]
        for reference_word in reference_words
    ]

    def substitution_cost(i: int, j: int) -> int:
        return 0 if similarity[i][j] >= settings.exact_match_threshold else 1

    # cost[i][j]: reference_words[:i] 와 user_words[:j] 의 최소 편집 비용
    cost = [[0] * (cols + 1) for _ in range(rows + 1)]
    for i in range(1, rows + 1):
        cost[i][0] = i
    for j in range(1, cols + 1):
        cost[0][j] = j

    for i in range(1, rows + 1):
        for j in range(1, cols + 1):
            cost[i][j] = min(
                cost[i - 1][j - 1] + substitution_cost(i - 1, j - 1),
                cost[i][j - 1] + 1,
                cost[i - 1][j] + 1,
            )

    # 역추적
    pairs: list[AlignmentPair] = []
    i, j = rows, cols
    while i > 0 or j > 0:
        if i > 0 and j > 0 and cost[i][j] == cost[i - 1][j - 1] + substitution_cost(i - 1, j - 1):
            reference_word, user_word = reference_words[i - 1], user_words[j - 1]
            score = similarity[i - 1][j - 1]
            if substitution_cost(i - 1, j - 1) == 0:
                pairs.append(AlignmentPair.matched(reference_word, user_word, score))
            else:
                pairs.append(AlignmentPair.substituted(reference_word, user_word, score))
            i, j = i - 1, j - 1
        elif j > 0 and cost[i][j] == cost[i][j - 1] + 1:
            pairs.append(AlignmentPair.inserted(user_words[j - 1]))
            j -= 1
        else:
            pairs.append(AlignmentPair.deleted(reference_words[i - 1]))
            i -= 1

    pairs.reverse()
    return pairs


# =============================================================================
# 통합 진입점
# =============================================================================

def align_words(
    reference_words: Sequence[str],
    user_words: Sequence[str],
    check_capitalization: bool = False,
    mode: Union[AlignmentMode, str, None] = None,
    config: Optional[MatchingConfig] = None,
) -> list[AlignmentPair]:
    """
    정렬 전략(mode)에 따라 그리디 또는 최적 정렬을 수행합니다.

    mode는 AlignmentMode 또는 "greedy" / "optimal" 문자열을 받습니다.
    None이면 config.default_mode (기본 greedy)를 따릅니다.
    """
    settings = config or _DEFAULT_CONFIG
    mode = AlignmentMode(settings.default_mode if mode is None else mode)
    if mode is AlignmentMode.OPTIMAL:
        pairs = align_exact(reference_words, user_words, check_capitalization, config)
    else:
        pairs = align_greedy(reference_words, user_words, check_capitalization, config)

    logger.debug(
        f"단어 정렬 완료: mode={mode.value}, "
        f"reference={len(reference_words)}, user={len(user_words)}, "
        f"ops={dict(count_operations(pairs))}"
    )
    return pairs


def count_operations(pairs: Sequence[AlignmentPair]) -> Counter:
    """정렬 결과의 연산 종류별 개수를 반환합니다. 키는 AlignmentOp.value 문자열입니다."""
    counts: Counter = Counter({op.value: 0 for op in AlignmentOp})
    counts.update(pair.op.value for pair in pairs)
    return counts
