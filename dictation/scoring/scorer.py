"""
받아쓰기 점수 계산 모듈입니다.

역할:
- 시도한 문장별 최적(DP) 정렬 및 힌트 보정으로 단어 통계 집계
- 정확도, 분당 단어 수, 속도 계수, 힌트 감점 배율, 최종 점수 계산
- jiwer를 사용한 보조 지표 WER/CER 계산
- 미시도 문장(None)이 섞인 부분 결과 목록도 오류 없이 처리

점수 공식:
    accuracy% = correct / (correct + substitutions + insertions) * 100   (분모 0이면 0)
    wpm       = user_words / (elapsed_seconds / 60)                       (경과 0이면 0)
    speed     = min(2.5, wpm / 10)
    score     = round(clamp(accuracy% * speed * hint_multiplier, 0, 100))  (0.5는 올림)

사용 예시:
    >>> report = compute_report(segments, results, elapsed_seconds=90.0, max_hint_level_used=1)
    >>> 0 <= report.score <= 100
    True
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence, Union

from dictation.captions import Segment
from dictation.config.schema import MatchingConfig, ScoringConfig
from dictation.matching import AlignmentOp, HintLevel
from dictation.matching.hint_corrector import is_correct_with_hint
from dictation.matching.word_aligner import align_exact, count_operations
from dictation.scoring import DictationReport, SentenceDetail, SentenceResult
from dictation.text.normalizer import normalize, tokenize

logger = logging.getLogger(__name__)

MAX_SCORE = 100.0


# =============================================================================
# 공식 단위 함수
# =============================================================================

def hint_penalty_multiplier(
    max_hint_level_used: Union[HintLevel, int],
    config: Optional[ScoringConfig] = None,
) -> float:
    """
    최대 사용 힌트 레벨에 대한 점수 배율을 반환합니다. (0 -> 1.0, 1 -> 0.8, 2 -> 0.6)

    예외:
        ValueError: 힌트 레벨이 0~2 범위를 벗어난 경우
    """
    settings = config or ScoringConfig()
    try:
        level = HintLevel(max_hint_level_used)
    except ValueError:
        raise ValueError(f"힌트 레벨은 0~2 범위여야 합니다. 입력값: {max_hint_level_used}") from None
    return settings.hint_multipliers[int(level)]


def accuracy_percentage(correct_words: int, substitutions: int, insertions: int) -> float:
    """정확도(%)를 계산합니다. 분모가 0이면 0.0"""
    denominator = correct_words + substitutions + insertions
    if denominator <= 0:
        return 0.0
    return correct_words / denominator * 100.0


def words_per_minute(user_word_count: int, elapsed_seconds: float) -> float:
    """분당 입력 단어 수를 계산합니다. 경과 시간이 0 이하이면 0.0"""
    if elapsed_seconds <= 0:
        return 0.0
    return user_word_count / (elapsed_seconds / 60.0)


def speed_factor(wpm: float, config: Optional[ScoringConfig] = None) -> float:
    settings = config or ScoringConfig()
    return min(settings.max_speed_factor, wpm / settings.words_per_minute_divisor)


def compute_score(
    accuracy: float,
    wpm: float,
    max_hint_level_used: Union[HintLevel, int] = HintLevel.OFF,
    config: Optional[ScoringConfig] = None,
) -> int:
    """
    정확도, 분당 단어 수, 힌트 레벨로 최종 점수를 계산합니다.

    0~100 범위로 자른 뒤 반올림합니다 (x.5는 올림).

    사용 예시:
        >>> compute_score(80.0, 20.0, 1)
        100
    """
    raw = accuracy * speed_factor(wpm, config) * hint_penalty_multiplier(max_hint_level_used, config)
    clamped = min(MAX_SCORE, max(0.0, raw))
    return int(math.floor(clamped + 0.5))


# =============================================================================
# WER/CER 보조 지표
# =============================================================================

def _compute_error_rates(
    results: Sequence[SentenceResult],
    check_capitalization: bool,
) -> tuple[Optional[float], Optional[float]]:
    """
    시도한 문장 전체에 대한 WER/CER을 계산합니다.

    정규화된 참조가 빈 문자열인 문장은 제외합니다. 계산 실패 시 (None, None)
    """
    references: list[str] = []
    hypotheses: list[str] = []
    for result in results:
        reference = normalize(result.expected, preserve_case=check_capitalization)
        if not reference:
            continue
        references.append(reference)
        hypotheses.append(normalize(result.actual, preserve_case=check_capitalization))

    if not references:
        return None, None

    try:
        import jiwer
        wer = float(jiwer.wer(reference=references, hypothesis=hypotheses))
        cer = float(jiwer.cer(reference=references, hypothesis=hypotheses))
    except Exception as exc:
        logger.error(f"WER/CER 계산 실패: {exc}")
        return None, None
    return wer, cer


# =============================================================================
# 리포트 생성
# =============================================================================

def compute_report(
    segments: Sequence[Segment],
    sentence_results: Sequence[Optional[SentenceResult]],
    elapsed_seconds: float,
    max_hint_level_used: Union[HintLevel, int] = HintLevel.OFF,
    check_capitalization: bool = False,
    scoring_config: Optional[ScoringConfig] = None,
    matching_config: Optional[MatchingConfig] = None,
    include_error_rates: bool = True,
) -> DictationReport:
    """
    세그먼트와 문장 결과 목록으로 DictationReport를 계산합니다.

    리포트는 매번 입력 데이터로부터 전부 다시 계산되며 별도 상태를 갖지 않습니다.

    파라미터:
        segments: 전체 스크립트 세그먼트 (총 단어 수 기준)
        sentence_results: 문장별 결과, 미시도 문장은 None
        elapsed_seconds: 연습 경과 시간 (초)
        max_hint_level_used: 연습 중 사용한 최대 힌트 레벨 (0~2)
        check_capitalization: 대소문자 검사 여부
        scoring_config: 점수 설정 (None이면 기본값)
        matching_config: 매칭 설정 (None이면 기본값)
        include_error_rates: jiwer WER/CER 계산 여부

    반환값:
        DictationReport: 집계 리포트

    예외:
        ValueError: 힌트 레벨이 0~2 범위를 벗어난 경우
    """
    multiplier = hint_penalty_multiplier(max_hint_level_used, scoring_config)
    hint_level = HintLevel(max_hint_level_used)

    total_words = sum(len(tokenize(segment.text)) for segment in segments)

    attempted: list[SentenceResult] = []
    details: list[SentenceDetail] = []
    attempted_words = user_words = 0
    correct_words = substitutions = insertions = deletions = hint_corrected = 0

    for index, result in enumerate(sentence_results):
        if result is None:
            continue
        attempted.append(result)

        reference_tokens = tokenize(result.expected)
        user_tokens = tokenize(result.actual)
        pairs = align_exact(reference_tokens, user_tokens, check_capitalization, matching_config)
        counts = count_operations(pairs)

        corrected = sum(
            1 for pair in pairs
            if pair.op is AlignmentOp.SUBSTITUTION
            and is_correct_with_hint(pair, hint_level, check_capitalization)
        )

        attempted_words += len(reference_tokens)
        user_words += len(user_tokens)
        correct_words += counts[AlignmentOp.MATCH.value] + corrected
        substitutions += counts[AlignmentOp.SUBSTITUTION.value] - corrected
        insertions += counts[AlignmentOp.INSERTION.value]
        deletions += counts[AlignmentOp.DELETION.value]
        hint_corrected += corrected

        details.append(SentenceDetail(
            index=index,
            expected=result.expected,
            actual=result.actual,
            is_correct=result.is_correct,
            pairs=tuple(pairs),
            hint_corrected_words=corrected,
        ))

    accuracy = accuracy_percentage(correct_words, substitutions, insertions)
    wpm = words_per_minute(user_words, elapsed_seconds)
    score = compute_score(accuracy, wpm, hint_level, scoring_config)
    completion = attempted_words / total_words * 100.0 if total_words else 0.0

    wer: Optional[float] = None
    cer: Optional[float] = None
    if include_error_rates:
        wer, cer = _compute_error_rates(attempted, check_capitalization)

    report = DictationReport(
        total_words=total_words,
        attempted_words=attempted_words,
        user_words=user_words,
        correct_words=correct_words,
        substitutions=substitutions,
        insertions=insertions,
        deletions=deletions,
        hint_corrected_words=hint_corrected,
        accuracy=accuracy,
        completion=completion,
        words_per_minute=wpm,
        speed_factor=speed_factor(wpm, scoring_config),
        max_hint_level_used=int(hint_level),
        hint_multiplier=multiplier,
        score=score,
        elapsed_seconds=max(0.0, elapsed_seconds),
        total_sentences=len(segments),
        attempted_sentences=len(attempted),
        correct_sentences=sum(1 for result in attempted if result.is_correct),
        check_capitalization=check_capitalization,
        wer=wer,
        cer=cer,
        sentence_details=tuple(details),
    )

    logger.info(
        f"받아쓰기 리포트: sentences={len(attempted)}/{len(segments)}, "
        f"words={attempted_words}/{total_words}, accuracy={accuracy:.1f}%, "
        f"wpm={wpm:.1f}, hint={int(hint_level)}, score={score}"
    )
    return report
