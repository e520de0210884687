"""
캡션 세그먼터 모듈입니다.

역할:
- WebVTT 형식 캡션 페이로드를 순서가 있는 Segment 목록으로 변환
- "[HH:]MM:SS.mmm" 타임스탬프를 초 단위 float로 변환
- 파싱 불가 타임스탬프 구성요소는 0으로 취급 (치명적 에러 없음)
- 텍스트 없는 큐는 조용히 건너뜀, start >= end 큐는 경고 후 제거

페이로드 형식:
    WEBVTT

    00:00:01.000 --> 00:00:03.500
    Berlin ist schön.

    00:00:04.000 --> 00:00:06.000
    Es ist kalt.

사용 예시:
    >>> segments = segment_captions(vtt_text)
    >>> segments[0].text
    'Berlin ist schön.'
"""

from __future__ import annotations

import logging
import math
from typing import Optional

from dictation.captions import Segment
from dictation.config.schema import CaptionConfig

logger = logging.getLogger(__name__)

# 타임스탬프 줄 식별 구분자
TIMESTAMP_ARROW = "-->"


def parse_timestamp(value: str) -> float:
    """
    캡션 타임스탬프 문자열을 초 단위로 변환합니다.

    지원 형식:
    - HH:MM:SS.mmm
    - MM:SS.mmm
    - 쉼표 소수점(SRT 스타일 "00:00:01,500")도 허용

    파싱할 수 없는 구성요소는 0초로 취급합니다.

    파라미터:
        value: 타임스탬프 문자열

    반환값:
        float: 초 단위 시각
    """
    parts = value.strip().replace(",", ".").split(":")

    if len(parts) == 3:
        hours, minutes, seconds = parts
    elif len(parts) == 2:
        hours = "0"
        minutes, seconds = parts
    else:
        logger.warning(f"타임스탬프 형식 오류, 0초로 처리: '{value}'")
        return 0.0

    return (
        _parse_component(hours, value) * 3600
        + _parse_component(minutes, value) * 60
        + _parse_component(seconds, value)
    )


def _parse_component(component: str, source: str) -> float:
    """타임스탬프 구성요소 하나를 float로 변환합니다. 실패 시 0.0"""
    try:
        number = float(component)
    except ValueError:
        logger.warning(f"타임스탬프 구성요소 파싱 실패, 0으로 처리: '{component}' (원본: '{source}')")
        return 0.0

    if math.isnan(number) or math.isinf(number):
        logger.warning(f"타임스탬프 구성요소가 유한수가 아님, 0으로 처리: '{component}'")
        return 0.0
    return number


def _parse_timing_line(line: str) -> tuple[float, float]:
    """
    "start --> end [cue settings]" 줄에서 시작/종료 시각을 추출합니다.

    종료 시각 뒤에 붙는 WebVTT 큐 설정(align:start 등)은 무시합니다.
    """
    start_raw, _, end_raw = line.partition(TIMESTAMP_ARROW)
    end_tokens = end_raw.split()
    end_value = end_tokens[0] if end_tokens else ""
    return parse_timestamp(start_raw), parse_timestamp(end_value)


def segment_captions(payload: str, config: Optional[CaptionConfig] = None) -> list[Segment]:
    """
    캡션 페이로드를 Segment 목록으로 변환합니다.

    처리 규칙:
    - "-->"를 포함한 줄은 타임스탬프 줄
    - 타임스탬프 뒤 처음 나오는 비어있지 않은 줄(헤더 토큰 제외)이 큐 텍스트
    - 큐 텍스트 이후 다음 타임스탬프 전까지의 줄은 무시 (멀티라인 큐 미지원)
    - 타임스탬프 앞에 오는 줄(헤더, 큐 식별자, NOTE 등)은 무시
    - 텍스트가 없는 큐는 건너뜀
    - start >= end 인 큐는 경고 후 제거 (drop_invalid_segments=True일 때)

    파라미터:
        payload: 캡션 파일 원문
        config: 캡션 설정 (None이면 기본값)

    반환값:
        list[Segment]: 시간 순서(파일 순서)의 세그먼트 목록
    """
    settings = config or CaptionConfig()
    segments: list[Segment] = []
    pending_timing: Optional[tuple[float, float]] = None
    skipped_empty = 0

    for line_number, raw_line in enumerate(payload.splitlines(), start=1):
        line = raw_line.strip()

        if TIMESTAMP_ARROW in line:
            if pending_timing is not None:
                skipped_empty += 1
            pending_timing = _parse_timing_line(line)
            continue

        if not line or line == settings.header_token or pending_timing is None:
            continue

        start_time, end_time = pending_timing
        pending_timing = None

        if settings.drop_invalid_segments and not start_time < end_time:
            logger.warning(
                f"잘못된 큐 타이밍으로 세그먼트 제거: line={line_number}, "
                f"start={start_time:.3f}, end={end_time:.3f}, text='{line[:30]}'"
            )
            continue

        segments.append(Segment(text=line, start_time=start_time, end_time=end_time))

    if pending_timing is not None:
        skipped_empty += 1

    if skipped_empty:
        logger.debug(f"텍스트 없는 큐 {skipped_empty}개 건너뜀")

    logger.info(f"캡션 세그먼트 파싱 완료: {len(segments)}개")
    return segments
