"""
CaptionSegmenter 단위 테스트

검증 조건:
- WebVTT 페이로드를 순서가 있는 Segment 목록으로 변환
- [HH:]MM:SS.mmm 타임스탬프 파싱, 파싱 불가 구성요소는 0
- 텍스트 없는 큐는 건너뜀, start >= end 큐는 경고 후 제거
- 멀티라인 큐는 첫 줄만 사용
"""

from __future__ import annotations

import logging

import pytest

from dictation.captions import Segment
from dictation.captions.caption_segmenter import parse_timestamp, segment_captions
from dictation.config.schema import CaptionConfig


SAMPLE_VTT = """WEBVTT

00:00:01.000 --> 00:00:03.500
Berlin ist schön.

00:00:04.000 --> 00:00:06.250
Es ist kalt.
"""


# =========================================================================
# 타임스탬프 파싱 테스트
# =========================================================================

class TestParseTimestamp:
    def test_minutes_seconds(self):
        assert parse_timestamp("01:02.500") == pytest.approx(62.5)

    def test_hours_minutes_seconds(self):
        assert parse_timestamp("01:00:00.000") == pytest.approx(3600.0)

    def test_full_timestamp(self):
        assert parse_timestamp("00:01:05.250") == pytest.approx(65.25)

    def test_comma_decimal_separator(self):
        # SRT 스타일 쉼표 소수점
        assert parse_timestamp("00:00:01,500") == pytest.approx(1.5)

    def test_surrounding_whitespace(self):
        assert parse_timestamp("  00:00:02.000 ") == pytest.approx(2.0)

    def test_unparsable_component_is_zero(self, caplog):
        with caplog.at_level(logging.WARNING):
            value = parse_timestamp("00:xx:01.000")
        assert value == pytest.approx(1.0)
        assert "파싱 실패" in caplog.text

    def test_garbage_is_zero(self):
        assert parse_timestamp("garbage") == 0.0

    def test_too_many_parts_is_zero(self):
        assert parse_timestamp("1:2:3:4") == 0.0

    def test_empty_string_is_zero(self):
        assert parse_timestamp("") == 0.0

    def test_nan_component_is_zero(self):
        assert parse_timestamp("00:00:nan") == 0.0


# =========================================================================
# 세그먼트 분리 테스트
# =========================================================================

class TestSegmentCaptions:
    def test_basic_payload(self):
        segments = segment_captions(SAMPLE_VTT)
        assert segments == [
            Segment("Berlin ist schön.", 1.0, 3.5),
            Segment("Es ist kalt.", 4.0, 6.25),
        ]

    def test_segment_duration(self):
        segments = segment_captions(SAMPLE_VTT)
        assert segments[0].duration == pytest.approx(2.5)

    def test_segment_is_immutable(self):
        segment = segment_captions(SAMPLE_VTT)[0]
        with pytest.raises(Exception):
            segment.text = "changed"

    def test_empty_payload(self):
        assert segment_captions("") == []

    def test_header_only(self):
        assert segment_captions("WEBVTT\n\n") == []

    def test_cue_without_text_is_skipped(self):
        payload = (
            "WEBVTT\n\n"
            "00:00:01.000 --> 00:00:02.000\n\n"
            "00:00:03.000 --> 00:00:04.000\n"
            "Zweiter Satz.\n"
        )
        segments = segment_captions(payload)
        assert [segment.text for segment in segments] == ["Zweiter Satz."]
        assert segments[0].start_time == pytest.approx(3.0)

    def test_trailing_cue_without_text_is_skipped(self):
        payload = SAMPLE_VTT + "\n00:00:07.000 --> 00:00:08.000\n"
        assert len(segment_captions(payload)) == 2

    def test_multiline_cue_uses_first_line(self):
        payload = (
            "WEBVTT\n\n"
            "00:00:01.000 --> 00:00:02.000\n"
            "Erste Zeile\n"
            "Zweite Zeile\n"
        )
        segments = segment_captions(payload)
        assert len(segments) == 1
        assert segments[0].text == "Erste Zeile"

    def test_cue_identifier_is_ignored(self):
        payload = (
            "WEBVTT\n\n"
            "1\n"
            "00:00:01.000 --> 00:00:02.000\n"
            "Hallo Welt\n"
        )
        assert [segment.text for segment in segment_captions(payload)] == ["Hallo Welt"]

    def test_cue_settings_are_ignored(self):
        payload = "WEBVTT\n\n00:00:01.000 --> 00:00:02.000 align:start position:10%\nHallo\n"
        segments = segment_captions(payload)
        assert segments[0].end_time == pytest.approx(2.0)

    def test_short_timestamps(self):
        payload = "WEBVTT\n\n00:01.000 --> 00:02.500\nKurz\n"
        segments = segment_captions(payload)
        assert segments[0].start_time == pytest.approx(1.0)
        assert segments[0].end_time == pytest.approx(2.5)

    def test_crlf_line_endings(self):
        payload = SAMPLE_VTT.replace("\n", "\r\n")
        assert len(segment_captions(payload)) == 2

    def test_text_is_stripped(self):
        payload = "WEBVTT\n\n00:00:01.000 --> 00:00:02.000\n   Guten Morgen   \n"
        assert segment_captions(payload)[0].text == "Guten Morgen"

    def test_order_is_preserved(self):
        payload = (
            "WEBVTT\n\n"
            "00:00:05.000 --> 00:00:06.000\nB\n\n"
            "00:00:01.000 --> 00:00:02.000\nA\n"
        )
        assert [segment.text for segment in segment_captions(payload)] == ["B", "A"]


# =========================================================================
# 잘못된 타이밍 처리 테스트
# =========================================================================

class TestInvalidTiming:
    INVALID_VTT = (
        "WEBVTT\n\n"
        "00:00:05.000 --> 00:00:02.000\n"
        "Rückwärts\n\n"
        "00:00:03.000 --> 00:00:03.000\n"
        "Null Dauer\n\n"
        "00:00:06.000 --> 00:00:07.000\n"
        "Gültig\n"
    )

    def test_start_after_end_is_dropped(self):
        segments = segment_captions(self.INVALID_VTT)
        assert [segment.text for segment in segments] == ["Gültig"]

    def test_drop_logs_warning(self, caplog):
        with caplog.at_level(logging.WARNING):
            segment_captions(self.INVALID_VTT)
        assert caplog.text.count("세그먼트 제거") == 2

    def test_keep_invalid_when_configured(self):
        config = CaptionConfig(drop_invalid_segments=False)
        segments = segment_captions(self.INVALID_VTT, config)
        assert len(segments) == 3

    def test_malformed_timestamp_does_not_abort(self):
        payload = (
            "WEBVTT\n\n"
            "00:00:aa --> 00:00:02.000\n"
            "Kaputt\n\n"
            "00:00:03.000 --> 00:00:04.000\n"
            "Heil\n"
        )
        segments = segment_captions(payload)
        # 시작 시각이 0으로 처리되어 유효한 세그먼트가 됨
        assert segments[0] == Segment("Kaputt", 0.0, 2.0)
        assert segments[1].text == "Heil"

    def test_custom_header_token(self):
        payload = "CAPTIONS\n\n00:00:01.000 --> 00:00:02.000\nText\n"
        config = CaptionConfig(header_token="CAPTIONS")
        assert [segment.text for segment in segment_captions(payload, config)] == ["Text"]
