"""
독일어 받아쓰기 채점 CLI

역할:
- 설정 로드 (config.yaml + DICT_ 환경변수 오버라이드) 및 구조화 로깅 설정
- 캡션 파일을 세그먼트로 분리
- 답안 파일(한 줄 = 한 문장, 빈 줄 = 건너뜀)을 ExerciseSession으로 재생
- 최종 점수 출력 및 JSON/TXT 리포트 저장

실행 예시:
    dictation-score --captions lesson.vtt --answers answers.txt --elapsed 95
    python -m dictation --captions lesson.vtt --answers answers.txt --elapsed 95 \\
        --hint-level 1 --check-capitalization --output output/reports/lesson.json
"""

from __future__ import annotations

import argparse
import logging
import sys
import uuid
from pathlib import Path
from typing import Optional

from dictation.captions.caption_segmenter import segment_captions
from dictation.config.config_manager import ConfigLoadError, ConfigManager
from dictation.config.schema import AppConfig
from dictation.logging.structured_logger import setup_logging
from dictation.scoring import DictationReport
from dictation.scoring.report_exporter import ReportExporter
from dictation.session.exercise_session import ExerciseSession, SessionState

logger = logging.getLogger(__name__)


class _ReplayClock:
    """답안 재생용 시계입니다. 시작 시각 0, 이후에는 지정한 경과 시간을 반환합니다."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


# =============================================================================
# 답안 재생
# =============================================================================

def replay_answers(
    session: ExerciseSession,
    answers: list[str],
    elapsed_seconds: float,
    clock: _ReplayClock,
) -> DictationReport:
    """
    답안 목록을 세션에 순서대로 제출하고 리포트를 반환합니다.

    빈 답안은 건너뛴 문장으로 처리하며, 답안이 문장 수보다 적으면
    남은 문장을 미시도로 두고 연습을 중단합니다.
    """
    clock.now = 0.0
    session.start()
    clock.now = elapsed_seconds

    for answer in answers:
        if session.state is SessionState.COMPLETED:
            logger.warning(f"답안이 문장 수({len(session.segments)})보다 많아 나머지 답안을 무시합니다.")
            break
        if session.state is SessionState.NAVIGATING:
            session.play_current()
        if session.state is SessionState.PLAYING:
            session.on_playback_ended()

        if answer.strip():
            session.submit(answer)
        else:
            session.next_sentence()

    if session.state is not SessionState.COMPLETED:
        return session.cancel()
    return session.report()


# =============================================================================
# 진입점
# =============================================================================

def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """커맨드라인 인자를 파싱합니다."""
    parser = argparse.ArgumentParser(
        description="German Dictation: 받아쓰기 매칭 및 채점 엔진"
    )
    parser.add_argument(
        "--config", default=None, help="설정 파일 경로 (미지정 시 기본값 + 환경변수)"
    )
    parser.add_argument(
        "--captions", required=True, help="WebVTT 캡션 파일 경로"
    )
    parser.add_argument(
        "--answers", required=True, help="답안 파일 경로 (한 줄 = 한 문장, 빈 줄 = 건너뜀)"
    )
    parser.add_argument(
        "--elapsed", type=float, default=0.0, help="연습 경과 시간 (초)"
    )
    parser.add_argument(
        "--hint-level", type=int, choices=[0, 1, 2], default=None,
        help="힌트 레벨 (config.yaml 오버라이드)"
    )
    parser.add_argument(
        "--check-capitalization", action="store_true", help="대소문자 검사 활성화"
    )
    parser.add_argument(
        "--output", default=None, help="JSON 리포트 저장 경로 (미지정 시 report.output_dir)"
    )
    parser.add_argument(
        "--summary", default=None, help="TXT 요약 리포트 저장 경로 (선택)"
    )
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    """CLI 메인 함수입니다. 종료 코드를 반환합니다."""
    args = _parse_args(argv)

    manager = ConfigManager()
    try:
        config = manager.load(args.config) if args.config else manager.load_defaults()
    except ConfigLoadError as exc:
        print(f"설정 로드 실패: {exc}", file=sys.stderr)
        return 1

    if args.hint_level is not None:
        config_dict = config.model_dump()
        config_dict["hints"]["default_level"] = args.hint_level
        config = AppConfig(**config_dict)

    session_id = config.system.session_id or uuid.uuid4().hex[:8]
    setup_logging(config, session_id=session_id)
    logger.info(f"받아쓰기 채점 시작: session_id={session_id}, captions={args.captions}")

    try:
        payload = Path(args.captions).read_text(encoding="utf-8")
        answers = Path(args.answers).read_text(encoding="utf-8").splitlines()
    except OSError as exc:
        logger.error(f"입력 파일 읽기 실패: {exc}")
        return 1

    segments = segment_captions(payload, config.captions)
    if not segments:
        logger.error(f"캡션에서 문장을 찾지 못했습니다: {args.captions}")
        return 1

    clock = _ReplayClock()
    session = ExerciseSession(
        segments,
        config=config,
        check_capitalization=args.check_capitalization,
        clock=clock,
    )
    report = replay_answers(session, answers, args.elapsed, clock)

    exporter = ReportExporter(config.report.output_dir)
    json_path = exporter.save_json(report, args.output)
    if args.summary:
        exporter.save_text(report, args.summary)

    print(
        f"Score: {report.score} | Accuracy: {report.accuracy:.1f}% | "
        f"Completion: {report.completion:.1f}% | WPM: {report.words_per_minute:.1f} | "
        f"Report: {json_path}"
    )
    logger.info("받아쓰기 채점 종료")
    return 0


if __name__ == "__main__":
    sys.exit(main())
