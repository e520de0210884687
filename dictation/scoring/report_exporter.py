"""
받아쓰기 리포트 내보내기 모듈입니다.

역할:
- DictationReport를 JSON 파일로 저장 (문장별 정렬 상세 포함)
- DictationReport를 사람이 읽는 TXT 요약 파일로 저장 ("Your Text / Correct Text" 비교)

사용 예시:
    >>> exporter = ReportExporter()
    >>> exporter.save_json(report, "output/reports/session.json")
    >>> exporter.save_text(report, "output/reports/session.txt")
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any, Optional

from dictation.scoring import DictationReport

logger = logging.getLogger(__name__)


def format_elapsed(seconds: float) -> str:
    """초를 "m:ss" 문자열로 변환합니다."""
    total = max(0, int(seconds))
    minutes, secs = divmod(total, 60)
    return f"{minutes}:{secs:02d}"


def report_to_dict(report: DictationReport) -> dict[str, Any]:
    """DictationReport를 JSON 직렬화 가능한 dict로 변환합니다."""
    return {
        "score": report.score,
        "accuracy": round(report.accuracy, 2),
        "completion": round(report.completion, 2),
        "words_per_minute": round(report.words_per_minute, 2),
        "speed_factor": round(report.speed_factor, 3),
        "max_hint_level_used": report.max_hint_level_used,
        "hint_multiplier": report.hint_multiplier,
        "elapsed_seconds": report.elapsed_seconds,
        "check_capitalization": report.check_capitalization,
        "total_words": report.total_words,
        "attempted_words": report.attempted_words,
        "user_words": report.user_words,
        "correct_words": report.correct_words,
        "substitutions": report.substitutions,
        "insertions": report.insertions,
        "deletions": report.deletions,
        "hint_corrected_words": report.hint_corrected_words,
        "mistakes": report.mistakes,
        "total_sentences": report.total_sentences,
        "attempted_sentences": report.attempted_sentences,
        "correct_sentences": report.correct_sentences,
        "wer": report.wer,
        "cer": report.cer,
        "sentences": [
            {
                "index": detail.index,
                "expected": detail.expected,
                "actual": detail.actual,
                "is_correct": detail.is_correct,
                "hint_corrected_words": detail.hint_corrected_words,
                "alignment": [
                    {
                        "op": pair.op.value,
                        "reference": pair.reference_word,
                        "user": pair.user_word,
                        "similarity": round(pair.similarity, 4),
                    }
                    for pair in detail.pairs
                ],
            }
            for detail in report.sentence_details
        ],
    }


class ReportExporter:
    """
    DictationReport를 JSON/TXT 파일로 저장하는 클래스입니다.

    파일 저장 실패 시 OSError를 로그에 남기고 상위로 전파합니다.
    """

    def __init__(self, output_dir: str | Path = "output/reports") -> None:
        self._output_dir = Path(output_dir)

    def _resolve_path(self, filepath: Optional[str | Path], suffix: str) -> Path:
        if filepath is None:
            path = self._output_dir / f"dictation_{int(time.time())}{suffix}"
        else:
            path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

    def save_json(self, report: DictationReport, filepath: Optional[str | Path] = None) -> Path:
        """
        리포트를 JSON 파일로 저장합니다.

        파라미터:
            report: 저장할 리포트
            filepath: 저장 경로. None이면 output_dir에 자동 생성

        반환값:
            Path: 저장된 파일 경로
        """
        path = self._resolve_path(filepath, ".json")
        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(report_to_dict(report), f, ensure_ascii=False, indent=2)
        except OSError as exc:
            logger.error(f"JSON 리포트 저장 실패: {path}, 오류: {exc}")
            raise

        logger.info(f"JSON 리포트 저장: {path}")
        return path

    def save_text(self, report: DictationReport, filepath: Optional[str | Path] = None) -> Path:
        """
        리포트를 TXT 요약 파일로 저장합니다.

        통계 요약 뒤에 시도한 문장의 사용자 입력과 정답을 나란히 기록합니다.
        """
        path = self._resolve_path(filepath, ".txt")

        lines = [
            "Dictation Results",
            "=================",
            f"Score:       {report.score}",
            f"Completion:  {report.completion:.0f}% ({report.attempted_words} / {report.total_words} words)",
            f"Accuracy:    {report.accuracy:.0f}% ({report.correct_words} correct words)",
            f"Mistakes:    {report.mistakes} / {report.user_words}",
            f"Time:        {format_elapsed(report.elapsed_seconds)} ({report.words_per_minute:.1f} words/min)",
            f"Hint level:  {report.max_hint_level_used} (x{report.hint_multiplier})",
            f"Sentences:   {report.attempted_sentences} / {report.total_sentences} "
            f"({report.correct_sentences} correct)",
        ]
        if report.wer is not None and report.cer is not None:
            lines.append(f"WER / CER:   {report.wer:.3f} / {report.cer:.3f}")

        lines.extend(["", "Your Text", "---------"])
        lines.append(" ".join(detail.actual for detail in report.sentence_details if detail.actual))
        lines.extend(["", "Correct Text", "------------"])
        lines.append(" ".join(detail.expected for detail in report.sentence_details))

        try:
            path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        except OSError as exc:
            logger.error(f"TXT 리포트 저장 실패: {path}, 오류: {exc}")
            raise

        logger.info(f"TXT 리포트 저장: {path}")
        return path
