"""
채점 CLI (dictation.cli) 단위 테스트

검증 조건:
- 캡션 + 답안 파일 재생 후 JSON 리포트 저장 및 요약 출력
- 빈 답안 줄은 건너뛴 문장으로 처리
- 설정/입력 오류 시 종료 코드 1
"""

from __future__ import annotations

import json
import logging

import pytest

from dictation.cli import _ReplayClock, main, replay_answers
from dictation.captions import Segment
from dictation.session import ExerciseSession, SessionState

CAPTIONS = """WEBVTT

00:00:01.000 --> 00:00:03.000
Berlin ist schön.

00:00:04.000 --> 00:00:06.000
Es ist kalt.
"""


@pytest.fixture(autouse=True)
def reset_root_logger(tmp_path, monkeypatch):
    """로그/리포트가 tmp_path에 쓰이도록 작업 디렉토리 변경, 테스트 후 핸들러 정리."""
    monkeypatch.chdir(tmp_path)
    yield
    root = logging.getLogger()
    for h in root.handlers[:]:
        root.removeHandler(h)
        h.close()


@pytest.fixture
def inputs(tmp_path):
    captions = tmp_path / "lesson.vtt"
    captions.write_text(CAPTIONS, encoding="utf-8")
    answers = tmp_path / "answers.txt"
    answers.write_text("Berlin ist schön\n\n", encoding="utf-8")
    return captions, answers


class TestMain:
    def test_scores_answers(self, inputs, tmp_path, capsys):
        captions, answers = inputs
        output = tmp_path / "report.json"
        code = main([
            "--captions", str(captions),
            "--answers", str(answers),
            "--elapsed", "6",
            "--output", str(output),
        ])

        assert code == 0
        data = json.loads(output.read_text(encoding="utf-8"))
        # 3단어 / 0.1분 = 30 wpm -> 속도 계수 2.5 로 상한 100
        assert data["score"] == 100
        assert data["attempted_sentences"] == 1
        assert data["total_sentences"] == 2
        assert data["completion"] == pytest.approx(50.0)
        assert "Score: 100" in capsys.readouterr().out

    def test_summary_file(self, inputs, tmp_path):
        captions, answers = inputs
        summary = tmp_path / "summary.txt"
        code = main([
            "--captions", str(captions),
            "--answers", str(answers),
            "--elapsed", "6",
            "--output", str(tmp_path / "report.json"),
            "--summary", str(summary),
        ])
        assert code == 0
        assert summary.read_text(encoding="utf-8").startswith("Dictation Results")

    def test_hint_level_override(self, inputs, tmp_path):
        captions, answers = inputs
        output = tmp_path / "report.json"
        main([
            "--captions", str(captions),
            "--answers", str(answers),
            "--elapsed", "6",
            "--hint-level", "1",
            "--output", str(output),
        ])
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["max_hint_level_used"] == 1
        assert data["score"] == 100

    def test_missing_config_file(self, inputs, tmp_path, capsys):
        captions, answers = inputs
        code = main([
            "--config", str(tmp_path / "missing.yaml"),
            "--captions", str(captions),
            "--answers", str(answers),
        ])
        assert code == 1
        assert "설정 로드 실패" in capsys.readouterr().err

    def test_missing_answers_file(self, inputs, tmp_path):
        captions, _ = inputs
        code = main(["--captions", str(captions), "--answers", str(tmp_path / "none.txt")])
        assert code == 1

    def test_captions_without_cues(self, inputs, tmp_path):
        _, answers = inputs
        empty = tmp_path / "empty.vtt"
        empty.write_text("WEBVTT\n", encoding="utf-8")
        assert main(["--captions", str(empty), "--answers", str(answers)]) == 1


class TestReplayAnswers:
    SEGMENTS = [
        Segment("Berlin ist schön.", 1.0, 3.0),
        Segment("Es ist kalt.", 4.0, 6.0),
    ]

    def test_all_answers_complete_session(self):
        clock = _ReplayClock()
        session = ExerciseSession(self.SEGMENTS, clock=clock)
        report = replay_answers(session, ["Berlin ist schön", "Es ist kalt"], 12.0, clock)

        assert session.state is SessionState.COMPLETED
        assert report.correct_sentences == 2
        assert report.elapsed_seconds == pytest.approx(12.0)

    def test_extra_answers_ignored(self, caplog):
        clock = _ReplayClock()
        session = ExerciseSession(self.SEGMENTS, clock=clock)
        with caplog.at_level(logging.WARNING):
            report = replay_answers(session, ["a", "b", "c"], 12.0, clock)
        assert report.attempted_sentences == 2
        assert "나머지 답안을 무시" in caplog.text

    def test_fewer_answers_cancel(self):
        clock = _ReplayClock()
        session = ExerciseSession(self.SEGMENTS, clock=clock)
        report = replay_answers(session, ["Berlin ist schön"], 6.0, clock)
        assert session.state is SessionState.COMPLETED
        assert report.attempted_sentences == 1
        assert session.results[1] is None


class TestEntryPoints:
    def test_root_launcher_uses_package_cli(self):
        import main as launcher
        assert launcher.main is main

    def test_console_script_target(self):
        from pathlib import Path
        pyproject = Path(__file__).resolve().parents[2] / "pyproject.toml"
        assert 'dictation-score = "dictation.cli:main"' in pyproject.read_text(encoding="utf-8")
