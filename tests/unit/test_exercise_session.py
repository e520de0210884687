"""
ExerciseSession 단위 테스트

검증 조건:
- 상태 전이: idle -> playing -> waiting_for_input -> navigating -> ... -> completed
- 허용되지 않는 상태에서의 동작은 SessionStateError
- 건너뛴 문장은 None으로 남고, 빈 입력 제출은 시도한 문장으로 기록
- 최대 힌트 레벨 누적 (idle에서는 초기화)
- 완료 후 경과 시간 고정, cancel / restart 동작
"""

from __future__ import annotations

import pytest

from dictation.captions import Segment
from dictation.config.schema import AppConfig
from dictation.logging.structured_logger import clear_context, get_context
from dictation.matching import HintLevel
from dictation.matching.char_diff import FeedbackKind
from dictation.session import ExerciseSession, SessionState, SessionStateError


class FakeClock:
    """테스트용 수동 시계"""

    def __init__(self, now: float = 100.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


SEGMENTS = [
    Segment("Berlin ist schön.", 0.0, 2.0),
    Segment("Es ist kalt.", 2.5, 4.0),
    Segment("Der Hund bellt.", 4.5, 6.0),
]


@pytest.fixture(autouse=True)
def reset_log_context():
    clear_context()
    yield
    clear_context()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session(clock):
    return ExerciseSession(SEGMENTS, clock=clock)


def _play_and_wait(session: ExerciseSession) -> None:
    if session.state is SessionState.NAVIGATING:
        session.play_current()
    session.on_playback_ended()


# =========================================================================
# 상태 전이 테스트
# =========================================================================

class TestStateTransitions:
    def test_initial_state(self, session):
        assert session.state is SessionState.IDLE
        assert session.current_index == 0
        assert session.results == (None, None, None)
        assert session.elapsed_seconds == 0.0

    def test_start_returns_first_segment(self, session):
        segment = session.start()
        assert segment == SEGMENTS[0]
        assert session.state is SessionState.PLAYING

    def test_start_twice_raises(self, session):
        session.start()
        with pytest.raises(SessionStateError):
            session.start()

    def test_start_without_segments(self, clock):
        with pytest.raises(SessionStateError):
            ExerciseSession([], clock=clock).start()

    def test_playback_ended(self, session):
        session.start()
        session.on_playback_ended()
        assert session.state is SessionState.WAITING_FOR_INPUT

    def test_playback_ended_requires_playing(self, session):
        session.start()
        session.on_playback_ended()
        with pytest.raises(SessionStateError):
            session.on_playback_ended()

    def test_submit_moves_to_next_sentence(self, session):
        session.start()
        session.on_playback_ended()
        result = session.submit("Berlin ist schoen")

        assert result.is_correct is True
        assert session.state is SessionState.NAVIGATING
        assert session.current_index == 1
        assert session.current_segment == SEGMENTS[1]

    def test_submit_while_playing_allowed(self, session):
        session.start()
        session.submit("Berlin ist schön")
        assert session.current_index == 1

    def test_submit_while_navigating_raises(self, session):
        session.start()
        session.submit("Berlin ist schön")
        with pytest.raises(SessionStateError):
            session.submit("Es ist kalt")

    def test_replay_current(self, session):
        session.start()
        session.on_playback_ended()
        assert session.play_current() == SEGMENTS[0]
        assert session.state is SessionState.PLAYING

    def test_full_run_completes(self, session, clock):
        session.start()
        for text in ("Berlin ist schön", "Es ist kalt", "Der Hund bellt"):
            _play_and_wait(session)
            clock.advance(5.0)
            session.submit(text)

        assert session.state is SessionState.COMPLETED
        assert all(result.is_correct for result in session.results)
        assert session.elapsed_seconds == pytest.approx(15.0)

    def test_actions_after_completion_raise(self, session):
        session.start()
        for text in ("a", "b", "c"):
            _play_and_wait(session)
            session.submit(text)
        with pytest.raises(SessionStateError):
            session.play_current()
        with pytest.raises(SessionStateError):
            session.next_sentence()

    def test_log_context_follows_state(self, session):
        session.start()
        assert get_context()["state"] == "playing"
        session.submit("Berlin ist schön")
        assert get_context() == {
            "exercise_id": session.exercise_id,
            "state": "navigating",
            "sentence_index": 1,
        }

    def test_log_context_identifies_session(self):
        segments = [Segment("Es ist kalt.", 0.0, 2.0)]
        first = ExerciseSession(segments)
        second = ExerciseSession(segments)
        assert first.exercise_id != second.exercise_id

        first.start()
        assert get_context()["exercise_id"] == first.exercise_id
        second.start()
        second.on_playback_ended()
        assert get_context()["exercise_id"] == second.exercise_id
        assert get_context()["state"] == "waiting_for_input"


# =========================================================================
# 문장 이동 테스트
# =========================================================================

class TestNavigation:
    def test_skip_leaves_none(self, session):
        session.start()
        session.next_sentence()
        assert session.results[0] is None
        assert session.current_index == 1

    def test_skip_with_pending_input_records(self, session):
        session.start()
        session.next_sentence("Berlin ist")
        assert session.results[0].actual == "Berlin ist"
        assert session.results[0].is_correct is False

    def test_empty_submit_is_attempted(self, session):
        session.start()
        session.on_playback_ended()
        result = session.submit("")
        assert session.results[0] is result
        assert result.actual == ""

    def test_skip_last_sentence_completes(self, session):
        session.start()
        session.next_sentence()
        session.next_sentence()
        session.next_sentence()
        assert session.state is SessionState.COMPLETED
        assert session.results == (None, None, None)

    def test_previous_sentence(self, session):
        session.start()
        session.submit("Berlin ist schön")
        session.previous_sentence()
        assert session.current_index == 0
        assert session.state is SessionState.NAVIGATING

    def test_previous_at_first_sentence_raises(self, session):
        session.start()
        with pytest.raises(ValueError):
            session.previous_sentence()

    def test_resubmit_overwrites_result(self, session):
        session.start()
        session.submit("Berlin ist")
        session.previous_sentence()
        session.play_current()
        session.submit("Berlin ist schön")
        assert session.results[0].is_correct is True


# =========================================================================
# 힌트 레벨 테스트
# =========================================================================

class TestHintLevel:
    def test_default_from_config(self, clock):
        config = AppConfig(hints={"default_level": 1})
        session = ExerciseSession(SEGMENTS, config=config, clock=clock)
        assert session.hint_level is HintLevel.FIRST_LETTER
        assert session.max_hint_level_used is HintLevel.FIRST_LETTER

    def test_idle_change_resets_max(self, session):
        session.set_hint_level(2)
        session.set_hint_level(0)
        assert session.max_hint_level_used is HintLevel.OFF

    def test_max_level_is_sticky_while_running(self, session):
        session.start()
        session.set_hint_level(2)
        session.set_hint_level(0)
        assert session.hint_level is HintLevel.OFF
        assert session.max_hint_level_used is HintLevel.PARTIAL_LETTERS

    def test_invalid_level(self, session):
        with pytest.raises(ValueError):
            session.set_hint_level(3)

    def test_completed_session_rejects_change(self, session):
        session.start()
        session.cancel()
        with pytest.raises(SessionStateError):
            session.set_hint_level(1)

    def test_report_uses_max_level(self, session, clock):
        session.start()
        session.set_hint_level(1)
        session.set_hint_level(0)
        clock.advance(18.0)
        session.submit("Berlin st schön")
        report = session.cancel()
        assert report.max_hint_level_used == 1
        assert report.hint_corrected_words == 1


# =========================================================================
# 경과 시간 / 중단 / 재시작 테스트
# =========================================================================

class TestLifecycle:
    def test_elapsed_runs_while_active(self, session, clock):
        session.start()
        clock.advance(12.5)
        assert session.elapsed_seconds == pytest.approx(12.5)

    def test_elapsed_frozen_after_completion(self, session, clock):
        session.start()
        clock.advance(10.0)
        session.cancel()
        clock.advance(50.0)
        assert session.elapsed_seconds == pytest.approx(10.0)

    def test_cancel_returns_partial_report(self, session, clock):
        session.start()
        clock.advance(30.0)
        session.submit("Berlin ist schon")
        report = session.cancel("ist kalt")

        assert session.state is SessionState.COMPLETED
        assert report.attempted_sentences == 2
        assert report.total_sentences == 3
        assert report.score == 80

    def test_cancel_in_idle_raises(self, session):
        with pytest.raises(SessionStateError):
            session.cancel()

    def test_restart_clears_everything(self, session, clock):
        session.start()
        session.submit("Berlin ist schön")
        session.set_hint_level(2)
        session.set_hint_level(0)
        session.restart()

        assert session.state is SessionState.IDLE
        assert session.results == (None, None, None)
        assert session.current_index == 0
        assert session.elapsed_seconds == 0.0
        assert session.max_hint_level_used is HintLevel.OFF

    def test_restart_after_completion(self, session):
        session.start()
        session.cancel()
        session.restart()
        assert session.start() == SEGMENTS[0]

    def test_report_before_start(self, session):
        report = session.report()
        assert report.score == 0
        assert report.attempted_sentences == 0


# =========================================================================
# 입력 보조 테스트
# =========================================================================

class TestInputHelpers:
    def test_transform_input(self, session):
        assert session.transform_input("schoen") == "schön"
        assert session.transform_input("Stras/e") == "Straße"

    def test_live_feedback(self, session):
        session.start()
        tokens = session.live_feedback("Berlin ist")
        kinds = [token.kind for token in tokens if token.kind is not FeedbackKind.SPACE]
        assert kinds == [FeedbackKind.CORRECT, FeedbackKind.CORRECT, FeedbackKind.MISSING]

    def test_live_feedback_uses_hint_level(self, session):
        session.start()
        session.set_hint_level(1)
        tokens = session.live_feedback("Berlin ist")
        assert tokens[-1].text == "s____"

    def test_live_feedback_outside_active_state(self, session):
        with pytest.raises(SessionStateError):
            session.live_feedback("Berlin")
