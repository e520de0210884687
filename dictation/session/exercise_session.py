"""
받아쓰기 연습 세션 컨트롤러 모듈입니다.

역할:
- 명시적 상태 머신으로 연습 진행 관리
    idle -> playing -> waiting_for_input -> navigating -> ... -> completed
- 문장별 SentenceResult 목록 관리 (미시도 문장은 None)
- 현재/최대 힌트 레벨 추적 (힌트 감점은 연습 전체에 한 번 적용)
- 주입 가능한 clock으로 경과 시간 측정
- 입력창 실시간 움라우트 치환, 실시간 피드백, 리포트 요청 위임

오디오 재생은 외부 협력자 몫입니다. play_current()가 반환한 Segment의
start_time/end_time 구간을 재생한 뒤 on_playback_ended()를 호출해야 합니다.

사용 예시:
    >>> session = ExerciseSession(segments)
    >>> segment = session.start()
    >>> session.on_playback_ended()
    >>> session.submit("Berlin ist schön")
    >>> report = session.report()
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from enum import Enum
from typing import Callable, Optional, Sequence, Union

from dictation.captions import Segment
from dictation.config.schema import AppConfig
from dictation.logging.structured_logger import bind_context
from dictation.matching import HintLevel
from dictation.matching.char_diff import FeedbackToken, build_live_feedback
from dictation.scoring import DictationReport, SentenceResult
from dictation.scoring.scorer import compute_report
from dictation.text.normalizer import apply_umlaut_substitutions

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """연습 세션 상태입니다."""
    IDLE = "idle"
    PLAYING = "playing"
    WAITING_FOR_INPUT = "waiting_for_input"
    NAVIGATING = "navigating"
    COMPLETED = "completed"


class SessionStateError(RuntimeError):
    """현재 상태에서 허용되지 않는 세션 동작을 요청했을 때 발생합니다."""
    pass


# 문장 진행 중(시작 이후, 완료 이전) 상태
_ACTIVE_STATES = frozenset({
    SessionState.PLAYING,
    SessionState.WAITING_FOR_INPUT,
    SessionState.NAVIGATING,
})


class ExerciseSession:
    """
    받아쓰기 연습 한 회차를 관리하는 컨트롤러입니다.

    엔진 함수(정렬/점수)는 모두 순수 함수이며, 변경 가능한 상태는 이 클래스만 가집니다.

    로그 컨텍스트(state, sentence_index)는 프로세스 전역이므로 마지막으로 상태가 바뀐
    세션의 값이 남습니다. 레코드마다 exercise_id가 함께 붙어 어느 세션의 값인지 구분됩니다.
    """

    def __init__(
        self,
        segments: Sequence[Segment],
        config: Optional[AppConfig] = None,
        check_capitalization: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config or AppConfig()
        self._segments: tuple[Segment, ...] = tuple(segments)
        self._check_capitalization = check_capitalization
        self._clock = clock
        self._exercise_id = uuid.uuid4().hex[:8]

        self._lock = threading.RLock()
        self._state = SessionState.IDLE
        self._current_index = 0
        self._results: list[Optional[SentenceResult]] = [None] * len(self._segments)
        self._hint_level = HintLevel(self._config.hints.default_level)
        self._max_hint_level_used = self._hint_level
        self._started_at: Optional[float] = None
        self._finished_at: Optional[float] = None

        logger.info(
            f"ExerciseSession 초기화: exercise_id={self._exercise_id}, sentences={len(self._segments)}, "
            f"check_capitalization={check_capitalization}, hint_level={int(self._hint_level)}"
        )

    # =========================================================================
    # 상태 조회
    # =========================================================================

    @property
    def exercise_id(self) -> str:
        """로그 컨텍스트에 붙는 세션별 짧은 식별자입니다."""
        return self._exercise_id

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def segments(self) -> tuple[Segment, ...]:
        return self._segments

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def current_segment(self) -> Optional[Segment]:
        """현재 문장 세그먼트입니다. 세그먼트가 없으면 None"""
        if not self._segments:
            return None
        return self._segments[self._current_index]

    @property
    def results(self) -> tuple[Optional[SentenceResult], ...]:
        with self._lock:
            return tuple(self._results)

    @property
    def hint_level(self) -> HintLevel:
        return self._hint_level

    @property
    def max_hint_level_used(self) -> HintLevel:
        return self._max_hint_level_used

    @property
    def check_capitalization(self) -> bool:
        return self._check_capitalization

    @property
    def elapsed_seconds(self) -> float:
        """시작 이후 경과 시간(초)입니다. 시작 전이면 0.0, 완료 후에는 고정됩니다."""
        with self._lock:
            if self._started_at is None:
                return 0.0
            end = self._finished_at if self._finished_at is not None else self._clock()
            return max(0.0, end - self._started_at)

    # =========================================================================
    # 내부 헬퍼
    # =========================================================================

    def _transition(self, new_state: SessionState) -> None:
        if new_state is not self._state:
            logger.debug(f"세션 상태 전이: {self._state.value} -> {new_state.value}")
        self._state = new_state
        bind_context(exercise_id=self._exercise_id, state=new_state.value, sentence_index=self._current_index)

    def _require(self, allowed: frozenset[SessionState] | set[SessionState], action: str) -> None:
        if self._state not in allowed:
            raise SessionStateError(
                f"'{action}'은(는) {self._state.value} 상태에서 허용되지 않습니다."
            )

    def _record(self, text: str) -> SentenceResult:
        segment = self._segments[self._current_index]
        result = SentenceResult.evaluate(segment.text, text, self._check_capitalization)
        self._results[self._current_index] = result
        logger.debug(
            f"문장 결과 저장: index={self._current_index}, correct={result.is_correct}"
        )
        return result

    def _complete(self) -> None:
        self._finished_at = self._clock()
        self._transition(SessionState.COMPLETED)
        attempted = sum(1 for result in self._results if result is not None)
        logger.info(
            f"연습 완료: attempted={attempted}/{len(self._segments)}, "
            f"elapsed={self.elapsed_seconds:.1f}s"
        )

    def _advance(self) -> None:
        if self._current_index >= len(self._segments) - 1:
            self._complete()
            return
        self._current_index += 1
        self._transition(SessionState.NAVIGATING)

    # =========================================================================
    # 진행 제어
    # =========================================================================

    def start(self) -> Segment:
        """
        연습을 시작하고 첫 문장 재생 상태로 전환합니다.

        반환값:
            Segment: 재생할 첫 문장

        예외:
            SessionStateError: idle 상태가 아니거나 세그먼트가 없는 경우
        """
        with self._lock:
            self._require({SessionState.IDLE}, "start")
            if not self._segments:
                raise SessionStateError("세그먼트가 없어 연습을 시작할 수 없습니다.")

            self._results = [None] * len(self._segments)
            self._current_index = 0
            self._max_hint_level_used = self._hint_level
            self._started_at = self._clock()
            self._finished_at = None
            self._transition(SessionState.PLAYING)
            logger.info(f"연습 시작: sentences={len(self._segments)}")
            return self._segments[0]

    def play_current(self) -> Segment:
        """현재 문장을 (다시) 재생 상태로 전환하고 재생할 Segment를 반환합니다."""
        with self._lock:
            self._require(_ACTIVE_STATES, "play_current")
            self._transition(SessionState.PLAYING)
            return self._segments[self._current_index]

    def on_playback_ended(self) -> None:
        """오디오 협력자가 문장 재생 종료를 알릴 때 호출합니다."""
        with self._lock:
            self._require({SessionState.PLAYING}, "on_playback_ended")
            self._transition(SessionState.WAITING_FOR_INPUT)

    def submit(self, text: str) -> SentenceResult:
        """
        현재 문장에 대한 입력을 제출합니다.

        빈 입력도 "빈 입력으로 시도한 문장"으로 기록됩니다.
        마지막 문장이면 연습이 완료되고, 아니면 다음 문장으로 이동(navigating)합니다.

        반환값:
            SentenceResult: 저장된 문장 결과

        예외:
            SessionStateError: playing/waiting_for_input 상태가 아닌 경우
        """
        with self._lock:
            self._require({SessionState.PLAYING, SessionState.WAITING_FOR_INPUT}, "submit")
            result = self._record(text)
            self._advance()
            return result

    def next_sentence(self, pending_input: str = "") -> None:
        """
        다음 문장으로 건너뜁니다.

        pending_input이 비어있지 않으면 현재 문장 결과로 먼저 기록하고,
        비어있으면 현재 문장은 미시도(None)로 남습니다. 마지막 문장에서 호출하면 연습이 완료됩니다.
        """
        with self._lock:
            self._require(_ACTIVE_STATES, "next_sentence")
            if pending_input.strip():
                self._record(pending_input)
            self._advance()

    def previous_sentence(self, pending_input: str = "") -> None:
        """
        이전 문장으로 돌아갑니다.

        예외:
            ValueError: 첫 문장에서 호출한 경우
            SessionStateError: 진행 중 상태가 아닌 경우
        """
        with self._lock:
            self._require(_ACTIVE_STATES, "previous_sentence")
            if self._current_index == 0:
                raise ValueError("첫 문장에서는 이전 문장으로 이동할 수 없습니다.")
            if pending_input.strip():
                self._record(pending_input)
            self._current_index -= 1
            self._transition(SessionState.NAVIGATING)

    def set_hint_level(self, level: Union[HintLevel, int]) -> None:
        """
        힌트 레벨을 변경합니다. 진행 중에 올린 레벨은 최대 사용 레벨로 누적됩니다.

        예외:
            ValueError: 힌트 레벨이 0~2 범위를 벗어난 경우
            SessionStateError: 완료된 세션인 경우
        """
        try:
            new_level = HintLevel(level)
        except ValueError:
            raise ValueError(f"힌트 레벨은 0~2 범위여야 합니다. 입력값: {level}") from None

        with self._lock:
            if self._state is SessionState.COMPLETED:
                raise SessionStateError("완료된 연습의 힌트 레벨은 변경할 수 없습니다.")
            self._hint_level = new_level
            if self._state is SessionState.IDLE:
                self._max_hint_level_used = new_level
            else:
                self._max_hint_level_used = max(self._max_hint_level_used, new_level)
            logger.info(
                f"힌트 레벨 변경: current={int(new_level)}, max={int(self._max_hint_level_used)}"
            )

    def cancel(self, pending_input: str = "") -> DictationReport:
        """
        연습을 중단하고 지금까지의 결과로 리포트를 만듭니다.

        입력 중이던 문장이 있으면 결과로 기록한 뒤 완료 상태로 전환합니다.
        """
        with self._lock:
            self._require(_ACTIVE_STATES, "cancel")
            if pending_input.strip():
                self._record(pending_input)
            logger.info(f"연습 중단 요청: index={self._current_index}")
            self._complete()
            return self.report()

    def restart(self) -> None:
        """결과와 타이머를 모두 초기화하고 idle 상태로 돌아갑니다."""
        with self._lock:
            self._results = [None] * len(self._segments)
            self._current_index = 0
            self._max_hint_level_used = self._hint_level
            self._started_at = None
            self._finished_at = None
            self._transition(SessionState.IDLE)
            logger.info("연습 재시작: 결과 초기화 완료")

    # =========================================================================
    # 입력 보조 / 리포트
    # =========================================================================

    def transform_input(self, raw_text: str) -> str:
        """입력창 원문에 움라우트 실시간 치환을 적용합니다."""
        return apply_umlaut_substitutions(raw_text)

    def live_feedback(self, text: str) -> list[FeedbackToken]:
        """
        현재 문장에 대한 실시간 피드백 토큰을 반환합니다.

        예외:
            SessionStateError: 진행 중 상태가 아닌 경우
        """
        with self._lock:
            self._require(_ACTIVE_STATES, "live_feedback")
            segment = self._segments[self._current_index]
            hint_level = self._hint_level

        return build_live_feedback(
            segment.text,
            text,
            check_capitalization=self._check_capitalization,
            hint_level=hint_level,
            config=self._config.matching,
        )

    def report(self) -> DictationReport:
        """
        현재까지의 결과로 DictationReport를 계산합니다.

        어떤 상태에서도 호출할 수 있으며, 미시도 문장은 None으로 전달됩니다.
        """
        with self._lock:
            results = list(self._results)
            elapsed = self.elapsed_seconds
            max_hint = self._max_hint_level_used

        return compute_report(
            self._segments,
            results,
            elapsed_seconds=elapsed,
            max_hint_level_used=max_hint,
            check_capitalization=self._check_capitalization,
            scoring_config=self._config.scoring,
            matching_config=self._config.matching,
            include_error_rates=self._config.report.include_error_rates,
        )
