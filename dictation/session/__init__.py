"""
연습 세션 모듈 패키지

ExerciseSession 상태 머신과 상태 오류 타입을 제공합니다.
"""

from dictation.session.exercise_session import ExerciseSession, SessionState, SessionStateError

__all__ = ["ExerciseSession", "SessionState", "SessionStateError"]
