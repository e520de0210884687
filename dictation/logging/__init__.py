"""
구조화 로깅 패키지

StructuredLogger와 연습 컨텍스트 바인딩 함수를 외부에서 임포트하기 위한 패키지 초기화입니다.
"""

from dictation.logging.structured_logger import (
    StructuredLogger,
    bind_context,
    clear_context,
    get_context,
    setup_logging,
)

__all__ = ["StructuredLogger", "bind_context", "clear_context", "get_context", "setup_logging"]
