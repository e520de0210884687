"""
받아쓰기 엔진 로깅 설정

콘솔과 output/logs/app.log(순환, 10MB x 5) 두 곳으로 같은 레코드를 내보냅니다.
json 포맷은 python-json-logger로 한 줄 JSON을, text 포맷은 사람이 읽는 한 줄을 씁니다.
어느 포맷이든 session_id가 붙고, bind_context()로 묶은 연습 진행 상태
(state, sentence_index 등)가 레코드마다 따라갑니다.

    >>> setup_logging(config)
    >>> bind_context(state="playing", sentence_index=3)
    >>> StructuredLogger.get(__name__).info("문장 제출")
"""

from __future__ import annotations

import logging
import logging.handlers
import threading
import uuid
from pathlib import Path
from typing import Any, Optional

from pythonjsonlogger import jsonlogger

from dictation.config.schema import AppConfig

_SESSION_ID: str = ""

# 모든 로그 레코드에 첨부되는 연습 진행 컨텍스트
_CONTEXT: dict[str, Any] = {}
_CONTEXT_LOCK = threading.Lock()

_LOG_FILENAME = "app.log"
_MAX_LOG_BYTES = 10 * 1024 * 1024
_LOG_BACKUP_COUNT = 5

# 컨텍스트가 덮어쓸 수 없는 LogRecord 표준 속성
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


# =============================================================================
# 컨텍스트 관리
# =============================================================================

def bind_context(**fields: Any) -> None:
    """
    이후 모든 로그 레코드에 첨부할 컨텍스트 필드를 설정합니다.

    값이 None인 필드는 컨텍스트에서 제거됩니다.
    LogRecord 표준 속성 이름(name, msg 등)은 무시됩니다.
    """
    with _CONTEXT_LOCK:
        for key, value in fields.items():
            if key in _RESERVED_ATTRS:
                continue
            if value is None:
                _CONTEXT.pop(key, None)
            else:
                _CONTEXT[key] = value


def clear_context() -> None:
    """연습 진행 컨텍스트를 모두 제거합니다."""
    with _CONTEXT_LOCK:
        _CONTEXT.clear()


def get_context() -> dict[str, Any]:
    """현재 컨텍스트의 복사본을 반환합니다."""
    with _CONTEXT_LOCK:
        return dict(_CONTEXT)


class _ContextFilter(logging.Filter):
    """세션 ID와 연습 컨텍스트를 레코드 속성으로 주입하는 필터입니다."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = _SESSION_ID
        for key, value in get_context().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        record.context = get_context()
        return True


# =============================================================================
# 로깅 초기화
# =============================================================================

def setup_logging(config: AppConfig, session_id: Optional[str] = None) -> None:
    """
    root logger에 콘솔/파일 핸들러를 설치하고 세션 ID를 정합니다.

    재호출 시 기존 핸들러를 닫고 교체하므로 핸들러가 누적되지 않습니다.

    파라미터:
        config: system 섹션의 log_level, log_format, log_dir를 읽을 설정
        session_id: 세션 식별자. None이면 config.system.session_id 또는 UUID 사용
    """
    global _SESSION_ID

    _SESSION_ID = session_id or config.system.session_id or str(uuid.uuid4())
    clear_context()

    log_level = getattr(logging, config.system.log_level, logging.INFO)
    log_dir = Path(config.system.log_dir)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            filename=log_dir / _LOG_FILENAME,
            maxBytes=_MAX_LOG_BYTES,
            backupCount=_LOG_BACKUP_COUNT,
            encoding="utf-8",
        ))
    except OSError as exc:
        logging.warning(f"로그 파일 핸들러 생성 실패: {exc}")

    context_filter = _ContextFilter()
    for handler in handlers:
        handler.setLevel(log_level)
        handler.addFilter(context_filter)
        if config.system.log_format == "json":
            handler.setFormatter(_JsonFormatter(session_id=_SESSION_ID))
        else:
            handler.setFormatter(_TextFormatter(session_id=_SESSION_ID))
        root_logger.addHandler(handler)

    logging.getLogger(__name__).info(
        f"로깅 초기화: level={config.system.log_level}, "
        f"format={config.system.log_format}, session={_SESSION_ID}"
    )


# =============================================================================
# 포맷터
# =============================================================================

class _JsonFormatter(jsonlogger.JsonFormatter):
    """
    session_id, module, level 필드와 연습 컨텍스트를 추가하는 JSON 포맷터입니다.

    컨텍스트 필드는 extra로 전달된 같은 이름의 필드를 덮어쓰지 않습니다.
    """

    def __init__(self, session_id: str = "") -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
        self._session_id = session_id

    def add_fields(
        self,
        log_record: dict,
        record: logging.LogRecord,
        message_dict: dict,
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record.pop("context", None)
        log_record["session_id"] = self._session_id
        log_record["module"] = record.name
        log_record["level"] = record.levelname
        for key, value in getattr(record, "context", {}).items():
            log_record.setdefault(key, value)


class _TextFormatter(logging.Formatter):
    """session_id 접두어와 "key=value" 컨텍스트 접미어를 붙이는 텍스트 포맷터입니다."""

    def __init__(self, session_id: str = "") -> None:
        super().__init__(
            fmt=f"%(asctime)s [{session_id[:8] if session_id else 'no-sid'}] "
                f"%(levelname)-8s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = getattr(record, "context", None)
        if context:
            line += " | " + " ".join(f"{key}={value}" for key, value in sorted(context.items()))
        return line


class StructuredLogger:
    """
    모듈별 로거를 반환하는 팩토리 클래스입니다.

    표준 Logger를 직접 반환하여 기존 logging API와 완전히 호환됩니다.
    """

    @staticmethod
    def get(name: str) -> logging.Logger:
        return logging.getLogger(name)

    @staticmethod
    def get_session_id() -> str:
        """현재 세션 ID를 반환합니다."""
        return _SESSION_ID
