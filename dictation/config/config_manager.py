"""
받아쓰기 엔진 설정 관리 모듈입니다.

역할:
- config.yaml 읽기 -> DICT_ 환경변수 덮어쓰기 -> AppConfig 검증 순서로 설정 구성
- "matching.lookahead_words" 형태의 점 표기 키로 설정값 조회
- 설정 파일 변경 감지(watchdog, 선택 의존성) 시 재로드 및 구독자 통보
- 재로드 검증에 실패하면 직전 설정을 그대로 유지

사용 예시:
    >>> manager = ConfigManager()
    >>> config = manager.load("config.yaml")
    >>> manager.get("matching.acceptance_threshold")
    0.38
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

import yaml
from pydantic import ValidationError

from dictation.config.schema import AppConfig

logger = logging.getLogger(__name__)

# 환경변수 오버라이드 접두사: DICT_<섹션>_<필드>
ENV_PREFIX = "DICT_"

# 설정 변경 콜백: (이전 설정, 새 설정) -> None
ConfigChangeCallback = Callable[[AppConfig, AppConfig], None]


class ConfigLoadError(Exception):
    """설정을 구성하지 못했을 때 발생하는 에러의 기본 클래스입니다."""
    pass


class ConfigValidationError(ConfigLoadError):
    """AppConfig 스키마 검증에 실패했을 때 발생합니다."""
    pass


class ConfigFileNotFoundError(ConfigLoadError):
    """지정한 설정 파일이 없을 때 발생합니다."""
    pass


# =============================================================================
# 환경변수 오버라이드
# =============================================================================

def coerce_env_value(value: str) -> Any:
    """
    환경변수 문자열을 bool / int / float / str 중 맞는 타입으로 바꿉니다.

    사용 예시:
        >>> coerce_env_value("false"), coerce_env_value("3"), coerce_env_value("0.5")
        (False, 3, 0.5)
    """
    lowered = value.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    for cast in (int, float):
        try:
            return cast(value)
        except ValueError:
            continue
    return value


def apply_env_overrides(
    raw_config: dict,
    environ: Optional[Mapping[str, str]] = None,
) -> dict:
    """
    DICT_ 접두사 환경변수를 원본 설정 딕셔너리에 덮어씁니다.

    첫 번째 "_" 앞이 섹션, 나머지가 필드 이름입니다. 섹션 이름에는 "_"가 없습니다.
        DICT_MATCHING_LOOKAHEAD_WORDS=3 -> matching.lookahead_words = 3
        DICT_SYSTEM_LOG_LEVEL=debug     -> system.log_level = "debug"

    파라미터:
        raw_config: YAML에서 읽은 딕셔너리 (직접 수정됨)
        environ: 환경변수 매핑 (None이면 os.environ)

    반환값:
        dict: 오버라이드가 적용된 raw_config
    """
    source = os.environ if environ is None else environ
    applied: list[str] = []

    for env_key in sorted(source):
        if not env_key.startswith(ENV_PREFIX):
            continue
        section_name, _, field_name = env_key[len(ENV_PREFIX):].lower().partition("_")
        if not section_name or not field_name:
            logger.debug(f"환경변수 무시 (섹션/필드 구분 불가): {env_key}")
            continue

        section = raw_config.setdefault(section_name, {})
        if not isinstance(section, dict):
            logger.debug(f"환경변수 무시 ({section_name} 섹션이 매핑이 아님): {env_key}")
            continue

        section[field_name] = coerce_env_value(source[env_key])
        applied.append(f"{section_name}.{field_name}")

    if applied:
        logger.info(f"환경변수 오버라이드 {len(applied)}건 적용: {', '.join(applied)}")
    return raw_config


# =============================================================================
# 설정 매니저
# =============================================================================

class ConfigManager:
    """
    활성 AppConfig 하나를 보관하고 교체하는 매니저입니다.

    load()/load_defaults()/reload()는 모두 같은 구성 경로
    (YAML 읽기 -> 환경변수 -> 검증)를 거치며, 교체는 락 안에서 원자적으로 이루어집니다.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._config: Optional[AppConfig] = None
        self._source: Optional[Path] = None
        self._subscribers: list[ConfigChangeCallback] = []
        # watchdog Observer (watch() 호출 시 생성)
        self._observer: Optional[Any] = None

    @property
    def config(self) -> Optional[AppConfig]:
        with self._lock:
            return self._config

    @property
    def source(self) -> Optional[Path]:
        """마지막으로 로드한 설정 파일 경로입니다. 기본값만 사용했다면 None"""
        return self._source

    # =========================================================================
    # 로드
    # =========================================================================

    def load(self, filepath: str | Path) -> AppConfig:
        """
        YAML 설정 파일로 활성 설정을 구성합니다.

        파라미터:
            filepath: YAML 설정 파일 경로

        반환값:
            AppConfig: 검증된 설정

        예외:
            ConfigFileNotFoundError: 파일이 없을 때
            ConfigValidationError: 스키마 검증 실패 시
            ConfigLoadError: YAML 문법 오류, 읽기 실패, 최상위가 매핑이 아닐 때
        """
        path = Path(filepath)
        if not path.is_file():
            message = f"설정 파일을 찾을 수 없습니다: {path}"
            logger.error(message)
            raise ConfigFileNotFoundError(message)

        config = self._build(_read_yaml(path))
        with self._lock:
            self._config = config
            self._source = path

        logger.info(
            f"설정 로드 완료: file={path}, log_level={config.system.log_level}, "
            f"mode={config.matching.default_mode}, lookahead={config.matching.lookahead_words}, "
            f"hint={config.hints.default_level}"
        )
        return config

    def load_defaults(self) -> AppConfig:
        """설정 파일 없이 기본값과 환경변수만으로 활성 설정을 구성합니다."""
        config = self._build({})
        with self._lock:
            self._config = config
            self._source = None
        logger.info("설정 파일 없이 기본 설정 사용")
        return config

    def reload(self) -> bool:
        """
        마지막으로 로드한 파일을 다시 읽어 활성 설정을 교체합니다.

        구성에 실패하면 에러를 로그로 남기고 직전 설정을 유지합니다.
        교체에 성공하면 구독자에게 (이전 설정, 새 설정)을 통보합니다.

        반환값:
            bool: 새 설정이 적용되었으면 True
        """
        path = self._source
        if path is None:
            logger.warning("다시 읽을 설정 파일이 없어 리로드를 건너뜁니다")
            return False

        try:
            new_config = self._build(_read_yaml(path))
        except ConfigLoadError as exc:
            logger.error(f"설정 리로드 실패, 직전 설정 유지: {exc}")
            return False

        with self._lock:
            previous = self._config
            self._config = new_config

        logger.info(f"설정 리로드 완료: {path}")
        if previous is not None:
            self._notify(previous, new_config)
        return True

    def validate_schema(self, raw_config: dict) -> bool:
        """원본 딕셔너리가 AppConfig 스키마를 만족하는지 여부만 확인합니다."""
        try:
            AppConfig(**raw_config)
        except ValidationError as exc:
            logger.warning(f"스키마 검증 실패: {exc.error_count()}개 에러")
            return False
        return True

    # =========================================================================
    # 조회
    # =========================================================================

    def get(self, key: str, default: Any = None) -> Any:
        """
        점 표기 키로 설정값을 조회합니다. 경로 중간이 없으면 default를 반환합니다.

        예외:
            RuntimeError: 설정을 아직 로드하지 않은 경우
        """
        with self._lock:
            node: Any = self._config
        if node is None:
            message = "설정이 로드되지 않았습니다. load() 또는 load_defaults()를 먼저 호출하세요."
            logger.error(message)
            raise RuntimeError(message)

        for part in key.split("."):
            if isinstance(node, dict):
                if part not in node:
                    return default
                node = node[part]
            elif hasattr(node, part):
                node = getattr(node, part)
            else:
                logger.debug(f"설정 키 없음: {key} ({part}), 기본값 반환")
                return default
        return node

    # =========================================================================
    # 구독 / 파일 감시
    # =========================================================================

    def subscribe(self, callback: ConfigChangeCallback) -> None:
        """설정이 교체될 때 호출할 콜백을 등록합니다."""
        self._subscribers.append(callback)
        logger.debug(f"설정 구독자 등록: 총 {len(self._subscribers)}개")

    def unsubscribe(self, callback: ConfigChangeCallback) -> None:
        """등록된 콜백을 제거합니다. 없는 콜백이면 경고만 남깁니다."""
        if callback not in self._subscribers:
            logger.warning("제거할 설정 구독자를 찾지 못했습니다")
            return
        self._subscribers.remove(callback)
        logger.debug(f"설정 구독자 제거: 남은 {len(self._subscribers)}개")

    def watch(self, filepath: str | Path | None = None) -> bool:
        """
        설정 파일 변경을 감시하여 수정될 때마다 reload()를 호출합니다.

        watchdog(extra: watch)이 설치되지 않았거나 감시할 파일이 없으면
        경고를 남기고 False를 반환합니다.

        반환값:
            bool: 감시를 시작했으면 True
        """
        target = Path(filepath) if filepath else self._source
        if target is None:
            logger.warning("감시할 설정 파일이 없습니다. load()를 먼저 호출하세요.")
            return False

        try:
            from watchdog.events import FileSystemEventHandler
            from watchdog.observers import Observer
        except ImportError:
            logger.warning(
                "watchdog 미설치로 설정 파일 감시를 건너뜁니다. "
                "pip install 'dictation-engine[watch]'"
            )
            return False

        manager = self

        class _ReloadOnModify(FileSystemEventHandler):
            def on_modified(self, event: Any) -> None:
                if not event.is_directory and Path(event.src_path).name == target.name:
                    logger.info(f"설정 파일 변경 감지: {event.src_path}")
                    manager.reload()

        self.stop_watch()
        observer = Observer()
        observer.schedule(_ReloadOnModify(), path=str(target.parent), recursive=False)
        observer.daemon = True
        observer.start()
        self._observer = observer
        logger.info(f"설정 파일 감시 시작: {target}")
        return True

    def stop_watch(self) -> None:
        """설정 파일 감시를 중지합니다."""
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=5)
        self._observer = None
        logger.info("설정 파일 감시 중지")

    # =========================================================================
    # 내부 헬퍼
    # =========================================================================

    def _build(self, raw_config: dict) -> AppConfig:
        raw_config = apply_env_overrides(raw_config)
        try:
            return AppConfig(**raw_config)
        except ValidationError as exc:
            for error in exc.errors():
                location = ".".join(str(part) for part in error["loc"])
                logger.error(
                    f"설정 검증 실패: field={location}, msg={error['msg']}, "
                    f"input={error.get('input', 'N/A')}"
                )
            raise ConfigValidationError(
                f"설정 스키마 검증 실패: {exc.error_count()}개 에러"
            ) from exc

    def _notify(self, previous: AppConfig, current: AppConfig) -> None:
        # 한 구독자의 실패가 나머지 통보를 막지 않음
        for callback in list(self._subscribers):
            try:
                callback(previous, current)
            except Exception as exc:
                logger.error(f"설정 구독자 콜백 에러: {exc}", exc_info=True)


def _read_yaml(path: Path) -> dict:
    """
    YAML 파일을 딕셔너리로 읽습니다. 빈 파일은 빈 딕셔너리입니다.

    예외:
        ConfigLoadError: 읽기 실패, 문법 오류, 최상위가 매핑이 아닐 때
    """
    try:
        with open(path, "r", encoding="utf-8") as config_file:
            data = yaml.safe_load(config_file)
    except yaml.YAMLError as exc:
        logger.error(f"YAML 파싱 에러: {path}", exc_info=True)
        raise ConfigLoadError(f"YAML 파싱 에러: {exc}") from exc
    except OSError as exc:
        logger.error(f"설정 파일 읽기 에러: {path}", exc_info=True)
        raise ConfigLoadError(f"설정 파일 읽기 에러: {exc}") from exc

    if data is None:
        logger.warning(f"설정 파일이 비어 있어 기본값을 사용합니다: {path}")
        return {}
    if not isinstance(data, dict):
        raise ConfigLoadError(f"설정 파일 최상위는 매핑이어야 합니다: {type(data).__name__}")
    return data
