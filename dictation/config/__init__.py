"""
설정 패키지

AppConfig 스키마와 ConfigManager를 외부에서 임포트하기 위한 패키지 초기화입니다.
"""

from dictation.config.config_manager import (
    ConfigFileNotFoundError,
    ConfigLoadError,
    ConfigManager,
    ConfigValidationError,
)
from dictation.config.schema import (
    AppConfig,
    CaptionConfig,
    HintConfig,
    MatchingConfig,
    ReportConfig,
    ScoringConfig,
    SystemConfig,
)

__all__ = [
    "AppConfig",
    "CaptionConfig",
    "ConfigFileNotFoundError",
    "ConfigLoadError",
    "ConfigManager",
    "ConfigValidationError",
    "HintConfig",
    "MatchingConfig",
    "ReportConfig",
    "ScoringConfig",
    "SystemConfig",
]
