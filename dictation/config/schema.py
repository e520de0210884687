"""
받아쓰기 엔진 설정 모델

config.yaml 한 파일이 아래 여섯 섹션으로 나뉘며, 섹션마다 BaseModel 하나가 대응합니다.

    system    로그 레벨/포맷/디렉토리, 세션 ID
    captions  캡션 헤더 토큰, 잘못된 타이밍 처리
    matching  점수 사다리 상수와 그리디 탐색 범위
    hints     기본 힌트 레벨
    scoring   속도 계수와 힌트 배율
    report    리포트 경로와 WER/CER 포함 여부

빠진 섹션이나 필드는 기본값으로 채워지므로 AppConfig() 자체가 유효한 설정입니다.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("json", "text")
ALIGNMENT_MODES = ("greedy", "optimal")


def _check_unit_interval(name: str, value: float) -> float:
    """값이 0.0~1.0 범위인지 검증합니다."""
    if not 0.0 <= value <= 1.0:
        error_message = f"{name}은(는) 0.0~1.0 범위여야 합니다. 입력값: {value}"
        raise ValueError(error_message)
    return value


def _check_choice(name: str, value: str, choices: tuple) -> str:
    if value not in choices:
        raise ValueError(f"{name}: '{value}' 은(는) 지원하지 않는 값입니다. 선택지: {', '.join(choices)}")
    return value


# =============================================================================
# system: 로깅과 세션 식별
# =============================================================================

class SystemConfig(BaseModel):
    """로깅 출력과 세션 ID 설정. session_id가 비어 있으면 setup_logging이 UUID를 발급합니다."""

    log_level: str = Field(default="INFO", description="DEBUG | INFO | WARNING | ERROR | CRITICAL")
    log_format: str = Field(default="json", description="json | text")
    log_dir: str = Field(default="output/logs", description="app.log가 놓일 디렉토리")
    session_id: str = Field(default="", description="고정 세션 ID (선택)")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        # 환경변수로 "warning" 처럼 소문자가 들어와도 허용
        return _check_choice("log_level", value.upper(), LOG_LEVELS)

    @field_validator("log_format")
    @classmethod
    def check_log_format(cls, value: str) -> str:
        return _check_choice("log_format", value, LOG_FORMATS)


# =============================================================================
# captions 섹션: 자막(캡션) 파일 파싱 설정
# =============================================================================

class CaptionConfig(BaseModel):
    """
    캡션 페이로드 파싱 설정입니다.

    역할:
    - 포맷 헤더 토큰 지정 (텍스트로 취급하지 않음)
    - start >= end 인 잘못된 세그먼트 제거 여부
    """
    # 캡션 파일 첫 줄의 포맷 헤더 토큰
    header_token: str = Field(default="WEBVTT", description="포맷 헤더 토큰")
    # startTime < endTime 을 위반한 세그먼트를 경고와 함께 제거할지 여부
    drop_invalid_segments: bool = Field(default=True, description="잘못된 타이밍 세그먼트 제거")


# =============================================================================
# matching 섹션: 퍼지 매칭 및 단어 정렬 설정
# =============================================================================

class MatchingConfig(BaseModel):
    """
    퍼지 스코어러와 단어 정렬기의 임계값 설정입니다.

    역할:
    - 그리디 정렬의 탐색 범위(lookahead) 지정
    - 후보 수락 임계값 및 완전 일치 임계값 지정
    - 합성어 포함, Levenshtein 유사도, 위치 패널티 파라미터 제어

    기본값은 모두 점수 사다리(score ladder)의 고정 상수와 동일합니다.
    """
    # 그리디 정렬 시 참조 단어 하나당 탐색할 사용자 단어 수
    lookahead_words: int = Field(default=5, description="그리디 탐색 범위 (단어 수)")
    # 후보를 '사용 가능한 매칭'으로 인정하는 최소 점수 (초과)
    acceptance_threshold: float = Field(default=0.38, description="후보 수락 임계값")
    # 이 점수 이상이면 match, 미만이면 substitution
    exact_match_threshold: float = Field(default=1.0, description="완전 일치 임계값")
    # 합성어 포함 판정 시 짧은 쪽 단어의 최소 길이
    containment_min_length: int = Field(default=4, description="합성어 포함 최소 길이")
    # distance / longerLength 가 이 값 미만이면 Levenshtein 점수 사용
    levenshtein_ratio_threshold: float = Field(default=0.6, description="Levenshtein 유사도 임계값")
    # 위치 오프셋 1당 감점 (대소문자 무시 모드)
    position_penalty: float = Field(default=0.03, description="위치 패널티 (오프셋당)")
    # 위치 오프셋 1당 감점 (대소문자 검사 모드)
    position_penalty_case_sensitive: float = Field(
        default=0.01, description="위치 패널티 (대소문자 검사 모드, 오프셋당)"
    )
    # 위치 패널티로 깎일 수 있는 하한
    position_penalty_floor: float = Field(default=0.4, description="위치 패널티 하한")
    # 기본 정렬 모드
    default_mode: str = Field(default="greedy", description="기본 정렬 모드 (greedy | optimal)")

    @field_validator("lookahead_words", "containment_min_length")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        """양의 정수인지 검증합니다."""
        if value < 1:
            error_message = f"1 이상의 정수여야 합니다. 입력값: {value}"
            raise ValueError(error_message)
        return value

    @field_validator(
        "acceptance_threshold",
        "exact_match_threshold",
        "levenshtein_ratio_threshold",
        "position_penalty",
        "position_penalty_case_sensitive",
        "position_penalty_floor",
    )
    @classmethod
    def validate_unit_interval(cls, value: float) -> float:
        """점수/비율 값이 0.0~1.0 범위인지 검증합니다."""
        return _check_unit_interval("matching 임계값", value)

    @field_validator("default_mode")
    @classmethod
    def validate_default_mode(cls, value: str) -> str:
        return _check_choice("default_mode", value, ALIGNMENT_MODES)


# =============================================================================
# hints 섹션: 힌트 레벨 설정
# =============================================================================

class HintConfig(BaseModel):
    """
    힌트 시스템 설정입니다.

    역할:
    - 연습 시작 시 적용할 기본 힌트 레벨 (0=끔, 1=첫 글자, 2=부분 글자)
    """
    default_level: int = Field(default=0, description="기본 힌트 레벨 (0~2)")

    @field_validator("default_level")
    @classmethod
    def validate_level(cls, value: int) -> int:
        """힌트 레벨이 0~2 범위인지 검증합니다."""
        if not 0 <= value <= 2:
            error_message = f"힌트 레벨은 0~2 범위여야 합니다. 입력값: {value}"
            raise ValueError(error_message)
        return value


# =============================================================================
# scoring 섹션: 최종 점수 산정 설정
# =============================================================================

class ScoringConfig(BaseModel):
    """
    종합 점수 공식의 파라미터입니다.

    역할:
    - 속도 계수 상한 및 WPM 나눗수 지정
    - 힌트 레벨별 감점 배율 지정
    """
    # 속도 계수 상한 (speedFactor = min(max, wpm / divisor))
    max_speed_factor: float = Field(default=2.5, description="속도 계수 상한")
    # WPM을 속도 계수로 바꿀 때 나누는 값
    words_per_minute_divisor: float = Field(default=10.0, description="WPM 나눗수")
    # 최대 사용 힌트 레벨별 점수 배율
    hint_multipliers: dict[int, float] = Field(
        default_factory=lambda: {0: 1.0, 1: 0.8, 2: 0.6},
        description="힌트 레벨별 배율",
    )

    @field_validator("words_per_minute_divisor", "max_speed_factor")
    @classmethod
    def validate_positive_float(cls, value: float) -> float:
        """0보다 큰 값인지 검증합니다."""
        if value <= 0:
            error_message = f"0보다 커야 합니다. 입력값: {value}"
            raise ValueError(error_message)
        return value

    @field_validator("hint_multipliers")
    @classmethod
    def validate_hint_multipliers(cls, value: dict[int, float]) -> dict[int, float]:
        """힌트 레벨 0~2 모두에 대해 0.0~1.0 배율이 정의되었는지 검증합니다."""
        missing = [level for level in (0, 1, 2) if level not in value]
        if missing:
            error_message = f"hint_multipliers에 레벨 {missing} 배율이 없습니다."
            raise ValueError(error_message)
        for multiplier in value.values():
            _check_unit_interval("hint_multipliers 배율", multiplier)
        return value


# =============================================================================
# report 섹션: 결과 리포트 설정
# =============================================================================

class ReportConfig(BaseModel):
    """
    받아쓰기 결과 리포트 설정입니다.

    역할:
    - 리포트 저장 경로 지정
    - jiwer 기반 WER/CER 보조 지표 포함 여부
    """
    # 리포트 저장 디렉토리
    output_dir: str = Field(default="output/reports", description="리포트 출력 디렉토리")
    # WER/CER(jiwer) 계산 포함 여부
    include_error_rates: bool = Field(default=True, description="WER/CER 포함 여부")


# =============================================================================
# 루트 모델
# =============================================================================

class AppConfig(BaseModel):
    """
    config.yaml 전체에 대응하는 루트 모델입니다.

    ConfigManager가 YAML 매핑에 DICT_ 환경변수를 덮어쓴 뒤 이 모델로 검증합니다.
    섹션 하나가 통째로 빠져도 해당 섹션 모델의 기본값이 쓰입니다.

        >>> AppConfig(**{"matching": {"lookahead_words": 3}}).matching.lookahead_words
        3
    """
    system: SystemConfig = Field(default_factory=SystemConfig)
    captions: CaptionConfig = Field(default_factory=CaptionConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    hints: HintConfig = Field(default_factory=HintConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
