"""
캡션 모듈 패키지

공통 데이터 타입:
- Segment: 캡션 큐 하나(텍스트 + 시작/종료 시각) 컨테이너
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Segment:
    """
    타이밍 정보를 가진 캡션 큐 하나입니다.

    파싱 이후에는 변경되지 않으며, 연습 세션이 소유합니다.
    오디오 플레이어는 start_time/end_time 구간만 재생합니다.

    필드:
        text: 받아써야 할 참조 문장
        start_time: 시작 시각 (초)
        end_time: 종료 시각 (초, start_time보다 커야 함)
    """
    text: str
    start_time: float
    end_time: float

    @property
    def duration(self) -> float:
        """재생 구간 길이 (초)"""
        return self.end_time - self.start_time
