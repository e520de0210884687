"""
저장소 루트에서 바로 실행하기 위한 진입점입니다.

설치 후에는 dictation-score 명령이나 python -m dictation 을 사용합니다.
"""

import sys

from dictation.cli import main

if __name__ == "__main__":
    sys.exit(main())
