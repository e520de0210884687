"""python -m dictation 실행 진입점입니다."""

import sys

from dictation.cli import main

sys.exit(main())
