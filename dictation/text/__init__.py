"""
텍스트 정규화 패키지

비교용 정규화, 움라우트 실시간 치환, 단어 분리 함수를 제공합니다.
"""

from dictation.text.normalizer import (
    PROBLEM_WORDS,
    UMLAUT_DIGRAPHS,
    apply_umlaut_substitutions,
    normalize,
    tokenize,
)

__all__ = [
    "PROBLEM_WORDS",
    "UMLAUT_DIGRAPHS",
    "apply_umlaut_substitutions",
    "normalize",
    "tokenize",
]
