"""
텍스트 정규화 모듈입니다.

역할:
- 움라우트 대체 표기(oe, o/, o: 등)를 실제 움라우트로 치환
- 구두점 제거 (유니코드 문자/숫자/공백만 유지)
- 연속 공백 축약 및 양끝 공백 제거
- preserve_case=False일 때 소문자 변환
- 입력창 실시간 치환용으로 동일한 치환 테이블 공개

처리 순서가 중요합니다. "/"가 움라우트 대체 표기로 쓰이므로
움라우트 치환이 구두점 제거보다 먼저 수행되어야 합니다.

사용 예시:
    >>> normalize("Schoener Tag!", preserve_case=True)
    'Schöner Tag'
    >>> normalize("Schoener Tag!")
    'schöner tag'
"""

from __future__ import annotations

import re
import unicodedata

# 움라우트 대체 표기 치환 테이블 (적용 순서 유지)
UMLAUT_DIGRAPHS: tuple[tuple[str, str], ...] = (
    ("oe", "ö"),
    ("o/", "ö"),
    ("o:", "ö"),
    ("ae", "ä"),
    ("a/", "ä"),
    ("a:", "ä"),
    ("ue", "ü"),
    ("u/", "ü"),
    ("u:", "ü"),
    ("s/", "ß"),
)

# 치환 이후에도 잘못 남는 단어 예외 목록
PROBLEM_WORDS: dict[str, str] = {
    "schoener": "schöner",
    "schoen": "schön",
    "felle": "fälle",
}

_PROBLEM_WORD_RE = re.compile(
    r"\b(" + "|".join(sorted(PROBLEM_WORDS, key=len, reverse=True)) + r")\b",
    re.IGNORECASE,
)
# 유니코드 문자, 숫자, 공백 이외의 모든 문자 (\w에 포함되는 "_"도 제거)
_NON_WORD_RE = re.compile(r"[^\w\s]|_")
_WHITESPACE_RE = re.compile(r"\s+")


def apply_umlaut_substitutions(text: str) -> str:
    """
    움라우트 대체 표기를 실제 움라우트로 치환합니다.

    입력창에 타이핑되는 원문에 실시간으로 적용되는 치환과 동일한 테이블을 사용합니다.
    대소문자를 구분하여 주어진 문자열 그대로 치환합니다 ("OE"는 치환하지 않음).
    """
    for digraph, umlaut in UMLAUT_DIGRAPHS:
        text = text.replace(digraph, umlaut)
    return text


def _fix_problem_word(match: re.Match) -> str:
    word = match.group(0)
    replacement = PROBLEM_WORDS.get(word)
    if replacement is not None:
        return replacement
    # 첫 글자만 대문자인 경우 ("Felle" -> "Fälle")
    if word[:1].isupper() and word[1:].islower():
        return PROBLEM_WORDS[word.lower()].capitalize()
    return word


def _normalize_once(text: str, preserve_case: bool) -> str:
    text = apply_umlaut_substitutions(text)
    text = _PROBLEM_WORD_RE.sub(_fix_problem_word, text)
    text = _NON_WORD_RE.sub("", text)
    text = _WHITESPACE_RE.sub(" ", text).strip()
    if not preserve_case:
        text = text.lower()
    return text


def normalize(text: str, preserve_case: bool = False) -> str:
    """
    비교용으로 문자열을 정규화합니다.

    처리 순서:
    1. 움라우트 대체 표기 치환 + 예외 단어 교정
    2. 유니코드 문자/숫자/공백 이외 문자 제거
    3. 연속 공백 축약 및 trim
    4. preserve_case=False이면 소문자 변환

    구두점 제거나 소문자 변환으로 새로 맞붙은 대체 표기("o.e" -> "oe", "OE" -> "oe")도
    치환되도록 결과가 더 이상 바뀌지 않을 때까지 반복합니다.
    따라서 normalize(normalize(s, c), c) == normalize(s, c) 가 항상 성립합니다.

    파라미터:
        text: 원문 문자열
        preserve_case: True이면 대소문자 유지

    반환값:
        str: 정규화된 문자열
    """
    # 조합형 움라우트("o" + U+0308)를 완성형으로 합쳐 구두점 제거 시 손실 방지
    current = unicodedata.normalize("NFC", text)
    while True:
        normalized = _normalize_once(current, preserve_case)
        if normalized == current:
            return normalized
        current = normalized


def tokenize(text: str) -> list[str]:
    """
    문장을 공백 기준 단어 목록으로 분리합니다.

    정규화 후 빈 문자열이 되는 토큰(순수 구두점, 예: "-")은 제외하며,
    나머지 토큰은 원문 그대로 반환합니다.
    """
    return [word for word in text.split() if normalize(word, preserve_case=True)]
