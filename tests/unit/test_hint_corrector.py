"""
힌트 보정 모듈 단위 테스트

검증 조건:
- 레벨별 공개 글자 수 (0 / 1 / 단어 길이 > 5 이면 3, 아니면 2)
- 숨겨진 부분만 입력한 substitution 재분류
- 단조성: 레벨 1에서 정답이면 레벨 2에서도 정답
- 힌트 표시 문자열 생성
"""

from __future__ import annotations

import pytest

from dictation.matching import AlignmentPair, HintLevel
from dictation.matching.hint_corrector import (
    is_correct_with_hint,
    reveal_hint,
    visible_letter_count,
)


def _sub(reference: str, user: str) -> AlignmentPair:
    return AlignmentPair.substituted(reference, user, 0.5)


# =========================================================================
# 공개 글자 수 테스트
# =========================================================================

class TestVisibleLetterCount:
    @pytest.mark.parametrize("word, level, expected", [
        ("ist", 0, 0),
        ("ist", 1, 1),
        ("ist", 2, 2),
        ("Hallo", 2, 2),
        ("Straße", 2, 3),
        ("Montagmorgen", 2, 3),
        ("Montagmorgen", 1, 1),
    ])
    def test_counts(self, word, level, expected):
        assert visible_letter_count(word, level) == expected

    def test_capped_at_word_length(self):
        assert visible_letter_count("a", 2) == 1

    def test_punctuation_not_counted(self):
        # "Hallo!"는 5글자이므로 2글자 공개
        assert visible_letter_count("Hallo!", 2) == 2

    def test_accepts_enum(self):
        assert visible_letter_count("Montagmorgen", HintLevel.PARTIAL_LETTERS) == 3

    @pytest.mark.parametrize("level", [-1, 3])
    def test_invalid_level(self, level):
        with pytest.raises(ValueError):
            visible_letter_count("ist", level)


# =========================================================================
# 힌트 재분류 테스트
# =========================================================================

class TestIsCorrectWithHint:
    def test_hidden_part_typed_at_first_letter(self):
        assert is_correct_with_hint(_sub("ist", "st"), 1) is True

    def test_no_hint_no_correction(self):
        assert is_correct_with_hint(_sub("ist", "st"), 0) is False

    def test_full_prefix_typed(self):
        # 공개 글자보다 길게 앞부분을 입력한 경우
        assert is_correct_with_hint(_sub("Montagmorgen", "Montag"), 1) is True

    def test_only_visible_letters_typed(self):
        assert is_correct_with_hint(_sub("Hallo", "H"), 1) is False

    def test_wrong_hidden_part(self):
        assert is_correct_with_hint(_sub("ist", "sx"), 2) is False

    def test_level_two_hidden_part(self):
        assert is_correct_with_hint(_sub("Montagmorgen", "tagmorgen"), 2) is True
        assert is_correct_with_hint(_sub("Montagmorgen", "tagmorgen"), 1) is False

    @pytest.mark.parametrize("reference, user", [
        ("ist", "st"),
        ("Montagmorgen", "ontag"),
        ("Montagmorgen", "Mon"),
        ("Hallo", "allo"),
        ("Straße", "traße"),
    ])
    def test_monotonic_in_level(self, reference, user):
        pair = _sub(reference, user)
        assert is_correct_with_hint(pair, 1) is True
        assert is_correct_with_hint(pair, 2) is True

    def test_case_checked_hidden_part(self):
        assert is_correct_with_hint(_sub("Berlin", "erlin"), 1, check_capitalization=True) is True

    def test_case_checked_wrong_case(self):
        pair = _sub("Berlin", "berlin")
        assert is_correct_with_hint(pair, 1, check_capitalization=True) is False
        assert is_correct_with_hint(pair, 1, check_capitalization=False) is True

    def test_normalized_equal_is_correct(self):
        assert is_correct_with_hint(_sub("schön", "schoen"), 0) is True

    def test_match_always_correct(self):
        pair = AlignmentPair.matched("ist", "ist")
        assert all(is_correct_with_hint(pair, level) for level in (0, 1, 2))

    def test_insertion_and_deletion_never_correct(self):
        for pair in (AlignmentPair.inserted("äh"), AlignmentPair.deleted("Es")):
            assert all(not is_correct_with_hint(pair, level) for level in (0, 1, 2))

    def test_invalid_level(self):
        with pytest.raises(ValueError):
            is_correct_with_hint(_sub("ist", "st"), 5)


# =========================================================================
# 힌트 표시 문자열 테스트
# =========================================================================

class TestRevealHint:
    def test_partial_letters(self):
        assert reveal_hint("Montagmorgen", 2) == "Mon_________"

    def test_first_letter(self):
        assert reveal_hint("ist", 1) == "i__"

    def test_off_masks_everything(self):
        assert reveal_hint("Hallo!", 0) == "_____"

    def test_keeps_original_case(self):
        assert reveal_hint("Berlin", 1) == "B_____"
