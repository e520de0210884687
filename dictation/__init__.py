"""
독일어 받아쓰기 매칭 및 채점 엔진

컨트롤러(UI)가 사용하는 엔진 API:
- segment_captions(payload) -> list[Segment]
- normalize(text, preserve_case) -> str
- align_greedy / align_exact / align_words -> list[AlignmentPair]
- is_correct_with_hint(pair, hint_level) -> bool
- compute_report(segments, sentence_results, elapsed_seconds, max_hint_level_used, check_capitalization)
  -> DictationReport
"""

from dictation.captions import Segment
from dictation.captions.caption_segmenter import parse_timestamp, segment_captions
from dictation.matching import AlignmentMode, AlignmentOp, AlignmentPair, HintLevel
from dictation.matching.char_diff import CharDiff, FeedbackToken, build_live_feedback, compare_chars
from dictation.matching.fuzzy_scorer import are_similar_words, levenshtein_distance, word_similarity
from dictation.matching.hint_corrector import is_correct_with_hint, reveal_hint, visible_letter_count
from dictation.matching.word_aligner import align_exact, align_greedy, align_words
from dictation.scoring import DictationReport, SentenceDetail, SentenceResult
from dictation.scoring.scorer import compute_report, compute_score
from dictation.session import ExerciseSession, SessionState, SessionStateError
from dictation.text.normalizer import apply_umlaut_substitutions, normalize, tokenize

__version__ = "1.0.0"

__all__ = [
    "AlignmentMode",
    "AlignmentOp",
    "AlignmentPair",
    "CharDiff",
    "DictationReport",
    "ExerciseSession",
    "FeedbackToken",
    "HintLevel",
    "Segment",
    "SentenceDetail",
    "SentenceResult",
    "SessionState",
    "SessionStateError",
    "align_exact",
    "align_greedy",
    "align_words",
    "apply_umlaut_substitutions",
    "are_similar_words",
    "build_live_feedback",
    "compare_chars",
    "compute_report",
    "compute_score",
    "is_correct_with_hint",
    "levenshtein_distance",
    "normalize",
    "parse_timestamp",
    "reveal_hint",
    "segment_captions",
    "tokenize",
    "visible_letter_count",
    "word_similarity",
]
