"""
Comment scoring engine.

Normalizer and signal detectors feed the per-comment scorer; the
fingerprint index supplies batch-wide duplicate counts; the aggregator
summarizes a scored batch; the secondary module defines the contract with
an external semantic classifier.
"""

from scoring.models import (
    Comment,
    OpinionLabel,
    ScoredComment,
    SecondaryOpinion,
    clamp_score,
)
from scoring.normalizer import fingerprint_text, keyword_text
from scoring.fingerprint import FingerprintEntry, FingerprintIndex
from scoring.scorer import (
    CommentScorer,
    ScoringWeights,
    DEFAULT_WEIGHTS,
    evaluate_signals,
    score_comments,
)
from scoring.aggregator import FlagCount, Summary, summarize
from scoring.secondary import (
    BatchVerdict,
    BatchVerdictLabel,
    CandidateItem,
    ClassifierResponse,
    SecondaryClassifierError,
    extract_json_payload,
    merge_opinions,
    parse_classifier_response,
    parse_classifier_text,
    select_candidates,
)

__all__ = [
    # Models
    "Comment",
    "OpinionLabel",
    "ScoredComment",
    "SecondaryOpinion",
    "clamp_score",
    # Normalizer
    "fingerprint_text",
    "keyword_text",
    # Fingerprint index
    "FingerprintEntry",
    "FingerprintIndex",
    # Scorer
    "CommentScorer",
    "ScoringWeights",
    "DEFAULT_WEIGHTS",
    "evaluate_signals",
    "score_comments",
    # Aggregator
    "FlagCount",
    "Summary",
    "summarize",
    # Secondary classifier
    "BatchVerdict",
    "BatchVerdictLabel",
    "CandidateItem",
    "ClassifierResponse",
    "SecondaryClassifierError",
    "extract_json_payload",
    "merge_opinions",
    "parse_classifier_response",
    "parse_classifier_text",
    "select_candidates",
]
