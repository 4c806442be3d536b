"""
Heuristic bot-likeness scorer for YouTube comments.

A multi-signal additive scorer: every detector that fires adds points and a
flag. Detectors always run in the same order, so flags for a given comment
come out in the same order on every run.

Architecture:
    1. Build the FingerprintIndex for the whole batch (one pass)
    2. Score each comment from its own text and its fingerprint entry
    3. Clamp the point total into [0, 100]

Scoring a comment only reads the shared index, so comments can be scored
in parallel without locking.

Usage:
    scored = score_comments(comments)
    for item in scored:
        print(item.bot_score, ", ".join(item.flags))
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor
from dataclasses import dataclass
from typing import List, Optional, Sequence

from scoring import signals
from scoring.fingerprint import EMPTY_ENTRY, FingerprintEntry, FingerprintIndex
from scoring.models import Comment, ScoredComment, clamp_score
from scoring.normalizer import as_text, keyword_text

logger = logging.getLogger(__name__)


# =============================================================================
# WEIGHTS
# =============================================================================

def ramp(base: float, step: float, count: int, cap: float, minimum: int = 1) -> float:
    """Monotonic clamp: base at the minimum evidence, +step per extra unit, capped."""
    return min(base + step * max(0, count - minimum), cap)


@dataclass(frozen=True)
class ScoringWeights:
    """Canonical weighting table. Points are additive before clamping."""

    # Template/duplicate campaign
    duplicate_min: int = 3
    duplicate_base: float = 20
    duplicate_step: float = 5
    duplicate_cap: float = 40

    # Links
    link_base: float = 25
    link_step: float = 10
    link_cap: float = 40

    # Contact details
    contact_base: float = 30
    contact_step: float = 5
    contact_cap: float = 40
    email: float = 20
    phone: float = 25

    # Phrase sets
    scam_base: float = 25
    scam_step: float = 5
    scam_cap: float = 35
    crypto_base: float = 20
    crypto_step: float = 5
    crypto_cap: float = 30
    promo_base: float = 15
    promo_step: float = 5
    promo_cap: float = 25
    adult: float = 25

    # Style
    emoji_min: int = 7
    emoji_base: float = 10
    emoji_step: float = 1
    emoji_cap: float = 20
    uppercase_ratio: float = 0.8
    uppercase: float = 10
    punctuation_min: int = 10
    punctuation: float = 10
    char_run_min: int = 5
    char_run: float = 8
    repeated_words_min: int = 2
    repeated_words: float = 8
    hashtag_min: int = 3
    hashtags: float = 10
    symbol_heavy: float = 10
    length_extreme: float = 3
    short_praise: float = 8


DEFAULT_WEIGHTS = ScoringWeights()


@dataclass(frozen=True)
class Signal:
    """One triggered detector."""
    flag: str
    points: float


# =============================================================================
# SIGNAL EVALUATION
# =============================================================================

def evaluate_signals(
    text: str,
    entry: FingerprintEntry = EMPTY_ENTRY,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> List[Signal]:
    """
    Run every detector over one comment, in fixed order.

    Args:
        text: Raw comment body (non-strings are treated as empty)
        entry: The comment's entry in the batch fingerprint index
        weights: Weighting table

    Returns:
        Triggered signals in evaluation order
    """
    text = as_text(text)
    keywords = keyword_text(text)
    found: List[Signal] = []
    w = weights

    # --- Batch-relative: template campaigns ---

    if entry.frequency >= w.duplicate_min:
        found.append(Signal(
            f"template/duplicate x{entry.frequency}",
            ramp(w.duplicate_base, w.duplicate_step, entry.frequency, w.duplicate_cap, w.duplicate_min),
        ))

    # --- Links and contact details ---

    links = signals.count_links(text)
    if links:
        found.append(Signal("contains link", ramp(w.link_base, w.link_step, links, w.link_cap)))

    matched = signals.contact_bait(keywords)
    if matched:
        found.append(Signal("contact bait", ramp(w.contact_base, w.contact_step, len(matched), w.contact_cap)))

    if signals.has_email(text):
        found.append(Signal("email address", w.email))

    if signals.has_phone_number(text):
        found.append(Signal("phone number", w.phone))

    # --- Phrase sets ---

    matched = signals.scam_phrases(keywords)
    if matched:
        found.append(Signal("scam/giveaway", ramp(w.scam_base, w.scam_step, len(matched), w.scam_cap)))

    matched = signals.crypto_phrases(keywords)
    if matched:
        found.append(Signal("crypto/investment", ramp(w.crypto_base, w.crypto_step, len(matched), w.crypto_cap)))

    matched = signals.self_promo_phrases(keywords)
    if matched:
        found.append(Signal("self-promo", ramp(w.promo_base, w.promo_step, len(matched), w.promo_cap)))

    if signals.adult_bait(keywords):
        found.append(Signal("adult bait", w.adult))

    # --- Style ---

    emoji_count = signals.count_emoji(text)
    if emoji_count >= w.emoji_min:
        found.append(Signal(
            f"many emojis ({emoji_count})",
            ramp(w.emoji_base, w.emoji_step, emoji_count, w.emoji_cap, w.emoji_min),
        ))

    if signals.latin_letter_count(text) >= signals.UPPERCASE_MIN_LETTERS:
        ratio = signals.uppercase_ratio(text)
        if ratio >= w.uppercase_ratio:
            found.append(Signal(f"high uppercase ({round(ratio * 100)}%)", w.uppercase))

    if signals.punctuation_count(text) >= w.punctuation_min:
        found.append(Signal("punctuation burst", w.punctuation))

    run = signals.longest_char_run(text)
    if run >= w.char_run_min:
        found.append(Signal(f"repeated characters ({run})", w.char_run))

    if signals.repeated_word_count(text) >= w.repeated_words_min:
        found.append(Signal("repeated words", w.repeated_words))

    tags = signals.hashtag_count(text)
    if tags >= w.hashtag_min:
        found.append(Signal(f"hashtag spam ({tags})", w.hashtags))

    if signals.is_symbol_dominant(text):
        found.append(Signal("symbol-heavy text", w.symbol_heavy))

    extreme = signals.length_extreme(text)
    if extreme:
        found.append(Signal(f"very {extreme}", w.length_extreme))

    if signals.is_generic_short_praise(text):
        found.append(Signal("generic short praise", w.short_praise))

    return found


# =============================================================================
# SCORER
# =============================================================================

class CommentScorer:
    """
    Scores batches of comments.

    Usage:
        scorer = CommentScorer()
        scored = scorer.score_batch(comments)
    """

    def __init__(self, weights: ScoringWeights = DEFAULT_WEIGHTS):
        self.weights = weights

    def score_one(self, comment: Comment, entry: FingerprintEntry = EMPTY_ENTRY) -> ScoredComment:
        """Score a single comment given its fingerprint entry."""
        found = evaluate_signals(comment.text, entry, self.weights)
        return ScoredComment(
            comment=comment,
            bot_score=clamp_score(sum(s.points for s in found)),
            flags=tuple(s.flag for s in found),
        )

    def score_batch(
        self,
        comments: Sequence[Comment],
        executor: Optional[Executor] = None,
    ) -> List[ScoredComment]:
        """
        Score a batch, preserving input order.

        Args:
            comments: Comments to score
            executor: Optional executor to spread per-comment scoring over

        Returns:
            One ScoredComment per input comment, same positions
        """
        comments = list(comments)
        index = FingerprintIndex.build(c.text for c in comments)

        if executor is None:
            scored = [self.score_one(c, e) for c, e in zip(comments, index.entries)]
        else:
            scored = list(executor.map(self.score_one, comments, index.entries))

        logger.debug(f"Scored {len(scored)} comments")
        return scored


_default_scorer: Optional[CommentScorer] = None


def get_default_scorer() -> CommentScorer:
    """Get or create the default scorer instance."""
    global _default_scorer
    if _default_scorer is None:
        _default_scorer = CommentScorer()
    return _default_scorer


def score_comments(
    comments: Sequence[Comment],
    executor: Optional[Executor] = None,
) -> List[ScoredComment]:
    """Score a batch with the default weights."""
    return get_default_scorer().score_batch(comments, executor=executor)
