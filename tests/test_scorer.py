"""
Unit tests for the heuristic scorer.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from scoring.fingerprint import FingerprintEntry
from scoring.models import Comment, clamp_score
from scoring.scorer import (
    CommentScorer,
    DEFAULT_WEIGHTS,
    evaluate_signals,
    ramp,
    score_comments,
)

TEMPLATE = "This song brings back so many memories of my childhood"


def _flags(text, entry=None):
    if entry is None:
        return [s.flag for s in evaluate_signals(text)]
    return [s.flag for s in evaluate_signals(text, entry)]


class TestRamp:
    """Test cases for the monotonic clamp helper."""

    def test_base_at_minimum(self):
        assert ramp(25, 10, 1, 40) == 25

    def test_step_and_cap(self):
        assert ramp(25, 10, 2, 40) == 35
        assert ramp(25, 10, 9, 40) == 40

    def test_custom_minimum(self):
        assert ramp(20, 5, 3, 40, minimum=3) == 20
        assert ramp(20, 5, 5, 40, minimum=3) == 30


class TestClampScore:
    """Test cases for clamp_score."""

    @pytest.mark.parametrize("value,expected", [
        (-10, 0), (0, 0), (59.5, 60), (59.4, 59), (100, 100), (250, 100),
    ])
    def test_clamp(self, value, expected):
        assert clamp_score(value) == expected


class TestEvaluateSignals:
    """Test cases for per-comment signal evaluation."""

    def test_link_flag(self):
        assert "contains link" in _flags("check this out http://bit.ly/xyz")

    def test_no_link_flag(self):
        assert "contains link" not in _flags("i love this song")

    def test_high_uppercase_flag(self):
        assert "high uppercase (100%)" in _flags("ABCDEFGHIJ KLMNOPQRST")

    def test_lowercase_no_uppercase_flag(self):
        flags = _flags("abcdefghij klmnopqrst")
        assert not any(f.startswith("high uppercase") for f in flags)

    def test_uppercase_needs_enough_letters(self):
        flags = _flags("OMG WOW!")
        assert not any(f.startswith("high uppercase") for f in flags)

    def test_flag_order_is_fixed(self):
        """Flags follow evaluation order regardless of text order."""
        text = "SUBSCRIBE NOW!!!!!!!!!! whatsapp me +1 555 123 4567 https://bit.ly/x"
        flags = _flags(text)
        order = ["contains link", "contact bait", "phone number", "self-promo", "punctuation burst"]
        positions = [flags.index(f) for f in order]
        assert positions == sorted(positions)

    def test_duplicate_flag_uses_frequency(self):
        entry = FingerprintEntry("whatever", 5)
        signals = evaluate_signals(TEMPLATE, entry)
        assert signals[0].flag == "template/duplicate x5"
        assert signals[0].points == 30

    def test_duplicate_below_minimum_ignored(self):
        entry = FingerprintEntry("whatever", 2)
        assert not any(f.startswith("template/duplicate") for f in _flags(TEMPLATE, entry))

    def test_non_string_text(self):
        """Non-string text scores as empty text."""
        assert _flags(None) == ["very short"]

    def test_many_emojis(self):
        flags = _flags("🔥" * 9)
        assert "many emojis (9)" in flags


class TestCommentScorer:
    """Test cases for batch scoring."""

    def test_scores_are_bounded_integers(self, mixed_batch):
        for item in CommentScorer().score_batch(mixed_batch):
            assert isinstance(item.bot_score, int)
            assert 0 <= item.bot_score <= 100

    def test_extreme_spam_is_clamped(self, make_comment):
        text = (
            "FREE BITCOIN GIVEAWAY!!!!!!!!!! claim now, whatsapp +447700900123 or "
            "email win@prize.com, subscribe to my channel http://bit.ly/a www.b.xyz 🔥🔥🔥🔥🔥🔥🔥🔥"
        )
        scored = CommentScorer().score_batch([make_comment(text)])
        assert scored[0].bot_score == 100

    def test_order_preserved(self, mixed_batch):
        scored = score_comments(mixed_batch)
        assert [s.comment_id for s in scored] == [c.comment_id for c in mixed_batch]

    def test_template_campaign_flagged(self, mixed_batch):
        scored = score_comments(mixed_batch)
        flagged = [s.comment.author_name for s in scored if "template/duplicate x3" in s.flags]
        assert flagged == ["bot_1", "bot_2", "bot_3"]

    def test_nice_never_duplicate(self, make_comment):
        scored = score_comments([make_comment("nice") for _ in range(5)])
        for item in scored:
            assert not any(f.startswith("template/duplicate") for f in item.flags)

    @pytest.mark.parametrize("k", [3, 4, 5, 7, 10])
    def test_duplicate_component_monotonic(self, make_comment, k):
        """Every copy is flagged, and the duplicate points never drop as k grows."""
        uniques = [make_comment(f"unique comment number {i} about the video") for i in range(4)]
        batch = uniques[:2] + [make_comment(TEMPLATE) for _ in range(k)] + uniques[2:]
        scored = score_comments(batch)
        flagged = [s for s in scored if f"template/duplicate x{k}" in s.flags]
        assert len(flagged) == k

        previous = evaluate_signals(TEMPLATE, FingerprintEntry("t", k - 1))[0].points if k > 3 else 0
        current = evaluate_signals(TEMPLATE, FingerprintEntry("t", k))[0].points
        assert current >= previous
        assert current <= DEFAULT_WEIGHTS.duplicate_cap

    def test_executor_matches_sequential(self, mixed_batch):
        sequential = score_comments(mixed_batch)
        with ThreadPoolExecutor(max_workers=4) as pool:
            parallel = score_comments(mixed_batch, executor=pool)
        assert parallel == sequential

    def test_deterministic(self, mixed_batch):
        assert score_comments(mixed_batch) == score_comments(mixed_batch)

    def test_missing_text_is_empty(self):
        comment = Comment.from_dict({"commentId": "x", "text": None})
        scored = score_comments([comment])
        assert scored[0].flags == ("very short",)
        assert scored[0].bot_score == 3

    def test_empty_batch(self):
        assert score_comments([]) == []
