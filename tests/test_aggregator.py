"""
Unit tests for the batch aggregator.
"""

from scoring.aggregator import percentage, rank_flags, summarize


class TestSummarize:
    """Test cases for summarize."""

    def test_suspicious_count_and_percentage(self, make_scored):
        scored = [make_scored(s) for s in [10, 70, 85, 40, 61]]
        summary = summarize(scored, threshold=60)
        assert summary.total == 5
        assert summary.suspicious == 3
        assert summary.suspicious_pct == 60.0

    def test_threshold_is_inclusive(self, make_scored):
        summary = summarize([make_scored(60), make_scored(59)], threshold=60)
        assert summary.suspicious == 1

    def test_empty_batch(self):
        summary = summarize([])
        assert summary.total == 0
        assert summary.suspicious == 0
        assert summary.suspicious_pct == 0.0
        assert summary.top_flags == ()

    def test_top_flags_are_a_tuple(self, make_scored):
        summary = summarize([make_scored(80, flags=["contains link", "self-promo"])])
        assert isinstance(summary.top_flags, tuple)
        assert [f.flag for f in summary.top_flags] == ["contains link", "self-promo"]

    def test_to_dict_keys(self, make_scored):
        data = summarize([make_scored(80, flags=["contains link"])]).to_dict()
        assert data == {
            "total": 1,
            "suspicious": 1,
            "suspiciousPct": 100.0,
            "topFlags": [{"flag": "contains link", "count": 1}],
            "threshold": 60,
        }


class TestPercentage:
    """Test cases for the one-decimal percentage."""

    def test_rounds_half_up(self):
        assert percentage(1, 3) == 33.3
        assert percentage(2, 3) == 66.7
        assert percentage(1, 8) == 12.5

    def test_zero_total(self):
        assert percentage(0, 0) == 0.0


class TestRankFlags:
    """Test cases for top-flag ranking."""

    def test_descending_with_first_seen_ties(self, make_scored):
        scored = [
            make_scored(10, flags=["very short"]),
            make_scored(50, flags=["contains link", "self-promo"]),
            make_scored(70, flags=["self-promo", "contact bait"]),
            make_scored(20, flags=["contact bait"]),
        ]
        ranked = [(f.flag, f.count) for f in rank_flags(scored)]
        assert ranked == [
            ("self-promo", 2),
            ("contact bait", 2),
            ("very short", 1),
            ("contains link", 1),
        ]

    def test_truncated_to_limit(self, make_scored):
        scored = [make_scored(10, flags=[f"flag {i}" for i in range(20)])]
        assert len(rank_flags(scored)) == 12
        assert len(rank_flags(scored, limit=3)) == 3
