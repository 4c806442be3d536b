"""
Batch summary of scored comments.
"""

import math
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

from core.constants import SUSPICIOUS_THRESHOLD, TOP_FLAGS_LIMIT
from scoring.models import ScoredComment


@dataclass(frozen=True)
class FlagCount:
    """How many comments in a batch carry a flag."""
    flag: str
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"flag": self.flag, "count": self.count}


@dataclass(frozen=True)
class Summary:
    """Aggregate view of one scored batch."""
    total: int
    suspicious: int
    suspicious_pct: float
    top_flags: Tuple[FlagCount, ...] = ()
    threshold: int = SUSPICIOUS_THRESHOLD

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "suspicious": self.suspicious,
            "suspiciousPct": self.suspicious_pct,
            "topFlags": [f.to_dict() for f in self.top_flags],
            "threshold": self.threshold,
        }


def percentage(part: int, total: int) -> float:
    """part/total as a percentage with one decimal, rounded half up; 0.0 for an empty batch."""
    if total <= 0:
        return 0.0
    return math.floor(part / total * 1000 + 0.5) / 10


def rank_flags(scored: Sequence[ScoredComment], limit: int = TOP_FLAGS_LIMIT) -> List[FlagCount]:
    """
    Flags by number of occurrences, descending.

    Counter keeps first-seen order and sorted() is stable, so ties stay in
    the order the flags were first seen.
    """
    counts: Counter = Counter()
    for item in scored:
        counts.update(item.flags)
    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    return [FlagCount(flag, count) for flag, count in ranked[:limit]]


def summarize(
    scored: Sequence[ScoredComment],
    threshold: int = SUSPICIOUS_THRESHOLD,
    top_n: int = TOP_FLAGS_LIMIT,
) -> Summary:
    """
    Reduce a scored batch to counts and top flags.

    Args:
        scored: Scored comments
        threshold: Score at or above which a comment is suspicious
        top_n: Number of flags to keep

    Returns:
        Summary whose total equals len(scored)
    """
    total = len(scored)
    suspicious = sum(1 for item in scored if item.is_suspicious(threshold))
    return Summary(
        total=total,
        suspicious=suspicious,
        suspicious_pct=percentage(suspicious, total),
        top_flags=tuple(rank_flags(scored, top_n)),
        threshold=threshold,
    )
