"""Shared fixtures for the test-suite."""

from typing import Callable, List, Optional

import pytest

from scoring.models import Comment, ScoredComment


@pytest.fixture
def make_comment() -> Callable[..., Comment]:
    """Factory for Comment records with sensible defaults."""
    counter = {"n": 0}

    def _make(
        text: str,
        author: str = "viewer",
        likes: int = 0,
        published_at: str = "2024-05-01T12:00:00Z",
        comment_id: Optional[str] = None,
    ) -> Comment:
        counter["n"] += 1
        return Comment(
            comment_id=comment_id or f"c{counter['n']}",
            author_name=author,
            text=text,
            like_count=likes,
            published_at=published_at,
        )

    return _make


@pytest.fixture
def make_scored(make_comment) -> Callable[..., ScoredComment]:
    """Factory for ScoredComment records with a fixed score."""

    def _make(score: int, flags=(), text: Optional[str] = None, **kwargs) -> ScoredComment:
        comment = make_comment(text if text is not None else f"comment scored {score}", **kwargs)
        return ScoredComment(comment=comment, bot_score=score, flags=tuple(flags))

    return _make


@pytest.fixture
def mixed_batch(make_comment) -> List[Comment]:
    """A small batch with one obvious spam campaign and ordinary viewers."""
    template = "Thanks for this video, message me on whatsapp for trading tips"
    return [
        make_comment("This explanation of recursion finally made it click for me.", likes=120),
        make_comment(template, author="bot_1"),
        make_comment("What software did you use for the animations?", likes=8),
        make_comment(template, author="bot_2"),
        make_comment("nice", likes=1),
        make_comment(template, author="bot_3"),
        make_comment("FREE GIFT CARD GIVEAWAY!!! claim now at www.free-prizes.xyz", author="promo"),
    ]
