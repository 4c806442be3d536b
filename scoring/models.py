"""
Data model shared by the scoring pipeline.

Comments come in from the fetch collaborator, ScoredComments go out to the
aggregator, the secondary classifier merge and the presentation layer.
All records are immutable; attaching a secondary opinion produces a new
ScoredComment.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from core.constants import SCORE_MAX, SCORE_MIN, SUSPICIOUS_THRESHOLD


def clamp_score(value: float) -> int:
    """Clamp into [0, 100] and round half up to an integer."""
    value = max(SCORE_MIN, min(SCORE_MAX, value))
    return int(value + 0.5)


# =============================================================================
# COMMENTS
# =============================================================================

@dataclass(frozen=True)
class Comment:
    """A top-level video comment as delivered by the fetch collaborator."""
    comment_id: str
    author_name: str
    text: str
    like_count: int = 0
    published_at: str = ""
    author_channel_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Comment":
        """
        Build a Comment from a loosely-typed dict (API-style camelCase keys).

        A missing or non-string body becomes empty text; a missing or
        negative like count becomes 0.
        """
        text = data.get("text")
        likes = data.get("likeCount", 0)
        if isinstance(likes, bool) or not isinstance(likes, int) or likes < 0:
            likes = 0
        channel_id = data.get("authorChannelId")
        return cls(
            comment_id=str(data.get("commentId", "")),
            author_name=str(data.get("authorName") or "Unknown"),
            text=text if isinstance(text, str) else "",
            like_count=likes,
            published_at=str(data.get("publishedAt") or ""),
            author_channel_id=channel_id if isinstance(channel_id, str) else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "commentId": self.comment_id,
            "authorName": self.author_name,
            "authorChannelId": self.author_channel_id,
            "text": self.text,
            "likeCount": self.like_count,
            "publishedAt": self.published_at,
        }


# =============================================================================
# SECONDARY OPINIONS
# =============================================================================

class OpinionLabel(Enum):
    """Verdict of the secondary classifier for one comment."""
    BOT = "bot"
    HUMAN = "human"
    UNCERTAIN = "uncertain"

    @classmethod
    def parse(cls, value: object) -> "OpinionLabel":
        """Map a raw label to the enum; anything unknown is UNCERTAIN."""
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.UNCERTAIN

    @property
    def display_name(self) -> str:
        mapping = {
            OpinionLabel.BOT: "Bot",
            OpinionLabel.HUMAN: "Human",
            OpinionLabel.UNCERTAIN: "Uncertain",
        }
        return mapping[self]


@dataclass(frozen=True)
class SecondaryOpinion:
    """Second opinion attached to a scored comment."""
    score: Optional[int]
    label: OpinionLabel
    reason: str = ""

    @classmethod
    def placeholder(cls) -> "SecondaryOpinion":
        """Neutral opinion for candidates the classifier did not answer."""
        return cls(score=None, label=OpinionLabel.UNCERTAIN, reason="")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "label": self.label.value,
            "reason": self.reason,
        }


# =============================================================================
# SCORED COMMENTS
# =============================================================================

@dataclass(frozen=True)
class ScoredComment:
    """A comment with its heuristic bot score and the flags that produced it."""
    comment: Comment
    bot_score: int
    flags: Tuple[str, ...] = field(default_factory=tuple)
    opinion: Optional[SecondaryOpinion] = None

    @property
    def comment_id(self) -> str:
        return self.comment.comment_id

    @property
    def text(self) -> str:
        return self.comment.text

    def is_suspicious(self, threshold: int = SUSPICIOUS_THRESHOLD) -> bool:
        return self.bot_score >= threshold

    def with_opinion(self, opinion: Optional[SecondaryOpinion]) -> "ScoredComment":
        return dataclasses.replace(self, opinion=opinion)

    def to_dict(self) -> Dict[str, Any]:
        data = self.comment.to_dict()
        data["botScore"] = self.bot_score
        data["flags"] = list(self.flags)
        if self.opinion is not None:
            data["ai"] = self.opinion.to_dict()
        return data
