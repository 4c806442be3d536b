"""
Video analysis pipeline.

URL -> fetch comments -> score -> summarize -> optional second opinion ->
presentation order. This is the glue the UI and exporter consume.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from core.constants import MAX_COMMENTS_DEFAULT, SUSPICIOUS_THRESHOLD, SortOption
from core.validators import MaxCommentsValidator
from extractor import InvalidURLError, YouTubeCommentExtractor
from scoring.aggregator import Summary, summarize
from scoring.models import ScoredComment
from scoring.scorer import score_comments
from scoring.secondary import (
    BatchVerdict,
    SecondaryClassifierError,
    merge_opinions,
    select_candidates,
)

logger = logging.getLogger(__name__)


@dataclass
class AnalysisReport:
    """Everything the presentation layer needs for one video."""
    video_id: str
    fetched: int
    threshold: int
    summary: Summary
    comments: List[ScoredComment] = field(default_factory=list)
    verdict: Optional[BatchVerdict] = None
    secondary_error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "videoId": self.video_id,
            "fetched": self.fetched,
            "threshold": self.threshold,
            "summary": self.summary.to_dict(),
            "comments": [c.to_dict() for c in self.comments],
            "verdict": self.verdict.to_dict() if self.verdict else None,
            "secondaryError": self.secondary_error,
        }


def sort_scored(scored: Sequence[ScoredComment], sort_by: SortOption = SortOption.SCORE) -> List[ScoredComment]:
    """Presentation order. All sorts are stable, so ties keep batch order."""
    if sort_by == SortOption.LIKES:
        return sorted(scored, key=lambda x: x.comment.like_count, reverse=True)
    elif sort_by == SortOption.DATE_NEWEST:
        return sorted(scored, key=lambda x: x.comment.published_at, reverse=True)
    return sorted(scored, key=lambda x: x.bot_score, reverse=True)


def analyze_video(
    url: str,
    extractor: YouTubeCommentExtractor,
    classifier=None,
    max_comments: int = MAX_COMMENTS_DEFAULT,
    threshold: int = SUSPICIOUS_THRESHOLD,
    sort_by: SortOption = SortOption.SCORE,
    progress_callback: Optional[Callable[[int], None]] = None,
) -> AnalysisReport:
    """
    Fetch, score and summarize the comments of one video.

    Args:
        url: Video URL or raw video ID
        extractor: Comment fetch collaborator
        classifier: Optional secondary classifier (anything with
            ``classify(video_id, candidates) -> ClassifierResponse``)
        max_comments: Comments to fetch, clamped to the supported range
        threshold: Suspicious threshold shared by the summary and the report
        sort_by: Presentation order of the returned comments
        progress_callback: Passed through to the fetch

    Returns:
        AnalysisReport

    Raises:
        InvalidURLError: If no video ID can be extracted
        YouTubeAPIError: If the fetch fails
    """
    video_id = extractor.get_video_id(url)
    if not video_id:
        raise InvalidURLError("Invalid YouTube URL (or video ID). Please paste a full video link.")

    max_comments = MaxCommentsValidator.clamp(max_comments)
    comments = extractor.fetch_comments(
        video_id,
        max_comments=max_comments,
        progress_callback=progress_callback,
    )

    scored = score_comments(comments)
    summary = summarize(scored, threshold=threshold)
    logger.info(
        f"{video_id}: {summary.suspicious}/{summary.total} suspicious "
        f"({summary.suspicious_pct}%) at threshold {threshold}"
    )

    verdict: Optional[BatchVerdict] = None
    secondary_error: Optional[str] = None

    if classifier is not None and scored:
        candidates = select_candidates(scored)
        try:
            response = classifier.classify(video_id, candidates)
        except SecondaryClassifierError as e:
            logger.warning(f"Secondary classifier failed, keeping heuristic scores only: {e}")
            secondary_error = str(e)
        else:
            scored = merge_opinions(scored, candidates, response)
            verdict = response.verdict

    return AnalysisReport(
        video_id=video_id,
        fetched=len(comments),
        threshold=threshold,
        summary=summary,
        comments=sort_scored(scored, sort_by),
        verdict=verdict,
        secondary_error=secondary_error,
    )
