"""
YouTube comment fetch collaborator.

Pages through the YouTube Data API v3 commentThreads endpoint and hands
top-level comments to the scoring pipeline as immutable Comment records.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from googleapiclient.discovery import build, Resource
from googleapiclient.errors import HttpError

from core.constants import (
    API_DELAY_BETWEEN_PAGES,
    MAX_COMMENTS_DEFAULT,
    YOUTUBE_API_SERVICE_NAME,
    YOUTUBE_API_VERSION,
    YOUTUBE_COMMENTS_PER_PAGE,
)
from core.validators import URLValidator
from scoring.models import Comment

logger = logging.getLogger(__name__)


# =============================================================================
# EXCEPTIONS
# =============================================================================

class YouTubeAPIError(Exception):
    """Any failure talking to the YouTube Data API."""
    pass


class VideoNotFoundError(YouTubeAPIError):
    pass


class CommentsDisabledError(YouTubeAPIError):
    pass


class QuotaExceededError(YouTubeAPIError):
    pass


class InvalidURLError(ValueError):
    """No video ID could be read from the input."""
    pass


def map_http_error(error: HttpError) -> YouTubeAPIError:
    """Translate a googleapiclient HttpError into the extractor hierarchy."""
    status = error.resp.status
    body = error.content.decode("utf-8", errors="replace") if error.content else ""
    lowered = body.lower()

    if status == 404:
        return VideoNotFoundError("Video not found")
    if status == 403:
        if "commentsdisabled" in lowered or "disabled comments" in lowered:
            return CommentsDisabledError("Comments are disabled for this video")
        if "quotaexceeded" in lowered:
            return QuotaExceededError("YouTube API quota exceeded, try again tomorrow")
        return YouTubeAPIError("Access forbidden (403): check the API key restrictions")
    return YouTubeAPIError(f"YouTube API error ({status}): {body[:200]}")


# =============================================================================
# VIDEO METADATA
# =============================================================================

@dataclass(frozen=True)
class VideoMetadata:
    video_id: str
    title: str
    published_at: str
    view_count: int
    like_count: int
    comment_count: int
    channel_id: str

    @property
    def url(self) -> str:
        return f"https://www.youtube.com/watch?v={self.video_id}"

    @classmethod
    def from_api_item(cls, video_id: str, item: Dict[str, Any]) -> "VideoMetadata":
        snippet = item.get("snippet", {})
        stats = item.get("statistics", {})
        return cls(
            video_id=video_id,
            title=snippet.get("title", ""),
            published_at=snippet.get("publishedAt", ""),
            view_count=int(stats.get("viewCount", 0)),
            like_count=int(stats.get("likeCount", 0)),
            comment_count=int(stats.get("commentCount", 0)),
            channel_id=snippet.get("channelId", ""),
        )


# =============================================================================
# EXTRACTOR
# =============================================================================

class YouTubeCommentExtractor:
    """
    Fetches top-level comments for one video at a time.

    Usage:
        extractor = YouTubeCommentExtractor(api_key)
        video_id = extractor.get_video_id("https://youtu.be/VIDEO_ID")
        comments = extractor.fetch_comments(video_id, max_comments=500)
    """

    def __init__(self, api_key: str, page_delay: float = API_DELAY_BETWEEN_PAGES):
        """
        Args:
            api_key: YouTube Data API v3 key
            page_delay: Seconds to wait between comment pages
        """
        self.api_key = api_key
        self.page_delay = page_delay
        self._client: Optional[Resource] = None

    @property
    def youtube(self) -> Resource:
        """API client, built on first use."""
        if self._client is None:
            self._client = build(
                YOUTUBE_API_SERVICE_NAME,
                YOUTUBE_API_VERSION,
                developerKey=self.api_key,
            )
        return self._client

    def get_video_id(self, url: str) -> Optional[str]:
        return URLValidator.extract_video_id(url)

    def fetch_video_details(self, video_id: str) -> VideoMetadata:
        """
        Look up title and statistics for a video.

        Raises:
            VideoNotFoundError: If the API returns no item for the ID
            YouTubeAPIError: For other API errors
        """
        try:
            response = self.youtube.videos().list(part="snippet,statistics", id=video_id).execute()
        except HttpError as e:
            logger.error(f"YouTube API error ({e.resp.status}) looking up {video_id}")
            raise map_http_error(e) from e

        items = response.get("items") or []
        if not items:
            raise VideoNotFoundError(f"Video not found: {video_id}")
        return VideoMetadata.from_api_item(video_id, items[0])

    def fetch_comments(
        self,
        video_id: str,
        max_comments: int = MAX_COMMENTS_DEFAULT,
        progress_callback: Optional[Callable[[int], None]] = None,
    ) -> List[Comment]:
        """
        Collect up to ``max_comments`` top-level comments, most relevant first.

        Args:
            video_id: YouTube video ID
            max_comments: Stop once this many comments are collected
            progress_callback: Receives the running comment count after each page

        Returns:
            Comments in API order

        Raises:
            CommentsDisabledError: If the video has comments turned off
            QuotaExceededError: If the API quota is used up
            YouTubeAPIError: For other API errors
        """
        comments: List[Comment] = []
        page_token: Optional[str] = None

        while len(comments) < max_comments:
            request = {
                "part": "snippet",
                "videoId": video_id,
                "maxResults": min(YOUTUBE_COMMENTS_PER_PAGE, max_comments - len(comments)),
                "textFormat": "plainText",
                "order": "relevance",
            }
            if page_token:
                request["pageToken"] = page_token

            try:
                page = self.youtube.commentThreads().list(**request).execute()
            except HttpError as e:
                logger.error(f"YouTube API error ({e.resp.status}) fetching comments for {video_id}")
                raise map_http_error(e) from e

            for thread in page.get("items", []):
                comment = self._to_comment(thread)
                if comment is not None:
                    comments.append(comment)
                if len(comments) >= max_comments:
                    break

            if progress_callback:
                progress_callback(len(comments))

            page_token = page.get("nextPageToken")
            if not page_token:
                break
            if len(comments) < max_comments:
                time.sleep(self.page_delay)

        logger.info(f"Fetched {len(comments)} comments for {video_id}")
        return comments

    @staticmethod
    def _to_comment(thread: Dict[str, Any]) -> Optional[Comment]:
        """Build a Comment from one commentThreads item; None if it has no top-level comment."""
        try:
            top_level = thread["snippet"]["topLevelComment"]
        except (KeyError, TypeError):
            logger.debug("Skipping comment thread without a top-level comment")
            return None

        snippet = top_level.get("snippet", {})
        channel = snippet.get("authorChannelId")

        # textOriginal is the raw text; textDisplay may carry HTML
        text = snippet.get("textOriginal")
        if not isinstance(text, str):
            text = snippet.get("textDisplay", "")

        return Comment.from_dict({
            "commentId": top_level.get("id", ""),
            "authorName": snippet.get("authorDisplayName"),
            "authorChannelId": channel.get("value") if isinstance(channel, dict) else None,
            "text": text,
            "likeCount": snippet.get("likeCount", 0),
            "publishedAt": snippet.get("publishedAt", ""),
        })
