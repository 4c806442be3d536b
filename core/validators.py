"""
Input validation utilities.

Provides reusable validation for video URLs, API keys, and numeric options.
All validators follow a consistent pattern returning (is_valid, error_message).
"""

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from core.constants import (
    API_KEY_MIN_LENGTH,
    API_KEY_PATTERN,
    MAX_COMMENTS_DEFAULT,
    MAX_COMMENTS_MAX,
    MAX_COMMENTS_MIN,
    SCORE_MAX,
    SCORE_MIN,
    SUSPICIOUS_THRESHOLD,
    VIDEO_ID_PATTERN,
    YOUTUBE_URL_PATTERNS,
)


@dataclass
class ValidationResult:
    """Result of a validation check."""
    is_valid: bool
    error_message: Optional[str] = None

    def __bool__(self) -> bool:
        return self.is_valid


class URLValidator:
    """Validates YouTube URLs and extracts video IDs."""

    # Pre-compile patterns for performance
    _compiled_patterns = [re.compile(pattern) for pattern in YOUTUBE_URL_PATTERNS]
    _raw_id_pattern = re.compile(rf"^{VIDEO_ID_PATTERN}$")

    @classmethod
    def extract_video_id(cls, url: str) -> Optional[str]:
        """
        Extract video ID from a YouTube URL or a bare video ID.

        Args:
            url: YouTube URL in any supported format, or an 11-character ID

        Returns:
            11-character video ID or None if invalid
        """
        if not url:
            return None

        url = url.strip()

        # Pasted ID
        if cls._raw_id_pattern.match(url):
            return url

        for pattern in cls._compiled_patterns:
            match = pattern.search(url)
            if match:
                return match.group(1)

        return None

    @classmethod
    def validate(cls, url: str) -> ValidationResult:
        """
        Validate a YouTube URL.

        Args:
            url: URL to validate

        Returns:
            ValidationResult with is_valid and optional error message
        """
        if not url or not url.strip():
            return ValidationResult(False, "URL cannot be empty")

        if cls.extract_video_id(url) is None:
            return ValidationResult(
                False,
                f"Invalid YouTube URL format: {url[:50]}..."
                if len(url) > 50 else f"Invalid YouTube URL format: {url}"
            )

        return ValidationResult(True)


class APIKeyValidator:
    """Validates Google API keys (YouTube Data API v3, Gemini)."""

    _pattern = re.compile(API_KEY_PATTERN)

    @classmethod
    def validate(cls, api_key: Optional[str], name: str = "API key") -> ValidationResult:
        """
        Validate an API key format.

        Note: This only validates the format, not whether the key is actually valid.
        API key validity is confirmed when making the first API call.

        Args:
            api_key: API key string
            name: Label used in error messages

        Returns:
            ValidationResult with format validation
        """
        if not api_key:
            return ValidationResult(False, f"{name} is required")

        api_key = api_key.strip()

        if len(api_key) < API_KEY_MIN_LENGTH:
            return ValidationResult(
                False,
                f"{name} appears too short (minimum {API_KEY_MIN_LENGTH} characters)"
            )

        if not cls._pattern.match(api_key):
            return ValidationResult(False, f"{name} contains invalid characters")

        return ValidationResult(True)


class MaxCommentsValidator:
    """Validates the number of comments fetched per analysis."""

    @classmethod
    def clamp(cls, value: int) -> int:
        """Clamp a comment count into the supported range."""
        return max(MAX_COMMENTS_MIN, min(MAX_COMMENTS_MAX, value))

    @classmethod
    def parse(cls, value: str) -> Tuple[int, Optional[str]]:
        """
        Parse and validate maximum comments value.

        Args:
            value: String value from input field

        Returns:
            Tuple of (parsed_value, warning_message)
            Returns the default with a warning if invalid
        """
        if not value or not value.strip():
            return MAX_COMMENTS_DEFAULT, None

        try:
            parsed = int(value.strip())
        except ValueError:
            return MAX_COMMENTS_DEFAULT, f"Invalid max comments value, using {MAX_COMMENTS_DEFAULT}"

        clamped = cls.clamp(parsed)
        if clamped != parsed:
            return clamped, (
                f"Max comments must be between {MAX_COMMENTS_MIN} and "
                f"{MAX_COMMENTS_MAX}, using {clamped}"
            )
        return clamped, None


class ThresholdValidator:
    """Validates the suspicious-score threshold."""

    @classmethod
    def parse(cls, value: object) -> Tuple[int, Optional[str]]:
        """
        Coerce a threshold into an integer in [0, 100].

        Returns:
            Tuple of (threshold, warning_message)
        """
        try:
            parsed = int(round(float(value)))
        except (TypeError, ValueError):
            return SUSPICIOUS_THRESHOLD, f"Invalid threshold, using {SUSPICIOUS_THRESHOLD}"

        if parsed < SCORE_MIN or parsed > SCORE_MAX:
            clamped = max(SCORE_MIN, min(SCORE_MAX, parsed))
            return clamped, f"Threshold must be between {SCORE_MIN} and {SCORE_MAX}, using {clamped}"

        return parsed, None
