"""
Application constants and configuration values.

Centralized location for all magic numbers, strings, and configuration values.
"""

from enum import Enum
from typing import Dict


# =============================================================================
# APPLICATION METADATA
# =============================================================================

APP_NAME = "YouTube Comment Bot Scanner"
APP_VERSION = "1.0.0"
APP_DESCRIPTION = "Score YouTube comments for bot-like and spam behaviour"


# =============================================================================
# UI THEME CONFIGURATION
# =============================================================================

COLORS: Dict[str, str] = {
    "bg_dark": "#1a1a2e",
    "bg_card": "#16213e",
    "bg_input": "#0f0f1a",
    "accent": "#e94560",
    "accent_hover": "#ff6b6b",
    "accent_secondary": "#0f3460",
    "text_primary": "#ffffff",
    "text_secondary": "#a0a0a0",
    "text_muted": "#6c6c6c",
    "success": "#4ecca3",
    "warning": "#ffc107",
    "error": "#ff6b6b",
    "border": "#2a2a4a",
}


# =============================================================================
# API CONFIGURATION
# =============================================================================

# YouTube API settings
YOUTUBE_API_SERVICE_NAME = "youtube"
YOUTUBE_API_VERSION = "v3"
YOUTUBE_COMMENTS_PER_PAGE = 100

# Rate limiting
API_DELAY_BETWEEN_PAGES = 0.5  # seconds

# API Key validation
API_KEY_MIN_LENGTH = 20
API_KEY_PATTERN = r"^[A-Za-z0-9_-]+$"

# Gemini (secondary classifier)
GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"
GEMINI_DEFAULT_MODEL = "gemini-1.5-flash"
GEMINI_TEMPERATURE = 0.2
GEMINI_MAX_OUTPUT_TOKENS = 2048
GEMINI_TIMEOUT = 60  # seconds

# Comments per analysis run
MAX_COMMENTS_DEFAULT = 500
MAX_COMMENTS_MIN = 50
MAX_COMMENTS_MAX = 5000


# =============================================================================
# YOUTUBE URL PATTERNS
# =============================================================================

# Video ID is always 11 characters: alphanumeric, underscore, hyphen
VIDEO_ID_LENGTH = 11
VIDEO_ID_PATTERN = r"[a-zA-Z0-9_-]{11}"

# Supported YouTube URL formats
YOUTUBE_URL_PATTERNS = [
    rf"(?:https?://)?(?:(?:www|m|music)\.)?youtube\.com/watch\?(?:.*&)?v=({VIDEO_ID_PATTERN})",
    rf"(?:https?://)?(?:(?:www|m)\.)?youtube\.com/v/({VIDEO_ID_PATTERN})",
    rf"(?:https?://)?(?:(?:www|m)\.)?youtube\.com/embed/({VIDEO_ID_PATTERN})",
    rf"(?:https?://)?(?:(?:www|m)\.)?youtube\.com/shorts/({VIDEO_ID_PATTERN})",
    rf"(?:https?://)?youtu\.be/({VIDEO_ID_PATTERN})",
]


# =============================================================================
# SCORING CONFIGURATION
# =============================================================================

# A comment is "suspicious" when its bot score reaches this value.
# Shared by the scorer output and the batch summary.
SUSPICIOUS_THRESHOLD = 60

SCORE_MIN = 0
SCORE_MAX = 100

# Fingerprints shorter than this never count as templates ("nice", "lol")
FINGERPRINT_MIN_LENGTH = 18

# A template needs this many copies in one batch before it is flagged
DUPLICATE_MIN_COUNT = 3

TOP_FLAGS_LIMIT = 12

# Secondary classifier candidate selection
SECONDARY_CANDIDATE_LIMIT = 30
SECONDARY_TEXT_LIMIT = 500
SECONDARY_REASON_LIMIT = 300

# Delimiter used when a flag list is flattened into one export cell
FLAG_DELIMITER = " | "


# =============================================================================
# SETTINGS CONFIGURATION
# =============================================================================

SETTINGS_FILE = "settings.json"
KEYRING_SERVICE_NAME = "yt-bot-scanner"
KEYRING_YOUTUBE_KEY_NAME = "youtube_api_key"
KEYRING_GEMINI_KEY_NAME = "gemini_api_key"


# =============================================================================
# ENUMS
# =============================================================================

class SortOption(Enum):
    """Presentation order for scored comments."""
    SCORE = "score"
    LIKES = "likes"
    DATE_NEWEST = "date_desc"

    @classmethod
    def from_display_name(cls, name: str) -> "SortOption":
        """Convert display name to enum value."""
        mapping = {
            "Bot Score": cls.SCORE,
            "Likes": cls.LIKES,
            "Date (Newest)": cls.DATE_NEWEST,
        }
        return mapping.get(name, cls.SCORE)

    @property
    def display_name(self) -> str:
        """Get human-readable display name."""
        mapping = {
            SortOption.SCORE: "Bot Score",
            SortOption.LIKES: "Likes",
            SortOption.DATE_NEWEST: "Date (Newest)",
        }
        return mapping[self]


class SensitivityPreset(Enum):
    """Preset suspicious thresholds (lower = flags more comments)."""
    LIGHT = 75
    MODERATE = 60      # Default
    AGGRESSIVE = 45
    STRICT = 35

    @classmethod
    def label_for(cls, threshold: float) -> str:
        """Name of the preset band a threshold falls into."""
        if threshold >= cls.LIGHT.value:
            return "Light"
        if threshold >= cls.MODERATE.value:
            return "Moderate"
        if threshold >= cls.AGGRESSIVE.value:
            return "Aggressive"
        return "Strict"


class LogLevel(Enum):
    """Log message severity levels."""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    MUTED = "muted"


# =============================================================================
# LOG STYLING
# =============================================================================

LOG_ICONS: Dict[str, str] = {
    "info": "→",
    "success": "✓",
    "warning": "⚠",
    "error": "✗",
    "muted": "·",
}

LOG_COLORS: Dict[str, str] = {
    "info": COLORS["text_secondary"],
    "success": COLORS["success"],
    "warning": COLORS["warning"],
    "error": COLORS["error"],
    "muted": COLORS["text_muted"],
}


# =============================================================================
# WINDOW CONFIGURATION
# =============================================================================

WINDOW_DEFAULT_WIDTH = 1000
WINDOW_DEFAULT_HEIGHT = 820
WINDOW_MIN_WIDTH = 820
WINDOW_MIN_HEIGHT = 600
