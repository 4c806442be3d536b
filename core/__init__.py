"""
Core modules for YouTube Comment Bot Scanner.

This package contains shared constants, configuration, and input validation.
"""

from core.constants import (
    APP_NAME,
    APP_VERSION,
    COLORS,
    LOG_COLORS,
    LOG_ICONS,
    SUSPICIOUS_THRESHOLD,
    WINDOW_DEFAULT_WIDTH,
    WINDOW_DEFAULT_HEIGHT,
    WINDOW_MIN_WIDTH,
    WINDOW_MIN_HEIGHT,
    SensitivityPreset,
    SortOption,
    LogLevel,
)
from core.validators import (
    ValidationResult,
    URLValidator,
    APIKeyValidator,
    MaxCommentsValidator,
    ThresholdValidator,
)
from core.settings import SettingsManager, AppSettings

__all__ = [
    # Constants
    "APP_NAME",
    "APP_VERSION",
    "COLORS",
    "LOG_COLORS",
    "LOG_ICONS",
    "SUSPICIOUS_THRESHOLD",
    "WINDOW_DEFAULT_WIDTH",
    "WINDOW_DEFAULT_HEIGHT",
    "WINDOW_MIN_WIDTH",
    "WINDOW_MIN_HEIGHT",
    # Enums
    "SensitivityPreset",
    "SortOption",
    "LogLevel",
    # Validators
    "ValidationResult",
    "URLValidator",
    "APIKeyValidator",
    "MaxCommentsValidator",
    "ThresholdValidator",
    # Settings
    "SettingsManager",
    "AppSettings",
]
