"""
Settings management with secure credential storage.

Provides persistent settings storage with system keyring integration
for the YouTube and Gemini API keys.
"""

import json
import logging
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

import keyring
from keyring.backends import fail
from keyring.errors import KeyringError, PasswordDeleteError

from core.constants import (
    GEMINI_DEFAULT_MODEL,
    KEYRING_GEMINI_KEY_NAME,
    KEYRING_SERVICE_NAME,
    KEYRING_YOUTUBE_KEY_NAME,
    MAX_COMMENTS_DEFAULT,
    SETTINGS_FILE,
    SUSPICIOUS_THRESHOLD,
    WINDOW_DEFAULT_HEIGHT,
    WINDOW_DEFAULT_WIDTH,
    SortOption,
)

logger = logging.getLogger(__name__)

# Field name -> keyring entry name
SECRET_FIELDS = {
    "youtube_api_key": KEYRING_YOUTUBE_KEY_NAME,
    "gemini_api_key": KEYRING_GEMINI_KEY_NAME,
}


def keyring_usable() -> bool:
    """True when the active keyring backend can actually store secrets."""
    try:
        backend = keyring.get_keyring()
    except KeyringError as e:
        logger.warning(f"Keyring backend unavailable: {e}")
        return False
    return not isinstance(backend, fail.Keyring)


@dataclass
class AppSettings:
    """Application settings data class."""

    # API settings
    youtube_api_key: str = ""
    gemini_api_key: str = ""
    gemini_model: str = GEMINI_DEFAULT_MODEL

    # Analysis settings
    max_comments: int = MAX_COMMENTS_DEFAULT
    suspicious_threshold: int = SUSPICIOUS_THRESHOLD
    use_secondary: bool = False

    # Presentation
    sort_by: str = SortOption.SCORE.value

    # UI preferences
    window_width: int = WINDOW_DEFAULT_WIDTH
    window_height: int = WINDOW_DEFAULT_HEIGHT

    def to_dict(self, include_api_keys: bool = False) -> dict:
        """
        Convert settings to dictionary.

        Args:
            include_api_keys: Whether to include the API keys (for non-secure storage)
        """
        data = asdict(self)
        if not include_api_keys:
            for name in SECRET_FIELDS:
                del data[name]
        return {k: v for k, v in data.items() if v is not None}

    @classmethod
    def from_dict(cls, data: dict) -> "AppSettings":
        """Create settings from dictionary."""
        # Filter to only known fields
        known_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in known_fields}
        return cls(**filtered)


class SettingsManager:
    """
    Manages application settings with secure credential storage.

    Settings are stored in a JSON file, but the API keys are stored
    securely using the system keyring when a usable backend exists.

    Usage:
        manager = SettingsManager()
        settings = manager.load()

        settings.youtube_api_key = "new_key"
        settings.use_secondary = True

        manager.save(settings)
    """

    def __init__(self, settings_file: Optional[str] = None, use_keyring: Optional[bool] = None):
        """
        Initialize the settings manager.

        Args:
            settings_file: Path to settings file. Defaults to SETTINGS_FILE constant.
            use_keyring: Force keyring usage on/off. Defaults to backend detection.
        """
        self.settings_file = Path(settings_file or SETTINGS_FILE)
        self._use_keyring = keyring_usable() if use_keyring is None else use_keyring

    @property
    def keyring_available(self) -> bool:
        """Check if secure keyring storage is available."""
        return self._use_keyring

    def load(self) -> AppSettings:
        """
        Load settings from file and keyring.

        Returns:
            AppSettings with loaded values, or defaults if no settings exist
        """
        settings = AppSettings()
        data = self._read_file()
        if data:
            settings = AppSettings.from_dict(data)

        for field_name, key_name in SECRET_FIELDS.items():
            secret = self._load_secret(key_name)
            if secret:
                setattr(settings, field_name, secret)

        return settings

    def save(self, settings: AppSettings) -> bool:
        """
        Save settings to file and keyring.

        Args:
            settings: AppSettings to save

        Returns:
            True if saved successfully
        """
        stored_in_keyring = all(
            self._save_secret(key_name, getattr(settings, field_name))
            for field_name, key_name in SECRET_FIELDS.items()
        )

        data = settings.to_dict(include_api_keys=not stored_in_keyring)
        try:
            with open(self.settings_file, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            logger.error(f"Failed to save settings: {e}")
            return False

        return True

    def delete_api_keys(self) -> bool:
        """
        Delete the stored API keys from keyring.

        Returns:
            True if deleted successfully
        """
        if not self._use_keyring:
            return True

        ok = True
        for key_name in SECRET_FIELDS.values():
            try:
                keyring.delete_password(KEYRING_SERVICE_NAME, key_name)
            except PasswordDeleteError:
                # Key didn't exist
                continue
            except KeyringError as e:
                logger.error(f"Failed to delete {key_name} from keyring: {e}")
                ok = False
        return ok

    def get_storage_info(self) -> str:
        """Get information about how the API keys are stored."""
        if self._use_keyring:
            return "API keys stored securely in system keyring"
        return "API keys stored in settings.json (no usable keyring backend)"

    def _read_file(self) -> dict:
        if not self.settings_file.exists():
            return {}
        try:
            with open(self.settings_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse settings file: {e}")
            return {}
        except OSError as e:
            logger.error(f"Failed to load settings: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _load_secret(self, key_name: str) -> Optional[str]:
        """Load an API key from keyring (file values are read by load())."""
        if not self._use_keyring:
            return None
        try:
            return keyring.get_password(KEYRING_SERVICE_NAME, key_name)
        except KeyringError as e:
            logger.warning(f"Failed to load {key_name} from keyring: {e}")
            return None

    def _save_secret(self, key_name: str, value: str) -> bool:
        """Save an API key to keyring. Returns False when it must go to the file."""
        if not self._use_keyring:
            return False
        if not value:
            return True
        try:
            keyring.set_password(KEYRING_SERVICE_NAME, key_name, value)
            return True
        except KeyringError as e:
            logger.warning(f"Failed to save {key_name} to keyring: {e}")
            logger.debug("API keys will be stored in settings file (less secure)")
            return False
