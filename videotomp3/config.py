import json
from pathlib import Path

from .exceptions import ConfigurationError
from .logger import get_logger

logger = get_logger(__name__)

# Configuration file location
CONFIG_DIR = Path.home() / ".config" / "download-video-as-mp3"
CONFIG_FILE = CONFIG_DIR / "config.json"

# Keys with a fixed meaning and the type their value must have
PREF_YTDLP_PATH = "ytdlp_path"
PREF_NOTIFICATIONS = "notifications_enabled"
STORAGE_OUTPUT_DIR = "lastOutputDir"
STORAGE_WINDOW_WIDTH = "window_width"
STORAGE_WINDOW_HEIGHT = "window_height"
KNOWN_KEYS = {
    PREF_YTDLP_PATH: str,
    PREF_NOTIFICATIONS: bool,
    STORAGE_OUTPUT_DIR: str,
    STORAGE_WINDOW_WIDTH: int,
    STORAGE_WINDOW_HEIGHT: int,
}


def _validate_config(config):
    """
    Validate the configuration structure.

    Known keys holding a value of the wrong type are dropped so that the
    defaults apply; unknown keys are kept as is.

    Args:
        config: Configuration dictionary to validate

    Returns:
        Validated configuration dictionary
    """
    if not isinstance(config, dict):
        logger.warning("Config is not a dictionary, using empty config")
        return {}

    validated = {}
    for key, value in config.items():
        expected = KNOWN_KEYS.get(key)
        if expected is not None and (not isinstance(value, expected)
                                     or (expected is int and isinstance(value, bool))):
            logger.warning(f"Ignoring config key {key!r}: expected {expected.__name__}, "
                           f"got {type(value).__name__}")
            continue
        validated[key] = value

    logger.debug(f"Configuration validated with {len(validated)} keys")
    return validated


def load_config(path=None):
    """
    Load configuration from JSON file.

    Args:
        path: Config file to read (default: CONFIG_FILE)

    Returns:
        Configuration dictionary (empty dict if not found or invalid)
    """
    config_file = Path(path) if path else CONFIG_FILE
    logger.debug(f"Loading configuration from {config_file}...")

    if not config_file.exists():
        logger.debug(f"Config file not found: {config_file}, using defaults")
        return {}

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = json.load(f)
        logger.info("Configuration loaded successfully")
        return _validate_config(config_data)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse config file {config_file}: {e}")
    except OSError as e:
        logger.error(f"Failed to read config file {config_file}: {e}")

    logger.warning("Using default configuration")
    return {}


def save_config(config, path=None):
    """
    Save configuration to JSON file.

    Args:
        config: Configuration dictionary to save
        path: Config file to write (default: CONFIG_FILE)

    Raises:
        ConfigurationError: If the configuration cannot be saved
    """
    config_file = Path(path) if path else CONFIG_FILE
    logger.debug("Saving configuration...")

    try:
        config_file.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Failed to create config directory {config_file.parent}: {e}")
        raise ConfigurationError(f"Cannot create config directory: {e}") from e

    try:
        with open(config_file, 'w', encoding='utf-8') as f:
            json.dump(config, f, indent=2)
        logger.info(f"Configuration saved successfully to {config_file}")
    except OSError as e:
        logger.error(f"Failed to write config file {config_file}: {e}")
        raise ConfigurationError(f"Cannot write config file: {e}") from e
    except TypeError as e:
        logger.error(f"Invalid config data structure: {e}")
        raise ConfigurationError(f"Invalid config data: {e}") from e


class Preferences:
    """User preferences stored in the config file."""

    def __init__(self, config):
        self._config = config

    @property
    def ytdlp_path(self):
        return self._config.get(PREF_YTDLP_PATH, "").strip()

    @property
    def notifications_enabled(self):
        return self._config.get(PREF_NOTIFICATIONS, True)


class LocalStorage:
    """
    Small key-value store backed by the same JSON config file.

    Every write goes to disk immediately; reads are served from the
    dictionary loaded at construction time, which is shared with
    Preferences so both see the same data.
    """

    def __init__(self, path=None, config=None):
        self.path = path
        self.data = config if config is not None else load_config(path)

    def get_item(self, key, default=None):
        return self.data.get(key, default)

    def set_item(self, key, value):
        self.data[key] = value
        save_config(self.data, self.path)

    def remove_item(self, key):
        if key not in self.data:
            return
        del self.data[key]
        save_config(self.data, self.path)
