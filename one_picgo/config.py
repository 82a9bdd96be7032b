"""Configuration for one-picgo."""

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from one_picgo.core.models import ConfigError
from one_picgo.uploaders.picgo import DEFAULT_PICGO_URL

logger = logging.getLogger(__name__)

# Option names used by the editor extension settings
ALIASES = {
    'uploadInterval': 'upload_interval',
    'maxRetries': 'max_retries',
    'picgoUrl': 'picgo_url',
    'stagingDir': 'staging_dir',
    'useStaging': 'use_staging',
    'keepAltText': 'keep_alt_text',
}


@dataclass
class UploaderConfig:
    """Settings for an upload run.

    Attributes:
        upload_interval: Pause after each image and between retries, in ms
        max_retries: Attempts per image before it counts as failed
        picgo_url: Upload endpoint of the PicGo server
        timeout: HTTP timeout in seconds
        staging_dir: Directory for staging copies (None: system temp dir)
        use_staging: Upload renamed staging copies instead of the originals
        keep_alt_text: Keep alt text in rewritten image links
    """
    upload_interval: int = 2000
    max_retries: int = 3
    picgo_url: str = DEFAULT_PICGO_URL
    timeout: float = 30
    staging_dir: Optional[str] = None
    use_staging: bool = True
    keep_alt_text: bool = False

    def __post_init__(self):
        for name in ('upload_interval', 'max_retries'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ConfigError(f"{name} must be a non-negative integer, got {value!r}")
        if self.max_retries == 0:
            raise ConfigError("max_retries must be at least 1")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UploaderConfig":
        """Build a config from a mapping, accepting camelCase option names."""
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            name = ALIASES.get(key, key)
            if name not in known:
                logger.warning("Ignoring unknown config option: %s", key)
                continue
            values[name] = value
        return cls(**values)


def load_config(path: Optional[Path] = None) -> UploaderConfig:
    """Load configuration from a YAML file.

    Args:
        path: YAML file to read; defaults are used when None

    Returns:
        UploaderConfig

    Raises:
        ConfigError: If the file cannot be read or holds invalid values
    """
    if path is None:
        return UploaderConfig()

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return UploaderConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must be a mapping, got {type(data).__name__}")

    return UploaderConfig.from_dict(data)
