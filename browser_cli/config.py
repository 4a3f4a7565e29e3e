"""Configuration management for browser-cli.

Supports multiple configuration sources with precedence:
CLI flags > Environment variables > Config file > Defaults

Usage:
    >>> config = Configuration()
    >>> config.load_from_file("~/.browser-cli.json")
    >>> config.load_from_env()
    >>> config.merge(chrome_port=9333)  # CLI overrides
    >>> print(config.chrome_port)
    9333
"""

import os
import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "~/.browser-cli.json"
ENV_PREFIX = "BROWSER_CLI_"


class Configuration:
    """Configuration manager with layered precedence.

    Precedence order (highest to lowest):
    1. CLI arguments (via merge method)
    2. Environment variables (BROWSER_CLI_* prefix)
    3. Config file (~/.browser-cli.json)
    4. Default values

    Attributes:
        chrome_host: Host of the remote debugging endpoint
        chrome_port: Chrome remote debugging port (default: 9222)
        timeout: Per-command timeout in seconds (default: 30.0)
        connect_timeout: Discovery and handshake deadline in seconds (default: 5.0)
        max_size: Maximum WebSocket message size in bytes (default: 16MB)
        poll_interval: Interval between wait polls in seconds (default: 0.1)
        screenshot_path: Default screenshot output file
        log_level: Logging level (default: "WARNING")
        log_format: Log output format "text" or "json" (default: "text")
    """

    DEFAULTS = {
        "chrome_host": "127.0.0.1",
        "chrome_port": 9222,
        "timeout": 30.0,
        "connect_timeout": 5.0,
        "max_size": 16_777_216,  # full-page screenshots exceed 2MB
        "poll_interval": 0.1,
        "screenshot_path": "/tmp/browser-cli/screenshot.jpg",
        "log_level": "WARNING",
        "log_format": "text",
    }

    ENV_TYPES = {
        "chrome_host": str,
        "chrome_port": int,
        "timeout": float,
        "connect_timeout": float,
        "max_size": int,
        "poll_interval": float,
        "screenshot_path": str,
        "log_level": str,
        "log_format": str,
    }

    def __init__(self):
        """Initialize configuration with default values."""
        self.chrome_host: str = self.DEFAULTS["chrome_host"]
        self.chrome_port: int = self.DEFAULTS["chrome_port"]
        self.timeout: float = self.DEFAULTS["timeout"]
        self.connect_timeout: float = self.DEFAULTS["connect_timeout"]
        self.max_size: int = self.DEFAULTS["max_size"]
        self.poll_interval: float = self.DEFAULTS["poll_interval"]
        self.screenshot_path: str = self.DEFAULTS["screenshot_path"]
        self.log_level: str = self.DEFAULTS["log_level"]
        self.log_format: str = self.DEFAULTS["log_format"]

    def load_from_file(self, file_path: str = DEFAULT_CONFIG_FILE) -> None:
        """Load configuration from JSON file.

        Args:
            file_path: Path to config file

        Note:
            Invalid JSON, a missing file, or a value that does not convert to
            the key's type is ignored with a log message.
            Partial configs are merged with existing values.
        """
        path = Path(file_path).expanduser()

        if not path.exists():
            logger.debug(f"Config file not found: {path}")
            return

        try:
            with open(path, "r") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.warning(f"Invalid JSON in config file {path}: {e}")
            return
        except OSError as e:
            logger.warning(f"Error loading config file {path}: {e}")
            return

        if not isinstance(data, dict):
            logger.warning(f"Config file {path} must contain a JSON object")
            return

        for key, value in data.items():
            type_converter = self.ENV_TYPES.get(key)
            if type_converter is None or value is None:
                continue
            try:
                setattr(self, key, type_converter(value))
            except (ValueError, TypeError) as e:
                logger.warning(f"Invalid value for {key} in config file {path}: {value!r} ({e})")
        logger.info(f"Loaded configuration from {path}")

    def load_from_env(self) -> None:
        """Load configuration from BROWSER_CLI_* environment variables.

        e.g. BROWSER_CLI_CHROME_PORT, BROWSER_CLI_TIMEOUT, BROWSER_CLI_LOG_LEVEL.
        Invalid values are ignored with a warning.
        """
        for attr_name, type_converter in self.ENV_TYPES.items():
            env_var = ENV_PREFIX + attr_name.upper()
            value = os.getenv(env_var)
            if value is not None:
                try:
                    converted_value = type_converter(value)
                    setattr(self, attr_name, converted_value)
                    logger.debug(f"Loaded {attr_name}={converted_value} from {env_var}")
                except (ValueError, TypeError) as e:
                    logger.warning(f"Invalid value for {env_var}: {value} ({e})")

    def merge(self, **kwargs) -> None:
        """Merge CLI arguments into configuration (highest precedence).

        None values are skipped so unset flags keep lower-precedence values.

        Example:
            >>> config.merge(chrome_port=9333, timeout=15.0)
        """
        self._merge_dict(kwargs)

    def _merge_dict(self, data: dict) -> None:
        for key, value in data.items():
            if key in self.DEFAULTS and value is not None:
                setattr(self, key, value)
                logger.debug(f"Set {key}={value}")

    def to_dict(self) -> dict:
        """Export configuration as dictionary."""
        return {key: getattr(self, key) for key in self.DEFAULTS}

    def __repr__(self) -> str:
        return f"Configuration({self.to_dict()})"
