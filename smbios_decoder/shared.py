"""
Shared utilities: configuration and logging.
"""
import sys
import logging
from pathlib import Path
from configparser import ConfigParser, Error as ConfigError
from typing import Optional, Union

DEFAULT_CONFIG_NAME = "smbios_decoder.ini"
LOGGER_NAME = "smbios_decoder"


class ConfigManager:
    """Manages decoder configuration from an INI file."""

    def __init__(self, config_path: Union[str, Path] = DEFAULT_CONFIG_NAME):
        self.config_path = Path(config_path)
        self.config = ConfigParser()

    def load(self) -> ConfigParser:
        """Load config file (a missing file leaves every value at its fallback)."""
        self.config.read(self.config_path)

        # Relative paths in the file may refer to %(CONFIG_DIR)s
        self.config.set('DEFAULT', 'CONFIG_DIR', str(self.config_path.resolve().parent))

        return self.config

    @property
    def exists(self) -> bool:
        return self.config_path.is_file()

    def get(self, section: str, key: str, fallback: Optional[str] = None) -> str:
        """Get config value with fallback."""
        try:
            return self.config.get(section, key)
        except ConfigError:
            return fallback if fallback else ""

    def getint(self, section: str, key: str, fallback: int = 0) -> int:
        """Get integer config value."""
        try:
            return self.config.getint(section, key)
        except (ConfigError, ValueError):
            return fallback

    def getbool(self, section: str, key: str, fallback: bool = False) -> bool:
        """Get boolean config value."""
        try:
            return self.config.getboolean(section, key)
        except (ConfigError, ValueError):
            return fallback


class LogManager:
    """Manages logging for the decoder package."""

    def __init__(self, name: str = LOGGER_NAME, log_dir: Optional[Path] = None, level: str = "WARNING"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

        # Repeated setup in one process replaces the previous handlers
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()

        formatter = logging.Formatter(
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # Console handler on stderr; stdout carries command output
        ch = logging.StreamHandler(sys.stderr)
        ch.setLevel(self.logger.level)
        ch.setFormatter(formatter)
        self.logger.addHandler(ch)

        # File handler
        self.log_dir = Path(log_dir) if log_dir else None
        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(self.log_dir / f"{name}.log")
            fh.setLevel(logging.DEBUG)
            fh.setFormatter(formatter)
            self.logger.addHandler(fh)

    def get_logger(self) -> logging.Logger:
        """Get configured logger."""
        return self.logger
