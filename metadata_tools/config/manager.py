"""
Centralized configuration management for paper-metadata-tools.
"""
import os
import configparser
from typing import Any, Optional
from pathlib import Path


DEFAULTS = {
    'APIS': {
        'crossref_email': '',
        'crossref_timeout': '6',
    },
    'GROBID': {
        'enabled': 'false',
        'url': 'http://localhost:8070',
        'timeout': '60',
    },
    'UNSTRUCTURED': {
        'enabled': 'false',
        'url': 'http://localhost:8000/general/v0/general',
        'timeout': '120',
    },
    'OLLAMA': {
        'enabled': 'true',
        'host': 'localhost',
        'port': '11434',
        'model': 'llama3.1:8b',
        'timeout': '180',
    },
    'EXTRACTION': {
        'header_chars': '12000',
        'preprint_cue_threshold': '2',
        'summary_max_chars': '1200',
        'llm_max_workers': '2',
    },
    'LOGGING': {
        'level': 'INFO',
    },
}


class ConfigManager:
    """Centralized configuration management."""

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration manager.

        Reads the defaults, then config_file, then a config.personal.conf
        next to it (personal overrides). Missing files are skipped.

        Args:
            config_file: Path to configuration file. If None, uses default location.
        """
        self.config_file = config_file or self._get_default_config_path()
        self.config = configparser.ConfigParser()
        self._load_config()

    def _get_default_config_path(self) -> str:
        """Get default configuration file path."""
        # config.conf in the repository root
        root = Path(__file__).parent.parent.parent
        return str(root / "config.conf")

    def _load_config(self):
        """Load defaults, then the config file and its personal override."""
        self.config.read_dict(DEFAULTS)
        personal = Path(self.config_file).with_name("config.personal.conf")
        self.config.read([f for f in (self.config_file, str(personal)) if os.path.exists(f)])

    def get(self, section: str, key: str, fallback: Any = None) -> Any:
        """Get configuration value."""
        try:
            return self.config.get(section, key, fallback=fallback)
        except (configparser.NoSectionError, configparser.NoOptionError):
            return fallback

    def get_int(self, section: str, key: str, fallback: int = 0) -> int:
        """Get integer configuration value (fallback when missing or malformed)."""
        try:
            return self.config.getint(section, key, fallback=fallback)
        except ValueError:
            return fallback

    def get_bool(self, section: str, key: str, fallback: bool = False) -> bool:
        """Get boolean configuration value (true/false, yes/no, on/off, 1/0)."""
        try:
            return self.config.getboolean(section, key, fallback=fallback)
        except ValueError:
            return fallback
