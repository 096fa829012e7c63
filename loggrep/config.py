"""Configuration management for loggrep."""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict

import yaml

logger = logging.getLogger("loggrep.config")

# Default configuration values
DEFAULT_CONFIG = {
    "search": {"date": None, "strictness": "silent", "literal": False},
    "context": {"before": 0, "after": 0},
    "output": {"separator": None, "line_numbers": False, "strip_ansi": False},
}


class Config:
    """Configuration manager for loggrep."""

    def __init__(self):
        self._config = None
        self._config_file = None
        self._loaded = False
        self._loading = False

    def _get_config_path(self) -> Path:
        """Get the configuration file path."""
        # Check for config file in order of preference:
        # 1. Environment variable
        if os.environ.get("LOGGREP_CONFIG"):
            return Path(os.environ["LOGGREP_CONFIG"])

        # 2. Current directory
        local_config = Path("./loggrep.yaml")
        if local_config.exists():
            return local_config

        # 3. User config directory
        config_dir = Path.home() / ".config" / "loggrep"
        config_file = config_dir / "loggrep.yaml"

        if not config_dir.exists():
            config_dir.mkdir(parents=True, exist_ok=True)

        if not config_file.exists():
            self._create_default_config(config_file)

        return config_file

    def _create_default_config(self, config_file: Path):
        """Create a default configuration file with comments."""
        default_config_content = """# loggrep Configuration File
# Command line options always override these settings

# Search Settings
search:
  # Regex used to find the date in each line; the first capture group is
  # handed to the date parser. Required either here or via --date.
  # Example: '^(\\S+ \\S+)'
  date: null

  # What to do with lines where no date can be found while filtering by time
  # One of: silent, warn, abort
  # Default: silent
  strictness: silent

  # Treat --include/--exclude patterns as literal text instead of regexes
  # Default: false
  literal: false

# Context Settings
context:
  # Lines to show before each matching line
  # Default: 0
  before: 0

  # Lines to show after each matching line
  # Default: 0
  after: 0

# Output Settings
output:
  # Line printed between non-contiguous blocks of output
  # null disables separators, '' prints a blank line
  # Default: null
  separator: null

  # Prefix output lines with their line number
  # Default: false
  line_numbers: false

  # Remove ANSI color codes from output lines
  # Default: false
  strip_ansi: false

# Note: You can also override these settings with environment variables:
# - LOGGREP_SEARCH_DATE
# - LOGGREP_SEARCH_STRICTNESS
# - LOGGREP_CONTEXT_BEFORE
# - LOGGREP_CONTEXT_AFTER
# - LOGGREP_OUTPUT_SEPARATOR
"""
        try:
            config_file.write_text(default_config_content)
            logger.info(f"Created default configuration file at {config_file}")
        except OSError as e:
            logger.warning(f"Failed to create default config file: {e}")

    def _load_config(self):
        """Load configuration from file."""
        try:
            self._config_file = self._get_config_path()

            if self._config_file.exists():
                with open(self._config_file, "r") as f:
                    loaded_config = yaml.safe_load(f) or {}

                self._merge_config(self._config, loaded_config)
                logger.info(f"Loaded configuration from {self._config_file}")
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config file, using defaults: {e}")

    def _merge_config(self, base: Dict[str, Any], update: Dict[str, Any]):
        """Recursively merge configuration dictionaries."""
        for key, value in update.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_config(base[key], value)
            else:
                base[key] = value

    def _ensure_loaded(self):
        """Ensure configuration is loaded (lazy loading)."""
        if not self._loaded and not self._loading:
            self._loading = True
            try:
                self._config = copy.deepcopy(DEFAULT_CONFIG)
                self._load_config()
                self._loaded = True
            finally:
                self._loading = False

    @property
    def config_file(self):
        """Get the configuration file path."""
        self._ensure_loaded()
        return self._config_file

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value using dot notation (e.g., 'context.before')."""
        self._ensure_loaded()
        # Check environment variable override first
        env_key = f"LOGGREP_{key.upper().replace('.', '_')}"
        if env_key in os.environ:
            value = os.environ[env_key]
            if value.isdigit():
                return int(value)
            if value.lower() in ("true", "false"):
                return value.lower() == "true"
            if "." in value:
                try:
                    return float(value)
                except ValueError:
                    pass
            return value

        # Navigate through nested config
        keys = key.split(".")
        value = self._config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def get_config_info(self) -> str:
        """Get information about the current configuration."""
        self._ensure_loaded()
        return f"Config file: {self._config_file or 'Using defaults'}"


# Global config instance - lazy loaded
config = Config()
