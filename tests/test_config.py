"""Tests for the configuration management module."""

import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from loggrep.config import DEFAULT_CONFIG, Config


@pytest.fixture
def isolated_dir():
    """Run a test inside an empty working directory and home."""
    original_cwd = os.getcwd()
    with tempfile.TemporaryDirectory() as tmpdir:
        os.chdir(tmpdir)
        try:
            with patch.dict(os.environ, {"HOME": tmpdir}, clear=True):
                yield Path(tmpdir)
        finally:
            os.chdir(original_cwd)


class TestConfig:
    """Test cases for the Config class."""

    def test_default_config_values(self, isolated_dir):
        """Test that default configuration values are loaded correctly."""
        config = Config()

        assert config.get("search.date") is None
        assert config.get("search.strictness") == "silent"
        assert config.get("context.before") == 0
        assert config.get("context.after") == 0
        assert config.get("output.separator") is None

    def test_get_with_default(self, isolated_dir):
        """Test the get method with default values."""
        config = Config()

        assert config.get("non.existent.key", "default_value") == "default_value"
        # Existing keys ignore the default parameter
        assert config.get("search.strictness", "warn") == "silent"

    def test_environment_variable_override(self, isolated_dir):
        """Test that environment variables override config file values."""
        with patch.dict(os.environ, {
            "LOGGREP_CONTEXT_BEFORE": "3",
            "LOGGREP_SEARCH_STRICTNESS": "warn",
            "LOGGREP_OUTPUT_LINE_NUMBERS": "true",
        }):
            config = Config()

            assert config.get("context.before") == 3
            assert config.get("search.strictness") == "warn"
            assert config.get("output.line_numbers") is True

    def test_load_custom_config_file(self, isolated_dir):
        """Test loading configuration from a custom YAML file."""
        config_path = isolated_dir / "custom.yaml"
        config_path.write_text(yaml.dump({
            "search": {"date": r"^(\S+ \S+)"},
            "context": {"after": 2},
        }))

        with patch.dict(os.environ, {"LOGGREP_CONFIG": str(config_path)}):
            config = Config()

            assert config.get("search.date") == r"^(\S+ \S+)"
            assert config.get("context.after") == 2
            # Untouched values keep their defaults
            assert config.get("context.before") == 0
            assert config.config_file == config_path

    def test_local_config_file(self, isolated_dir):
        """Test that ./loggrep.yaml is picked up from the working directory."""
        Path("loggrep.yaml").write_text("output:\n  separator: '--'\n")
        config = Config()

        assert config.get("output.separator") == "--"

    def test_merge_does_not_mutate_defaults(self, isolated_dir):
        """Test that loading a file leaves DEFAULT_CONFIG untouched."""
        Path("loggrep.yaml").write_text("context:\n  before: 9\n")
        config = Config()

        assert config.get("context.before") == 9
        assert DEFAULT_CONFIG["context"]["before"] == 0

    def test_merge_config(self, isolated_dir):
        """Test the configuration merge functionality."""
        config = Config()

        base = {"a": {"b": 1, "c": 2}, "d": 3}
        update = {"a": {"b": 10, "e": 4}, "f": 5}

        config._merge_config(base, update)

        assert base["a"]["b"] == 10  # Updated
        assert base["a"]["c"] == 2   # Preserved
        assert base["a"]["e"] == 4   # Added
        assert base["d"] == 3        # Preserved
        assert base["f"] == 5        # Added

    def test_type_conversion_from_env(self, isolated_dir):
        """Test that environment variable values are converted to appropriate types."""
        with patch.dict(os.environ, {
            "LOGGREP_CONTEXT_AFTER": "12",
            "LOGGREP_SOME_BOOL": "false",
            "LOGGREP_SOME_FLOAT": "1.5",
            "LOGGREP_SEARCH_DATE": "^(\\S+)",
        }):
            config = Config()

            assert config.get("context.after") == 12
            assert isinstance(config.get("context.after"), int)
            assert config.get("some.bool") is False
            assert config.get("some.float") == 1.5
            assert config.get("search.date") == "^(\\S+)"

    def test_config_file_creation(self, isolated_dir):
        """Test that default config file is created when it doesn't exist."""
        config = Config()
        _ = config.get("search.date")

        config_path = isolated_dir / ".config" / "loggrep" / "loggrep.yaml"
        assert config_path.exists()

        content = config_path.read_text()
        assert "loggrep Configuration File" in content
        assert "strictness: silent" in content
        # The generated file must itself be valid YAML matching the defaults
        assert yaml.safe_load(content) == DEFAULT_CONFIG

    def test_invalid_yaml_falls_back_to_defaults(self, isolated_dir):
        """Test that a broken config file does not stop loading."""
        Path("loggrep.yaml").write_text("search: [unclosed\n")
        config = Config()

        assert config.get("search.strictness") == "silent"

    def test_config_info(self, isolated_dir):
        """Test the human-readable config description."""
        Path("loggrep.yaml").write_text("{}\n")
        config = Config()

        assert config.get_config_info() == "Config file: loggrep.yaml"
