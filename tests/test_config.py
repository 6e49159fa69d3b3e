"""Tests for Lending Library configuration.

These tests cover:
1. Default values
2. Environment variable loading
3. Validation of bad values
4. The process-wide config store
"""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from lending_library.config import LibraryConfig, get_config, reset_config


class TestLibraryConfig:
    """Test configuration behavior."""

    def test_default_configuration(self):
        """Defaults keep logfire local and log at INFO."""
        config = LibraryConfig()

        assert config.busy_timeout == 5.0
        assert config.echo_sql is False
        assert config.log_level == "INFO"
        assert config.debug is False
        assert config.environment == "development"
        assert config.logfire_enabled is True
        assert config.logfire_send is False
        assert config.logfire_console is False

    def test_environment_variable_loading(self):
        """Settings come from LENDING_LIBRARY_* variables."""
        env_vars = {
            "LENDING_LIBRARY_BUSY_TIMEOUT": "12.5",
            "LENDING_LIBRARY_LOG_LEVEL": "warning",
            "LENDING_LIBRARY_ECHO_SQL": "true",
            "LENDING_LIBRARY_ENVIRONMENT": "test",
            "LENDING_LIBRARY_LOGFIRE_ENABLED": "false",
        }

        with patch.dict(os.environ, env_vars):
            config = LibraryConfig()

        assert config.busy_timeout == 12.5
        assert config.log_level == "WARNING"
        assert config.echo_sql is True
        assert config.environment == "test"
        assert config.logfire_enabled is False

    def test_no_files_created(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        LibraryConfig()

        assert list(tmp_path.iterdir()) == []

    def test_debug_overrides_log_level(self):
        config = LibraryConfig(debug=True, log_level="ERROR")
        assert config.effective_log_level == "DEBUG"

    @pytest.mark.parametrize(
        "field,value",
        [
            ("log_level", "VERBOSE"),
            ("busy_timeout", 0),
            ("busy_timeout", 301),
        ],
    )
    def test_invalid_values_rejected(self, field, value):
        with pytest.raises(ValidationError) as exc_info:
            LibraryConfig(**{field: value})

        assert exc_info.value.errors()[0]["loc"] == (field,)


class TestConfigStore:
    """Test the process-wide configuration."""

    def test_get_config_is_cached(self):
        with patch.dict(os.environ, {"LENDING_LIBRARY_BUSY_TIMEOUT": "7"}):
            first = get_config()
            second = get_config()

        assert first is second
        assert first.busy_timeout == 7.0

    def test_reset_config(self):
        first = get_config()
        reset_config()
        second = get_config()

        assert first is not second
