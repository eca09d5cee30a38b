"""Tests for the configuration module."""

import os
import tempfile
from pathlib import Path

import pytest
import yaml

from mythremote.core.config import (
    Config,
    FrontendConfig,
    SessionConfig,
    ENV_CONFIG_FILE,
    ENV_FRONTEND_ADDRESS,
    ENV_FRONTEND_NAME,
    ENV_FRONTEND_PORT,
    ENV_PROTOCOL_LOG_FILE,
    ENV_SESSION_POLL_INTERVAL,
    ENV_SESSION_TIMEOUT,
)
from mythremote.frontend import FrontendEndpoint

ALL_ENV_VARS = (
    ENV_CONFIG_FILE,
    ENV_FRONTEND_ADDRESS,
    ENV_FRONTEND_NAME,
    ENV_FRONTEND_PORT,
    ENV_PROTOCOL_LOG_FILE,
    ENV_SESSION_POLL_INTERVAL,
    ENV_SESSION_TIMEOUT,
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep the user's environment and config file out of the tests."""
    for name in ALL_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv(ENV_CONFIG_FILE, "/nonexistent/path/config.yaml")


def write_yaml(data) -> str:
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        yaml.safe_dump(data, f)
        return f.name


class TestFrontendConfig:
    """Tests for FrontendConfig dataclass."""

    def test_default_values(self):
        """Test that FrontendConfig has correct default values."""
        config = FrontendConfig()
        assert config.name == "frontend"
        assert config.address is None
        assert config.port == 6546


class TestSessionConfig:
    """Tests for SessionConfig dataclass."""

    def test_default_values(self):
        """Test that SessionConfig has correct default values."""
        config = SessionConfig()
        assert config.timeout == 2000.0
        assert config.poll_interval == 5000.0


class TestConfig:
    """Tests for Config class."""

    def test_to_dict(self):
        """Test converting Config to dictionary."""
        config = Config()
        config.frontend.address = "10.0.0.5"

        assert config.to_dict() == {
            "frontend": {
                "name": "frontend",
                "address": "10.0.0.5",
                "port": 6546,
            },
            "session": {
                "timeout": 2000.0,
                "poll_interval": 5000.0,
            },
        }

    def test_endpoint(self):
        """Test building the endpoint to connect to."""
        config = Config()
        config.frontend.name = "Lounge"
        config.frontend.address = "10.0.0.5"
        config.frontend.port = 7000

        assert config.endpoint() == FrontendEndpoint("Lounge", "10.0.0.5", 7000)

    def test_missing_address_is_rejected(self):
        """Test that loading without a frontend address fails validation."""
        with pytest.raises(ValueError, match="Frontend address is required"):
            Config.load()

    def test_skip_validation(self):
        """Test that validation can be skipped, e.g. for generating a config file."""
        config = Config.load(skip_validation=True)
        assert config.frontend.address is None

    def test_non_positive_timeout_is_rejected(self):
        """Test that a zero timeout fails validation."""
        with pytest.raises(ValueError, match="timeout"):
            Config.load(cli_args={"address": "10.0.0.5", "timeout": 0})


class TestConfigLoadFromFile:
    """Tests for loading configuration from files."""

    def test_load_from_yaml_file(self):
        """Test loading configuration from a YAML file."""
        config_path = write_yaml({
            "frontend": {"name": "Lounge", "address": "192.168.1.20", "port": 7000},
            "session": {"timeout": 1500, "poll-interval": 1000},
            "protocol-log-file": "/tmp/protocol.log",
        })

        try:
            config = Config.load(config_file=config_path)
            assert config.frontend.name == "Lounge"
            assert config.frontend.address == "192.168.1.20"
            assert config.frontend.port == 7000
            assert config.session.timeout == 1500.0
            assert config.session.poll_interval == 1000.0
            assert config.protocol_log_file == "/tmp/protocol.log"
        finally:
            os.unlink(config_path)

    def test_load_from_yaml_with_underscore_keys(self):
        """Test loading configuration with underscore-style keys."""
        config_path = write_yaml({
            "frontend": {"address": "192.168.1.20"},
            "session": {"poll_interval": 250},
            "protocol_log_file": "/tmp/protocol.log",
        })

        try:
            config = Config.load(config_file=config_path)
            assert config.session.poll_interval == 250.0
            assert config.protocol_log_file == "/tmp/protocol.log"
        finally:
            os.unlink(config_path)

    def test_load_partial_config_file(self):
        """Test loading a config file with only some values specified."""
        config_path = write_yaml({"frontend": {"address": "192.168.1.20"}})

        try:
            config = Config.load(config_file=config_path)
            assert config.frontend.address == "192.168.1.20"
            assert config.frontend.port == 6546  # Default
            assert config.session.timeout == 2000.0  # Default
        finally:
            os.unlink(config_path)

    def test_invalid_yaml_uses_defaults(self):
        """Test that a broken config file is ignored with a warning."""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            f.write("frontend: [unclosed\n")
            config_path = f.name

        try:
            config = Config.load(config_file=config_path, cli_args={"address": "10.0.0.5"})
            assert config.frontend.port == 6546
            assert config.frontend.address == "10.0.0.5"
        finally:
            os.unlink(config_path)


class TestConfigPrecedence:
    """Tests for CLI argument and environment variable precedence."""

    def test_cli_args_override_file(self):
        """Test that CLI arguments override file values."""
        config_path = write_yaml({"frontend": {"address": "192.168.1.20", "port": 7000}})

        try:
            config = Config.load(config_file=config_path, cli_args={"port": 8000, "name": None})
            assert config.frontend.port == 8000  # From CLI
            assert config.frontend.address == "192.168.1.20"  # From file
            assert config.frontend.name == "frontend"  # None is ignored
        finally:
            os.unlink(config_path)

    def test_env_vars_override_all(self, monkeypatch):
        """Test that environment variables override everything."""
        config_path = write_yaml({
            "frontend": {"address": "192.168.1.20", "port": 7000},
            "session": {"timeout": 1500},
        })

        try:
            monkeypatch.setenv(ENV_FRONTEND_ADDRESS, "10.0.0.1")
            monkeypatch.setenv(ENV_FRONTEND_PORT, "6000")
            monkeypatch.setenv(ENV_FRONTEND_NAME, "Den")
            monkeypatch.setenv(ENV_SESSION_TIMEOUT, "500")
            monkeypatch.setenv(ENV_SESSION_POLL_INTERVAL, "0")

            config = Config.load(config_file=config_path, cli_args={"port": 8000})

            assert config.frontend.address == "10.0.0.1"
            assert config.frontend.port == 6000
            assert config.frontend.name == "Den"
            assert config.session.timeout == 500.0
            assert config.session.poll_interval == 0.0
        finally:
            os.unlink(config_path)

    def test_env_var_for_config_path(self, monkeypatch):
        """Test that MYTHREMOTE_CONFIG sets the config path."""
        config_path = write_yaml({"frontend": {"address": "192.168.1.99"}})

        try:
            monkeypatch.setenv(ENV_CONFIG_FILE, config_path)
            config = Config.load()
            assert config.frontend.address == "192.168.1.99"
        finally:
            os.unlink(config_path)


class TestConfigSave:
    """Tests for saving configuration to files."""

    def test_save_uses_hyphenated_keys(self):
        """Test that save writes the file format that load reads."""
        config = Config()
        config.frontend.address = "192.168.1.20"
        config.session.poll_interval = 1000.0

        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "subdir" / "config.yaml"
            config.save(config_path)

            with open(config_path) as f:
                saved_data = yaml.safe_load(f)

            assert saved_data["frontend"]["address"] == "192.168.1.20"
            assert saved_data["session"]["poll-interval"] == 1000.0
            assert "protocol-log-file" not in saved_data

            loaded = Config.load(config_file=config_path)
            assert loaded.to_dict() == config.to_dict()
