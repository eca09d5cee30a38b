"""Configuration management for mythremote.

Handles configuration loading with the following precedence (highest to lowest):
1. Environment variables
2. CLI arguments
3. Config file
4. Default values
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from mythremote.core.logging import get_logger
from mythremote.frontend.state import DEFAULT_FRONTEND_PORT, FrontendEndpoint

logger = get_logger()

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "mythremote" / "config.yaml"

# Environment variable names
ENV_FRONTEND_NAME = "FRONTEND_NAME"
ENV_FRONTEND_ADDRESS = "FRONTEND_ADDRESS"
ENV_FRONTEND_PORT = "FRONTEND_PORT"
ENV_SESSION_TIMEOUT = "SESSION_TIMEOUT"
ENV_SESSION_POLL_INTERVAL = "SESSION_POLL_INTERVAL"
ENV_PROTOCOL_LOG_FILE = "PROTOCOL_LOG_FILE"
ENV_CONFIG_FILE = "MYTHREMOTE_CONFIG"


@dataclass
class FrontendConfig:
    """Frontend location settings."""

    name: str = "frontend"
    address: str | None = None
    port: int = DEFAULT_FRONTEND_PORT


@dataclass
class SessionConfig:
    """Session timing settings."""

    timeout: float = 2000.0  # ms
    poll_interval: float = 5000.0  # ms


@dataclass
class Config:
    """Main configuration container."""

    frontend: FrontendConfig = field(default_factory=FrontendConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    protocol_log_file: str | None = None

    @classmethod
    def load(
        cls,
        config_file: Path | str | None = None,
        cli_args: dict[str, Any] | None = None,
        skip_validation: bool = False,
    ) -> "Config":
        """Load configuration from all sources with proper precedence.

        Args:
            config_file: Path to configuration file. If None, uses default or env var.
            cli_args: Dictionary of CLI arguments.
            skip_validation: If True, do not require a frontend address
                (used when generating a config file).

        Returns:
            Loaded and merged configuration.

        Raises:
            ValueError: If no frontend address is set after loading all sources
                (unless skip_validation is True).
        """
        config = cls()

        if config_file is None:
            config_file = os.environ.get(ENV_CONFIG_FILE, str(DEFAULT_CONFIG_PATH))

        config_path = Path(config_file).expanduser()

        if config_path.exists():
            config = cls._load_from_file(config_path)

        if cli_args:
            config = cls._apply_cli_args(config, cli_args)

        # Environment variables have the highest precedence
        config = cls._apply_env_vars(config)

        if not skip_validation:
            config._validate()

        return config

    @staticmethod
    def _get(data: dict[str, Any], key: str) -> Any:
        """Look up a hyphenated key, falling back to its underscored spelling."""
        if key in data:
            return data[key]
        return data.get(key.replace("-", "_"))

    @classmethod
    def _load_from_file(cls, path: Path) -> "Config":
        """Load configuration from YAML file.

        Args:
            path: Path to the YAML config file.

        Returns:
            Configuration loaded from file.
        """
        config = cls()

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (yaml.YAMLError, OSError) as e:
            logger.warning(f"Failed to load config file {path}: {e}")
            return config

        frontend_data = data.get("frontend") or {}
        if cls._get(frontend_data, "name") is not None:
            config.frontend.name = str(frontend_data["name"])
        if cls._get(frontend_data, "address") is not None:
            config.frontend.address = str(frontend_data["address"])
        if cls._get(frontend_data, "port") is not None:
            config.frontend.port = int(frontend_data["port"])

        session_data = data.get("session") or {}
        if cls._get(session_data, "timeout") is not None:
            config.session.timeout = float(session_data["timeout"])
        poll_interval = cls._get(session_data, "poll-interval")
        if poll_interval is not None:
            config.session.poll_interval = float(poll_interval)

        protocol_log_file = cls._get(data, "protocol-log-file")
        if protocol_log_file is not None:
            config.protocol_log_file = str(protocol_log_file)

        return config

    @classmethod
    def _apply_cli_args(cls, config: "Config", cli_args: dict[str, Any]) -> "Config":
        """Apply CLI arguments to configuration.

        Args:
            config: Existing configuration to modify.
            cli_args: Dictionary of CLI arguments.

        Returns:
            Modified configuration.
        """
        if cli_args.get("name") is not None:
            config.frontend.name = str(cli_args["name"])

        if cli_args.get("address") is not None:
            config.frontend.address = str(cli_args["address"])

        if cli_args.get("port") is not None:
            config.frontend.port = int(cli_args["port"])

        if cli_args.get("timeout") is not None:
            config.session.timeout = float(cli_args["timeout"])

        if cli_args.get("poll_interval") is not None:
            config.session.poll_interval = float(cli_args["poll_interval"])

        if cli_args.get("protocol_log_file") is not None:
            config.protocol_log_file = str(cli_args["protocol_log_file"])

        return config

    @classmethod
    def _apply_env_vars(cls, config: "Config") -> "Config":
        """Apply environment variables to configuration.

        Args:
            config: Existing configuration to modify.

        Returns:
            Modified configuration.
        """
        if ENV_FRONTEND_NAME in os.environ:
            config.frontend.name = os.environ[ENV_FRONTEND_NAME]

        if ENV_FRONTEND_ADDRESS in os.environ:
            config.frontend.address = os.environ[ENV_FRONTEND_ADDRESS]

        if ENV_FRONTEND_PORT in os.environ:
            config.frontend.port = int(os.environ[ENV_FRONTEND_PORT])

        if ENV_SESSION_TIMEOUT in os.environ:
            config.session.timeout = float(os.environ[ENV_SESSION_TIMEOUT])

        if ENV_SESSION_POLL_INTERVAL in os.environ:
            config.session.poll_interval = float(os.environ[ENV_SESSION_POLL_INTERVAL])

        if ENV_PROTOCOL_LOG_FILE in os.environ:
            config.protocol_log_file = os.environ[ENV_PROTOCOL_LOG_FILE]

        return config

    def _validate(self) -> None:
        """Validate required configuration values.

        Raises:
            ValueError: If required configuration is missing or invalid.
        """
        if not self.frontend.address or not self.frontend.address.strip():
            raise ValueError(
                "Frontend address is required but not set. Please provide it via:\n"
                f"    - Environment variable: {ENV_FRONTEND_ADDRESS}\n"
                "    - CLI argument: --address or -a\n"
                "    - Config file: frontend.address"
            )
        if self.session.timeout <= 0:
            raise ValueError(f"Session timeout must be positive, got {self.session.timeout}")

    def endpoint(self) -> FrontendEndpoint:
        """Build the FrontendEndpoint described by this configuration."""
        return FrontendEndpoint(
            name=self.frontend.name,
            address=self.frontend.address or "",
            port=self.frontend.port,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary.

        Returns:
            Dictionary representation of configuration.
        """
        result: dict[str, Any] = {
            "frontend": {
                "name": self.frontend.name,
                "address": self.frontend.address,
                "port": self.frontend.port,
            },
            "session": {
                "timeout": self.session.timeout,
                "poll_interval": self.session.poll_interval,
            },
        }
        if self.protocol_log_file is not None:
            result["protocol_log_file"] = self.protocol_log_file
        return result

    def save(self, path: Path | str | None = None) -> None:
        """Save configuration to YAML file.

        Args:
            path: Path to save to. If None, uses default config path.
        """
        if path is None:
            path = DEFAULT_CONFIG_PATH

        save_path = Path(path).expanduser()
        save_path.parent.mkdir(parents=True, exist_ok=True)

        frontend_data: dict[str, Any] = {
            "name": self.frontend.name,
            "port": self.frontend.port,
        }
        if self.frontend.address is not None:
            frontend_data["address"] = self.frontend.address

        data: dict[str, Any] = {
            "frontend": frontend_data,
            "session": {
                "timeout": self.session.timeout,
                "poll-interval": self.session.poll_interval,
            },
        }

        if self.protocol_log_file is not None:
            data["protocol-log-file"] = self.protocol_log_file

        with open(save_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, default_flow_style=False)
