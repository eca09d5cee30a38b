"""
Core package - Contains core utilities and infrastructure.

This package provides:
- Config: Configuration loading and management
- Logging: Logging utilities and the protocol log file
- Utils: Exception hierarchy and text helpers
"""

from .utils import (
    CommandEncodingError,
    ConnectIOError,
    ConnectTimeoutError,
    FrontendError,
    FrontendIOError,
    HostUnresolvableError,
    NotConnectedError,
    UnexpectedAcknowledgementError,
    text_to_keys,
)
from .config import Config, FrontendConfig, SessionConfig
from .logging import get_logger, setup_logging

__all__ = [
    "CommandEncodingError",
    "ConnectIOError",
    "ConnectTimeoutError",
    "FrontendError",
    "FrontendIOError",
    "HostUnresolvableError",
    "NotConnectedError",
    "UnexpectedAcknowledgementError",
    "text_to_keys",
    "Config",
    "FrontendConfig",
    "SessionConfig",
    "get_logger",
    "setup_logging",
]
