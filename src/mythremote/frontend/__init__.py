"""
Frontend package - Session management for the frontend network control protocol.

This package provides:
- FrontendRemote: High-level remote control combining the pieces below
- FrontendSession: Connection lifecycle and session state
- CommandDispatcher: Serialized command exchanges
- StatusPoller: Periodic location polling
- Notifier: Ordered delivery of StatusChanged/LocationChanged events
- FrontendTransport: TCP streams and timeouts
- encode_command/read_response: The line protocol codec
"""

from .state import (
    DEFAULT_FRONTEND_PORT,
    FrontendEndpoint,
    FrontendLocation,
    LocationKind,
    SessionStatus,
)
from .codec import PROMPT, encode_command, read_response
from .notifier import (
    LocationChanged,
    Notifier,
    SessionEvent,
    SessionListener,
    StatusChanged,
)
from .transport import FrontendTransport
from .session import FrontendSession
from .dispatcher import CommandDispatcher
from .poller import StatusPoller
from .remote import FrontendRemote

__all__ = [
    "DEFAULT_FRONTEND_PORT",
    "FrontendEndpoint",
    "FrontendLocation",
    "LocationKind",
    "SessionStatus",
    "PROMPT",
    "encode_command",
    "read_response",
    "LocationChanged",
    "Notifier",
    "SessionEvent",
    "SessionListener",
    "StatusChanged",
    "FrontendTransport",
    "FrontendSession",
    "CommandDispatcher",
    "StatusPoller",
    "FrontendRemote",
]
