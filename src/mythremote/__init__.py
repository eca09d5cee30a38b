"""mythremote - Remote control client for the MythTV frontend network control port."""

__version__ = "0.1.0"
__author__ = "mythremote Team"

from .frontend import (
    FrontendEndpoint,
    FrontendLocation,
    FrontendRemote,
    FrontendSession,
    LocationChanged,
    SessionListener,
    SessionStatus,
    StatusChanged,
)
from .core import Config, FrontendError, FrontendIOError, NotConnectedError

__all__ = [
    "FrontendEndpoint",
    "FrontendLocation",
    "FrontendRemote",
    "FrontendSession",
    "LocationChanged",
    "SessionListener",
    "SessionStatus",
    "StatusChanged",
    "Config",
    "FrontendError",
    "FrontendIOError",
    "NotConnectedError",
    "__version__",
]
