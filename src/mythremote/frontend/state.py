"""
Frontend state types - session status, endpoints and parsed locations.

This module provides the SessionStatus codes reported to listeners, the
FrontendEndpoint a session connects to and FrontendLocation, which parses
the line returned by ``query location``.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum

DEFAULT_FRONTEND_PORT = 6546


class SessionStatus(IntEnum):
    """
    Connection status of a frontend session.

    The integer values are the status codes reported to listeners.
    """
    DISCONNECTED = 0
    CONNECTED = 1
    CONNECTING = 3
    ERROR = 99

    def __str__(self) -> str:
        return self.name.capitalize()


@dataclass(frozen=True)
class FrontendEndpoint:
    """
    Identifies the frontend a session talks to.

    Attributes:
        name: Display name used in status messages.
        address: Host name or IP address of the frontend.
        port: Network control port of the frontend.
    """
    name: str
    address: str
    port: int = DEFAULT_FRONTEND_PORT

    def __str__(self) -> str:
        return f"{self.address}:{self.port}"


class LocationKind(str, Enum):
    """Broad categories of frontend locations."""
    PLAYBACK_VIDEO = "Playback Video"
    PLAYBACK_RECORDED = "Playback Recorded"
    PLAYBACK_LIVETV = "Playback LiveTV"
    MENU = "menu"

    def __str__(self) -> str:
        return self.value


DELETABLE_SCREENS = ("mythvideo", "playbackbox")


@dataclass(frozen=True)
class FrontendLocation:
    """
    Parsed view of a location string reported by ``query location``.

    Parsed from lines such as:
    Playback Video 00:01:00 1.00x ...
    Playback Recorded 00:10:12 of 00:58:00 1x ...
    mainmenu

    Attributes:
        raw: The location line as reported by the frontend.
        kind: Category of the location.
        position: Current playback position, for playback locations.
        total: Total length, for recorded and live TV playback.
    """
    raw: str
    kind: LocationKind = LocationKind.MENU
    position: str | None = None
    total: str | None = None

    @property
    def is_playback(self) -> bool:
        return self.kind is not LocationKind.MENU

    @property
    def is_deletable(self) -> bool:
        """True on screens where the frontend accepts a delete key for the selection."""
        return self.raw.startswith(DELETABLE_SCREENS)

    @classmethod
    def parse(cls, line: str) -> "FrontendLocation":
        """
        Parse a location line.

        Unknown or malformed playback lines degrade to whatever fields are
        present rather than failing.

        Args:
            line: First line of a ``query location`` response.
        """
        for kind in (
            LocationKind.PLAYBACK_VIDEO,
            LocationKind.PLAYBACK_RECORDED,
            LocationKind.PLAYBACK_LIVETV,
        ):
            if line.startswith(kind.value):
                parts = line.split(" ")
                position = parts[2] if len(parts) > 2 else None
                total = None
                if kind is not LocationKind.PLAYBACK_VIDEO and len(parts) > 4:
                    total = parts[4]
                return cls(raw=line, kind=kind, position=position, total=total)

        return cls(raw=line)
