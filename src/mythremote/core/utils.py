"""
Exceptions and helper functions for mythremote.

This module provides the error hierarchy used by the frontend session layer
and small text helpers shared by the dispatcher and the CLI.
"""

from collections.abc import Iterator


class FrontendError(Exception):
    """Base class for errors talking to a frontend."""

    pass


class HostUnresolvableError(FrontendError):
    """Raised when the frontend address cannot be resolved."""

    pass


class ConnectIOError(FrontendError):
    """Raised when the TCP connection to the frontend cannot be opened."""

    pass


class ConnectTimeoutError(FrontendError):
    """Raised when opening the connection takes longer than the session timeout."""

    pass


class NotConnectedError(FrontendError):
    """Raised when a command is attempted without a connected session."""

    pass


class UnexpectedAcknowledgementError(FrontendError):
    """Raised when a state-changing command is not answered with OK."""

    def __init__(self, command: str, response: str | None):
        self.command = command
        self.response = response
        if response is None:
            message = f"Command {command!r} returned no results"
        else:
            message = f"Command {command!r} returned {response!r}"
        super().__init__(message)


class FrontendIOError(FrontendError):
    """
    Raised when reading from or writing to the frontend fails.

    Attributes:
        partial: Response lines read before the failure, if any.
    """

    def __init__(self, message: str, partial: list[str] | None = None):
        super().__init__(message)
        self.partial = partial or []


class CommandEncodingError(FrontendError, ValueError):
    """Raised when a command cannot be encoded for the wire."""

    pass


# Whitespace characters that map to named frontend keys
WHITESPACE_KEYS = {
    "\t": "tab",
    " ": "space",
    "\r": "enter",
    "\n": "enter",
}


def text_to_keys(text: str) -> Iterator[str]:
    """
    Translate free text into the sequence of key tokens that types it.

    Tabs, spaces and line breaks become the named keys ``tab``, ``space`` and
    ``enter``; any other whitespace is dropped. Every other character is sent
    as itself.

    Example:
        >>> list(text_to_keys("a b"))
        ['a', 'space', 'b']
    """
    for char in text:
        if char.isspace():
            key = WHITESPACE_KEYS.get(char)
            if key:
                yield key
        else:
            yield char


def describe_error(exc: BaseException) -> str:
    """Return a short human readable reason for an exception."""
    reason = str(exc)
    if not reason:
        reason = type(exc).__name__
    return reason
