"""
Session transport - TCP stream handling for a frontend connection.

This module provides the FrontendTransport class which owns the asyncio stream
pair for one connection and enforces the session timeout on connect and reads.
"""

import asyncio
import socket

from mythremote.core.logging import get_logger, log_protocol_sent
from mythremote.core.utils import (
    ConnectIOError,
    ConnectTimeoutError,
    FrontendIOError,
    HostUnresolvableError,
    describe_error,
)
from mythremote.frontend.codec import encode_command, read_response
from mythremote.frontend.state import FrontendEndpoint

logger = get_logger()

DEFAULT_TIMEOUT = 2000.0  # ms


def buffered_size(reader: asyncio.StreamReader) -> int:
    """Number of bytes received but not yet read from the stream."""
    # StreamReader has no public accessor; CPython keeps the data in the
    # private bytearray StreamReader._buffer
    return len(reader._buffer)  # pyright: ignore[reportAttributeAccessIssue]


class FrontendTransport:
    """
    Owns the socket streams of a single frontend connection.

    The transport knows nothing about session state; it opens, reads, writes
    and closes, raising FrontendError subclasses on failure.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        """
        Initialize the transport.

        Args:
            timeout: Timeout in ms for connecting and for each read.
        """
        self.timeout = timeout / 1000
        self.endpoint: FrontendEndpoint | None = None
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None

    @property
    def is_open(self) -> bool:
        return self._reader is not None and self._writer is not None

    @property
    def address(self) -> str | None:
        return self.endpoint.address if self.endpoint else None

    async def open(self, endpoint: FrontendEndpoint) -> None:
        """
        Open a TCP connection to the frontend.

        Any streams left over from a previous connection are closed first.

        Args:
            endpoint: The frontend to connect to.

        Raises:
            HostUnresolvableError: If the address cannot be resolved.
            ConnectTimeoutError: If the connection is not established in time.
            ConnectIOError: For any other socket error.
        """
        if self.is_open:
            await self.close()

        self.endpoint = endpoint
        logger.debug(f"Opening connection to {endpoint}")

        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(endpoint.address, endpoint.port),
                self.timeout,
            )
        except socket.gaierror as e:
            raise HostUnresolvableError(f"Unknown host: {endpoint.address}") from e
        except asyncio.TimeoutError as e:
            raise ConnectTimeoutError(f"Connect timeout: {endpoint.address}") from e
        except OSError as e:
            raise ConnectIOError(f"IO Except: {describe_error(e)}: {endpoint.address}") from e
        except (ValueError, OverflowError) as e:
            # Bad host label (IDNA) or port out of range
            raise ConnectIOError(f"IO Except: {describe_error(e)}: {endpoint.address}") from e

        self._reader = reader
        self._writer = writer
        logger.debug(f"Connection to {endpoint} established")

    def has_pending_input(self) -> bool:
        """Check whether unread bytes are waiting in the input buffer."""
        if self._reader is None:
            return False
        return buffered_size(self._reader) > 0

    async def send(self, command: str) -> None:
        """
        Write one command and flush it.

        Args:
            command: The command line to send; a newline is appended if missing.

        Raises:
            CommandEncodingError: If the command is not ASCII.
            FrontendIOError: If the connection is closed or the write fails.
        """
        data = encode_command(command)

        if self._writer is None:
            raise FrontendIOError("No output stream available")

        try:
            self._writer.write(data)
            await self._writer.drain()
        except OSError as e:
            raise FrontendIOError(describe_error(e)) from e

        log_protocol_sent(command.strip(), self.address)
        logger.verbose(f"Raw data sent: {data!r}")

    async def read_response(self) -> list[str]:
        """
        Read one prompt-terminated response.

        Raises:
            FrontendIOError: If the connection is closed or the read fails.
        """
        if self._reader is None:
            raise FrontendIOError("No input stream available")

        return await read_response(self._reader, self.timeout, self.address)

    async def close(self) -> None:
        """
        Close the streams and the socket.

        Failures are logged and never prevent the handles from being released.
        """
        writer = self._writer
        self._reader = None
        self._writer = None

        if writer is None:
            return

        try:
            if writer.can_write_eof():
                writer.write_eof()
        except OSError as e:
            logger.warning(f"Error closing output stream: {e}")

        try:
            writer.close()
            await asyncio.wait_for(writer.wait_closed(), self.timeout)
        except (OSError, asyncio.TimeoutError) as e:
            logger.warning(f"Error closing socket: {e}")

        logger.debug(f"Connection to {self.endpoint} closed")
