"""
Command dispatcher - serialized command exchanges with the frontend.

This module provides the CommandDispatcher class which runs one command at a
time over a FrontendSession, drains stale input, checks acknowledgements and
recovers the session when the connection fails mid-exchange.
"""

from __future__ import annotations

from mythremote.core.logging import get_logger
from mythremote.core.utils import (
    FrontendIOError,
    NotConnectedError,
    UnexpectedAcknowledgementError,
)
from mythremote.frontend.codec import encode_command
from mythremote.frontend.session import FrontendSession
from mythremote.frontend.state import SessionStatus

logger = get_logger()

ACK_OK = "OK"


class CommandDispatcher:
    """Runs commands against a session, one exchange at a time."""

    def __init__(self, session: FrontendSession):
        self.session = session

    async def execute(self, command: str, expect_ack: bool = False) -> list[str] | None:
        """
        Send a command and read its response.

        Only one exchange runs at a time; concurrent callers wait their turn.

        Args:
            command: The command line to send.
            expect_ack: Require the first response line to be ``OK``.

        Returns:
            The response lines, or None if the command failed. A failed
            acknowledgement leaves the session connected; an I/O failure
            disconnects it.

        Raises:
            CommandEncodingError: If the command is not ASCII.
        """
        encode_command(command)

        async with self.session.exchange_lock:
            if not self.session.is_connected:
                logger.error(
                    f"Unable to send command {command.strip()!r}: "
                    f"{NotConnectedError('Not connected')}"
                )
                return None

            try:
                results = await self._exchange(command)
            except FrontendIOError as e:
                await self._fail(command, e)
                return None

        if expect_ack and (not results or results[0] != ACK_OK):
            error = UnexpectedAcknowledgementError(
                command.strip(), results[0] if results else None
            )
            logger.error(str(error))
            return None

        return results

    async def _exchange(self, command: str) -> list[str]:
        transport = self.session.transport

        # Anything already waiting belongs to an earlier, unmatched exchange
        if transport.has_pending_input():
            stale = await transport.read_response()
            logger.debug(f"Discarded stale response: {stale}")

        await transport.send(command)
        return await transport.read_response()

    async def _fail(self, command: str, error: FrontendIOError) -> None:
        """Move the session to ERROR and release the connection. Lock must be held."""
        address = self.session.transport.address
        logger.error(f"Unable to send command {command.strip()!r}: {error}")
        self.session.set_status(SessionStatus.ERROR, f"{error}: {address}")
        await self.session.close()

    async def query(self, name: str) -> list[str] | None:
        """
        Run a read-only query, e.g. ``query location``.

        Args:
            name: What to query.
        """
        return await self.execute(f"query {name}", expect_ack=False)

    async def send_jump(self, location: str) -> bool:
        return await self.execute(f"jump {location}", expect_ack=True) is not None

    async def send_key(self, key: str) -> bool:
        return await self.execute(f"key {key}", expect_ack=True) is not None

    async def send_play(self, subcommand: str) -> bool:
        return await self.execute(f"play {subcommand}", expect_ack=True) is not None
