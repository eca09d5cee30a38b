"""
Frontend remote - high-level remote control of a frontend.

This module provides the FrontendRemote class which combines the session,
dispatcher, poller and notifier into the interface used by the CLI and by any
other front end.
"""

from __future__ import annotations

import asyncio

from mythremote.core.logging import get_logger
from mythremote.core.utils import CommandEncodingError, text_to_keys
from mythremote.frontend.codec import encode_command
from mythremote.frontend.dispatcher import CommandDispatcher
from mythremote.frontend.notifier import Notifier, SessionListener
from mythremote.frontend.poller import DEFAULT_POLL_INTERVAL, StatusPoller
from mythremote.frontend.session import FrontendSession
from mythremote.frontend.state import FrontendEndpoint, FrontendLocation, SessionStatus
from mythremote.frontend.transport import DEFAULT_TIMEOUT

logger = get_logger()


class FrontendRemote:
    """
    Remote control for a single frontend.

    Example:
        async with FrontendRemote(poll_interval=0) as remote:
            task = await remote.connect(FrontendEndpoint("Lounge", "10.0.0.5"))
            if await task:
                await remote.send_jump("livetv")
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        listener: SessionListener | None = None,
    ):
        """
        Initialize the remote.

        Args:
            timeout: Timeout in ms for connecting and for each read.
            poll_interval: Location polling interval in ms; 0 disables polling.
            listener: Optional listener for status and location events.
        """
        self.notifier = Notifier(listener)
        self.session = FrontendSession(notifier=self.notifier, timeout=timeout)
        self.dispatcher = CommandDispatcher(self.session)
        self.poller = StatusPoller(self.session, self.dispatcher, interval=poll_interval)

    @property
    def is_connected(self) -> bool:
        return self.session.is_connected

    @property
    def is_connecting(self) -> bool:
        return self.session.is_connecting

    @property
    def status(self) -> SessionStatus:
        return self.session.status

    @property
    def status_text(self) -> str:
        return self.session.status_text

    @property
    def location(self) -> FrontendLocation | None:
        """The last polled location, parsed, or None before the first poll."""
        if not self.session.last_location:
            return None
        return FrontendLocation.parse(self.session.last_location)

    def set_status_listener(self, listener: SessionListener | None) -> None:
        self.notifier.set_listener(listener)

    async def set_poll_interval(self, interval: float) -> None:
        """
        Change the location polling interval.

        Args:
            interval: Interval in ms; zero or negative disables polling.
        """
        if self.session.is_connected or self.session.is_connecting:
            await self.poller.set_interval(interval)
        else:
            self.poller.interval = interval

    async def start(self) -> None:
        """Start event delivery."""
        self.notifier.start()

    async def stop(self) -> None:
        """Disconnect and stop event delivery."""
        await self.disconnect()
        await self.notifier.stop()

    async def connect(self, endpoint: FrontendEndpoint) -> asyncio.Task[bool]:
        """
        Connect to a frontend, breaking any existing connection first.

        Args:
            endpoint: The frontend to connect to.

        Returns:
            A task that completes with True once connected.
        """
        self.notifier.start()
        await self.poller.stop()
        task = await self.session.connect(endpoint)
        await self.poller.start()
        return task

    async def disconnect(self) -> None:
        await self.poller.stop()
        await self.session.disconnect()

    async def execute(self, command: str, expect_ack: bool = False) -> list[str] | None:
        return await self.dispatcher.execute(command, expect_ack)

    async def query(self, name: str) -> list[str] | None:
        return await self.dispatcher.query(name)

    async def send_jump(self, location: str) -> bool:
        ok = await self.dispatcher.send_jump(location)
        await self.poller.check_location()
        return ok

    async def send_key(self, key: str) -> bool:
        ok = await self.dispatcher.send_key(key)
        await self.poller.check_location()
        return ok

    async def send_play(self, subcommand: str) -> bool:
        ok = await self.dispatcher.send_play(subcommand)
        await self.poller.check_location()
        return ok

    async def send_text(self, text: str) -> bool:
        """
        Type free text as a sequence of key presses.

        Nothing is sent if any character cannot be encoded. Otherwise typing
        stops at the first key the frontend rejects.

        Returns:
            True if every key was acknowledged.
        """
        keys = list(text_to_keys(text))
        try:
            for key in keys:
                encode_command(f"key {key}")
        except CommandEncodingError as e:
            logger.error(f"Unable to send text: {e}")
            return False

        ok = True
        for key in keys:
            if not await self.dispatcher.send_key(key):
                ok = False
                break

        await self.poller.check_location()
        return ok

    async def send_raw(self, line: str) -> list[str] | None:
        """Send an arbitrary command line without requiring an acknowledgement."""
        return await self.dispatcher.execute(line, expect_ack=False)

    async def __aenter__(self) -> "FrontendRemote":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()
