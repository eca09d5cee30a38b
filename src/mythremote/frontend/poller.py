"""
Status poller - periodic location checks against the frontend.

This module provides the StatusPoller class which owns a single periodic task
that queries the frontend location and publishes a LocationChanged event
whenever the reported location differs from the previous one.
"""

from __future__ import annotations

import asyncio

from mythremote.core.logging import get_logger
from mythremote.frontend.dispatcher import CommandDispatcher
from mythremote.frontend.notifier import LocationChanged
from mythremote.frontend.session import FrontendSession
from mythremote.frontend.state import SessionStatus

logger = get_logger()

DEFAULT_POLL_INTERVAL = 5000.0  # ms


class StatusPoller:
    """
    Polls the frontend location at a fixed interval.

    There is never more than one polling task: re-arming cancels the
    current one before creating its replacement.
    """

    def __init__(
        self,
        session: FrontendSession,
        dispatcher: CommandDispatcher,
        interval: float = DEFAULT_POLL_INTERVAL,
    ):
        """
        Initialize the poller. Polling does not start until start() or set_interval().

        Args:
            session: The session whose location is tracked.
            dispatcher: Dispatcher used to run the location query.
            interval: Polling interval in ms. Zero or negative disables polling.
        """
        self.session = session
        self.dispatcher = dispatcher
        self.interval = interval
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def set_interval(self, interval: float) -> None:
        """
        Change the polling interval and re-arm the poller.

        Args:
            interval: Polling interval in ms. Zero or negative disables polling.
        """
        self.interval = interval
        await self.start()

    async def start(self) -> None:
        """(Re)start polling with the current interval."""
        await self.stop()

        if self.interval <= 0:
            logger.info("Location polling disabled (interval is 0)")
            return

        self._task = asyncio.create_task(self._poll_loop(self.interval / 1000))

    async def stop(self) -> None:
        """Cancel the polling task, if any."""
        task = self._task
        self._task = None
        if task is None:
            return

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _poll_loop(self, period: float) -> None:
        logger.info(f"Location polling started (period: {period * 1000}ms)")
        try:
            while True:
                await asyncio.sleep(period)
                try:
                    await self.check_location()
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    logger.error(f"Error in location poll: {e}")
        except asyncio.CancelledError:
            logger.info("Location polling stopped")
            raise

    async def check_location(self) -> None:
        """
        Query the frontend location once.

        Does nothing unless the session is connected. A failed query marks
        the session disconnected; a new location is published once.
        """
        session = self.session
        if not session.is_connected or session.is_connecting:
            return

        result = await self.dispatcher.query("location")

        if result is None:
            session.set_status(SessionStatus.DISCONNECTED, "Disconnected")
            return

        if not result:
            return

        session.set_status(SessionStatus.CONNECTED, session.connected_message)

        location = result[0]
        if location != session.last_location:
            logger.debug(f"Frontend location changed: {location!r}")
            session.last_location = location
            session.notifier.publish(LocationChanged(location=location))
