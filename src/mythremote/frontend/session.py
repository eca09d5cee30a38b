"""
Frontend session - connection lifecycle and session state.

This module provides the FrontendSession class which owns every piece of
mutable connection state: the transport, the status code and message, the
last known location and the lock that serializes protocol exchanges.
"""

from __future__ import annotations

import asyncio

from mythremote.core.logging import get_logger
from mythremote.core.utils import FrontendError, describe_error
from mythremote.frontend.notifier import Notifier, StatusChanged
from mythremote.frontend.state import FrontendEndpoint, SessionStatus
from mythremote.frontend.transport import DEFAULT_TIMEOUT, FrontendTransport

logger = get_logger()

EXIT_COMMAND = "exit"


class FrontendSession:
    """
    A single connection lifecycle from connect to disconnect.

    Status changes are published to the notifier. All state is written from
    the event loop that runs the session, either by the connect task or
    while holding the exchange lock.
    """

    def __init__(
        self,
        notifier: Notifier | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: FrontendTransport | None = None,
    ):
        """
        Initialize the session.

        Args:
            notifier: Where status events are published. A private one is created if omitted.
            timeout: Timeout in ms for connecting and for each read.
            transport: Transport to use, mainly for tests.
        """
        self.notifier = notifier or Notifier()
        self.transport = transport or FrontendTransport(timeout=timeout)
        self.endpoint: FrontendEndpoint | None = None
        self.last_location: str = ""

        self._status = SessionStatus.DISCONNECTED
        self._status_text = "Disconnected"
        self._exchange_lock = asyncio.Lock()
        self._connect_task: asyncio.Task[bool] | None = None

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def status_text(self) -> str:
        return self._status_text

    @property
    def is_connected(self) -> bool:
        return self._status == SessionStatus.CONNECTED

    @property
    def is_connecting(self) -> bool:
        return self._status == SessionStatus.CONNECTING

    @property
    def exchange_lock(self) -> asyncio.Lock:
        """Lock held for the duration of every protocol exchange."""
        return self._exchange_lock

    @property
    def connected_message(self) -> str:
        name = self.endpoint.name if self.endpoint else "frontend"
        return f"{name} - Connected"

    def set_status(self, status: SessionStatus, message: str) -> None:
        """
        Record a new status and publish it if anything changed.

        Args:
            status: The new status code.
            message: Human readable status text.
        """
        if status == self._status and message == self._status_text:
            return

        logger.debug(f"Session status {self._status} -> {status}: {message}")
        self._status = status
        self._status_text = message
        self.notifier.publish(StatusChanged(message=message, code=status))

    async def connect(self, endpoint: FrontendEndpoint) -> asyncio.Task[bool]:
        """
        Start connecting to a frontend.

        Any existing connection is severed first. The status is CONNECTING
        when this returns; the returned task completes with True once
        connected, or False after the status has been set to ERROR.

        Args:
            endpoint: The frontend to connect to.

        Returns:
            The task performing the connection.
        """
        await self.disconnect()

        self.endpoint = endpoint
        self.set_status(SessionStatus.CONNECTING, "Connecting")

        self._connect_task = asyncio.create_task(self._connect_worker(endpoint))
        return self._connect_task

    async def _connect_worker(self, endpoint: FrontendEndpoint) -> bool:
        try:
            await self.transport.open(endpoint)
        except asyncio.CancelledError:
            await self.transport.close()
            raise
        except FrontendError as e:
            await self.transport.close()
            logger.error(f"Failed to connect to {endpoint}: {e}")
            self.set_status(SessionStatus.ERROR, str(e))
            return False
        except Exception as e:
            await self.transport.close()
            logger.exception(f"Unexpected error connecting to {endpoint}: {e}")
            self.set_status(
                SessionStatus.ERROR, f"IO Except: {describe_error(e)}: {endpoint.address}"
            )
            return False

        if not self.transport.is_open:
            await self.transport.close()
            self.set_status(SessionStatus.ERROR, "Unknown error getting output stream.")
            return False

        logger.info(f"Connected to {endpoint.name} at {endpoint}")
        self.set_status(SessionStatus.CONNECTED, self.connected_message)
        return True

    async def disconnect(self) -> None:
        """
        End the session.

        A pending connect attempt is cancelled and an in-flight exchange is
        allowed to finish before the connection is torn down. Always leaves
        the session DISCONNECTED; calling it again is harmless.
        """
        connect_task = self._connect_task
        self._connect_task = None
        if connect_task and not connect_task.done():
            connect_task.cancel()
            # wait() does not raise for the cancelled task but does let a
            # cancellation of this caller through
            await asyncio.wait([connect_task])

        async with self._exchange_lock:
            await self.close()

    async def close(self) -> None:
        """
        Tear down the connection. The caller must hold the exchange lock.

        Sends a best-effort ``exit`` when connected, releases the streams and
        forces the DISCONNECTED status.
        """
        try:
            if self.is_connected and self.transport.is_open:
                try:
                    await self.transport.send(EXIT_COMMAND)
                except FrontendError as e:
                    logger.debug(f"Could not send exit: {e}")
        finally:
            try:
                await self.transport.close()
            except Exception as e:
                logger.warning(f"Disconnect I/O error: {describe_error(e)}")
            self.last_location = ""
            self.set_status(SessionStatus.DISCONNECTED, "Disconnected")
