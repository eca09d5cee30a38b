"""
Session notifier - ordered delivery of session events to a listener.

This module provides the tagged events published by the session layer and the
Notifier which delivers them, in publication order, to the registered
listener from a worker task on the session's event loop.
"""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass
from typing import Union

from mythremote.core.logging import get_logger
from mythremote.frontend.state import SessionStatus

logger = get_logger()


@dataclass(frozen=True)
class StatusChanged:
    """The session status or its message changed."""
    message: str
    code: SessionStatus


@dataclass(frozen=True)
class LocationChanged:
    """The frontend reported a location different from the previous one."""
    location: str


SessionEvent = Union[StatusChanged, LocationChanged]


class SessionListener:
    """
    Receiver of session events.

    Subclasses override the callbacks they care about. Callbacks may be
    plain methods or coroutines.
    """

    def on_status_changed(self, message: str, code: SessionStatus) -> None:
        pass

    def on_location_changed(self, location: str) -> None:
        pass


class Notifier:
    """
    Delivers session events to a single listener.

    Events are queued by publish() and delivered by a worker task, so the
    publisher is never blocked or affected by a slow or failing listener.
    """

    def __init__(self, listener: SessionListener | None = None):
        self._listener = listener
        self._queue: asyncio.Queue[SessionEvent] = asyncio.Queue()
        self._worker_task: asyncio.Task | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def listener(self) -> SessionListener | None:
        return self._listener

    def set_listener(self, listener: SessionListener | None) -> None:
        """
        Register the listener, replacing any previous one.

        Args:
            listener: The new listener, or None to stop delivering events.
        """
        self._listener = listener

    def start(self) -> None:
        """Start the delivery worker on the running event loop."""
        if self._worker_task and not self._worker_task.done():
            return

        self._loop = asyncio.get_running_loop()
        self._worker_task = asyncio.create_task(self._process_queue())
        logger.debug("Notifier started")

    async def stop(self) -> None:
        """Deliver any queued events, then stop the worker."""
        if self._worker_task is None:
            return

        if not self._worker_task.done():
            await self.join()
            self._worker_task.cancel()
            try:
                await self._worker_task
            except asyncio.CancelledError:
                pass

        self._worker_task = None
        logger.debug("Notifier stopped")

    def publish(self, event: SessionEvent) -> None:
        """
        Queue an event for delivery. Non-blocking.

        Safe to call from other threads once the notifier has been started.

        Args:
            event: The event to deliver.
        """
        if self._worker_task is None:
            self.start()

        loop = self._loop
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if loop is not None and running is not loop:
            loop.call_soon_threadsafe(self._queue.put_nowait, event)
        else:
            self._queue.put_nowait(event)

    async def join(self) -> None:
        """Wait until every published event has been delivered."""
        await self._queue.join()

    async def _process_queue(self) -> None:
        """Deliver queued events in order."""
        while True:
            event = await self._queue.get()
            try:
                await self._deliver(event)
            except Exception as e:
                logger.exception(f"Error delivering {event!r} to listener: {e}")
            finally:
                self._queue.task_done()

    async def _deliver(self, event: SessionEvent) -> None:
        listener = self._listener
        if listener is None:
            return

        if isinstance(event, StatusChanged):
            result = listener.on_status_changed(event.message, event.code)
        else:
            result = listener.on_location_changed(event.location)

        if inspect.isawaitable(result):
            await result
