"""Shared fixtures: an in-process fake frontend speaking the network control protocol."""

import asyncio
import threading

import pytest
import pytest_asyncio

from mythremote.frontend import FrontendEndpoint, FrontendRemote, SessionListener

# Response marker telling the fake frontend to drop the connection
CLOSE = object()


class FakeFrontend:
    """
    Minimal frontend network control server.

    Answers ``query location`` with ``self.location``, acknowledges jump/key/play
    commands with OK and anything else with an error, unless overridden in
    ``responses``. A response of None sends nothing at all.
    """

    BANNER = (
        b"MythFrontend Network Control\r\n"
        b"Type 'help' for usage information\r\n"
        b"---------------------------------\r\n"
        b"# "
    )

    def __init__(self, banner: bool = False):
        self.banner = banner
        self.location = "mainmenu"
        self.responses: dict[str, object] = {}
        self.delays: dict[str, float] = {}
        self.received: list[str] = []
        self.connection_count = 0
        self.port = 0
        self._server: asyncio.AbstractServer | None = None
        self._writers: list[asyncio.StreamWriter] = []

    async def start(self) -> None:
        self._server = await asyncio.start_server(self._handle_client, "127.0.0.1", 0)
        self.port = self._server.sockets[0].getsockname()[1]

    async def stop(self) -> None:
        for writer in self._writers:
            writer.close()
        if self._server:
            self._server.close()
            try:
                await asyncio.wait_for(self._server.wait_closed(), 1.0)
            except asyncio.TimeoutError:
                pass

    def count(self, line: str) -> int:
        return self.received.count(line)

    async def wait_for(self, line: str, timeout: float = 1.0) -> None:
        """Wait until the given line has been received."""
        async def poll():
            while line not in self.received:
                await asyncio.sleep(0.01)

        await asyncio.wait_for(poll(), timeout)

    def respond(self, line: str) -> object:
        if line in self.responses:
            return self.responses[line]
        if line == "query location":
            return [self.location]
        if line.startswith(("jump ", "key ", "play ")):
            return ["OK"]
        return ["ERROR unknown command"]

    async def _handle_client(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        self.connection_count += 1
        self._writers.append(writer)
        try:
            if self.banner:
                writer.write(self.BANNER)
                await writer.drain()

            while True:
                raw = await reader.readline()
                if not raw:
                    break

                line = raw.decode("ascii").strip()
                self.received.append(line)
                if line == "exit":
                    break

                if line in self.delays:
                    await asyncio.sleep(self.delays[line])

                response = self.respond(line)
                if response is CLOSE:
                    break
                if response is None:
                    continue

                payload = "".join(f"{r}\r\n" for r in response) + "# "
                writer.write(payload.encode("ascii"))
                await writer.drain()
        except ConnectionError:
            pass
        finally:
            writer.close()


class RecordingListener(SessionListener):
    """Listener that records every event it receives."""

    def __init__(self):
        self.statuses = []
        self.locations = []

    def on_status_changed(self, message, code):
        self.statuses.append((code, message))

    def on_location_changed(self, location):
        self.locations.append(location)

    @property
    def codes(self):
        return [code for code, _ in self.statuses]


@pytest_asyncio.fixture
async def frontend():
    server = FakeFrontend()
    await server.start()
    yield server
    await server.stop()


@pytest.fixture
def endpoint(frontend):
    return FrontendEndpoint(name="Lounge", address="127.0.0.1", port=frontend.port)


@pytest.fixture
def listener():
    return RecordingListener()


@pytest_asyncio.fixture
async def remote(frontend, listener):
    remote = FrontendRemote(timeout=300, poll_interval=0, listener=listener)
    await remote.start()
    yield remote
    await remote.stop()


@pytest_asyncio.fixture
async def connected(remote, endpoint):
    task = await remote.connect(endpoint)
    assert await task
    return remote


@pytest.fixture
def threaded_frontend():
    """A fake frontend served from its own thread, for code that runs asyncio.run()."""
    loop = asyncio.new_event_loop()
    thread = threading.Thread(target=loop.run_forever, daemon=True)
    thread.start()

    server = FakeFrontend()
    asyncio.run_coroutine_threadsafe(server.start(), loop).result(5)
    yield server

    asyncio.run_coroutine_threadsafe(server.stop(), loop).result(5)
    loop.call_soon_threadsafe(loop.stop)
    thread.join(5)
    loop.close()
