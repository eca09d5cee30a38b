"""Tests for location polling."""

import asyncio

import pytest

from mythremote.frontend import SessionStatus

from conftest import CLOSE

PLAYING = "Playback Video 00:01:00 1x 00:44:12 ..."


class TestCheckLocation:
    """Tests for StatusPoller.check_location."""

    @pytest.mark.asyncio
    async def test_change_notifies_once(self, connected, frontend, listener):
        """Test that a new location is published once and repeats are suppressed."""
        frontend.location = PLAYING

        await connected.poller.check_location()
        await connected.poller.check_location()
        await connected.notifier.join()

        assert listener.locations == [PLAYING]
        assert connected.session.last_location == PLAYING
        assert frontend.count("query location") == 2

    @pytest.mark.asyncio
    async def test_each_transition_notifies(self, connected, frontend, listener):
        """Test that moving back and forth publishes every transition."""
        for location in ("mainmenu", PLAYING, PLAYING, "mainmenu"):
            frontend.location = location
            await connected.poller.check_location()
        await connected.notifier.join()

        assert listener.locations == ["mainmenu", PLAYING, "mainmenu"]

    @pytest.mark.asyncio
    async def test_empty_result_changes_nothing(self, connected, frontend, listener):
        """Test that an empty location response leaves the snapshot alone."""
        await connected.poller.check_location()
        frontend.responses["query location"] = []

        await connected.poller.check_location()
        await connected.notifier.join()

        assert listener.locations == ["mainmenu"]
        assert connected.session.last_location == "mainmenu"
        assert connected.is_connected

    @pytest.mark.asyncio
    async def test_failed_query_disconnects(self, connected, frontend, listener):
        """Test that a failed location query leaves the session DISCONNECTED."""
        frontend.responses["query location"] = CLOSE

        await connected.poller.check_location()
        await connected.notifier.join()

        assert connected.status == SessionStatus.DISCONNECTED
        assert connected.status_text == "Disconnected"
        assert listener.locations == []

    @pytest.mark.asyncio
    async def test_skipped_when_not_connected(self, remote, frontend):
        """Test that no query is issued without a connection."""
        await remote.poller.check_location()
        assert frontend.connection_count == 0

    @pytest.mark.asyncio
    async def test_location_is_parsed(self, connected, frontend):
        """Test that the remote exposes the parsed location."""
        frontend.location = PLAYING
        await connected.poller.check_location()

        location = connected.location
        assert location is not None
        assert location.is_playback
        assert location.position == "00:01:00"


class TestPollingTimer:
    """Tests for the periodic polling task."""

    @pytest.mark.asyncio
    async def test_rearm_replaces_task(self, connected):
        """Test that re-arming cancels exactly the previous task and starts one new task."""
        poller = connected.poller

        await poller.set_interval(1000)
        first = poller._task
        assert first is not None and not first.done()

        await poller.set_interval(2000)
        second = poller._task

        assert first.cancelled()
        assert second is not first
        assert second is not None and not second.done()
        assert poller.is_running

    @pytest.mark.asyncio
    async def test_zero_interval_disables_polling(self, connected, frontend):
        """Test that an interval of 0 stops all further queries."""
        await connected.set_poll_interval(30)
        await asyncio.sleep(0.2)
        assert frontend.count("query location") >= 2

        await connected.set_poll_interval(0)
        assert not connected.poller.is_running
        # A query cancelled mid-flight may still reach the frontend
        await asyncio.sleep(0.05)
        polled = frontend.count("query location")

        await asyncio.sleep(0.2)
        assert frontend.count("query location") == polled

    @pytest.mark.asyncio
    async def test_polling_publishes_location(self, connected, frontend, listener):
        """Test that the timer drives location notifications without repeats."""
        frontend.location = PLAYING
        await connected.set_poll_interval(30)
        await asyncio.sleep(0.2)
        await connected.set_poll_interval(0)
        await connected.notifier.join()

        assert listener.locations == [PLAYING]

    @pytest.mark.asyncio
    async def test_interval_applies_on_next_connect(self, remote, endpoint, frontend):
        """Test that an interval set while disconnected is used once connected."""
        await remote.set_poll_interval(30)
        assert not remote.poller.is_running

        assert await (await remote.connect(endpoint))
        assert remote.poller.is_running
        await asyncio.sleep(0.2)
        assert frontend.count("query location") >= 2

    @pytest.mark.asyncio
    async def test_disconnect_stops_polling(self, remote, endpoint):
        """Test that disconnecting cancels the polling task."""
        await remote.set_poll_interval(30)
        assert await (await remote.connect(endpoint))

        await remote.disconnect()
        assert not remote.poller.is_running
