"""Tests for WatchdogScheduler."""

import asyncio

import pytest

from djistream.session.watchdog import WatchdogScheduler


class TestWatchdogScheduler:
    """Tests for named watchdog timers."""

    @pytest.fixture
    def expired(self):
        """List collecting (name, token) pairs of expired watchdogs."""
        return []

    @pytest.fixture
    def watchdogs(self, expired):
        return WatchdogScheduler(lambda name, token: expired.append((name, token)))

    @pytest.mark.asyncio
    async def test_fires_after_delay(self, watchdogs, expired):
        """Test an armed watchdog calls back with its name and token."""
        watchdogs.arm("start-watchdog", 0.01, token=7)
        assert watchdogs.is_armed("start-watchdog")
        await asyncio.sleep(0.05)
        assert expired == [("start-watchdog", 7)]
        assert not watchdogs.is_armed("start-watchdog")

    @pytest.mark.asyncio
    async def test_cancel(self, watchdogs, expired):
        """Test a cancelled watchdog never fires."""
        watchdogs.arm("start-watchdog", 0.01)
        assert watchdogs.cancel("start-watchdog") is True
        await asyncio.sleep(0.05)
        assert expired == []

    @pytest.mark.asyncio
    async def test_cancel_unarmed(self, watchdogs):
        """Test cancelling an unknown watchdog reports False."""
        assert watchdogs.cancel("stop-watchdog") is False

    @pytest.mark.asyncio
    async def test_rearm_replaces_timer(self, watchdogs, expired):
        """Test re-arming restarts the timer instead of adding another."""
        watchdogs.arm("start-watchdog", 0.01)
        watchdogs.arm("start-watchdog", 0.2)
        await asyncio.sleep(0.05)
        assert expired == []
        assert watchdogs.armed == {"start-watchdog"}
        watchdogs.cancel_all()

    @pytest.mark.asyncio
    async def test_independent_names(self, watchdogs, expired):
        """Test watchdogs with different names run independently."""
        watchdogs.arm("start-watchdog", 0.2)
        watchdogs.arm("stop-watchdog", 0.01)
        await asyncio.sleep(0.05)
        assert expired == [("stop-watchdog", 0)]
        assert watchdogs.armed == {"start-watchdog"}
        watchdogs.cancel_all()

    @pytest.mark.asyncio
    async def test_cancel_all(self, watchdogs, expired):
        """Test cancel_all clears every pending timer."""
        watchdogs.arm("start-watchdog", 0.01)
        watchdogs.arm("stop-watchdog", 0.01)
        watchdogs.cancel_all()
        await asyncio.sleep(0.05)
        assert expired == []
        assert watchdogs.armed == frozenset()

    def test_arm_requires_running_loop(self, watchdogs):
        """Test arming outside an event loop fails."""
        with pytest.raises(RuntimeError):
            watchdogs.arm("start-watchdog", 1.0)

    @pytest.mark.asyncio
    async def test_rearm_reports_latest_token(self, watchdogs, expired):
        """Test only the latest arming fires, carrying its own token."""
        watchdogs.arm("start-watchdog", 0.01, token=1)
        watchdogs.arm("start-watchdog", 0.02, token=2)
        await asyncio.sleep(0.08)
        assert expired == [("start-watchdog", 2)]
