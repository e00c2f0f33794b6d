"""
Unit tests for the periodic sync scheduler
"""
import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from shop_insights.database.models import SyncTrigger
from shop_insights.services.scheduler import SyncScheduler, run_sync_cycle
from shop_insights.utils.exceptions import SchedulingError


class FakeClock:
    """Clock whose time only moves when something sleeps or works"""

    def __init__(self):
        self.now = datetime(2025, 1, 1, tzinfo=timezone.utc)
        self.sleeps = []

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.advance(seconds)


class TestSyncScheduler:
    """Test fixed-interval firing"""

    @pytest.fixture
    def clock(self):
        return FakeClock()

    def test_rejects_non_positive_interval(self):
        with pytest.raises(SchedulingError):
            SyncScheduler(AsyncMock(), interval_seconds=0)

    def test_fires_once_per_interval(self, clock):
        job = AsyncMock()
        start = clock()
        scheduler = SyncScheduler(job, interval_seconds=600, clock=clock, sleep=clock.sleep)

        asyncio.run(scheduler.run_pending(max_runs=3))

        assert job.await_count == 3
        assert clock.sleeps == [600, 600, 600]
        assert [e.scheduled_for for e in scheduler.executions] == [
            start + timedelta(minutes=10),
            start + timedelta(minutes=20),
            start + timedelta(minutes=30),
        ]
        assert all(e.status == "success" for e in scheduler.executions)

    def test_job_duration_shortens_next_wait(self, clock):
        async def job():
            clock.advance(45)

        scheduler = SyncScheduler(job, interval_seconds=600, clock=clock, sleep=clock.sleep)

        asyncio.run(scheduler.run_pending(max_runs=2))

        assert clock.sleeps == [600, 555]

    def test_missed_slots_are_coalesced(self, clock):
        async def slow_job():
            clock.advance(1500)

        scheduler = SyncScheduler(slow_job, interval_seconds=600, clock=clock, sleep=clock.sleep)

        asyncio.run(scheduler.run_pending(max_runs=2))

        # First run ends at t+2100; the slots at t+1200 and t+1800 are skipped
        assert clock.sleeps == [600, 300]
        assert len(scheduler.executions) == 2

    def test_failing_job_does_not_stop_the_timer(self, clock):
        job = AsyncMock(side_effect=[RuntimeError("database is locked"), None, None])
        scheduler = SyncScheduler(job, interval_seconds=60, clock=clock, sleep=clock.sleep)

        asyncio.run(scheduler.run_pending(max_runs=3))

        assert [e.status for e in scheduler.executions] == ["failed", "success", "success"]
        assert scheduler.executions[0].error_message == "database is locked"

    def test_start_and_stop(self):
        async def scenario():
            scheduler = SyncScheduler(AsyncMock(), interval_seconds=3600)
            scheduler.start()
            assert scheduler.running
            with pytest.raises(SchedulingError):
                scheduler.start()
            await scheduler.stop()
            return scheduler

        scheduler = asyncio.run(scenario())

        assert not scheduler.running
        assert scheduler.executions == []


class TestRunSyncCycle:
    """Test the all-tenants sync job"""

    def test_one_failing_tenant_does_not_stop_the_cycle(self):
        first, third = MagicMock(tenant_id=1), MagicMock(tenant_id=3)
        sync_service = MagicMock()
        sync_service.list_tenant_ids.return_value = [1, 2, 3]
        sync_service.sync_tenant = AsyncMock(side_effect=[first, RuntimeError("boom"), third])

        results = asyncio.run(run_sync_cycle(sync_service))

        assert results == [first, third]
        assert sync_service.sync_tenant.await_count == 3
        sync_service.sync_tenant.assert_any_await(2, trigger=SyncTrigger.SCHEDULED)

    def test_no_tenants(self):
        sync_service = MagicMock()
        sync_service.list_tenant_ids.return_value = []
        sync_service.sync_tenant = AsyncMock()

        assert asyncio.run(run_sync_cycle(sync_service)) == []
        sync_service.sync_tenant.assert_not_awaited()
