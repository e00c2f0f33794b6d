"""
Periodic sync scheduling for Shop Insights.

SyncScheduler fires a job on a fixed interval. Fire times are computed by an
APScheduler IntervalTrigger against an injectable clock, and the wait between
fires goes through an injectable sleep, so the loop can be driven with a fake
clock in tests.

run_sync_cycle is the job the application schedules: it syncs every tenant in
turn and isolates failures per tenant.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, List, Optional

from apscheduler.triggers.interval import IntervalTrigger

from shop_insights.database.models import SyncTrigger
from shop_insights.utils.exceptions import SchedulingError
from shop_insights.utils.logger import get_logger

logger = get_logger(__name__)

Clock = Callable[[], datetime]
Sleep = Callable[[float], Awaitable[Any]]

MAX_EXECUTION_HISTORY = 50


def utc_clock() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class JobExecutionResult:
    """Result of a scheduled job execution."""
    scheduled_for: datetime
    started_at: datetime
    completed_at: Optional[datetime]
    status: str  # "success", "failed"
    error_message: Optional[str] = None


class SyncScheduler:
    """
    Fixed-interval timer running one async job.

    Runs never overlap: the next fire time is computed after the previous run
    finishes, and fire times missed while a run was in progress are coalesced
    into the next slot.
    """

    def __init__(self, job: Callable[[], Awaitable[Any]],
                 interval_seconds: float = 600.0,
                 clock: Optional[Clock] = None,
                 sleep: Optional[Sleep] = None,
                 name: str = "sync_cycle"):
        """
        Initialize scheduler.

        Args:
            job: Coroutine function invoked on every fire
            interval_seconds: Seconds between fires
            clock: Returns the current timezone-aware time
            sleep: Awaitable sleep taking seconds
            name: Job name used in logs
        """
        if interval_seconds <= 0:
            raise SchedulingError("Interval must be positive", {"interval_seconds": interval_seconds})

        self.job = job
        self.interval = timedelta(seconds=interval_seconds)
        self.clock = clock or utc_clock
        self.sleep = sleep or asyncio.sleep
        self.name = name

        self.executions: List[JobExecutionResult] = []
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def _create_trigger(self) -> IntervalTrigger:
        # First fire is one full interval after start
        return IntervalTrigger(
            seconds=self.interval.total_seconds(),
            start_date=self.clock() + self.interval,
            timezone="UTC",
        )

    async def _execute(self, scheduled_for: datetime) -> None:
        execution = JobExecutionResult(
            scheduled_for=scheduled_for,
            started_at=self.clock(),
            completed_at=None,
            status="running",
        )
        try:
            logger.info(f"Running scheduled job {self.name} (due {scheduled_for.isoformat()})")
            await self.job()
            execution.status = "success"
        except Exception as e:
            logger.error(f"Scheduled job {self.name} failed: {e}", exc_info=True)
            execution.status = "failed"
            execution.error_message = str(e)
        finally:
            execution.completed_at = self.clock()
            self.executions.append(execution)
            del self.executions[:-MAX_EXECUTION_HISTORY]

    async def run_pending(self, max_runs: Optional[int] = None) -> None:
        """
        Drive the timer loop.

        Args:
            max_runs: Stop after this many fires (None = run until cancelled)
        """
        trigger = self._create_trigger()
        previous: Optional[datetime] = None
        runs = 0

        while max_runs is None or runs < max_runs:
            now = self.clock()
            next_fire = trigger.get_next_fire_time(previous, now)
            if next_fire < now:
                logger.warning(f"Job {self.name} missed its slot at {next_fire.isoformat()}; coalescing")
                next_fire = trigger.get_next_fire_time(None, now)

            delay = (next_fire - now).total_seconds()
            if delay > 0:
                await self.sleep(delay)

            previous = next_fire
            await self._execute(next_fire)
            runs += 1

    def start(self) -> asyncio.Task:
        """Start the timer loop as a background task on the running loop."""
        if self.running:
            raise SchedulingError(f"Scheduler {self.name} is already running")

        self._task = asyncio.get_running_loop().create_task(self.run_pending())
        logger.info(f"Scheduler started: {self.name} every {self.interval.total_seconds():.0f}s")
        return self._task

    async def stop(self) -> None:
        """Cancel the timer loop and wait for it to finish."""
        if self._task is None:
            return

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        finally:
            self._task = None
        logger.info(f"Scheduler stopped: {self.name}")


async def run_sync_cycle(sync_service, trigger: SyncTrigger = SyncTrigger.SCHEDULED) -> list:
    """
    Sync every tenant sequentially.

    One tenant's failure is logged and never prevents the following tenants
    from being processed.

    Args:
        sync_service: SyncService instance
        trigger: Recorded in each sync log

    Returns:
        List of SyncResult for the tenants that completed
    """
    tenant_ids = sync_service.list_tenant_ids()
    logger.info(f"Sync cycle started for {len(tenant_ids)} tenants")

    results = []
    failed = 0
    for tenant_id in tenant_ids:
        try:
            results.append(await sync_service.sync_tenant(tenant_id, trigger=trigger))
        except Exception as e:
            failed += 1
            logger.error(f"Sync failed for tenant {tenant_id}: {e}", exc_info=True)

    logger.info(f"Sync cycle finished: {len(results)} tenants synced, {failed} failed")
    return results
