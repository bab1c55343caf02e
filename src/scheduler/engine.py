"""DispatchSweep — per-minute delivery of due scheduled messages."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from src.config import settings

if TYPE_CHECKING:
    from src.delivery.router import DeliveryRouter
    from src.scheduler.service import ReminderService

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "dispatch_sweep"


class DispatchSweep:
    """Runs a sweep at the start of every wall-clock minute.

    The cron trigger recomputes the next minute boundary after each run, so
    slow sweeps never push later ticks off the boundary.

    Messages are removed from the queue before delivery is attempted
    (at-most-once): a failed or interrupted delivery is logged, not retried.

    Args:
        service: ReminderService that owns the queue.
        router: DeliveryRouter used for each due message.
        timezone: IANA timezone string for the scheduler (default from settings).
    """

    def __init__(
        self,
        service: ReminderService,
        router: DeliveryRouter,
        timezone: str | None = None,
    ) -> None:
        self._service = service
        self._router = router
        self._timezone = timezone or settings.scheduler_timezone
        self._scheduler = AsyncIOScheduler(timezone=self._timezone)
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    # -- Lifecycle -------------------------------------------------------------

    async def start(self, *, run_immediately: bool = True) -> None:
        """Deliver anything already overdue, then start the per-minute job."""
        if run_immediately:
            await self.sweep()
        self._scheduler.add_job(
            self.sweep,
            trigger=CronTrigger(second=0, timezone=self._timezone),
            id=SWEEP_JOB_ID,
            name="Deliver due scheduled messages",
            coalesce=True,
            max_instances=1,
            misfire_grace_time=30,
            replace_existing=True,
        )
        self._scheduler.start()
        self._running = True
        logger.info("Dispatch sweep started (tz=%s)", self._timezone)

    async def stop(self) -> None:
        """Shut down the scheduler. In-flight deliveries are not awaited."""
        if self._running:
            self._scheduler.shutdown(wait=False)
            self._running = False
            logger.info("Dispatch sweep stopped")

    # -- Sweep -----------------------------------------------------------------

    async def sweep(self, now: int | None = None) -> int:
        """Extract due messages and deliver each one independently.

        Returns the number of messages taken off the queue.
        """
        due = await self._service.extract_due(now)
        delivered = 0
        for message in due:
            try:
                if await self._router.deliver(message):
                    delivered += 1
            except Exception:
                logger.exception("Unexpected error delivering message %s", message.id)

        if due:
            logger.info(
                "Sent %d of %d scheduled message(s) at %s",
                delivered,
                len(due),
                datetime.now(UTC).isoformat(timespec="seconds"),
            )
        return len(due)
