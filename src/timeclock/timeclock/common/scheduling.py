from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import BaseScheduler

logger = logging.getLogger(__name__)


def new_scheduler() -> BackgroundScheduler:
    return BackgroundScheduler(
        timezone="UTC",
        job_defaults={"coalesce": True, "max_instances": 1, "misfire_grace_time": 30},
    )


class PeriodicTask:
    """A cancellable interval job.

    Runs `func` every `interval_seconds` on an APScheduler scheduler. When no
    scheduler is passed the task owns one and shuts it down on `stop()`.
    Exceptions raised by `func` are logged and never reach the scheduler thread.
    """

    def __init__(
        self,
        name: str,
        func: Callable[[], object],
        *,
        interval_seconds: float,
        scheduler: Optional[BaseScheduler] = None,
        run_immediately: bool = False,
    ):
        self.name = name
        self._func = func
        self._interval = float(interval_seconds)
        self._scheduler = scheduler
        self._owns_scheduler = scheduler is None
        self._run_immediately = run_immediately
        self._job = None

    @property
    def running(self) -> bool:
        return self._job is not None

    def start(self) -> None:
        if self._job is not None:
            return
        if self._scheduler is None:
            self._scheduler = new_scheduler()
        if not self._scheduler.running:
            self._scheduler.start()

        kwargs = {}
        if self._run_immediately:
            kwargs["next_run_time"] = datetime.now(timezone.utc)
        self._job = self._scheduler.add_job(
            self.run_once,
            "interval",
            seconds=self._interval,
            id=self.name,
            name=self.name,
            replace_existing=True,
            **kwargs,
        )
        logger.info("Started periodic task %s (every %ss)", self.name, self._interval)

    def stop(self) -> None:
        if self._job is not None:
            try:
                self._job.remove()
            except JobLookupError:
                pass
            self._job = None
            logger.info("Stopped periodic task %s", self.name)
        if self._owns_scheduler and self._scheduler is not None and self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None

    def run_once(self) -> None:
        try:
            self._func()
        except Exception:
            logger.exception("Periodic task %s failed", self.name)
