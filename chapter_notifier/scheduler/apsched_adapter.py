"""APScheduler wrapper driving the periodic release check."""

from __future__ import annotations

from datetime import datetime
from typing import Callable

import structlog
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

JOB_ID = "release-check"


class APSchedulerAdapter:
    """Run one job on a fixed interval without overlapping executions."""

    def __init__(self, scheduler: BackgroundScheduler | None = None) -> None:
        self.scheduler = scheduler or BackgroundScheduler()
        self.logger = structlog.get_logger("chapter_notifier.scheduler").bind(component="scheduler")
        self.started = False

    def start(self) -> None:
        if not self.started:
            self.scheduler.start()
            self.started = True
            self.logger.info("apscheduler_started")

    def shutdown(self, wait: bool = True) -> None:
        """Stop scheduling; with ``wait`` the running cycle finishes first."""

        if self.started:
            self.scheduler.shutdown(wait=wait)
            self.started = False
            self.logger.info("apscheduler_stopped")

    def schedule_interval(
        self, callback: Callable[[], object], minutes: int, run_immediately: bool = True
    ) -> None:
        """Run ``callback`` every ``minutes``, first run now unless disabled.

        A tick that fires while the previous run is still going is dropped,
        so an overlong cycle is followed by the next regular tick rather than
        an immediate catch-up run.
        """

        trigger = self._build_trigger(minutes)
        job_kwargs: dict = {
            "trigger": trigger,
            "id": JOB_ID,
            "replace_existing": True,
            # a cycle longer than the interval delays the next tick instead of overlapping
            "max_instances": 1,
            "coalesce": True,
            "misfire_grace_time": None,
        }
        if run_immediately:
            job_kwargs["next_run_time"] = datetime.now().astimezone()
        self.scheduler.add_job(callback, **job_kwargs)
        self.logger.info("job_scheduled", job_id=JOB_ID, interval_minutes=minutes)

    @staticmethod
    def _build_trigger(minutes: int) -> IntervalTrigger:
        if minutes < 1:
            raise ValueError("Interval must be at least one minute")
        return IntervalTrigger(minutes=minutes)

    def list_jobs(self) -> list[dict]:
        jobs = []
        for job in self.scheduler.get_jobs():
            jobs.append(
                {
                    "id": job.id,
                    "next_run_time": getattr(job, "next_run_time", None),
                    "trigger": str(job.trigger),
                }
            )
        return jobs


__all__ = ["APSchedulerAdapter", "JOB_ID"]
