"""
Automatic schedule sync scheduler.

Arms one recurring job per sport plus a daily full sync. Jobs only run when
the process is in an active environment (production or staging).
"""
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Union

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_MISSED, JobExecutionEvent
from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from orchestrator.sync_orchestrator import (
    SyncOrchestrator,
    describe_result,
    describe_summary,
)
from processor.models import Sport, SyncResult, SyncSummary

logger = logging.getLogger(__name__)

ALL_SPORTS = 'all'


@dataclass(frozen=True)
class Cadence:
    """Fire every `every_hours` hours at `minute` past the hour (UTC)."""
    every_hours: int
    minute: int

    def trigger(self) -> CronTrigger:
        return CronTrigger(
            hour=f'*/{self.every_hours}', minute=self.minute, timezone='UTC'
        )


# Offsets keep the per-sport syncs from firing together
SPORT_CADENCES: Dict[Sport, Cadence] = {
    Sport.F1: Cadence(every_hours=6, minute=0),
    Sport.NASCAR: Cadence(every_hours=8, minute=15),
    Sport.RALLY: Cadence(every_hours=12, minute=30),
    Sport.CRICKET: Cadence(every_hours=4, minute=45),
    Sport.FOOTBALL: Cadence(every_hours=6, minute=30),
}

DAILY_SYNC_HOUR = 3
DAILY_SYNC_MINUTE = 0


class SyncScheduler:
    """Recurring schedule syncs backed by APScheduler."""

    def __init__(self, orchestrator_factory: Callable[[], SyncOrchestrator],
                 active: bool, environment: str = 'development'):
        """
        Initialize the scheduler.

        Args:
            orchestrator_factory: Builds a fresh orchestrator for each firing
            active: Whether timers should be armed by start()
            environment: Environment name, reported in logs and status()
        """
        self.orchestrator_factory = orchestrator_factory
        self.active = active
        self.environment = environment
        self._scheduler: Optional[BackgroundScheduler] = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self) -> bool:
        """
        Register and start all sync jobs.

        Returns:
            True if the jobs were armed, False when scheduling is disabled
        """
        if not self.active:
            logger.info(
                f"Sync scheduler disabled in {self.environment} mode. "
                f"Set APP_ENV to production or staging to enable automatic syncing"
            )
            return False

        if self.running:
            logger.warning("Sync scheduler already running")
            return True

        logger.info("Initializing sports schedule sync scheduler")
        self._scheduler = BackgroundScheduler(
            executors={'default': ThreadPoolExecutor(len(SPORT_CADENCES) + 1)},
            job_defaults={
                'coalesce': True,
                'max_instances': 1,
                'misfire_grace_time': 300,
            },
            timezone='UTC'
        )
        self._scheduler.add_listener(
            self._on_job_event, EVENT_JOB_ERROR | EVENT_JOB_MISSED
        )

        for sport, cadence in SPORT_CADENCES.items():
            self._scheduler.add_job(
                self.run_now,
                trigger=cadence.trigger(),
                args=[sport.slug],
                id=f'sync_{sport.slug}',
                name=f'{sport.value} schedule sync',
                replace_existing=True,
            )
            logger.info(
                f"Scheduled {sport.value} sync every {cadence.every_hours} hours "
                f"at minute {cadence.minute} UTC"
            )

        self._scheduler.add_job(
            self.run_now,
            trigger=CronTrigger(
                hour=DAILY_SYNC_HOUR, minute=DAILY_SYNC_MINUTE, timezone='UTC'
            ),
            args=[ALL_SPORTS],
            id=f'sync_{ALL_SPORTS}',
            name='All sports schedule sync',
            replace_existing=True,
        )
        logger.info(
            f"Scheduled all sports sync daily at "
            f"{DAILY_SYNC_HOUR:02d}:{DAILY_SYNC_MINUTE:02d} UTC"
        )

        self._scheduler.start()
        logger.info("Sports schedule sync scheduler started")
        return True

    def shutdown(self, wait: bool = False) -> None:
        if self.running:
            self._scheduler.shutdown(wait=wait)
            logger.info("Sports schedule sync scheduler stopped")
        self._scheduler = None

    def run_now(self, target: str) -> Optional[Union[SyncResult, SyncSummary]]:
        """
        Run one sync immediately; used by every scheduled job.

        Never raises: failures are logged and None is returned.

        Args:
            target: Sport slug or "all"

        Returns:
            SyncResult, SyncSummary for "all", or None on failure
        """
        try:
            orchestrator = self.orchestrator_factory()
            if target == ALL_SPORTS:
                summary = orchestrator.sync_all()
                logger.info(f"[scheduler] {describe_summary(summary)}")
                return summary

            sport = Sport.from_slug(target)
            result = orchestrator.sync_one(sport)
            logger.info(f"[scheduler] {describe_result(sport, result)}")
            return result

        except Exception as e:
            logger.error(
                f"[scheduler] {target} sync failed: {e}",
                extra={'error_type': type(e).__name__},
                exc_info=True
            )
            return None

    def status(self) -> dict:
        """
        Report scheduler state.

        Returns:
            Dict with total_jobs, is_enabled, environment and per-job next run
        """
        jobs = self._scheduler.get_jobs() if self._scheduler else []
        return {
            'total_jobs': len(jobs),
            'is_enabled': self.active,
            'environment': self.environment,
            'jobs': [
                {
                    'id': job.id,
                    'name': job.name,
                    'next_run': (
                        job.next_run_time.isoformat() if job.next_run_time else None
                    ),
                }
                for job in jobs
            ],
        }

    @staticmethod
    def _on_job_event(event: JobExecutionEvent) -> None:
        if event.code == EVENT_JOB_MISSED:
            logger.warning(f"[scheduler] Job {event.job_id} missed its run time")
        elif event.exception:
            logger.error(f"[scheduler] Job {event.job_id} raised: {event.exception}")
