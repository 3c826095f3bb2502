import logging
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from budget import BudgetApp
from config import get_settings


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class SchedulerManager:
    def __init__(self, app: BudgetApp, timezone: Optional[str] = None) -> None:
        self.app = app
        self.timezone = timezone or get_settings().timezone
        self.scheduler = BackgroundScheduler(timezone=self.timezone)

    def _run_job(self, source: str = "manual") -> None:
        logger.info(f"scheduler_run: source={source}")
        ledger = self.app.reconcile()
        logger.info(
            f"scheduler_run: source={source} synced_month={ledger.last_sync_date}"
        )

    def start(self) -> None:
        self._run_job("startup")

        trigger = CronTrigger(day=1, hour=0, minute=5, timezone=self.timezone)
        self.scheduler.add_job(
            self._run_job,
            trigger,
            args=["monthly_00:05"],
            id="reconcile_monthly",
            replace_existing=True,
            misfire_grace_time=3600,
        )

        trigger = IntervalTrigger(hours=1, timezone=self.timezone)
        self.scheduler.add_job(
            self._run_job,
            trigger,
            args=["hourly_safety_net"],
            id="reconcile_hourly_safety",
            replace_existing=True,
            misfire_grace_time=300,
        )

        self.scheduler.start()
        logger.info("Scheduler started with monthly 00:05 and hourly safety net")

    def stop(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped")
