"""
Background job scheduler

The reconciliation sweep runs daily and the expiry reminder weekly, both on
cron triggers in the reference timezone so "midnight" means the gym's
midnight.
"""

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
import structlog

from gymkeeper.core.config import Settings
from gymkeeper.services.reconciliation import MembershipJobs

logger = structlog.get_logger(__name__)


def create_scheduler(jobs: MembershipJobs, settings: Settings) -> AsyncIOScheduler:
    """Build (but do not start) the scheduler with the membership jobs registered"""
    tz = jobs.clock.tz
    scheduler = AsyncIOScheduler(timezone=tz)

    scheduler.add_job(
        jobs.reconcile,
        CronTrigger(hour=settings.RECONCILE_HOUR, minute=settings.RECONCILE_MINUTE, timezone=tz),
        id="reconcile_member_statuses",
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    scheduler.add_job(
        jobs.remind_expiring,
        CronTrigger(day_of_week=settings.EXPIRY_REMINDER_DAY_OF_WEEK, hour=0, minute=0, timezone=tz),
        id="remind_expiring_memberships",
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )

    logger.info(
        f"Scheduled reconciliation daily at {settings.RECONCILE_HOUR:02d}:{settings.RECONCILE_MINUTE:02d} "
        f"and expiry reminders on {settings.EXPIRY_REMINDER_DAY_OF_WEEK} ({jobs.clock.tz_name})"
    )
    return scheduler
