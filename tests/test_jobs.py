"""
Tests for the scheduler wiring and the maintenance scripts
"""

from datetime import date, datetime
from decimal import Decimal
import uuid

from apscheduler.triggers.cron import CronTrigger
from sqlmodel import Session

from gymkeeper.core.config import get_settings
from gymkeeper.core.events import EventBus
from gymkeeper.core.scheduler import create_scheduler
from gymkeeper.models.attendance import Attendance
from gymkeeper.models.payment import Payment, PaymentMethod
from gymkeeper.scripts.check_orphans import find_orphans
from gymkeeper.services.reconciliation import MembershipJobs


def test_scheduler_registers_membership_jobs(engine, clock):
    settings = get_settings()
    jobs = MembershipJobs(lambda: Session(engine), clock, EventBus())

    scheduler = create_scheduler(jobs, settings)
    registered = {job.id: job for job in scheduler.get_jobs()}

    assert set(registered) == {"reconcile_member_statuses", "remind_expiring_memberships"}
    reconcile = registered["reconcile_member_statuses"].trigger
    assert isinstance(reconcile, CronTrigger)
    assert f"hour='{settings.RECONCILE_HOUR}'" in str(reconcile)
    assert f"day_of_week='{settings.EXPIRY_REMINDER_DAY_OF_WEEK}'" in str(
        registered["remind_expiring_memberships"].trigger
    )


def test_find_orphans(db, tenant, make_member):
    member = make_member(tenant)
    db.add(Attendance(
        tenant_id=tenant.id, member_id=uuid.uuid4(), attended_on=date(2024, 3, 1), check_in_time="06:00:00",
    ))
    db.add(Payment(
        tenant_id=tenant.id, member_id=uuid.uuid4(), amount=Decimal("100"),
        method=PaymentMethod.CASH, plan="Monthly", paid_at=datetime(2024, 3, 1, 6, 0),
    ))
    # Member id that exists, but under another tenant, also counts
    db.add(Payment(
        tenant_id=uuid.uuid4(), member_id=member.id, amount=Decimal("100"),
        method=PaymentMethod.CASH, plan="Monthly", paid_at=datetime(2024, 3, 1, 6, 0),
    ))
    db.commit()

    assert find_orphans(db) == {"attendance": 1, "payments": 2}
