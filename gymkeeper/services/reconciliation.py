"""
Membership status reconciliation

Status is derived from expiry_date but stored, so a periodic sweep brings
the two back in line. Each transition is a conditional UPDATE whose WHERE
clause re-checks the guard: a sweep that read a member before a concurrent
renewal matches zero rows instead of deactivating the renewed member.
"""

import asyncio
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Tuple
import uuid

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select
import structlog

from gymkeeper.core.clock import Clock
from gymkeeper.core.events import EventBus, MembershipsExpiringSoon, MemberStatusesReconciled
from gymkeeper.models.member import Member, MemberStatus
from gymkeeper.models.tenant import Tenant
from gymkeeper.services.aggregation import expiring_soon

logger = structlog.get_logger(__name__)


@dataclass
class ReconciliationResult:
    run_date: date
    checked: int = 0
    activated: int = 0
    deactivated: int = 0
    skipped: int = 0
    failed: int = 0

    def to_dict(self) -> Dict:
        return {
            "run_date": self.run_date.isoformat(),
            "checked": self.checked,
            "activated": self.activated,
            "deactivated": self.deactivated,
            "skipped": self.skipped,
            "failed": self.failed,
        }


def find_status_drift(session: Session, today: date) -> List[Tuple[uuid.UUID, MemberStatus]]:
    """Members whose stored status disagrees with their expiry_date, with the target status"""
    stale_active = session.exec(
        select(Member.id).where(
            Member.status == MemberStatus.ACTIVE,
            Member.expiry_date < today,
        )
    ).all()
    stale_inactive = session.exec(
        select(Member.id).where(
            Member.status == MemberStatus.INACTIVE,
            Member.expiry_date >= today,
        )
    ).all()

    return (
        [(member_id, MemberStatus.INACTIVE) for member_id in stale_active]
        + [(member_id, MemberStatus.ACTIVE) for member_id in stale_inactive]
    )


def apply_status_transition(session: Session, member_id: uuid.UUID, target: MemberStatus, today: date) -> bool:
    """Move one member to ``target`` if the guard still holds; True when a row changed"""
    if target == MemberStatus.INACTIVE:
        guard = (Member.status == MemberStatus.ACTIVE) & (Member.expiry_date < today)
    else:
        guard = (Member.status == MemberStatus.INACTIVE) & (Member.expiry_date >= today)

    statement = (
        update(Member)
        .where(Member.id == member_id, guard)
        .values(status=target, updated_at=datetime.utcnow())
    )
    result = session.connection().execute(statement)
    session.commit()
    return result.rowcount == 1


def reconcile_member_statuses(session: Session, today: date) -> ReconciliationResult:
    """Converge every member's status to what expiry_date says as of ``today``.

    Idempotent: a second run on the same day finds nothing to do.
    """
    result = ReconciliationResult(run_date=today)
    drift = find_status_drift(session, today)
    result.checked = len(drift)

    if not drift:
        logger.info(f"No member status drift on {today}")
        return result

    for member_id, target in drift:
        try:
            changed = apply_status_transition(session, member_id, target, today)
        except SQLAlchemyError as e:
            session.rollback()
            result.failed += 1
            logger.error(f"Failed to reconcile member {member_id}: {e}")
            continue

        if not changed:
            # Renewed or edited since the drift query ran
            result.skipped += 1
            continue

        if target == MemberStatus.ACTIVE:
            result.activated += 1
        else:
            result.deactivated += 1
        logger.debug(f"Member {member_id} set to {target.value}")

    logger.info(
        f"Reconciled member statuses for {today}: {result.deactivated} deactivated, "
        f"{result.activated} activated, {result.skipped} skipped, {result.failed} failed"
    )
    return result


def collect_expiring_memberships(session: Session, today: date) -> List[MembershipsExpiringSoon]:
    """One event per tenant with Active members inside its reminder window"""
    tenants = session.exec(select(Tenant).where(Tenant.is_active == True)).all()  # noqa: E712
    window = {tenant.id: tenant.renewal_reminder_days for tenant in tenants}
    if not window:
        return []

    by_tenant: Dict[uuid.UUID, List[Member]] = defaultdict(list)
    for member in expiring_soon(session, None, today, max(window.values())):
        days = window.get(member.tenant_id)
        if days is not None and member.expiry_date <= today + timedelta(days=days):
            by_tenant[member.tenant_id].append(member)

    return [
        MembershipsExpiringSoon(
            tenant_id=tenant_id,
            window_start=today,
            window_end=today + timedelta(days=window[tenant_id]),
            members=[
                {
                    "member_id": str(member.id),
                    "name": member.name,
                    "email": member.email,
                    "phone": member.phone,
                    "plan": member.plan,
                    "expiry_date": member.expiry_date.isoformat(),
                }
                for member in members
            ],
        )
        for tenant_id, members in by_tenant.items()
    ]


class MembershipJobs:
    """Scheduled membership jobs, bound to a session source, a clock and an event bus.

    The database work runs in a worker thread so a long sweep does not hold
    up request handling on the event loop.
    """

    def __init__(self, session_factory: Callable[[], Session], clock: Clock, bus: EventBus):
        self.session_factory = session_factory
        self.clock = clock
        self.bus = bus

    def _run_sweep(self, today: date) -> ReconciliationResult:
        with self.session_factory() as session:
            return reconcile_member_statuses(session, today)

    def _collect_expiring(self, today: date) -> List[MembershipsExpiringSoon]:
        with self.session_factory() as session:
            return collect_expiring_memberships(session, today)

    async def reconcile(self) -> ReconciliationResult:
        today = self.clock.today()
        result = await asyncio.to_thread(self._run_sweep, today)

        await self.bus.publish(MemberStatusesReconciled(
            run_date=today,
            activated=result.activated,
            deactivated=result.deactivated,
            failed=result.failed,
        ))
        return result

    async def remind_expiring(self) -> int:
        """Publish expiring-soon events; returns how many tenants had any"""
        today = self.clock.today()
        events = await asyncio.to_thread(self._collect_expiring, today)

        for event in events:
            await self.bus.publish(event)

        logger.info(f"Expiry reminders published for {len(events)} tenant(s)")
        return len(events)
