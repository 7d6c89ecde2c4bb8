"""
Aggregation engine

Read-side rollups over the payment and attendance ledgers. The rollup
functions are pure and work on rows that were already fetched; the
``*_for_tenant`` style wrappers below them only run the queries. Nothing
here writes to the database.

Orphans (ledger rows whose member no longer resolves) are excluded from any
report that joins to members; they never abort a report.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple
import uuid

from sqlmodel import Session, func, select
import structlog

from gymkeeper.core.dates import days_elapsed_in_month, days_in_month, month_bounds
from gymkeeper.core.exceptions import AggregationDataError
from gymkeeper.models.attendance import Attendance
from gymkeeper.models.member import Member, MemberStatus
from gymkeeper.models.payment import Payment

logger = structlog.get_logger(__name__)

ZERO = Decimal("0")


def percentage(numerator: int, denominator: int, places: int) -> float:
    """numerator / denominator * 100 rounded half-up; 0 when denominator is 0"""
    if denominator <= 0:
        return 0.0
    exponent = Decimal(1).scaleb(-places)
    value = (Decimal(numerator) * 100 / Decimal(denominator)).quantize(exponent, rounding=ROUND_HALF_UP)
    return float(value)


# ============================================================================
# Orphan handling
# ============================================================================

def _require_member(record, member: Optional[Member]) -> Member:
    if member is None:
        raise AggregationDataError(record.id, record.member_id)
    return member


def resolve_members(rows: Iterable[Tuple], report: str) -> List[Tuple]:
    """Keep (record, member) pairs whose member resolved, skip the rest"""
    resolved = []
    orphans = 0
    for record, member in rows:
        try:
            resolved.append((record, _require_member(record, member)))
        except AggregationDataError as exc:
            orphans += 1
            logger.warning(f"Skipping orphan in {report}: {exc.message}")

    if orphans:
        logger.info(f"{report}: excluded {orphans} orphaned record(s)")
    return resolved


def attendance_with_members(
    session: Session,
    tenant_id: uuid.UUID,
    start: date,
    end: date,
    member_id: Optional[uuid.UUID] = None,
    report: str = "attendance",
) -> List[Tuple[Attendance, Member]]:
    """Attendance rows in [start, end] joined to their member, orphans removed"""
    query = (
        select(Attendance, Member)
        .join(
            Member,
            (Member.id == Attendance.member_id) & (Member.tenant_id == Attendance.tenant_id),
            isouter=True,
        )
        .where(
            Attendance.tenant_id == tenant_id,
            Attendance.attended_on >= start,
            Attendance.attended_on <= end,
        )
    )
    if member_id is not None:
        query = query.where(Attendance.member_id == member_id)

    rows = session.exec(query.order_by(Attendance.attended_on, Attendance.created_at)).all()
    return resolve_members(rows, report=report)


# ============================================================================
# Revenue
# ============================================================================

@dataclass
class RevenueBucket:
    total: Decimal = ZERO
    count: int = 0

    def add(self, amount: Decimal) -> None:
        self.total += amount
        self.count += 1


@dataclass
class RevenueRollup:
    monthly: List[Dict] = field(default_factory=list)
    annual: List[Dict] = field(default_factory=list)
    total: RevenueBucket = field(default_factory=RevenueBucket)
    current_month: Decimal = ZERO


def rollup_revenue(payments: Iterable[Payment], today: date) -> RevenueRollup:
    """Group payments by (year, month) and by year.

    Every payment lands in exactly one monthly bucket, one annual bucket and
    the grand total, so the monthly totals always sum to the grand total.
    """
    monthly: Dict[Tuple[int, int], RevenueBucket] = defaultdict(RevenueBucket)
    annual: Dict[int, RevenueBucket] = defaultdict(RevenueBucket)
    grand = RevenueBucket()

    for payment in payments:
        key = (payment.paid_at.year, payment.paid_at.month)
        monthly[key].add(payment.amount)
        annual[key[0]].add(payment.amount)
        grand.add(payment.amount)

    current = monthly.get((today.year, today.month))

    return RevenueRollup(
        monthly=[
            {"year": year, "month": month, "total": bucket.total, "count": bucket.count}
            for (year, month), bucket in sorted(monthly.items())
        ],
        annual=[
            {"year": year, "total": bucket.total, "count": bucket.count}
            for year, bucket in sorted(annual.items())
        ],
        total=grand,
        current_month=current.total if current else ZERO,
    )


def revenue_for_tenant(session: Session, tenant_id: uuid.UUID, today: date) -> RevenueRollup:
    # Payments are summed without a member join: the ledger is the source of
    # truth for money received even when the member record is gone.
    payments = session.exec(select(Payment).where(Payment.tenant_id == tenant_id)).all()
    return rollup_revenue(payments, today)


# ============================================================================
# Attendance
# ============================================================================

@dataclass
class AttendanceStats:
    year: int
    month: int
    trend: List[Dict]
    rate: int
    present_records: int
    active_members: int
    days_elapsed: int


def attendance_trend(visits: Iterable[Tuple[uuid.UUID, date]], year: int, month: int) -> List[Dict]:
    """Dense per-day series of distinct members present, one entry per day"""
    present: Dict[int, Set[uuid.UUID]] = defaultdict(set)
    for member_id, day in visits:
        if day.year == year and day.month == month:
            present[day.day].add(member_id)

    return [
        {"day": day, "present": len(present.get(day, ()))}
        for day in range(1, days_in_month(year, month) + 1)
    ]


def attendance_rate(present_records: int, active_members: int, year: int, month: int, today: date) -> int:
    """Share of possible check-ins that happened, as an integer 0..100.

    Only days of the month that have started count as possible, so the
    current month is not penalised for days still ahead.
    """
    elapsed = days_elapsed_in_month(year, month, today)
    capacity = elapsed * active_members
    if capacity <= 0:
        return 0

    rate = (Decimal(present_records) * 100 / Decimal(capacity)).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return max(0, min(100, int(rate)))


def count_active_members(session: Session, tenant_id: uuid.UUID) -> int:
    return session.exec(
        select(func.count(Member.id)).where(
            Member.tenant_id == tenant_id,
            Member.status == MemberStatus.ACTIVE,
        )
    ).one()


def attendance_stats_for_tenant(
    session: Session,
    tenant_id: uuid.UUID,
    year: int,
    month: int,
    today: date,
) -> AttendanceStats:
    start, end = month_bounds(year, month)
    rows = attendance_with_members(session, tenant_id, start, end, report="attendance_stats")
    visits = [(record.member_id, record.attended_on) for record, _ in rows]
    active = count_active_members(session, tenant_id)

    return AttendanceStats(
        year=year,
        month=month,
        trend=attendance_trend(visits, year, month),
        rate=attendance_rate(len(visits), active, year, month, today),
        present_records=len(visits),
        active_members=active,
        days_elapsed=days_elapsed_in_month(year, month, today),
    )


def member_attendance_report(
    members: Sequence[Member],
    visits: Iterable[Tuple[uuid.UUID, date]],
    year: int,
    month: int,
) -> Dict:
    """Per-member present count and percentage for a month, every member listed"""
    total_days = days_in_month(year, month)
    counts: Dict[uuid.UUID, Set[date]] = defaultdict(set)
    for member_id, day in visits:
        counts[member_id].add(day)

    rows = []
    for member in members:
        present = len(counts.get(member.id, ()))
        rows.append({
            "member_id": member.id,
            "name": member.name,
            "email": member.email,
            "month": f"{year:04d}-{month:02d}",
            "present_count": present,
            "total_days": total_days,
            "percentage": percentage(present, total_days, 1),
        })

    average = (
        (Decimal(sum(row["present_count"] for row in rows)) / len(rows)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
        if rows else Decimal("0.0")
    )
    return {
        "data": rows,
        "summary": {"total_records": len(rows), "avg_attendance": float(average)},
    }


def member_attendance_report_for_tenant(session: Session, tenant_id: uuid.UUID, year: int, month: int) -> Dict:
    members = session.exec(
        select(Member).where(Member.tenant_id == tenant_id).order_by(Member.name, Member.id)
    ).all()
    start, end = month_bounds(year, month)
    rows = attendance_with_members(session, tenant_id, start, end, report="member_attendance_report")
    visits = [(record.member_id, record.attended_on) for record, _ in rows]
    return member_attendance_report(members, visits, year, month)


# ============================================================================
# Members
# ============================================================================

def expiring_soon(session: Session, tenant_id: Optional[uuid.UUID], today: date, days: int) -> List[Member]:
    """Active members whose expiry_date falls in [today, today + days].

    ``tenant_id`` None scans every tenant (scheduled reminders).
    """
    query = select(Member).where(
        Member.status == MemberStatus.ACTIVE,
        Member.expiry_date >= today,
        Member.expiry_date <= today + timedelta(days=days),
    )
    if tenant_id is not None:
        query = query.where(Member.tenant_id == tenant_id)
    return list(session.exec(query.order_by(Member.expiry_date, Member.name)).all())


def recent_members(session: Session, tenant_id: uuid.UUID, limit: int) -> List[Member]:
    return list(session.exec(
        select(Member)
        .where(Member.tenant_id == tenant_id)
        .order_by(Member.created_at.desc())
        .limit(limit)
    ).all())


def dashboard_stats(session: Session, tenant_id: uuid.UUID, today: date) -> Dict:
    counts = dict(session.exec(
        select(Member.status, func.count(Member.id))
        .where(Member.tenant_id == tenant_id)
        .group_by(Member.status)
    ).all())
    active = counts.get(MemberStatus.ACTIVE, 0)
    inactive = counts.get(MemberStatus.INACTIVE, 0)

    todays_visits = attendance_with_members(session, tenant_id, today, today, report="dashboard_stats")
    revenue = revenue_for_tenant(session, tenant_id, today)

    return {
        "total_members": active + inactive,
        "active_members": active,
        "inactive_members": inactive,
        "present_today": len(todays_visits),
        "current_month_revenue": revenue.current_month,
    }


def member_report(
    session: Session,
    tenant_id: uuid.UUID,
    status: Optional[str] = None,
    plan: Optional[str] = None,
    join_start: Optional[date] = None,
    join_end: Optional[date] = None,
) -> Dict:
    query = select(Member).where(Member.tenant_id == tenant_id)
    if status and status != "All":
        query = query.where(Member.status == MemberStatus(status))
    if plan and plan != "All":
        query = query.where(Member.plan == plan)
    if join_start:
        query = query.where(Member.join_date >= join_start)
    if join_end:
        query = query.where(Member.join_date <= join_end)

    members = list(session.exec(query.order_by(Member.join_date.desc(), Member.id)).all())
    return {
        "data": members,
        "summary": {
            "count": len(members),
            "active": sum(1 for m in members if m.status == MemberStatus.ACTIVE),
        },
    }
