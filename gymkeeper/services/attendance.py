"""
Attendance ledger

At most one record per (tenant, member, calendar day). The unique constraint
on the attendance table is the only duplicate guard: two concurrent check-ins
for the same member race on the insert and the loser gets AlreadyMarkedError.
"""

from datetime import date
from typing import Dict, List, Optional
import uuid

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session
import structlog

from gymkeeper.core.clock import Clock
from gymkeeper.core.dates import format_month, iter_days, month_bounds
from gymkeeper.core.exceptions import AlreadyMarkedError, TransactionError, ValidationError
from gymkeeper.models.attendance import Attendance, MarkedBy
from gymkeeper.services.aggregation import attendance_with_members, percentage
from gymkeeper.services.members import get_member

logger = structlog.get_logger(__name__)


def mark_present(
    session: Session,
    tenant_id: uuid.UUID,
    member_id: uuid.UUID,
    clock: Clock,
    marked_by: MarkedBy = MarkedBy.MANUAL,
) -> Attendance:
    """Record today's check-in for a member"""
    get_member(session, tenant_id, member_id)
    now = clock.local_now()

    record = Attendance(
        tenant_id=tenant_id,
        member_id=member_id,
        attended_on=now.date(),
        check_in_time=now.strftime("%H:%M:%S"),
        marked_by=marked_by,
    )
    session.add(record)

    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        logger.info(f"Duplicate check-in rejected for member {member_id} on {now.date()}")
        raise AlreadyMarkedError()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Failed to mark attendance for member {member_id}: {e}")
        raise TransactionError("Attendance was not recorded; retry the request")

    session.refresh(record)
    logger.info(f"Attendance marked: member {member_id} on {record.attended_on} ({marked_by.value})")
    return record


def present_for_day(session: Session, tenant_id: uuid.UUID, day: date) -> List[Dict]:
    """Who checked in on ``day``, in check-in order"""
    rows = attendance_with_members(session, tenant_id, day, day, report="present_for_day")
    return [
        {
            "member_id": member.id,
            "name": member.name,
            "check_in_time": record.check_in_time,
            "marked_by": record.marked_by,
        }
        for record, member in rows
    ]


def member_calendar(
    session: Session,
    tenant_id: uuid.UUID,
    member_id: uuid.UUID,
    first_month: Optional[tuple] = None,
    last_month: Optional[tuple] = None,
    today: Optional[date] = None,
) -> Dict:
    """Day-by-day present/absent calendar for one member over a month range.

    Months are (year, month) tuples; both default to the month of ``today``.
    """
    member = get_member(session, tenant_id, member_id)

    if first_month is None or last_month is None:
        if today is None:
            raise ValueError("today is required when the month range is not given")
        first_month = first_month or (today.year, today.month)
        last_month = last_month or (today.year, today.month)
    if first_month > last_month:
        raise ValidationError(
            "Start month must not be after end month",
            fields={"start_month": format_month(*first_month)}
        )

    start, _ = month_bounds(*first_month)
    _, end = month_bounds(*last_month)

    rows = attendance_with_members(session, tenant_id, start, end, member_id=member.id, report="member_calendar")
    present_days = {record.attended_on for record, _ in rows}

    days = [
        {"day": day, "status": "Present" if day in present_days else "Absent"}
        for day in iter_days(start, end)
    ]
    present = sum(1 for entry in days if entry["status"] == "Present")

    return {
        "member_id": member.id,
        "name": member.name,
        "start_month": format_month(*first_month),
        "end_month": format_month(*last_month),
        "attendance": days,
        "summary": {
            "present": present,
            "absent": len(days) - present,
            "total_days": len(days),
            "percentage": percentage(present, len(days), 2),
        },
    }


def month_overview(session: Session, tenant_id: uuid.UUID, year: int, month: int) -> Dict:
    """Member x day grid for the month, listing only members with a check-in"""
    start, end = month_bounds(year, month)
    day_numbers = list(range(1, end.day + 1))
    rows = attendance_with_members(session, tenant_id, start, end, report="month_overview")

    overview: Dict[uuid.UUID, Dict] = {}
    for record, member in rows:
        entry = overview.get(member.id)
        if entry is None:
            entry = overview[member.id] = {
                "member_id": member.id,
                "name": member.name,
                "days": {day: 0 for day in day_numbers},
            }
        entry["days"][record.attended_on.day] = 1

    return {
        "month": format_month(year, month),
        "days": day_numbers,
        "members": sorted(overview.values(), key=lambda entry: entry["name"]),
    }
