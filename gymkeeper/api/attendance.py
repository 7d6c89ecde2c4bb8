"""
Attendance API endpoints
"""

from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from typing import List, Optional
import uuid

from gymkeeper.api.schemas import (
    AttendanceMark, AttendanceRead, AttendanceStatsRead, MonthOverviewRead, PresentMemberRead
)
from gymkeeper.core.clock import Clock, get_clock
from gymkeeper.core.database import get_session
from gymkeeper.core.dates import format_month, parse_month
from gymkeeper.core.dependencies import get_tenant_id
from gymkeeper.models.attendance import MarkedBy
from gymkeeper.services import attendance as attendance_service
from gymkeeper.services.aggregation import attendance_stats_for_tenant
from gymkeeper.services.members import get_member

router = APIRouter()


def _month_or_current(month: Optional[str], clock: Clock):
    if month:
        return parse_month(month)
    today = clock.today()
    return today.year, today.month


@router.post("/mark/{member_id}", response_model=AttendanceRead, status_code=status.HTTP_201_CREATED)
async def mark_attendance(
    member_id: uuid.UUID,
    data: Optional[AttendanceMark] = None,
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock)
):
    """Mark a member present for today.

    No body means the manual button; a QR scan sends ``marked_by``.
    """
    marked_by = data.marked_by if data else MarkedBy.MANUAL
    record = attendance_service.mark_present(session, tenant_id, member_id, clock, marked_by=marked_by)
    member = get_member(session, tenant_id, member_id)
    return {**record.model_dump(), "name": member.name}


@router.get("", response_model=MonthOverviewRead)
async def get_month_overview(
    month: Optional[str] = None,
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock)
):
    year, month_number = _month_or_current(month, clock)
    return attendance_service.month_overview(session, tenant_id, year, month_number)


@router.get("/today", response_model=List[PresentMemberRead])
async def get_present_today(
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock)
):
    return attendance_service.present_for_day(session, tenant_id, clock.today())


@router.get("/stats", response_model=AttendanceStatsRead)
async def get_attendance_stats(
    month: Optional[str] = None,
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock)
):
    """Daily trend and attendance rate for a month"""
    year, month_number = _month_or_current(month, clock)
    stats = attendance_stats_for_tenant(session, tenant_id, year, month_number, clock.today())
    return {
        "month": format_month(stats.year, stats.month),
        "trend": stats.trend,
        "rate": stats.rate,
        "present_records": stats.present_records,
        "active_members": stats.active_members,
        "days_elapsed": stats.days_elapsed,
    }
