"""
Reports API endpoints
"""

from fastapi import APIRouter, Depends
from sqlmodel import Session
from typing import Optional
from datetime import date
import uuid

from gymkeeper.api.schemas import MemberAttendanceReportRead, MemberReportRead, PaymentExportRead
from gymkeeper.core.clock import Clock, get_clock
from gymkeeper.core.database import get_session
from gymkeeper.core.dates import parse_month
from gymkeeper.core.dependencies import get_tenant_id
from gymkeeper.core.exceptions import ValidationError
from gymkeeper.models.member import MemberStatus
from gymkeeper.services import aggregation
from gymkeeper.services.payments import export_payments

router = APIRouter()


@router.get("/payments", response_model=PaymentExportRead)
async def payments_report(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    method: Optional[str] = None,
    plan: Optional[str] = None,
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    session: Session = Depends(get_session)
):
    export = export_payments(session, tenant_id, start=start_date, end=end_date, method=method, plan=plan)
    return {
        "data": export.rows,
        "summary": {"total": export.total, "count": export.count},
    }


@router.get("/members", response_model=MemberReportRead)
async def members_report(
    status: Optional[str] = None,
    plan: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    session: Session = Depends(get_session)
):
    """Members filtered by status, plan and join date range"""
    if status and status != "All" and status not in {s.value for s in MemberStatus}:
        raise ValidationError(f"Unknown status: {status}", fields={"status": "Status must be Active or Inactive"})
    return aggregation.member_report(
        session, tenant_id, status=status, plan=plan, join_start=start_date, join_end=end_date
    )


@router.get("/attendance", response_model=MemberAttendanceReportRead)
async def attendance_report(
    month: Optional[str] = None,
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock)
):
    """Per-member present count and percentage for the month"""
    if month:
        year, month_number = parse_month(month)
    else:
        today = clock.today()
        year, month_number = today.year, today.month
    return aggregation.member_attendance_report_for_tenant(session, tenant_id, year, month_number)
