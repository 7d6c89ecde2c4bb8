"""
Payments API endpoints
"""

from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from typing import List, Optional
from datetime import date
import uuid

from gymkeeper.api.schemas import PaymentCreate, PaymentExportRead, PaymentRead
from gymkeeper.core.clock import Clock, get_clock
from gymkeeper.core.database import get_session
from gymkeeper.core.dependencies import get_tenant_id
from gymkeeper.services import payments as payment_service

router = APIRouter()


@router.post("", response_model=PaymentRead, status_code=status.HTTP_201_CREATED)
async def create_payment(
    data: PaymentCreate,
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock)
):
    """Record a standalone payment (membership dates are not changed)"""
    return payment_service.record_payment(
        session,
        tenant_id,
        data.member_id,
        amount=data.amount,
        method=data.method,
        plan=data.plan,
        paid_at=data.paid_at,
        clock=clock,
    )


@router.get("/history/{member_id}", response_model=List[PaymentRead])
async def get_payment_history(
    member_id: uuid.UUID,
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    session: Session = Depends(get_session)
):
    return payment_service.payment_history(session, tenant_id, member_id)


@router.get("/export", response_model=PaymentExportRead)
async def export_payments(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    method: Optional[str] = None,
    plan: Optional[str] = None,
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    session: Session = Depends(get_session)
):
    """Flattened payment rows with member details, for download"""
    export = payment_service.export_payments(
        session, tenant_id, start=start_date, end=end_date, method=method, plan=plan
    )
    return {
        "data": export.rows,
        "summary": {"total": export.total, "count": export.count},
    }
