"""
Members API endpoints
"""

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session
from typing import List, Optional
import uuid

from gymkeeper.api.schemas import (
    MemberCalendarRead, MemberCreate, MemberRead, MemberRenew, MemberUpdate, MemberWithPayment
)
from gymkeeper.core.clock import Clock, get_clock
from gymkeeper.core.database import get_session
from gymkeeper.core.dates import parse_month
from gymkeeper.core.dependencies import get_tenant_id
from gymkeeper.services import members as member_service
from gymkeeper.services.attendance import member_calendar

router = APIRouter()


@router.post("", response_model=MemberWithPayment, status_code=status.HTTP_201_CREATED)
async def create_member(
    data: MemberCreate,
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock)
):
    """Register a member and take the first payment"""
    fields = data.model_dump(include={"name", "email", "phone", "gender", "dob", "notes"})
    member, payment = member_service.register_member(
        session,
        tenant_id,
        fields,
        plan=data.plan,
        method=data.method,
        amount=data.amount,
        join_date=data.join_date,
        clock=clock,
    )
    return {"member": member, "payment": payment}


@router.get("", response_model=List[MemberRead])
async def list_members(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    search: Optional[str] = None,
    sort_by: str = "created_at",
    order: str = "desc",
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    session: Session = Depends(get_session)
):
    return member_service.list_members(
        session, tenant_id, status=status_filter, search=search, sort_by=sort_by, order=order
    )


@router.get("/{member_id}", response_model=MemberRead)
async def get_member(
    member_id: uuid.UUID,
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    session: Session = Depends(get_session)
):
    return member_service.get_member(session, tenant_id, member_id)


@router.put("/renew/{member_id}", response_model=MemberWithPayment)
async def renew_member(
    member_id: uuid.UUID,
    data: MemberRenew,
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock)
):
    """Restart the membership from today on the chosen plan"""
    member, payment = member_service.renew_member(
        session,
        tenant_id,
        member_id,
        plan=data.plan,
        method=data.method,
        amount=data.amount,
        clock=clock,
    )
    return {"member": member, "payment": payment}


@router.put("/{member_id}", response_model=MemberRead)
async def update_member(
    member_id: uuid.UUID,
    data: MemberUpdate,
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    session: Session = Depends(get_session)
):
    return member_service.update_member(session, tenant_id, member_id, data.model_dump(exclude_unset=True))


@router.get("/{member_id}/attendance", response_model=MemberCalendarRead)
async def get_member_attendance(
    member_id: uuid.UUID,
    start_month: Optional[str] = None,
    end_month: Optional[str] = None,
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock)
):
    """Present/absent calendar; both months default to the current one"""
    return member_calendar(
        session,
        tenant_id,
        member_id,
        first_month=parse_month(start_month) if start_month else None,
        last_month=parse_month(end_month) if end_month else None,
        today=clock.today(),
    )
