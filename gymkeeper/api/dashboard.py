"""
Dashboard API endpoints
"""

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session
from typing import List, Optional
import uuid

from gymkeeper.api.schemas import DashboardStatsRead, MemberRead, RevenueRead
from gymkeeper.core.clock import Clock, get_clock
from gymkeeper.core.config import get_settings
from gymkeeper.core.database import get_session
from gymkeeper.core.dependencies import get_tenant_id
from gymkeeper.services import aggregation

router = APIRouter()
settings = get_settings()


@router.get("/stats", response_model=DashboardStatsRead)
async def get_stats(
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock)
):
    return aggregation.dashboard_stats(session, tenant_id, clock.today())


@router.get("/recent-members", response_model=List[MemberRead])
async def get_recent_members(
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    session: Session = Depends(get_session)
):
    return aggregation.recent_members(session, tenant_id, settings.RECENT_MEMBERS_LIMIT)


@router.get("/expiring-members", response_model=List[MemberRead])
async def get_expiring_members(
    days: Optional[int] = Query(default=None, ge=0, le=365),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock)
):
    """Active members expiring within ``days`` (inclusive), soonest first"""
    window = settings.EXPIRING_SOON_DAYS if days is None else days
    return aggregation.expiring_soon(session, tenant_id, clock.today(), window)


@router.get("/revenue", response_model=RevenueRead)
async def get_revenue(
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock)
):
    rollup = aggregation.revenue_for_tenant(session, tenant_id, clock.today())
    return {
        "monthly": rollup.monthly,
        "annual": rollup.annual,
        "totals": {"total": rollup.total.total, "count": rollup.total.count},
        "current_month_revenue": rollup.current_month,
    }
