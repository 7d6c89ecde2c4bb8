"""
Membership plan catalogue

Plans are referenced by name from members and payments; every use goes
through resolve_plan so a name that is unknown or switched off for the
tenant is rejected at write time.
"""

from decimal import Decimal
from typing import Dict, Iterable, List
import uuid

from sqlmodel import Session, select
import structlog

from gymkeeper.core.exceptions import ValidationError
from gymkeeper.models.plan import MembershipPlan, DEFAULT_PLANS

logger = structlog.get_logger(__name__)


def seed_default_plans(session: Session, tenant_id: uuid.UUID) -> List[MembershipPlan]:
    """Add the default catalogue for a new tenant (caller commits)"""
    plans = [MembershipPlan(tenant_id=tenant_id, **plan) for plan in DEFAULT_PLANS]
    for plan in plans:
        session.add(plan)
    return plans


def list_plans(session: Session, tenant_id: uuid.UUID, active_only: bool = False) -> List[MembershipPlan]:
    query = select(MembershipPlan).where(MembershipPlan.tenant_id == tenant_id)
    if active_only:
        query = query.where(MembershipPlan.is_active == True)  # noqa: E712
    return list(session.exec(query.order_by(MembershipPlan.duration_months)).all())


def resolve_plan(session: Session, tenant_id: uuid.UUID, name: str) -> MembershipPlan:
    """Look up an active plan by name"""
    plan = session.exec(
        select(MembershipPlan).where(
            MembershipPlan.tenant_id == tenant_id,
            MembershipPlan.name == name,
        )
    ).first()

    if plan is None:
        raise ValidationError(f"Unknown plan: {name}", fields={"plan": "Invalid plan type"})
    if not plan.is_active:
        raise ValidationError(f"Plan is not available: {name}", fields={"plan": "Plan is inactive"})
    return plan


def upsert_plans(session: Session, tenant_id: uuid.UUID, entries: Iterable[Dict]) -> List[MembershipPlan]:
    """Create or update plans by name (caller commits).

    Plans missing from ``entries`` are left untouched so that existing
    members keep a resolvable plan name.
    """
    existing = {plan.name: plan for plan in list_plans(session, tenant_id)}
    touched = []

    for entry in entries:
        name = (entry.get("name") or "").strip()
        duration = entry.get("duration_months")
        price = entry.get("price")

        errors = {}
        if not name:
            errors["name"] = "Plan name is required"
        if duration is None or int(duration) < 1:
            errors["duration_months"] = "Duration must be at least one month"
        if price is None or Decimal(str(price)) <= 0:
            errors["price"] = "Price must be a positive number"
        if errors:
            raise ValidationError("Invalid membership plan", fields=errors)

        plan = existing.get(name)
        if plan is None:
            plan = MembershipPlan(tenant_id=tenant_id, name=name)
            existing[name] = plan
        plan.duration_months = int(duration)
        plan.price = Decimal(str(price))
        plan.is_active = bool(entry.get("is_active", True))
        session.add(plan)
        touched.append(plan)

    logger.info(f"Upserted {len(touched)} plans for tenant {tenant_id}")
    return touched
