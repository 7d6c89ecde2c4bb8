"""
Gym settings API endpoints
"""

from fastapi import APIRouter, Depends
from sqlmodel import Session

from gymkeeper.api.schemas import SettingsRead, SettingsUpdate
from gymkeeper.core.database import get_session
from gymkeeper.core.dependencies import get_current_tenant
from gymkeeper.models.tenant import Tenant
from gymkeeper.services.plans import list_plans
from gymkeeper.services.tenants import SETTINGS_FIELDS, update_settings

router = APIRouter()


def _settings_payload(session: Session, tenant: Tenant) -> dict:
    payload = {key: getattr(tenant, key) for key in SETTINGS_FIELDS}
    payload["plans"] = list_plans(session, tenant.id)
    return payload


@router.get("", response_model=SettingsRead)
async def get_settings(
    tenant: Tenant = Depends(get_current_tenant),
    session: Session = Depends(get_session)
):
    """Gym profile and the plan catalogue"""
    return _settings_payload(session, tenant)


@router.put("", response_model=SettingsRead)
async def put_settings(
    data: SettingsUpdate,
    tenant: Tenant = Depends(get_current_tenant),
    session: Session = Depends(get_session)
):
    changes = data.model_dump(exclude_unset=True, exclude={"plans"})
    plans = [plan.model_dump() for plan in data.plans] if data.plans is not None else None
    tenant = update_settings(session, tenant, changes, plans=plans)
    return _settings_payload(session, tenant)
