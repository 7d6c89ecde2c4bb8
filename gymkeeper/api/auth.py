"""
Gym admin authentication API endpoints
"""

from fastapi import APIRouter, Depends, status
from sqlmodel import Session
import structlog

from gymkeeper.core.auth import create_access_token
from gymkeeper.core.database import get_session
from gymkeeper.core.dependencies import get_current_tenant
from gymkeeper.models.tenant import Tenant
from gymkeeper.schemas.tenant import (
    PasswordChange, ProfileUpdate, TenantCreate, TenantLogin, TenantResponse
)
from gymkeeper.schemas.token import TokenResponse
from gymkeeper.services import tenants as tenant_service

logger = structlog.get_logger(__name__)
router = APIRouter()


def _token_for(tenant: Tenant) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(tenant_id=tenant.id, role=tenant.role.value),
        tenant_id=str(tenant.id),
        role=tenant.role.value,
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    data: TenantCreate,
    session: Session = Depends(get_session)
):
    """Register a gym admin account"""
    tenant = tenant_service.register_tenant(
        session,
        name=data.name,
        email=data.email,
        password=data.password,
        gym_name=data.gym_name,
        gym_code=data.gym_code,
    )
    return _token_for(tenant)


@router.post("/login", response_model=TokenResponse)
async def login(
    data: TenantLogin,
    session: Session = Depends(get_session)
):
    """Exchange credentials for a bearer token"""
    tenant = tenant_service.authenticate(session, data.email, data.password)
    logger.info(f"Tenant logged in: {tenant.id}")
    return _token_for(tenant)


@router.get("/profile", response_model=TenantResponse)
async def get_profile(tenant: Tenant = Depends(get_current_tenant)):
    return tenant


@router.put("/profile", response_model=TenantResponse)
async def update_profile(
    data: ProfileUpdate,
    tenant: Tenant = Depends(get_current_tenant),
    session: Session = Depends(get_session)
):
    return tenant_service.update_profile(session, tenant, name=data.name, email=data.email)


@router.put("/change-password")
async def change_password(
    data: PasswordChange,
    tenant: Tenant = Depends(get_current_tenant),
    session: Session = Depends(get_session)
):
    tenant_service.change_password(session, tenant, data.current_password, data.new_password)
    return {"message": "Password updated successfully"}
