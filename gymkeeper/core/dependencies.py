"""
Authentication dependencies for FastAPI
"""

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session
from typing import Optional
import uuid
import structlog

from gymkeeper.core.auth import verify_token
from gymkeeper.core.database import get_session
from gymkeeper.core.exceptions import AuthenticationError
from gymkeeper.models.tenant import Tenant

logger = structlog.get_logger(__name__)
security = HTTPBearer(auto_error=False)


async def get_tenant_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> uuid.UUID:
    """Get tenant ID from JWT token"""
    if credentials is None:
        raise AuthenticationError("No token, authorization denied")

    tenant_id = verify_token(credentials.credentials)
    if tenant_id is None:
        raise AuthenticationError("Could not validate credentials")

    logger.debug(f"Tenant authenticated: {tenant_id}")
    return tenant_id


def get_current_tenant(
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    session: Session = Depends(get_session)
) -> Tenant:
    """Load the authenticated tenant"""
    tenant = session.get(Tenant, tenant_id)
    if not tenant or not tenant.is_active:
        raise AuthenticationError("Could not validate credentials")
    return tenant
