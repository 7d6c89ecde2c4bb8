"""
Pydantic schemas for authentication tokens
"""

from pydantic import BaseModel, Field
from datetime import datetime


class TokenPayload(BaseModel):
    """JWT token payload"""
    sub: str = Field(..., description="Tenant ID")
    role: str = Field(..., description="Account role")
    exp: datetime = Field(..., description="Expiration time")
    iat: datetime = Field(default_factory=datetime.utcnow, description="Issued at")


class TokenResponse(BaseModel):
    """Token response"""
    access_token: str
    token_type: str = "bearer"
    tenant_id: str
    role: str
