"""
Pydantic schemas for tenant accounts
"""

from pydantic import BaseModel, Field, EmailStr
from typing import Optional
from datetime import datetime
import uuid

from gymkeeper.models.tenant import TenantRole


class TenantCreate(BaseModel):
    """Gym admin registration schema"""
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=100)
    gym_name: Optional[str] = Field(default=None, max_length=200)
    gym_code: Optional[str] = Field(default=None, max_length=50)


class TenantLogin(BaseModel):
    """Login schema"""
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=100)


class TenantResponse(BaseModel):
    """Tenant profile response"""
    id: uuid.UUID
    name: str
    email: str
    role: TenantRole
    gym_name: Optional[str] = None
    gym_code: Optional[str] = None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    email: Optional[EmailStr] = None


class PasswordChange(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=100)
