"""
Tenant model - one gym admin account, the isolation boundary for all data
"""

from sqlmodel import Field, SQLModel
from datetime import datetime
from typing import Optional
from enum import Enum
import uuid


class TenantRole(str, Enum):
    """Account roles"""
    ADMIN = "admin"
    TRAINER = "trainer"


class Tenant(SQLModel, table=True):
    """Gym admin account and gym settings"""

    __tablename__ = "tenants"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(max_length=100)
    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: str = Field(nullable=False)
    role: TenantRole = Field(default=TenantRole.ADMIN)

    # Gym profile
    gym_name: Optional[str] = Field(default=None, max_length=200)
    gym_code: Optional[str] = Field(
        default=None,
        unique=True,
        index=True,
        max_length=50,
        description="Public gym identifier, unique across tenants"
    )
    address: Optional[str] = Field(default=None, max_length=500)
    phone: Optional[str] = Field(default=None, max_length=50)

    # Operational settings
    currency: str = Field(default="INR", max_length=3)
    opening_time: Optional[str] = Field(default=None, max_length=5, description="HH:MM")
    closing_time: Optional[str] = Field(default=None, max_length=5, description="HH:MM")
    renewal_reminder_days: int = Field(default=7, description="Days before expiry to remind")
    low_attendance_threshold: int = Field(default=5, description="Visits per month")

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None
    is_active: bool = Field(default=True, index=True)
