"""
Member model with the Active/Inactive membership state machine
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import UniqueConstraint
from datetime import date, datetime
from typing import Optional
from enum import Enum
import uuid

from gymkeeper.core.dates import add_months


class MemberStatus(str, Enum):
    """Membership status, derived from expiry_date"""
    ACTIVE = "Active"        # expiry_date is today or later
    INACTIVE = "Inactive"    # expiry_date has passed


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class Member(SQLModel, table=True):
    """Gym membership record"""

    __tablename__ = "members"
    __table_args__ = (
        UniqueConstraint("tenant_id", "email", name="uq_member_tenant_email"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    tenant_id: uuid.UUID = Field(
        foreign_key="tenants.id",
        index=True,
        description="Tenant ID for multi-tenant isolation"
    )

    # Profile
    name: str = Field(index=True, max_length=100)
    email: Optional[str] = Field(default=None, max_length=255)
    phone: str = Field(index=True, max_length=20)
    gender: Gender
    dob: Optional[date] = None
    notes: Optional[str] = Field(default=None, max_length=500)

    # Membership
    plan: str = Field(max_length=50, description="Name of the plan last paid for")
    join_date: date
    renewal_date: date = Field(description="Start of the current membership period")
    expiry_date: date = Field(index=True, description="Last day the membership is valid")
    status: MemberStatus = Field(default=MemberStatus.ACTIVE, index=True)

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: Optional[datetime] = None

    def is_expired(self, today: date) -> bool:
        """Membership is valid through expiry_date inclusive"""
        return self.expiry_date < today

    def expected_status(self, today: date) -> MemberStatus:
        return MemberStatus.INACTIVE if self.is_expired(today) else MemberStatus.ACTIVE

    def needs_reconciliation(self, today: date) -> bool:
        return self.status != self.expected_status(today)

    def start_membership(self, plan_name: str, duration_months: int, join_date: date, today: date) -> None:
        """Open the first membership period at join_date"""
        if duration_months < 1:
            raise ValueError("Cannot start membership: plan duration must be positive")

        self.plan = plan_name
        self.join_date = join_date
        self.renewal_date = join_date
        self.expiry_date = add_months(join_date, duration_months)
        self.status = self.expected_status(today)

    def apply_renewal(self, plan_name: str, duration_months: int, today: date) -> None:
        """Restart the membership period from today, regardless of prior status"""
        if duration_months < 1:
            raise ValueError("Cannot renew membership: plan duration must be positive")

        self.plan = plan_name
        self.renewal_date = today
        self.expiry_date = add_months(today, duration_months)
        self.status = MemberStatus.ACTIVE
        self.updated_at = datetime.utcnow()
