"""
Membership plan catalogue, configured per tenant
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import Column, Numeric, UniqueConstraint
from decimal import Decimal
import uuid


DEFAULT_PLANS = [
    {"name": "Monthly", "duration_months": 1, "price": Decimal("1000")},
    {"name": "Quarterly", "duration_months": 3, "price": Decimal("2700")},
    {"name": "Half-Yearly", "duration_months": 6, "price": Decimal("5100")},
    {"name": "Yearly", "duration_months": 12, "price": Decimal("9600")},
]


class MembershipPlan(SQLModel, table=True):
    """Named membership tier with a duration and a price"""

    __tablename__ = "membership_plans"
    __table_args__ = (
        UniqueConstraint("tenant_id", "name", name="uq_plan_tenant_name"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    tenant_id: uuid.UUID = Field(
        foreign_key="tenants.id",
        index=True,
        description="Tenant ID for multi-tenant isolation"
    )
    name: str = Field(max_length=50)
    duration_months: int = Field(description="Membership length in calendar months")
    price: Decimal = Field(
        description="Plan price",
        sa_column=Column(Numeric(10, 2), nullable=False)
    )
    is_active: bool = Field(default=True)
