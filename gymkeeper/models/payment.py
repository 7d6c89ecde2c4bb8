"""
Payment model
Immutable membership payment records, the source of truth for revenue
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import Column, Numeric
from decimal import Decimal
from datetime import datetime
from enum import Enum
import uuid


class PaymentMethod(str, Enum):
    """Payment methods accepted at the front desk"""
    CASH = "Cash"
    UPI = "UPI"
    CARD = "Card"


class Payment(SQLModel, table=True):
    """Membership payment transaction (append-only)"""

    __tablename__ = "payments"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    tenant_id: uuid.UUID = Field(
        foreign_key="tenants.id",
        index=True,
        description="Tenant ID for multi-tenant isolation"
    )
    member_id: uuid.UUID = Field(
        foreign_key="members.id",
        index=True,
        description="Member who paid (reference, not owning)"
    )

    amount: Decimal = Field(
        description="Payment amount",
        sa_column=Column(Numeric(10, 2), nullable=False)
    )
    method: PaymentMethod = Field(index=True)
    plan: str = Field(max_length=50, description="Plan name at time of payment")

    paid_at: datetime = Field(
        default_factory=datetime.utcnow,
        index=True,
        description="Wall time in the reference timezone"
    )
    created_at: datetime = Field(default_factory=datetime.utcnow)
