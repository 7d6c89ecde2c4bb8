"""
Attendance model
One presence record per member per calendar day
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import UniqueConstraint
from datetime import date, datetime
from enum import Enum
import uuid


class MarkedBy(str, Enum):
    """How the check-in was captured"""
    MANUAL = "manual"        # Admin pressed the button
    QR_SELF = "qr_self"      # Member scanned the gym code
    QR_ADMIN = "qr_admin"    # Admin scanned the member code


class Attendance(SQLModel, table=True):
    """Daily check-in (append-only)"""

    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint("tenant_id", "member_id", "attended_on", name="uq_attendance_member_day"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    tenant_id: uuid.UUID = Field(
        foreign_key="tenants.id",
        index=True,
        description="Tenant ID for multi-tenant isolation"
    )
    member_id: uuid.UUID = Field(
        foreign_key="members.id",
        index=True,
        description="Member who checked in (reference, not owning)"
    )

    attended_on: date = Field(index=True, description="Calendar day in the reference timezone")
    check_in_time: str = Field(max_length=8, description="HH:MM:SS, display only")
    marked_by: MarkedBy = Field(default=MarkedBy.MANUAL)

    created_at: datetime = Field(default_factory=datetime.utcnow)
