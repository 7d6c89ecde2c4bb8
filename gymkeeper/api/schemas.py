"""
API schemas for Member, Payment, Attendance, dashboard and report payloads
"""

from sqlmodel import SQLModel
from datetime import date, datetime
from typing import Dict, List, Optional
from decimal import Decimal
from gymkeeper.models.attendance import MarkedBy
from gymkeeper.models.member import Gender, MemberStatus
from gymkeeper.models.payment import PaymentMethod
import uuid

# ============================================================================
# Member Schemas
# ============================================================================

class MemberCreate(SQLModel):
    name: str
    phone: str
    gender: str
    email: Optional[str] = None
    dob: Optional[date] = None
    notes: Optional[str] = None
    plan: str
    method: str = PaymentMethod.CASH.value
    amount: Optional[Decimal] = None
    join_date: Optional[date] = None


class MemberUpdate(SQLModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    gender: Optional[str] = None
    dob: Optional[date] = None
    notes: Optional[str] = None
    expiry_date: Optional[date] = None


class MemberRenew(SQLModel):
    plan: str
    method: str = PaymentMethod.CASH.value
    amount: Optional[Decimal] = None


class MemberRead(SQLModel):
    id: uuid.UUID
    name: str
    email: Optional[str] = None
    phone: str
    gender: Gender
    dob: Optional[date] = None
    notes: Optional[str] = None
    plan: str
    join_date: date
    renewal_date: date
    expiry_date: date
    status: MemberStatus
    created_at: datetime
    updated_at: Optional[datetime] = None


# ============================================================================
# Payment Schemas
# ============================================================================

class PaymentCreate(SQLModel):
    member_id: uuid.UUID
    amount: Decimal
    method: str
    plan: str
    paid_at: Optional[datetime] = None


class PaymentRead(SQLModel):
    id: uuid.UUID
    member_id: uuid.UUID
    amount: Decimal
    method: PaymentMethod
    plan: str
    paid_at: datetime
    created_at: datetime


class MemberWithPayment(SQLModel):
    """Registration and renewal both return the member and the payment taken"""
    member: MemberRead
    payment: PaymentRead


class PaymentExportRowRead(SQLModel):
    payment_id: uuid.UUID
    member_id: uuid.UUID
    member_name: str
    member_email: Optional[str] = None
    amount: Decimal
    plan: str
    method: str
    date: datetime


class PaymentExportSummary(SQLModel):
    total: Decimal
    count: int


class PaymentExportRead(SQLModel):
    data: List[PaymentExportRowRead]
    summary: PaymentExportSummary


# ============================================================================
# Attendance Schemas
# ============================================================================

class AttendanceMark(SQLModel):
    """Manual button by default; QR scans pass qr_admin or qr_self"""
    marked_by: MarkedBy = MarkedBy.MANUAL


class AttendanceRead(SQLModel):
    id: uuid.UUID
    member_id: uuid.UUID
    name: str
    attended_on: date
    check_in_time: str
    marked_by: MarkedBy


class PresentMemberRead(SQLModel):
    member_id: uuid.UUID
    name: str
    check_in_time: str
    marked_by: MarkedBy


class MonthOverviewRow(SQLModel):
    member_id: uuid.UUID
    name: str
    days: Dict[int, int]


class MonthOverviewRead(SQLModel):
    month: str
    days: List[int]
    members: List[MonthOverviewRow]


class TrendPoint(SQLModel):
    day: int
    present: int


class AttendanceStatsRead(SQLModel):
    month: str
    trend: List[TrendPoint]
    rate: int
    present_records: int
    active_members: int
    days_elapsed: int


class CalendarDay(SQLModel):
    day: date
    status: str


class CalendarSummary(SQLModel):
    present: int
    absent: int
    total_days: int
    percentage: float


class MemberCalendarRead(SQLModel):
    member_id: uuid.UUID
    name: str
    start_month: str
    end_month: str
    attendance: List[CalendarDay]
    summary: CalendarSummary


# ============================================================================
# Dashboard Schemas
# ============================================================================

class DashboardStatsRead(SQLModel):
    total_members: int
    active_members: int
    inactive_members: int
    present_today: int
    current_month_revenue: Decimal


class MonthlyRevenue(SQLModel):
    year: int
    month: int
    total: Decimal
    count: int


class AnnualRevenue(SQLModel):
    year: int
    total: Decimal
    count: int


class RevenueTotals(SQLModel):
    total: Decimal
    count: int


class RevenueRead(SQLModel):
    monthly: List[MonthlyRevenue]
    annual: List[AnnualRevenue]
    totals: RevenueTotals
    current_month_revenue: Decimal


# ============================================================================
# Report Schemas
# ============================================================================

class MemberAttendanceRow(SQLModel):
    member_id: uuid.UUID
    name: str
    email: Optional[str] = None
    month: str
    present_count: int
    total_days: int
    percentage: float


class MemberAttendanceSummary(SQLModel):
    total_records: int
    avg_attendance: float


class MemberAttendanceReportRead(SQLModel):
    data: List[MemberAttendanceRow]
    summary: MemberAttendanceSummary


class MemberReportSummary(SQLModel):
    count: int
    active: int


class MemberReportRead(SQLModel):
    data: List[MemberRead]
    summary: MemberReportSummary


# ============================================================================
# Settings Schemas
# ============================================================================

class PlanRead(SQLModel):
    id: uuid.UUID
    name: str
    duration_months: int
    price: Decimal
    is_active: bool


class PlanUpdate(SQLModel):
    name: str
    duration_months: int
    price: Decimal
    is_active: bool = True


class SettingsRead(SQLModel):
    gym_name: Optional[str] = None
    gym_code: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    currency: str
    opening_time: Optional[str] = None
    closing_time: Optional[str] = None
    renewal_reminder_days: int
    low_attendance_threshold: int
    plans: List[PlanRead]


class SettingsUpdate(SQLModel):
    gym_name: Optional[str] = None
    gym_code: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    currency: Optional[str] = None
    opening_time: Optional[str] = None
    closing_time: Optional[str] = None
    renewal_reminder_days: Optional[int] = None
    low_attendance_threshold: Optional[int] = None
    plans: Optional[List[PlanUpdate]] = None
