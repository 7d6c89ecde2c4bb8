"""
Payment ledger

Payments are append-only: this module creates and reads them, nothing
updates or deletes one.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import List, Optional
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select
import structlog

from gymkeeper.core.clock import Clock
from gymkeeper.core.exceptions import TransactionError, ValidationError
from gymkeeper.models.member import Member
from gymkeeper.models.payment import Payment
from gymkeeper.services.aggregation import resolve_members
from gymkeeper.services.members import get_member
from gymkeeper.services.plans import resolve_plan
from gymkeeper.services.validation import coerce_amount, coerce_method

logger = structlog.get_logger(__name__)


def record_payment(
    session: Session,
    tenant_id: uuid.UUID,
    member_id: uuid.UUID,
    *,
    amount,
    method,
    plan: str,
    clock: Clock,
    paid_at: Optional[datetime] = None,
) -> Payment:
    """Append a standalone payment; the member's membership is not touched"""
    amount = coerce_amount(amount)
    method = coerce_method(method)
    get_member(session, tenant_id, member_id)
    plan_record = resolve_plan(session, tenant_id, plan)

    if paid_at is None:
        paid_at = clock.local_now()
    elif paid_at.tzinfo is not None:
        # Stored as naive wall time in the reference timezone
        paid_at = paid_at.astimezone(clock.tz).replace(tzinfo=None)

    payment = Payment(
        tenant_id=tenant_id,
        member_id=member_id,
        amount=amount,
        method=method,
        plan=plan_record.name,
        paid_at=paid_at,
    )
    session.add(payment)
    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Failed to record payment for member {member_id}: {e}")
        raise TransactionError("Payment was not recorded; retry the request")

    session.refresh(payment)
    logger.info(f"Payment recorded: {payment.id} ({payment.amount} via {payment.method.value})")
    return payment


def payment_history(session: Session, tenant_id: uuid.UUID, member_id: uuid.UUID) -> List[Payment]:
    """Payments of one member, most recent first"""
    get_member(session, tenant_id, member_id)
    return list(session.exec(
        select(Payment)
        .where(Payment.tenant_id == tenant_id, Payment.member_id == member_id)
        .order_by(Payment.paid_at.desc(), Payment.created_at.desc())
    ).all())


@dataclass
class PaymentExportRow:
    payment_id: uuid.UUID
    member_id: uuid.UUID
    member_name: str
    member_email: Optional[str]
    amount: Decimal
    plan: str
    method: str
    date: datetime


@dataclass
class PaymentExport:
    rows: List[PaymentExportRow] = field(default_factory=list)
    total: Decimal = Decimal("0")
    count: int = 0


def export_payments(
    session: Session,
    tenant_id: uuid.UUID,
    start: Optional[date] = None,
    end: Optional[date] = None,
    method: Optional[str] = None,
    plan: Optional[str] = None,
) -> PaymentExport:
    """Flattened payment rows with member details, newest first.

    ``end`` is inclusive. Payments whose member no longer resolves are left
    out of the export.
    """
    if start and end and start > end:
        raise ValidationError("Start date must not be after end date", fields={"start_date": str(start)})

    query = (
        select(Payment, Member)
        .join(
            Member,
            (Member.id == Payment.member_id) & (Member.tenant_id == Payment.tenant_id),
            isouter=True,
        )
        .where(Payment.tenant_id == tenant_id)
    )
    if start:
        query = query.where(Payment.paid_at >= datetime.combine(start, time.min))
    if end:
        query = query.where(Payment.paid_at < datetime.combine(end + timedelta(days=1), time.min))
    if method and method != "All":
        query = query.where(Payment.method == coerce_method(method))
    if plan and plan != "All":
        query = query.where(Payment.plan == plan)

    rows = session.exec(query.order_by(Payment.paid_at.desc())).all()

    export = PaymentExport()
    for payment, member in resolve_members(rows, report="payment_export"):
        export.rows.append(PaymentExportRow(
            payment_id=payment.id,
            member_id=member.id,
            member_name=member.name,
            member_email=member.email,
            amount=payment.amount,
            plan=payment.plan,
            method=payment.method.value,
            date=payment.paid_at,
        ))
        export.total += payment.amount
        export.count += 1
    return export
