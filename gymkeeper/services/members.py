"""
Member store: registration, lookup, listing, profile edits and renewals

Registration and renewal each write a Member change and a Payment; both go
through a single commit so a failure leaves neither behind.
"""

from datetime import date, datetime
from typing import Dict, List, Optional, Tuple
import uuid

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, col, or_, select
import structlog

from gymkeeper.core.clock import Clock
from gymkeeper.core.exceptions import (
    AuthorizationError, ConflictError, NotFoundError, TransactionError, ValidationError
)
from gymkeeper.models.member import Member, MemberStatus
from gymkeeper.models.payment import Payment
from gymkeeper.services.plans import resolve_plan
from gymkeeper.services.validation import check_member_fields, coerce_amount, coerce_method

logger = structlog.get_logger(__name__)

SORT_COLUMNS = {
    "name": Member.name,
    "join_date": Member.join_date,
    "expiry_date": Member.expiry_date,
    "created_at": Member.created_at,
}

EDITABLE_FIELDS = ("name", "email", "phone", "gender", "dob", "notes", "expiry_date")


def _commit_membership_write(session: Session, action: str, member: Member) -> None:
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise ConflictError("A member with this email already exists")
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"{action} rolled back for member {member.id}: {e}")
        raise TransactionError(f"{action} was rolled back; retry the request")


def register_member(
    session: Session,
    tenant_id: uuid.UUID,
    fields: Dict,
    *,
    plan: str,
    method,
    clock: Clock,
    amount=None,
    join_date: Optional[date] = None,
) -> Tuple[Member, Payment]:
    """Create a member and the first payment for the chosen plan"""
    cleaned = check_member_fields(fields)
    method = coerce_method(method)
    plan_record = resolve_plan(session, tenant_id, plan)
    amount = coerce_amount(plan_record.price if amount is None else amount)

    today = clock.today()
    join_date = join_date or today

    member = Member(
        tenant_id=tenant_id,
        name=cleaned["name"],
        email=cleaned.get("email"),
        phone=cleaned["phone"],
        gender=cleaned["gender"],
        dob=cleaned.get("dob"),
        notes=cleaned.get("notes"),
    )
    member.start_membership(plan_record.name, plan_record.duration_months, join_date, today)

    payment = Payment(
        tenant_id=tenant_id,
        member_id=member.id,
        amount=amount,
        method=method,
        plan=plan_record.name,
        paid_at=datetime.combine(join_date, clock.local_now().time()),
    )

    session.add(member)
    session.add(payment)
    _commit_membership_write(session, "Member registration", member)

    session.refresh(member)
    session.refresh(payment)
    logger.info(f"Member registered: {member.id} on plan {member.plan}, expires {member.expiry_date}")
    return member, payment


def get_member(session: Session, tenant_id: uuid.UUID, member_id: uuid.UUID) -> Member:
    member = session.get(Member, member_id)
    if not member:
        raise NotFoundError("Member not found")
    if member.tenant_id != tenant_id:
        logger.warning(f"Cross-tenant member access blocked: {member_id} requested by {tenant_id}")
        raise AuthorizationError()
    return member


def list_members(
    session: Session,
    tenant_id: uuid.UUID,
    status: Optional[str] = None,
    search: Optional[str] = None,
    sort_by: str = "created_at",
    order: str = "desc",
) -> List[Member]:
    """Fresh snapshot of the tenant's members"""
    if sort_by not in SORT_COLUMNS:
        raise ValidationError(f"Cannot sort by {sort_by}", fields={"sort_by": ", ".join(SORT_COLUMNS)})
    if order not in ("asc", "desc"):
        raise ValidationError("Order must be asc or desc", fields={"order": order})

    query = select(Member).where(Member.tenant_id == tenant_id)

    if status and status != "All":
        try:
            query = query.where(Member.status == MemberStatus(status))
        except ValueError:
            raise ValidationError(f"Unknown status: {status}", fields={"status": "Status must be Active or Inactive"})
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(or_(col(Member.name).ilike(pattern), col(Member.phone).ilike(pattern)))

    sort_column = SORT_COLUMNS[sort_by]
    sort_clause = sort_column.asc() if order == "asc" else sort_column.desc()
    return list(session.exec(query.order_by(sort_clause, Member.id)).all())


def update_member(session: Session, tenant_id: uuid.UUID, member_id: uuid.UUID, changes: Dict) -> Member:
    """Edit profile fields.

    An expiry_date edit does not touch status here; the next reconciliation
    sweep brings status in line with it.
    """
    member = get_member(session, tenant_id, member_id)
    changes = {key: value for key, value in changes.items() if key in EDITABLE_FIELDS}
    cleaned = check_member_fields(changes, partial=True)

    if "expiry_date" in cleaned:
        if cleaned["expiry_date"] is None:
            raise ValidationError("Expiry date is required", fields={"expiry_date": "Expiry date is required"})
        if cleaned["expiry_date"] < member.renewal_date:
            raise ValidationError(
                "Expiry date cannot precede the renewal date",
                fields={"expiry_date": "Must be on or after the renewal date"}
            )

    for key, value in cleaned.items():
        setattr(member, key, value)
    member.updated_at = datetime.utcnow()

    session.add(member)
    _commit_membership_write(session, "Member update", member)
    session.refresh(member)
    logger.info(f"Member updated: {member.id} ({', '.join(sorted(cleaned))})")
    return member


def renew_member(
    session: Session,
    tenant_id: uuid.UUID,
    member_id: uuid.UUID,
    *,
    plan: str,
    method,
    clock: Clock,
    amount=None,
) -> Tuple[Member, Payment]:
    """Restart the membership from today on ``plan`` and record its payment"""
    member = get_member(session, tenant_id, member_id)
    method = coerce_method(method)
    plan_record = resolve_plan(session, tenant_id, plan)
    amount = coerce_amount(plan_record.price if amount is None else amount)

    previous_status = member.status
    member.apply_renewal(plan_record.name, plan_record.duration_months, clock.today())

    payment = Payment(
        tenant_id=tenant_id,
        member_id=member.id,
        amount=amount,
        method=method,
        plan=plan_record.name,
        paid_at=clock.local_now(),
    )

    session.add(member)
    session.add(payment)
    _commit_membership_write(session, "Membership renewal", member)

    session.refresh(member)
    session.refresh(payment)
    logger.info(
        f"Member renewed: {member.id} {previous_status.value} -> {member.status.value}, "
        f"expires {member.expiry_date}"
    )
    return member, payment
