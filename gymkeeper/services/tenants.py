"""
Tenant accounts: registration, login and gym settings
"""

from datetime import datetime
from typing import Dict, Iterable, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select
import structlog

from gymkeeper.core.auth import hash_password, verify_password
from gymkeeper.core.exceptions import AuthenticationError, ConflictError, ValidationError
from gymkeeper.models.tenant import Tenant
from gymkeeper.services.plans import seed_default_plans, upsert_plans

logger = structlog.get_logger(__name__)

SETTINGS_FIELDS = (
    "gym_name", "gym_code", "address", "phone", "currency",
    "opening_time", "closing_time", "renewal_reminder_days", "low_attendance_threshold",
)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def register_tenant(
    session: Session,
    *,
    name: str,
    email: str,
    password: str,
    gym_name: Optional[str] = None,
    gym_code: Optional[str] = None,
) -> Tenant:
    """Create a tenant together with its default plan catalogue"""
    email = _normalize_email(email)
    gym_code = gym_code.strip() if gym_code else None

    if session.exec(select(Tenant).where(Tenant.email == email)).first():
        raise ConflictError("Admin already exists")
    if gym_code and session.exec(select(Tenant).where(Tenant.gym_code == gym_code)).first():
        raise ConflictError("Gym code already taken")

    tenant = Tenant(
        name=name.strip(),
        email=email,
        password_hash=hash_password(password),
        gym_name=gym_name,
        gym_code=gym_code,
    )
    session.add(tenant)
    seed_default_plans(session, tenant.id)

    try:
        session.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration
        session.rollback()
        raise ConflictError("Admin or gym code already exists")

    session.refresh(tenant)
    logger.info(f"Tenant registered: {tenant.id}")
    return tenant


def authenticate(session: Session, email: str, password: str) -> Tenant:
    tenant = session.exec(select(Tenant).where(Tenant.email == _normalize_email(email))).first()
    if not tenant or not verify_password(password, tenant.password_hash):
        raise AuthenticationError("Invalid credentials")
    if not tenant.is_active:
        raise AuthenticationError("Account is inactive")
    return tenant


def update_profile(session: Session, tenant: Tenant, *, name: Optional[str] = None, email: Optional[str] = None) -> Tenant:
    if email:
        email = _normalize_email(email)
        clash = session.exec(
            select(Tenant).where(Tenant.email == email, Tenant.id != tenant.id)
        ).first()
        if clash:
            raise ConflictError("Email already in use")
        tenant.email = email
    if name:
        tenant.name = name.strip()

    tenant.updated_at = datetime.utcnow()
    session.add(tenant)
    session.commit()
    session.refresh(tenant)
    return tenant


def change_password(session: Session, tenant: Tenant, current_password: str, new_password: str) -> None:
    if not verify_password(current_password, tenant.password_hash):
        raise ValidationError("Current password is incorrect", fields={"current_password": "Incorrect password"})

    tenant.password_hash = hash_password(new_password)
    tenant.updated_at = datetime.utcnow()
    session.add(tenant)
    session.commit()
    logger.info(f"Password changed for tenant {tenant.id}")


def update_settings(
    session: Session,
    tenant: Tenant,
    changes: Dict,
    plans: Optional[Iterable[Dict]] = None,
) -> Tenant:
    """Apply gym settings and plan edits in one commit"""
    gym_code = changes.get("gym_code")
    if gym_code:
        clash = session.exec(
            select(Tenant).where(Tenant.gym_code == gym_code, Tenant.id != tenant.id)
        ).first()
        if clash:
            raise ConflictError("Gym code already taken")

    if changes.get("renewal_reminder_days") is not None and changes["renewal_reminder_days"] < 0:
        raise ValidationError("Reminder days cannot be negative", fields={"renewal_reminder_days": "Must be >= 0"})

    for key, value in changes.items():
        if key in SETTINGS_FIELDS:
            setattr(tenant, key, value)

    if plans is not None:
        upsert_plans(session, tenant.id, plans)

    tenant.updated_at = datetime.utcnow()
    session.add(tenant)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise ConflictError("Settings conflict with an existing record")

    session.refresh(tenant)
    logger.info(f"Settings updated for tenant {tenant.id}")
    return tenant


