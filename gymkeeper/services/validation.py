"""
Field-level input validation shared by the member and payment services
"""

from decimal import Decimal, InvalidOperation
from typing import Dict, Optional
import re

from gymkeeper.core.exceptions import ValidationError
from gymkeeper.models.member import Gender
from gymkeeper.models.payment import PaymentMethod

PHONE_PATTERN = re.compile(r"^[0-9]{10}$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
CENTS = Decimal("0.01")


def coerce_method(value) -> PaymentMethod:
    try:
        return PaymentMethod(value)
    except ValueError:
        allowed = ", ".join(m.value for m in PaymentMethod)
        raise ValidationError(
            f"Invalid payment method: {value}",
            fields={"method": f"Method must be one of {allowed}"}
        )


def coerce_amount(value) -> Decimal:
    try:
        amount = Decimal(str(value)).quantize(CENTS)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError("Amount must be a number", fields={"amount": "Amount must be a number"})

    if not amount.is_finite() or amount <= 0:
        raise ValidationError("Amount must be a positive number", fields={"amount": "Amount must be positive"})
    return amount


def check_member_fields(fields: Dict, partial: bool = False) -> Dict:
    """Validate and normalize member profile fields.

    With ``partial`` only the keys present are checked (profile edits);
    otherwise name, phone and gender are required.
    """
    errors: Dict[str, str] = {}
    cleaned = dict(fields)

    if "name" in fields or not partial:
        name = (fields.get("name") or "").strip()
        if not name:
            errors["name"] = "Name is required"
        elif not 2 <= len(name) <= 100:
            errors["name"] = "Name must be between 2 and 100 characters"
        cleaned["name"] = name

    if "phone" in fields or not partial:
        phone = (fields.get("phone") or "").strip()
        if not phone:
            errors["phone"] = "Phone is required"
        elif not PHONE_PATTERN.match(phone):
            errors["phone"] = "Phone must be a valid 10-digit number"
        cleaned["phone"] = phone

    if "gender" in fields or not partial:
        gender = _coerce_gender(fields.get("gender"))
        if gender is None:
            errors["gender"] = "Gender must be Male, Female, or Other"
        cleaned["gender"] = gender

    if fields.get("email"):
        email = fields["email"].strip().lower()
        if not EMAIL_PATTERN.match(email):
            errors["email"] = "Must be a valid email address"
        cleaned["email"] = email
    elif "email" in fields:
        cleaned["email"] = None

    if fields.get("notes") and len(fields["notes"]) > 500:
        errors["notes"] = "Notes must not exceed 500 characters"

    if errors:
        raise ValidationError("Validation failed", fields=errors)
    return cleaned


def _coerce_gender(value) -> Optional[Gender]:
    if value is None:
        return None
    try:
        return Gender(value)
    except ValueError:
        return None
