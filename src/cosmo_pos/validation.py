"""
Input validation utilities.
"""

import re

from cosmo_pos.constants import PIN_LENGTH


class ValidationError(Exception):
    """Raised when validation fails."""

    pass


class NotFoundError(ValidationError):
    """Raised when an id does not match any cached record."""

    pass


def validate_pin(pin: str) -> None:
    """PINs are exactly four digits."""
    if not pin:
        raise ValidationError("PIN is required")

    if not re.fullmatch(rf"\d{{{PIN_LENGTH}}}", pin):
        raise ValidationError(f"PIN must be exactly {PIN_LENGTH} digits")


def validate_email(email: str) -> None:
    """Validate email format."""
    if not email:
        raise ValidationError("Email is required")

    pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
    if not re.match(pattern, email):
        raise ValidationError("Invalid email format")


def validate_phone(phone: str) -> None:
    if not phone or len(re.sub(r"\D", "", phone)) < 9:
        raise ValidationError("Invalid phone number")


def validate_role(role: str) -> None:
    from cosmo_pos.constants import Roles

    if role not in Roles.all_values():
        allowed = ", ".join(sorted(Roles.all_values()))
        raise ValidationError(f"Invalid role: {role}. Allowed: {allowed}")
