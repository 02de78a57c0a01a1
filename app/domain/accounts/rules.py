"""
Registration and profile rules.

Pure checks run before any database write. Each failure raises a
distinct AccountValidationError subclass.
"""

from datetime import date, datetime
from typing import Optional, Sequence

from app.domain.accounts.entities import ContactAssignment, ContactRole
from app.domain.accounts.errors import (
    InsufficientContactsError,
    InvalidContactRolesError,
    InvalidDateError,
    MissingContactNumberError,
)

MIN_CONTACTS = 3


def check_contacts(contacts: Sequence[ContactAssignment]) -> None:
    """Validate the contact list of a registration.

    Checks, in order: the minimum count, a contact number on every
    contact, no repeated role, and a Kin contact.
    """
    if len(contacts) < MIN_CONTACTS:
        raise InsufficientContactsError(len(contacts), MIN_CONTACTS)

    for position, contact in enumerate(contacts, start=1):
        if not (contact.details.contact_number or "").strip():
            raise MissingContactNumberError(position)

    roles = [contact.role for contact in contacts]
    repeated = sorted({role for role in roles if roles.count(role) > 1})
    if repeated:
        raise InvalidContactRolesError(
            f"Each role may be assigned to one contact only: {', '.join(repeated)}"
        )
    if ContactRole.KIN.value not in roles:
        raise InvalidContactRolesError("A Kin contact is required")


def clean_text(value: Optional[str]) -> Optional[str]:
    """Trim a text field; blank values become None."""
    if value is None:
        return None
    stripped = str(value).strip()
    return stripped or None


def normalize_date(field_name: str, value: object) -> Optional[str]:
    """Return ``value`` as a ``YYYY-MM-DD`` string.

    Accepts date and datetime objects, ISO dates, and ISO datetimes
    (the time part is dropped). Empty values become None.

    Raises:
        InvalidDateError: For any other input.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        text = value.strip()
        try:
            if len(text) == 10:
                return date.fromisoformat(text).isoformat()
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date().isoformat()
        except ValueError:
            raise InvalidDateError(field_name, value) from None
    raise InvalidDateError(field_name, value)
