"""
Data Transfer Objects for the accounts application layer.

DTOs carry data between the interface and application layers.
They are plain dataclasses with no behavior.
"""

from dataclasses import dataclass
from typing import Any, Optional

from app.domain.accounts.entities import AccountRecord, Registration


@dataclass(frozen=True)
class RegisterAccountCommand:
    """Input DTO for opening an account.

    Attributes:
        registration: Validated wizard payload (contacts not yet rule-checked).
    """

    registration: Registration


@dataclass(frozen=True)
class LoginCommand:
    """Input DTO for a login attempt.

    Attributes:
        password: Plain-text password as typed.
        email: Login email. Takes precedence over ``phone``.
        phone: Cell number, used when no email is given.
    """

    password: str
    email: Optional[str] = None
    phone: Optional[str] = None


@dataclass(frozen=True)
class AuthResult:
    """Output DTO for a successful registration or login.

    Attributes:
        account: The account, with its password hash stripped.
        token: Signed session token.
    """

    account: AccountRecord
    token: str


@dataclass(frozen=True)
class GetProfileQuery:
    """Input DTO for reading a full profile."""

    acc_id: str


@dataclass(frozen=True)
class UpdateProfileCommand:
    """Input DTO for a partial profile update.

    Each block maps entity field names to new values and holds only the
    fields the client actually sent. A missing block is left untouched.
    """

    acc_id: str
    personal_data: Optional[dict[str, Any]] = None
    bank_details: Optional[dict[str, Any]] = None
    source_of_funding: Optional[dict[str, Any]] = None


@dataclass(frozen=True)
class DeleteProfileCommand:
    """Input DTO for deleting an account and everything it owns."""

    acc_id: str


@dataclass(frozen=True)
class DeleteProfileResult:
    """Output DTO for a completed account deletion.

    Attributes:
        acc_id: The deleted account.
        contacts_deleted: Contacts removed because nothing else referenced them.
        contacts_kept: Contacts kept because another account still links them.
    """

    acc_id: str
    contacts_deleted: int
    contacts_kept: int


@dataclass(frozen=True)
class VerifyBankAccountQuery:
    """Input DTO for checking a bank account against stored details."""

    account_number: str
    holder_name: str
    bank_name: str


@dataclass(frozen=True)
class BankVerificationResult:
    """Output DTO for a bank account check."""

    verified: bool
    message: str


@dataclass(frozen=True)
class BankOption:
    """A selectable bank. ``id`` is a 1-based position in name order."""

    id: int
    name: str
    code: str


@dataclass(frozen=True)
class BranchOption:
    """A selectable branch of one bank."""

    id: int
    name: str
    address: str
    code: str
