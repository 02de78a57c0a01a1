"""
Port interfaces (ABCs) for the accounts bounded context.

Ports define the contracts that the domain requires from the outside world.
Infrastructure adapters implement these interfaces.
The domain layer never depends on concrete implementations.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Any, Optional

from app.domain.accounts.entities import (
    AccountRecord,
    BankDetails,
    ContactAssignment,
    ContactDetails,
    FundingSource,
    PersonalData,
    SessionClaims,
)


class AccountRepository(ABC):
    """Port for the account statements, bound to one open connection.

    Every method runs on the same connection, so reads see the writes
    already made inside the current transaction.
    """

    # -- identifier sources -------------------------------------------

    @abstractmethod
    def max_account_id(self) -> Optional[str]:
        """Return the highest stored account ID, or None for an empty table."""
        raise NotImplementedError

    @abstractmethod
    def max_funding_id(self) -> Optional[str]:
        """Return the highest stored funding ID, or None for an empty table."""
        raise NotImplementedError

    @abstractmethod
    def contact_exists(self, contact_id: str) -> bool:
        """Return True if a contact row already uses this ID."""
        raise NotImplementedError

    # -- uniqueness checks --------------------------------------------

    @abstractmethod
    def email_taken(self, email: str, exclude_acc_id: Optional[str] = None) -> bool:
        """Return True if another account already uses this email."""
        raise NotImplementedError

    @abstractmethod
    def phone_taken(
        self, cell_number: str, exclude_acc_id: Optional[str] = None
    ) -> bool:
        """Return True if another account already uses this cell number."""
        raise NotImplementedError

    # -- inserts ------------------------------------------------------

    @abstractmethod
    def insert_funding_source(self, funding: FundingSource) -> None:
        """Insert a funding source row. ``funding.funding_id`` must be set."""
        raise NotImplementedError

    @abstractmethod
    def funding_source_exists(self, funding_id: str) -> bool:
        """Return True if the funding source row is readable."""
        raise NotImplementedError

    @abstractmethod
    def insert_bank_details(self, bank: BankDetails) -> None:
        """Insert a bank details row. ``bank.account_number`` must be set."""
        raise NotImplementedError

    @abstractmethod
    def bank_details_exist(self, account_number: str) -> bool:
        """Return True if the bank details row is readable."""
        raise NotImplementedError

    @abstractmethod
    def insert_account(
        self,
        acc_id: str,
        personal: PersonalData,
        password_hash: str,
        funding_id: str,
        bank_acc_no: str,
    ) -> None:
        """Insert the personal record referencing its funding and bank rows.

        Raises:
            DuplicateEmailError: If the email unique constraint fires.
            DuplicatePhoneError: If the cell number unique constraint fires.
        """
        raise NotImplementedError

    @abstractmethod
    def insert_contact(self, contact: ContactDetails) -> None:
        """Insert a contact row. ``contact.contact_id`` must be set."""
        raise NotImplementedError

    @abstractmethod
    def insert_contact_role(
        self,
        acc_id: str,
        contact_id: str,
        role: str,
        relationship: Optional[str],
    ) -> None:
        """Link a contact to an account under a role."""
        raise NotImplementedError

    # -- reads --------------------------------------------------------

    @abstractmethod
    def get_account(self, acc_id: str) -> Optional[AccountRecord]:
        """Return the account by its ID, or None if not found."""
        raise NotImplementedError

    @abstractmethod
    def find_account_by_email(self, email: str) -> Optional[AccountRecord]:
        """Return the account registered under an email, or None."""
        raise NotImplementedError

    @abstractmethod
    def find_account_by_phone(self, cell_number: str) -> Optional[AccountRecord]:
        """Return the account registered under a cell number, or None."""
        raise NotImplementedError

    @abstractmethod
    def get_bank_details(self, account_number: str) -> Optional[BankDetails]:
        """Return bank details by account number, or None."""
        raise NotImplementedError

    @abstractmethod
    def get_funding_source(self, funding_id: str) -> Optional[FundingSource]:
        """Return a funding source by ID, or None."""
        raise NotImplementedError

    @abstractmethod
    def list_contacts(self, acc_id: str) -> list[ContactAssignment]:
        """Return every contact linked to an account with its role."""
        raise NotImplementedError

    # -- updates ------------------------------------------------------

    @abstractmethod
    def update_personal_data(self, acc_id: str, changes: dict[str, Any]) -> None:
        """Update only the given personal fields of an account.

        Raises:
            DuplicateEmailError: If the email unique constraint fires.
            DuplicatePhoneError: If the cell number unique constraint fires.
        """
        raise NotImplementedError

    @abstractmethod
    def update_bank_details(self, account_number: str, changes: dict[str, Any]) -> None:
        """Update only the given bank fields."""
        raise NotImplementedError

    @abstractmethod
    def update_funding_source(self, funding_id: str, changes: dict[str, Any]) -> None:
        """Update only the given funding source fields."""
        raise NotImplementedError

    # -- deletes ------------------------------------------------------

    @abstractmethod
    def delete_contact_roles(self, acc_id: str) -> list[str]:
        """Delete every role row of an account; return the unlinked contact IDs."""
        raise NotImplementedError

    @abstractmethod
    def contact_is_referenced(self, contact_id: str) -> bool:
        """Return True if any role row still references the contact."""
        raise NotImplementedError

    @abstractmethod
    def delete_contact(self, contact_id: str) -> None:
        """Delete a contact row."""
        raise NotImplementedError

    @abstractmethod
    def delete_account(self, acc_id: str) -> None:
        """Delete the personal record, including its stored password hash."""
        raise NotImplementedError

    @abstractmethod
    def delete_bank_details(self, account_number: str) -> None:
        """Delete a bank details row."""
        raise NotImplementedError

    @abstractmethod
    def delete_funding_source(self, funding_id: str) -> None:
        """Delete a funding source row."""
        raise NotImplementedError


class AccountStore(ABC):
    """Port for acquiring scoped repositories.

    Both scopes release their connection on every exit path.
    """

    @abstractmethod
    def transaction(self) -> AbstractContextManager[AccountRepository]:
        """Open a transaction: commit on normal exit, roll back on error."""
        raise NotImplementedError

    @abstractmethod
    def session(self) -> AbstractContextManager[AccountRepository]:
        """Open a read-only scope without an explicit transaction."""
        raise NotImplementedError


class BankDirectory(ABC):
    """Port for bank lookups over the stored bank details."""

    @abstractmethod
    def account_matches(
        self, account_number: str, holder_name: str, bank_name: str
    ) -> bool:
        """Return True if a bank details row matches all three values."""
        raise NotImplementedError

    @abstractmethod
    def list_banks(self) -> list[str]:
        """Return distinct bank names in name order."""
        raise NotImplementedError

    @abstractmethod
    def list_branches(self, bank_name: str) -> list[str]:
        """Return distinct branches of a bank in name order."""
        raise NotImplementedError


class PasswordHasher(ABC):
    """Port for one-way password hashing."""

    @abstractmethod
    def hash(self, password: str) -> str:
        """Return a salted hash of the password."""
        raise NotImplementedError

    @abstractmethod
    def verify(self, password: str, password_hash: str) -> bool:
        """Return True if the password matches the stored hash."""
        raise NotImplementedError


class TokenService(ABC):
    """Port for issuing and validating signed session tokens."""

    @abstractmethod
    def issue(self, claims: SessionClaims) -> str:
        """Return a signed token carrying the claims and an expiry."""
        raise NotImplementedError

    @abstractmethod
    def decode(self, token: str) -> SessionClaims:
        """Return the claims of a valid token.

        Raises:
            InvalidTokenError: If the token is malformed, forged, or expired.
        """
        raise NotImplementedError
