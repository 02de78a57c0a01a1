"""
Domain entities for the accounts bounded context.

Entities represent the rows that make up one brokerage account:
personal record, funding source, bank details, and role-linked contacts.
They contain no framework imports and no IO operations.
Enumerated fields are carried as their string values; the enums below
define the accepted values at the API boundary.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class EmploymentStatus(Enum):
    """Employment status declared on the personal record."""

    EMPLOYED = "Employed"
    SELF_EMPLOYED = "Self-Employed"
    UNEMPLOYED = "Unemployed"
    STUDENT = "Student"
    RETIRED = "Retired"


class PurposeOfOpening(Enum):
    """Why the customer is opening the account."""

    SAVINGS = "Savings"
    INVESTMENT = "Investment"
    BUSINESS = "Business"
    PERSONAL_USE = "Personal Use"
    RETIREMENT = "Retirement"
    OTHERS = "Others"


class ValidIdType(Enum):
    """Government or school ID presented for the funding source."""

    DRIVERS_LICENSE = "Driver's License"
    PASSPORT = "Passport"
    SSS_ID = "SSS ID"
    PHILHEALTH_ID = "PhilHealth ID"
    STUDENT_ID = "Student ID"
    NATIONAL_ID = "National ID"
    OTHERS = "Others"


class SourceOfIncome(Enum):
    """Declared source of the funds deposited into the account."""

    SALARY = "Salary"
    BUSINESS = "Business"
    REMITTANCE = "Remittance"
    SCHOLARSHIP = "Scholarship"
    PENSION = "Pension"
    OTHERS = "Others"


class ContactRole(Enum):
    """Role a contact plays for one account. At most one contact per role."""

    KIN = "Kin"
    REFEREE_1 = "Referee 1"
    REFEREE_2 = "Referee 2"


class Relationship(Enum):
    """Relationship between the account holder and a contact."""

    FATHER = "Father"
    MOTHER = "Mother"
    SPOUSE = "Spouse"
    SON = "Son"
    DAUGHTER = "Daughter"
    FRIEND = "Friend"
    COLLEAGUE = "Colleague"
    MENTOR = "Mentor"
    OTHERS = "Others"


@dataclass(frozen=True)
class PersonalData:
    """The account holder's personal record (without credentials)."""

    cell_number: str
    email: Optional[str] = None
    name: Optional[str] = None
    address: Optional[str] = None
    postal_code: Optional[str] = None
    date_of_birth: Optional[str] = None
    employment_status: Optional[str] = None
    purpose_of_opening: Optional[str] = None


@dataclass(frozen=True)
class FundingSource:
    """Declared occupation and income backing the account.

    ``funding_id`` is empty until the row has been persisted.
    """

    funding_id: Optional[str] = None
    nature_of_work: Optional[str] = None
    business_school_name: Optional[str] = None
    office_school_address: Optional[str] = None
    office_school_number: Optional[str] = None
    valid_id: Optional[str] = None
    source_of_income: Optional[str] = None


@dataclass(frozen=True)
class BankDetails:
    """External bank account linked for funding and withdrawals.

    ``account_number`` is empty until the row has been persisted.
    """

    account_number: Optional[str] = None
    account_name: Optional[str] = None
    date_of_opening: Optional[str] = None
    bank_name: Optional[str] = None
    branch: Optional[str] = None


@dataclass(frozen=True)
class ContactDetails:
    """A natural person recorded as kin or referee."""

    contact_number: str
    contact_id: Optional[str] = None
    name: Optional[str] = None
    address: Optional[str] = None
    postal_code: Optional[str] = None
    email: Optional[str] = None


@dataclass(frozen=True)
class ContactAssignment:
    """A contact together with the role it plays for one account."""

    role: str
    details: ContactDetails
    relationship: Optional[str] = None


@dataclass(frozen=True)
class Credentials:
    """Login credentials captured by the registration wizard."""

    email: str
    password: str


@dataclass(frozen=True)
class Registration:
    """Everything needed to open an account in one transaction."""

    personal: PersonalData
    funding: FundingSource
    bank: BankDetails
    contacts: tuple[ContactAssignment, ...]
    credentials: Credentials

    @property
    def account_email(self) -> str:
        """Email stored on the account: the personal email, else the login email."""
        return self.personal.email or self.credentials.email


@dataclass(frozen=True)
class AccountRecord:
    """A persisted personal record with its foreign keys."""

    acc_id: str
    personal: PersonalData
    funding_id: Optional[str] = None
    bank_acc_no: Optional[str] = None
    password_hash: Optional[str] = field(default=None, repr=False)


@dataclass(frozen=True)
class AccountProfile:
    """The assembled aggregate returned by a profile lookup."""

    account: AccountRecord
    bank: Optional[BankDetails]
    funding: Optional[FundingSource]
    contacts: list[ContactAssignment]


@dataclass(frozen=True)
class SessionClaims:
    """Identity claims embedded in a signed session token."""

    acc_id: str
    email: Optional[str]
    phone: Optional[str]
