"""
Pydantic schemas for accounts API request/response validation.

These schemas enforce input validation and define the API contract.
Field aliases keep the column-style keys used by the registration
wizard (``P_Name``, ``Bank_Acc_No``, ``Business/School_Name``...).
No business logic belongs here.
"""

from typing import Annotated, Any, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    StringConstraints,
    ValidationInfo,
    field_validator,
    model_validator,
)

from app.domain.accounts.entities import (
    ContactRole,
    EmploymentStatus,
    PurposeOfOpening,
    Relationship,
    SourceOfIncome,
    ValidIdType,
)
from app.domain.accounts.errors import InvalidDateError
from app.domain.accounts.rules import normalize_date

MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 72
MAX_EMAIL_LENGTH = 60


class _RequestSchema(BaseModel):
    """Base for request bodies: trims strings, blank values become None."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    @field_validator("*", mode="before")
    @classmethod
    def coerce_scalars(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        # Phone and account numbers sometimes arrive as JSON numbers.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


def _iso_date(value: Any, info: ValidationInfo) -> Optional[str]:
    try:
        return normalize_date(info.field_name, value)
    except InvalidDateError as exc:
        raise ValueError(exc.message) from None


def _email_length(value: str) -> str:
    if len(value) > MAX_EMAIL_LENGTH:
        raise ValueError(f"must be at most {MAX_EMAIL_LENGTH} characters")
    return value


# Sized to the email columns.
Email = Annotated[EmailStr, AfterValidator(_email_length)]

# Passwords are hashed exactly as sent.
Password = Annotated[str, StringConstraints(strip_whitespace=False)]


# ── Registration blocks ──────────────────────────────────────────────


class PersonalDataIn(_RequestSchema):
    """Personal record block of the registration wizard."""

    name: Optional[str] = Field(default=None, alias="P_Name", max_length=50)
    address: Optional[str] = Field(default=None, alias="P_Address", max_length=150)
    postal_code: Optional[str] = Field(default=None, alias="P_Postal_Code", max_length=5)
    cell_number: str = Field(..., alias="P_Cell_Number", min_length=1, max_length=20)
    email: Optional[Email] = Field(default=None, alias="P_Email")
    date_of_birth: Optional[str] = Field(default=None, alias="Date_of_Birth")
    employment_status: Optional[EmploymentStatus] = Field(
        default=None, alias="Employment_Status"
    )
    purpose_of_opening: Optional[PurposeOfOpening] = Field(
        default=None, alias="Purpose_of_Opening"
    )

    @field_validator("date_of_birth", mode="before")
    @classmethod
    def birth_date(cls, value: Any, info: ValidationInfo) -> Optional[str]:
        return _iso_date(value, info)


class PersonalDataUpdate(PersonalDataIn):
    """Partial personal record. Email and cell number cannot be cleared."""

    cell_number: Optional[str] = Field(
        default=None, alias="P_Cell_Number", min_length=1, max_length=20
    )

    @field_validator("cell_number", "email")
    @classmethod
    def not_cleared(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            raise ValueError(f"{info.field_name} cannot be cleared")
        return value


class FundingSourceIn(_RequestSchema):
    """Source-of-funding block."""

    nature_of_work: Optional[str] = Field(
        default=None, alias="Nature_of_Work", max_length=50
    )
    business_school_name: Optional[str] = Field(
        default=None, alias="Business/School_Name", max_length=80
    )
    office_school_address: Optional[str] = Field(
        default=None, alias="Office/School_Address", max_length=150
    )
    office_school_number: Optional[str] = Field(
        default=None, alias="Office/School_Number", max_length=15
    )
    valid_id: Optional[ValidIdType] = Field(default=None, alias="Valid_ID")
    source_of_income: Optional[SourceOfIncome] = Field(
        default=None, alias="Source_of_Income"
    )


class BankDetailsIn(_RequestSchema):
    """Bank details block. The account number is always generated."""

    account_name: Optional[str] = Field(default=None, alias="Bank_Acc_Name", max_length=50)
    date_of_opening: Optional[str] = Field(default=None, alias="Bank_Acc_Date_of_Opening")
    bank_name: Optional[str] = Field(default=None, alias="Bank_Name", max_length=50)
    branch: Optional[str] = Field(default=None, alias="Branch", max_length=30)

    @field_validator("date_of_opening", mode="before")
    @classmethod
    def opening_date(cls, value: Any, info: ValidationInfo) -> Optional[str]:
        return _iso_date(value, info)


class ContactDetailsIn(_RequestSchema):
    """Contact person details. A missing number is rejected by the use case."""

    name: Optional[str] = Field(default=None, alias="C_Name", max_length=50)
    address: Optional[str] = Field(default=None, alias="C_Address", max_length=150)
    postal_code: Optional[str] = Field(default=None, alias="C_Postal_Code", max_length=5)
    email: Optional[Email] = Field(default=None, alias="C_Email")
    contact_number: Optional[str] = Field(
        default=None, alias="C_Contact_Number", max_length=45
    )


class ContactIn(_RequestSchema):
    """A contact together with its role for the new account."""

    role: ContactRole
    relationship: Optional[Relationship] = None
    contact_details: ContactDetailsIn = Field(
        default_factory=ContactDetailsIn, alias="contactDetails"
    )


class CredentialsIn(_RequestSchema):
    """Login credentials chosen during registration."""

    email: Email
    password: Password = Field(
        ..., min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH
    )


class RegisterRequest(_RequestSchema):
    """Request schema for the registration endpoint."""

    personal_data: PersonalDataIn = Field(..., alias="personalData")
    bank_details: BankDetailsIn = Field(default_factory=BankDetailsIn, alias="bankDetails")
    source_of_funding: FundingSourceIn = Field(
        default_factory=FundingSourceIn, alias="sourceOfFunding"
    )
    contacts: list[ContactIn] = Field(default_factory=list)
    credentials: CredentialsIn


class LoginRequest(_RequestSchema):
    """Request schema for the login endpoint. Email or phone is required."""

    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=20)
    password: Password = Field(..., min_length=1)

    @model_validator(mode="after")
    def email_or_phone(self) -> "LoginRequest":
        if not self.email and not self.phone:
            raise ValueError("Valid email required")
        return self


class UpdateProfileRequest(_RequestSchema):
    """Request schema for a partial profile update."""

    personal_data: Optional[PersonalDataUpdate] = Field(default=None, alias="personalData")
    bank_details: Optional[BankDetailsIn] = Field(default=None, alias="bankDetails")
    source_of_funding: Optional[FundingSourceIn] = Field(
        default=None, alias="sourceOfFunding"
    )


class VerifyAccountRequest(_RequestSchema):
    """Request schema for bank account verification."""

    account_number: str = Field(..., alias="accountNumber", min_length=1, max_length=19)
    account_holder_name: str = Field(..., alias="accountHolderName", min_length=1)
    bank_name: str = Field(..., alias="bankName", min_length=1)


# ── Responses ────────────────────────────────────────────────────────


class _ResponseSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class UserSummary(_ResponseSchema):
    """Sanitized account summary returned with a session token."""

    acc_id: str = Field(..., alias="accId")
    email: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None


class LoginUser(UserSummary):
    """Account summary returned by login."""

    address: Optional[str] = None
    postal_code: Optional[str] = Field(default=None, alias="postalCode")
    date_of_birth: Optional[str] = Field(default=None, alias="dateOfBirth")
    employment_status: Optional[str] = Field(default=None, alias="employmentStatus")
    purpose_of_opening: Optional[str] = Field(default=None, alias="purposeOfOpening")


class AuthData(_ResponseSchema):
    user: UserSummary
    token: str


class AuthResponse(_ResponseSchema):
    """Response schema for registration."""

    message: str
    data: AuthData


class LoginData(_ResponseSchema):
    user: LoginUser
    token: str


class LoginResponse(_ResponseSchema):
    """Response schema for login."""

    message: str
    data: LoginData


class PersonalDataOut(_ResponseSchema):
    acc_id: str = Field(..., alias="Acc_ID")
    name: Optional[str] = Field(default=None, alias="P_Name")
    address: Optional[str] = Field(default=None, alias="P_Address")
    postal_code: Optional[str] = Field(default=None, alias="P_Postal_Code")
    cell_number: Optional[str] = Field(default=None, alias="P_Cell_Number")
    email: Optional[str] = Field(default=None, alias="P_Email")
    date_of_birth: Optional[str] = Field(default=None, alias="Date_of_Birth")
    employment_status: Optional[str] = Field(default=None, alias="Employment_Status")
    purpose_of_opening: Optional[str] = Field(default=None, alias="Purpose_of_Opening")
    funding_id: Optional[str] = Field(default=None, alias="Funding_ID")
    bank_acc_no: Optional[str] = Field(default=None, alias="Bank_Acc_No")


class BankDetailsOut(_ResponseSchema):
    account_number: Optional[str] = Field(default=None, alias="Bank_Acc_No")
    account_name: Optional[str] = Field(default=None, alias="Bank_Acc_Name")
    date_of_opening: Optional[str] = Field(default=None, alias="Bank_Acc_Date_of_Opening")
    bank_name: Optional[str] = Field(default=None, alias="Bank_Name")
    branch: Optional[str] = Field(default=None, alias="Branch")


class FundingSourceOut(_ResponseSchema):
    funding_id: Optional[str] = Field(default=None, alias="Funding_ID")
    nature_of_work: Optional[str] = Field(default=None, alias="Nature_of_Work")
    business_school_name: Optional[str] = Field(default=None, alias="Business/School_Name")
    office_school_address: Optional[str] = Field(default=None, alias="Office/School_Address")
    office_school_number: Optional[str] = Field(default=None, alias="Office/School_Number")
    valid_id: Optional[str] = Field(default=None, alias="Valid_ID")
    source_of_income: Optional[str] = Field(default=None, alias="Source_of_Income")


class ContactOut(_ResponseSchema):
    contact_id: Optional[str] = Field(default=None, alias="Contact_ID")
    name: Optional[str] = Field(default=None, alias="C_Name")
    address: Optional[str] = Field(default=None, alias="C_Address")
    postal_code: Optional[str] = Field(default=None, alias="C_Postal_Code")
    email: Optional[str] = Field(default=None, alias="C_Email")
    contact_number: Optional[str] = Field(default=None, alias="C_Contact_Number")
    role: str = Field(..., alias="C_Role")
    relationship: Optional[str] = Field(default=None, alias="C_Relationship")


class ProfileData(_ResponseSchema):
    personal_data: PersonalDataOut = Field(..., alias="personalData")
    bank_details: Optional[BankDetailsOut] = Field(default=None, alias="bankDetails")
    source_of_funding: Optional[FundingSourceOut] = Field(
        default=None, alias="sourceOfFunding"
    )
    contacts: list[ContactOut]


class ProfileResponse(_ResponseSchema):
    """Response schema for a profile lookup."""

    data: ProfileData


class MessageResponse(_ResponseSchema):
    """Response schema for update and delete."""

    message: str


class BankVerificationData(_ResponseSchema):
    verified: bool
    message: str


class BankVerificationResponse(_ResponseSchema):
    data: BankVerificationData


class BankOptionItem(_ResponseSchema):
    id: int
    name: str
    code: str


class BankOptionsResponse(_ResponseSchema):
    data: list[BankOptionItem]


class BranchOptionItem(_ResponseSchema):
    id: int
    name: str
    address: str
    code: str


class BranchOptionsResponse(_ResponseSchema):
    data: list[BranchOptionItem]


class ErrorResponse(_ResponseSchema):
    """Standard error response. Never includes stack traces."""

    error: str
    detail: Any = None


class HealthResponse(_ResponseSchema):
    """Response schema for the health check endpoint."""

    status: str
    timestamp: str
    environment: str
    version: str
