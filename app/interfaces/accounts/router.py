"""
FastAPI routers for the accounts bounded context.

All routes delegate to use cases. No business logic here.
Input validation is handled by Pydantic schemas.
Error mapping is handled by centralized error handlers.
"""

from fastapi import APIRouter, Depends, Request, status

from app.application.accounts.banking import (
    GetBankOptionsUseCase,
    GetBranchOptionsUseCase,
    VerifyBankAccountUseCase,
)
from app.application.accounts.delete_profile import DeleteProfileUseCase
from app.application.accounts.dtos import (
    DeleteProfileCommand,
    GetProfileQuery,
    LoginCommand,
    RegisterAccountCommand,
    UpdateProfileCommand,
    VerifyBankAccountQuery,
)
from app.application.accounts.get_profile import GetProfileUseCase
from app.application.accounts.login import LoginUseCase
from app.application.accounts.register_account import RegisterAccountUseCase
from app.application.accounts.update_profile import UpdateProfileUseCase
from app.core.config import settings
from app.domain.accounts.entities import (
    AccountRecord,
    BankDetails,
    ContactAssignment,
    ContactDetails,
    Credentials,
    FundingSource,
    PersonalData,
    Registration,
)
from app.domain.accounts.rules import clean_text
from app.interfaces.accounts.dependencies import (
    get_bank_options_use_case,
    get_branch_options_use_case,
    get_delete_profile_use_case,
    get_login_use_case,
    get_profile_use_case,
    get_register_account_use_case,
    get_update_profile_use_case,
    get_verify_bank_account_use_case,
    require_account_owner,
)
from app.interfaces.accounts.schemas import (
    AuthData,
    AuthResponse,
    BankDetailsOut,
    BankOptionItem,
    BankOptionsResponse,
    BankVerificationData,
    BankVerificationResponse,
    BranchOptionItem,
    BranchOptionsResponse,
    ContactOut,
    ErrorResponse,
    FundingSourceOut,
    LoginData,
    LoginRequest,
    LoginResponse,
    LoginUser,
    MessageResponse,
    PersonalDataOut,
    ProfileData,
    ProfileResponse,
    RegisterRequest,
    UpdateProfileRequest,
    UserSummary,
    VerifyAccountRequest,
)
from app.shared.security.rate_limiting import limiter

auth_router = APIRouter(prefix="/auth", tags=["auth"])
users_router = APIRouter(prefix="/users", tags=["users"])
banking_router = APIRouter(prefix="/banking", tags=["banking"])


def _enum_value(value) -> str | None:
    return value.value if value is not None else None


def _registration_from(payload: RegisterRequest) -> Registration:
    """Map the validated wizard payload onto domain entities."""
    personal = payload.personal_data
    funding = payload.source_of_funding
    bank = payload.bank_details
    return Registration(
        personal=PersonalData(
            cell_number=personal.cell_number,
            email=clean_text(personal.email),
            name=clean_text(personal.name),
            address=clean_text(personal.address),
            postal_code=clean_text(personal.postal_code),
            date_of_birth=personal.date_of_birth,
            employment_status=_enum_value(personal.employment_status),
            purpose_of_opening=_enum_value(personal.purpose_of_opening),
        ),
        funding=FundingSource(
            nature_of_work=clean_text(funding.nature_of_work),
            business_school_name=clean_text(funding.business_school_name),
            office_school_address=clean_text(funding.office_school_address),
            office_school_number=clean_text(funding.office_school_number),
            valid_id=_enum_value(funding.valid_id),
            source_of_income=_enum_value(funding.source_of_income),
        ),
        bank=BankDetails(
            account_name=clean_text(bank.account_name),
            date_of_opening=bank.date_of_opening,
            bank_name=clean_text(bank.bank_name),
            branch=clean_text(bank.branch),
        ),
        contacts=tuple(
            ContactAssignment(
                role=contact.role.value,
                relationship=_enum_value(contact.relationship),
                details=ContactDetails(
                    contact_number=contact.contact_details.contact_number or "",
                    name=clean_text(contact.contact_details.name),
                    address=clean_text(contact.contact_details.address),
                    postal_code=clean_text(contact.contact_details.postal_code),
                    email=clean_text(contact.contact_details.email),
                ),
            )
            for contact in payload.contacts
        ),
        credentials=Credentials(
            email=payload.credentials.email, password=payload.credentials.password
        ),
    )


def _user_summary(account: AccountRecord) -> UserSummary:
    return UserSummary(
        acc_id=account.acc_id,
        email=account.personal.email,
        name=account.personal.name,
        phone=account.personal.cell_number,
    )


def _login_user(account: AccountRecord) -> LoginUser:
    personal = account.personal
    return LoginUser(
        acc_id=account.acc_id,
        email=personal.email,
        name=personal.name,
        phone=personal.cell_number,
        address=personal.address,
        postal_code=personal.postal_code,
        date_of_birth=personal.date_of_birth,
        employment_status=personal.employment_status,
        purpose_of_opening=personal.purpose_of_opening,
    )


# ── Auth ─────────────────────────────────────────────────────────────


@auth_router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Open an account",
    description=(
        "Create the personal record, funding source, bank details and "
        "contacts in one transaction and return a session token."
    ),
)
@limiter.limit(settings.rate_limit_auth)
def register(
    request: Request,
    payload: RegisterRequest,
    use_case: RegisterAccountUseCase = Depends(get_register_account_use_case),
) -> AuthResponse:
    """Register a new brokerage account."""
    result = use_case.execute(RegisterAccountCommand(_registration_from(payload)))
    return AuthResponse(
        message="Registration successful",
        data=AuthData(user=_user_summary(result.account), token=result.token),
    )


@auth_router.post(
    "/login",
    response_model=LoginResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
    summary="Log in",
    description="Verify email (or cell number) and password, return a session token.",
)
@limiter.limit(settings.rate_limit_auth)
def login(
    request: Request,
    payload: LoginRequest,
    use_case: LoginUseCase = Depends(get_login_use_case),
) -> LoginResponse:
    """Log in with email or phone and password."""
    result = use_case.execute(
        LoginCommand(
            password=payload.password,
            email=payload.email,
            phone=payload.phone,
        )
    )
    return LoginResponse(
        message="Login successful",
        data=LoginData(user=_login_user(result.account), token=result.token),
    )


# ── Profile ──────────────────────────────────────────────────────────


@users_router.get(
    "/profile/{acc_id}",
    response_model=ProfileResponse,
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Get profile",
    description="Return the account with its bank details, funding source and contacts.",
    dependencies=[Depends(require_account_owner)],
)
def get_profile(
    acc_id: str,
    use_case: GetProfileUseCase = Depends(get_profile_use_case),
) -> ProfileResponse:
    """Read the full profile of the authenticated account."""
    profile = use_case.execute(GetProfileQuery(acc_id=acc_id))
    account = profile.account
    personal = account.personal
    bank = profile.bank
    funding = profile.funding
    return ProfileResponse(
        data=ProfileData(
            personal_data=PersonalDataOut(
                acc_id=account.acc_id,
                name=personal.name,
                address=personal.address,
                postal_code=personal.postal_code,
                cell_number=personal.cell_number,
                email=personal.email,
                date_of_birth=personal.date_of_birth,
                employment_status=personal.employment_status,
                purpose_of_opening=personal.purpose_of_opening,
                funding_id=account.funding_id,
                bank_acc_no=account.bank_acc_no,
            ),
            bank_details=(
                BankDetailsOut(
                    account_number=bank.account_number,
                    account_name=bank.account_name,
                    date_of_opening=bank.date_of_opening,
                    bank_name=bank.bank_name,
                    branch=bank.branch,
                )
                if bank
                else None
            ),
            source_of_funding=(
                FundingSourceOut(
                    funding_id=funding.funding_id,
                    nature_of_work=funding.nature_of_work,
                    business_school_name=funding.business_school_name,
                    office_school_address=funding.office_school_address,
                    office_school_number=funding.office_school_number,
                    valid_id=funding.valid_id,
                    source_of_income=funding.source_of_income,
                )
                if funding
                else None
            ),
            contacts=[
                ContactOut(
                    contact_id=contact.details.contact_id,
                    name=contact.details.name,
                    address=contact.details.address,
                    postal_code=contact.details.postal_code,
                    email=contact.details.email,
                    contact_number=contact.details.contact_number,
                    role=contact.role,
                    relationship=contact.relationship,
                )
                for contact in profile.contacts
            ],
        )
    )


@users_router.put(
    "/profile/{acc_id}",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Update profile",
    description="Partially update personal data, bank details and funding source.",
    dependencies=[Depends(require_account_owner)],
)
def update_profile(
    acc_id: str,
    payload: UpdateProfileRequest,
    use_case: UpdateProfileUseCase = Depends(get_update_profile_use_case),
) -> MessageResponse:
    """Apply the fields the client sent; everything else is left as is."""

    def changes(block) -> dict | None:
        if block is None:
            return None
        return block.model_dump(mode="json", exclude_unset=True)

    use_case.execute(
        UpdateProfileCommand(
            acc_id=acc_id,
            personal_data=changes(payload.personal_data),
            bank_details=changes(payload.bank_details),
            source_of_funding=changes(payload.source_of_funding),
        )
    )
    return MessageResponse(message="Profile updated successfully")


@users_router.delete(
    "/profile/{acc_id}",
    response_model=MessageResponse,
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Delete profile",
    description="Delete the account, its bank details, funding source and unshared contacts.",
    dependencies=[Depends(require_account_owner)],
)
def delete_profile(
    acc_id: str,
    use_case: DeleteProfileUseCase = Depends(get_delete_profile_use_case),
) -> MessageResponse:
    """Delete the authenticated account and everything it owns."""
    use_case.execute(DeleteProfileCommand(acc_id=acc_id))
    return MessageResponse(message="Profile deleted successfully")


# ── Banking ──────────────────────────────────────────────────────────


@banking_router.post(
    "/verify-account",
    response_model=BankVerificationResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Verify a bank account",
)
def verify_account(
    payload: VerifyAccountRequest,
    use_case: VerifyBankAccountUseCase = Depends(get_verify_bank_account_use_case),
) -> BankVerificationResponse:
    """Check an account number, holder name and bank against stored details."""
    result = use_case.execute(
        VerifyBankAccountQuery(
            account_number=payload.account_number,
            holder_name=payload.account_holder_name,
            bank_name=payload.bank_name,
        )
    )
    return BankVerificationResponse(
        data=BankVerificationData(verified=result.verified, message=result.message)
    )


@banking_router.get(
    "/bank-options",
    response_model=BankOptionsResponse,
    summary="List banks",
)
def bank_options(
    use_case: GetBankOptionsUseCase = Depends(get_bank_options_use_case),
) -> BankOptionsResponse:
    return BankOptionsResponse(
        data=[
            BankOptionItem(id=option.id, name=option.name, code=option.code)
            for option in use_case.execute()
        ]
    )


@banking_router.get(
    "/branch-options/{bank_id}",
    response_model=BranchOptionsResponse,
    summary="List branches of a bank",
)
def branch_options(
    bank_id: str,
    use_case: GetBranchOptionsUseCase = Depends(get_branch_options_use_case),
) -> BranchOptionsResponse:
    """``bank_id`` is the bank name, as returned in ``code`` by bank-options."""
    return BranchOptionsResponse(
        data=[
            BranchOptionItem(
                id=option.id,
                name=option.name,
                address=option.address,
                code=option.code,
            )
            for option in use_case.execute(bank_id)
        ]
    )
