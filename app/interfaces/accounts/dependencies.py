"""
Dependency injection for the accounts bounded context.

Provides FastAPI dependency functions that wire infrastructure
adapters into use cases via constructor injection.
The Database gateway and Settings are created once by the application
factory and read from ``app.state``, so tests can swap either.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.application.accounts.banking import (
    GetBankOptionsUseCase,
    GetBranchOptionsUseCase,
    VerifyBankAccountUseCase,
)
from app.application.accounts.delete_profile import DeleteProfileUseCase
from app.application.accounts.get_profile import GetProfileUseCase
from app.application.accounts.login import LoginUseCase
from app.application.accounts.register_account import RegisterAccountUseCase
from app.application.accounts.update_profile import UpdateProfileUseCase
from app.core.config import Settings
from app.domain.accounts.entities import SessionClaims
from app.domain.accounts.errors import AccountAccessDeniedError, InvalidTokenError
from app.domain.accounts.identifiers import IdentifierGenerator
from app.domain.accounts.ports import (
    AccountStore,
    BankDirectory,
    PasswordHasher,
    TokenService,
)
from app.infrastructure.accounts.account_repository import SqlAccountStore
from app.infrastructure.accounts.bank_directory import SqlBankDirectory
from app.infrastructure.accounts.security import BcryptPasswordHasher, JwtTokenService
from app.infrastructure.database import Database

bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_account_store(database: Database = Depends(get_database)) -> AccountStore:
    return SqlAccountStore(database)


def get_bank_directory(database: Database = Depends(get_database)) -> BankDirectory:
    return SqlBankDirectory(database)


def get_password_hasher(settings: Settings = Depends(get_settings)) -> PasswordHasher:
    return BcryptPasswordHasher(rounds=settings.bcrypt_rounds)


def get_token_service(settings: Settings = Depends(get_settings)) -> TokenService:
    return JwtTokenService(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expires_minutes=settings.jwt_expires_minutes,
    )


def get_identifier_generator() -> IdentifierGenerator:
    return IdentifierGenerator()


# ── Use cases ────────────────────────────────────────────────────────


def get_register_account_use_case(
    store: AccountStore = Depends(get_account_store),
    identifiers: IdentifierGenerator = Depends(get_identifier_generator),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
) -> RegisterAccountUseCase:
    """Build RegisterAccountUseCase with its infrastructure dependencies."""
    return RegisterAccountUseCase(
        store=store, identifiers=identifiers, hasher=hasher, tokens=tokens
    )


def get_login_use_case(
    store: AccountStore = Depends(get_account_store),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
) -> LoginUseCase:
    """Build LoginUseCase with its infrastructure dependencies."""
    return LoginUseCase(store=store, hasher=hasher, tokens=tokens)


def get_profile_use_case(
    store: AccountStore = Depends(get_account_store),
) -> GetProfileUseCase:
    """Build GetProfileUseCase with its infrastructure dependencies."""
    return GetProfileUseCase(store=store)


def get_update_profile_use_case(
    store: AccountStore = Depends(get_account_store),
) -> UpdateProfileUseCase:
    """Build UpdateProfileUseCase with its infrastructure dependencies."""
    return UpdateProfileUseCase(store=store)


def get_delete_profile_use_case(
    store: AccountStore = Depends(get_account_store),
) -> DeleteProfileUseCase:
    """Build DeleteProfileUseCase with its infrastructure dependencies."""
    return DeleteProfileUseCase(store=store)


def get_verify_bank_account_use_case(
    directory: BankDirectory = Depends(get_bank_directory),
) -> VerifyBankAccountUseCase:
    return VerifyBankAccountUseCase(directory=directory)


def get_bank_options_use_case(
    directory: BankDirectory = Depends(get_bank_directory),
) -> GetBankOptionsUseCase:
    return GetBankOptionsUseCase(directory=directory)


def get_branch_options_use_case(
    directory: BankDirectory = Depends(get_bank_directory),
) -> GetBranchOptionsUseCase:
    return GetBranchOptionsUseCase(directory=directory)


# ── Authentication ───────────────────────────────────────────────────


def get_current_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> SessionClaims:
    """Decode the bearer token of the current request.

    Raises:
        InvalidTokenError: If no token was sent or it does not verify.
    """
    if credentials is None or not credentials.credentials:
        raise InvalidTokenError("Authentication required")
    return tokens.decode(credentials.credentials)


def require_account_owner(
    acc_id: str,
    claims: SessionClaims = Depends(get_current_claims),
) -> SessionClaims:
    """Allow access to ``acc_id`` only with that account's own token."""
    if claims.acc_id != acc_id:
        raise AccountAccessDeniedError(acc_id)
    return claims
