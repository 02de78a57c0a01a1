"""
Use case: Log in with email (or cell number) and password.

Input: LoginCommand
Output: AuthResult
Side effects: None.
Failure cases: InvalidCredentialsError (same error for unknown user and
    wrong password).
"""

import logging
from dataclasses import replace

from app.application.accounts.dtos import AuthResult, LoginCommand
from app.domain.accounts.entities import SessionClaims
from app.domain.accounts.errors import InvalidCredentialsError
from app.domain.accounts.ports import AccountStore, PasswordHasher, TokenService

logger = logging.getLogger(__name__)


class LoginUseCase:
    """Verifies credentials against the stored hash and issues a token."""

    def __init__(
        self,
        store: AccountStore,
        hasher: PasswordHasher,
        tokens: TokenService,
    ) -> None:
        self._store = store
        self._hasher = hasher
        self._tokens = tokens

    def execute(self, command: LoginCommand) -> AuthResult:
        """Run the login use case.

        Raises:
            InvalidCredentialsError: If the user is unknown or the password
                does not match.
        """
        with self._store.session() as repo:
            if command.email:
                account = repo.find_account_by_email(command.email.strip())
            elif command.phone:
                account = repo.find_account_by_phone(command.phone.strip())
            else:
                account = None

        if account is None or not self._hasher.verify(
            command.password, account.password_hash or ""
        ):
            logger.info("Rejected login attempt.")
            raise InvalidCredentialsError()

        token = self._tokens.issue(
            SessionClaims(
                acc_id=account.acc_id,
                email=account.personal.email,
                phone=account.personal.cell_number,
            )
        )
        logger.info("Account %s logged in.", account.acc_id)
        return AuthResult(account=replace(account, password_hash=None), token=token)
