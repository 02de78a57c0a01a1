"""
Use case: Partially update an account's profile.

Input: UpdateProfileCommand (acc_id + optional personal/bank/funding blocks)
Output: None
Side effects: Updates only the supplied columns of personal_data,
    bank_details and source_of_funding in one transaction.
Failure cases: AccountNotFoundError, DuplicateEmailError,
    DuplicatePhoneError, PersistenceError.
"""

import logging
from typing import Optional

from app.application.accounts.dtos import UpdateProfileCommand
from app.application.accounts.steps import TransactionScript
from app.domain.accounts.entities import AccountRecord
from app.domain.accounts.errors import (
    AccountNotFoundError,
    DuplicateEmailError,
    DuplicatePhoneError,
)
from app.domain.accounts.ports import AccountRepository, AccountStore

logger = logging.getLogger(__name__)


class UpdateProfileUseCase:
    """Applies per-block partial updates inside one transaction.

    Bank and funding rows are located through the account's own foreign
    keys; the client never chooses which row is updated.
    """

    def __init__(self, store: AccountStore) -> None:
        self._store = store

    def execute(self, command: UpdateProfileCommand) -> None:
        """Run the profile update.

        Raises:
            AccountNotFoundError: If the account does not exist.
            DuplicateAccountError: If a new email or phone belongs to another account.
        """
        loaded: dict[str, AccountRecord] = {}

        def load_account(repo: AccountRepository) -> None:
            account = repo.get_account(command.acc_id)
            if account is None:
                raise AccountNotFoundError(command.acc_id)
            loaded["account"] = account

        def update_personal(repo: AccountRepository) -> None:
            changes = command.personal_data or {}
            email: Optional[str] = changes.get("email")
            phone: Optional[str] = changes.get("cell_number")
            if email and repo.email_taken(email, exclude_acc_id=command.acc_id):
                raise DuplicateEmailError(email)
            if phone and repo.phone_taken(phone, exclude_acc_id=command.acc_id):
                raise DuplicatePhoneError(phone)
            repo.update_personal_data(command.acc_id, changes)

        def update_bank(repo: AccountRepository) -> None:
            bank_acc_no = loaded["account"].bank_acc_no
            if bank_acc_no:
                repo.update_bank_details(bank_acc_no, command.bank_details or {})

        def update_funding(repo: AccountRepository) -> None:
            funding_id = loaded["account"].funding_id
            if funding_id:
                repo.update_funding_source(funding_id, command.source_of_funding or {})

        script = TransactionScript("profile update").step("load account", load_account)
        if command.personal_data:
            script.step("update personal data", update_personal)
        if command.bank_details:
            script.step("update bank details", update_bank)
        if command.source_of_funding:
            script.step("update funding source", update_funding)
        script.run(self._store)

        logger.info(
            "Updated profile %s (%s).", command.acc_id, ", ".join(script.labels[1:]) or "no changes"
        )
