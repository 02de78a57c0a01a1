"""
Use case: Delete an account and everything it owns.

Input: DeleteProfileCommand (acc_id)
Output: DeleteProfileResult
Side effects: In one transaction deletes the account's role rows, every
    formerly linked contact that no other account references, the
    personal record (with its stored password hash), the bank details
    row and the funding source row.
Failure cases: AccountNotFoundError, PersistenceError.
"""

import logging

from app.application.accounts.dtos import DeleteProfileCommand, DeleteProfileResult
from app.application.accounts.steps import TransactionScript
from app.domain.accounts.entities import AccountRecord
from app.domain.accounts.errors import AccountNotFoundError
from app.domain.accounts.ports import AccountRepository, AccountStore

logger = logging.getLogger(__name__)


class DeleteProfileUseCase:
    """Tears down an account in the reverse of registration order.

    Contacts are shared references: one is removed only when no other
    account's role row still points at it.
    """

    def __init__(self, store: AccountStore) -> None:
        self._store = store

    def execute(self, command: DeleteProfileCommand) -> DeleteProfileResult:
        """Run the deletion.

        Raises:
            AccountNotFoundError: If the account does not exist.
        """
        state: dict = {"unlinked": [], "deleted": 0}

        def load_account(repo: AccountRepository) -> None:
            account = repo.get_account(command.acc_id)
            if account is None:
                raise AccountNotFoundError(command.acc_id)
            state["account"] = account

        def delete_roles(repo: AccountRepository) -> None:
            state["unlinked"] = repo.delete_contact_roles(command.acc_id)

        def delete_orphaned_contacts(repo: AccountRepository) -> None:
            for contact_id in state["unlinked"]:
                if not repo.contact_is_referenced(contact_id):
                    repo.delete_contact(contact_id)
                    state["deleted"] += 1

        def delete_account(repo: AccountRepository) -> None:
            repo.delete_account(command.acc_id)

        def delete_bank(repo: AccountRepository) -> None:
            account: AccountRecord = state["account"]
            if account.bank_acc_no:
                repo.delete_bank_details(account.bank_acc_no)

        def delete_funding(repo: AccountRepository) -> None:
            account: AccountRecord = state["account"]
            if account.funding_id:
                repo.delete_funding_source(account.funding_id)

        (
            TransactionScript("account deletion")
            .step("load account", load_account)
            .step("delete contact roles", delete_roles)
            .step("delete orphaned contacts", delete_orphaned_contacts)
            .step("delete account", delete_account)
            .step("delete bank details", delete_bank)
            .step("delete funding source", delete_funding)
            .run(self._store)
        )

        result = DeleteProfileResult(
            acc_id=command.acc_id,
            contacts_deleted=state["deleted"],
            contacts_kept=len(state["unlinked"]) - state["deleted"],
        )
        logger.info(
            "Deleted account %s (contacts deleted=%d, kept=%d).",
            result.acc_id,
            result.contacts_deleted,
            result.contacts_kept,
        )
        return result
