"""
Use case: Read the full profile of an account.

Input: GetProfileQuery (acc_id)
Output: AccountProfile
Side effects: None.
Failure cases: AccountNotFoundError.
"""

import logging
from dataclasses import replace

from app.application.accounts.dtos import GetProfileQuery
from app.domain.accounts.entities import AccountProfile
from app.domain.accounts.errors import AccountNotFoundError
from app.domain.accounts.ports import AccountStore

logger = logging.getLogger(__name__)


class GetProfileUseCase:
    """Assembles an account with its bank details, funding source and contacts."""

    def __init__(self, store: AccountStore) -> None:
        self._store = store

    def execute(self, query: GetProfileQuery) -> AccountProfile:
        """Run the profile lookup.

        Raises:
            AccountNotFoundError: If the account does not exist.
        """
        with self._store.session() as repo:
            account = repo.get_account(query.acc_id)
            if account is None:
                raise AccountNotFoundError(query.acc_id)

            bank = repo.get_bank_details(account.bank_acc_no) if account.bank_acc_no else None
            funding = repo.get_funding_source(account.funding_id) if account.funding_id else None
            contacts = repo.list_contacts(query.acc_id)

        logger.debug("Loaded profile %s with %d contacts.", query.acc_id, len(contacts))
        return AccountProfile(
            account=replace(account, password_hash=None),
            bank=bank,
            funding=funding,
            contacts=contacts,
        )
