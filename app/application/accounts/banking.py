"""
Use cases: Bank account verification and bank/branch options.

Input: VerifyBankAccountQuery, or a bank name for branch options
Output: BankVerificationResult, list[BankOption], list[BranchOption]
Side effects: None.
Failure cases: PersistenceError.
"""

import logging

from app.application.accounts.dtos import (
    BankOption,
    BankVerificationResult,
    BranchOption,
    VerifyBankAccountQuery,
)
from app.domain.accounts.ports import BankDirectory

logger = logging.getLogger(__name__)


class VerifyBankAccountUseCase:
    """Checks that an account number, holder and bank match a stored row."""

    def __init__(self, directory: BankDirectory) -> None:
        self._directory = directory

    def execute(self, query: VerifyBankAccountQuery) -> BankVerificationResult:
        verified = self._directory.account_matches(
            query.account_number.strip(),
            query.holder_name.strip(),
            query.bank_name.strip(),
        )
        logger.info("Bank account verification: verified=%s", verified)
        if verified:
            return BankVerificationResult(True, "Account verified successfully")
        return BankVerificationResult(False, "Account verification failed")


class GetBankOptionsUseCase:
    """Lists the banks already linked to accounts."""

    def __init__(self, directory: BankDirectory) -> None:
        self._directory = directory

    def execute(self) -> list[BankOption]:
        return [
            BankOption(id=index, name=name, code=name)
            for index, name in enumerate(self._directory.list_banks(), start=1)
        ]


class GetBranchOptionsUseCase:
    """Lists the branches of one bank."""

    def __init__(self, directory: BankDirectory) -> None:
        self._directory = directory

    def execute(self, bank_name: str) -> list[BranchOption]:
        return [
            BranchOption(id=index, name=branch, address=f"{branch} Branch", code=branch)
            for index, branch in enumerate(
                self._directory.list_branches(bank_name), start=1
            )
        ]
