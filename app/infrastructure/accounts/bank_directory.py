"""
Adapter: Bank directory.

Implements the BankDirectory port over the stored bank details.
There is no external bank registry; options are derived from the banks
and branches already linked to accounts.
"""

from sqlalchemy import text

from app.domain.accounts.ports import BankDirectory
from app.infrastructure.database import Database


class SqlBankDirectory(BankDirectory):
    """Bank lookups answered from the ``bank_details`` table."""

    def __init__(self, database: Database) -> None:
        self._database = database

    def account_matches(
        self, account_number: str, holder_name: str, bank_name: str
    ) -> bool:
        """Return True if one row matches number, holder and bank."""
        with self._database.connect() as conn:
            row = conn.execute(
                text(
                    """
                    SELECT 1 FROM bank_details
                    WHERE bank_acc_no = :number
                      AND bank_acc_name = :holder
                      AND bank_name = :bank
                    """
                ),
                {"number": account_number, "holder": holder_name, "bank": bank_name},
            ).first()
        return row is not None

    def list_banks(self) -> list[str]:
        with self._database.connect() as conn:
            return list(
                conn.execute(
                    text(
                        "SELECT DISTINCT bank_name FROM bank_details "
                        "WHERE bank_name IS NOT NULL ORDER BY bank_name"
                    )
                ).scalars()
            )

    def list_branches(self, bank_name: str) -> list[str]:
        with self._database.connect() as conn:
            return list(
                conn.execute(
                    text(
                        "SELECT DISTINCT branch FROM bank_details "
                        "WHERE bank_name = :bank AND branch IS NOT NULL ORDER BY branch"
                    ),
                    {"bank": bank_name},
                ).scalars()
            )
