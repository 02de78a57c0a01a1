"""
Adapter: Account repository.

Implements the AccountRepository and AccountStore ports.
Every statement is a bound ``text()`` query; values are never
interpolated. Column names for partial updates come only from the
whitelists below.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection, RowMapping
from sqlalchemy.exc import IntegrityError

from app.domain.accounts.entities import (
    AccountRecord,
    BankDetails,
    ContactAssignment,
    ContactDetails,
    FundingSource,
    PersonalData,
)
from app.domain.accounts.errors import DuplicateEmailError, DuplicatePhoneError
from app.domain.accounts.ports import AccountRepository, AccountStore
from app.infrastructure.database import Database

logger = logging.getLogger(__name__)

PERSONAL_COLUMNS = {
    "name": "p_name",
    "address": "p_address",
    "postal_code": "p_postal_code",
    "cell_number": "p_cell_number",
    "email": "p_email",
    "date_of_birth": "date_of_birth",
    "employment_status": "employment_status",
    "purpose_of_opening": "purpose_of_opening",
}

BANK_COLUMNS = {
    "account_name": "bank_acc_name",
    "date_of_opening": "bank_acc_date_of_opening",
    "bank_name": "bank_name",
    "branch": "branch",
}

FUNDING_COLUMNS = {
    "nature_of_work": "nature_of_work",
    "business_school_name": "business_school_name",
    "office_school_address": "office_school_address",
    "office_school_number": "office_school_number",
    "valid_id": "valid_id",
    "source_of_income": "source_of_income",
}

# Markers found in PostgreSQL (constraint name) and SQLite (table.column)
# unique-violation messages.
_EMAIL_MARKERS = ("uq_personal_data_email", "personal_data.p_email")
_PHONE_MARKERS = ("uq_personal_data_cell_number", "personal_data.p_cell_number")


def _iso(value: Any) -> Optional[str]:
    """Render a DATE column value as ``YYYY-MM-DD`` regardless of driver."""
    if value is None:
        return None
    if hasattr(value, "isoformat"):
        return value.isoformat()[:10]
    return str(value)


def _personal_from_row(row: RowMapping) -> PersonalData:
    return PersonalData(
        cell_number=row["p_cell_number"],
        email=row["p_email"],
        name=row["p_name"],
        address=row["p_address"],
        postal_code=row["p_postal_code"],
        date_of_birth=_iso(row["date_of_birth"]),
        employment_status=row["employment_status"],
        purpose_of_opening=row["purpose_of_opening"],
    )


def _account_from_row(row: RowMapping) -> AccountRecord:
    return AccountRecord(
        acc_id=row["acc_id"],
        personal=_personal_from_row(row),
        funding_id=row["funding_id"],
        bank_acc_no=row["bank_acc_no"],
        password_hash=row["p_password"],
    )


def _raise_duplicate(exc: IntegrityError, email: Any, cell_number: Any) -> None:
    """Translate an email/phone unique violation; re-raise anything else."""
    message = str(exc.orig)
    if any(marker in message for marker in _EMAIL_MARKERS):
        raise DuplicateEmailError(str(email)) from exc
    if any(marker in message for marker in _PHONE_MARKERS):
        raise DuplicatePhoneError(str(cell_number)) from exc
    raise exc


class SqlAccountRepository(AccountRepository):
    """Account statements bound to one SQLAlchemy connection."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def _scalar(self, sql: str, params: Optional[dict[str, Any]] = None) -> Any:
        return self._conn.execute(text(sql), params or {}).scalar()

    def _first(self, sql: str, params: dict[str, Any]) -> Optional[RowMapping]:
        return self._conn.execute(text(sql), params).mappings().first()

    def _execute(self, sql: str, params: dict[str, Any]) -> int:
        return self._conn.execute(text(sql), params).rowcount

    def _update(
        self,
        table: str,
        key_column: str,
        key: str,
        whitelist: dict[str, str],
        changes: dict[str, Any],
        extra_set: str = "",
    ) -> None:
        unknown = set(changes) - set(whitelist)
        if unknown:
            raise ValueError(f"Unknown {table} fields: {sorted(unknown)}")
        if not changes:
            return

        assignments = [f"{whitelist[name]} = :{name}" for name in changes]
        if extra_set:
            assignments.append(extra_set)
        params = dict(changes)
        params["_key"] = key
        self._execute(
            f"UPDATE {table} SET {', '.join(assignments)} WHERE {key_column} = :_key",
            params,
        )

    # -- identifier sources -------------------------------------------

    def max_account_id(self) -> Optional[str]:
        return self._scalar("SELECT MAX(acc_id) FROM personal_data WHERE acc_id LIKE 'A%'")

    def max_funding_id(self) -> Optional[str]:
        return self._scalar(
            "SELECT MAX(funding_id) FROM source_of_funding WHERE funding_id LIKE 'F%'"
        )

    def contact_exists(self, contact_id: str) -> bool:
        row = self._first(
            "SELECT 1 FROM contact_person_details WHERE contact_id = :contact_id",
            {"contact_id": contact_id},
        )
        return row is not None

    # -- uniqueness checks --------------------------------------------

    def email_taken(self, email: str, exclude_acc_id: Optional[str] = None) -> bool:
        row = self._first(
            "SELECT acc_id FROM personal_data WHERE p_email = :email AND acc_id <> :exclude",
            {"email": email, "exclude": exclude_acc_id or ""},
        )
        return row is not None

    def phone_taken(
        self, cell_number: str, exclude_acc_id: Optional[str] = None
    ) -> bool:
        row = self._first(
            "SELECT acc_id FROM personal_data WHERE p_cell_number = :cell AND acc_id <> :exclude",
            {"cell": cell_number, "exclude": exclude_acc_id or ""},
        )
        return row is not None

    # -- inserts ------------------------------------------------------

    def insert_funding_source(self, funding: FundingSource) -> None:
        self._execute(
            """
            INSERT INTO source_of_funding
                (funding_id, nature_of_work, business_school_name,
                 office_school_address, office_school_number, valid_id,
                 source_of_income)
            VALUES
                (:funding_id, :nature_of_work, :business_school_name,
                 :office_school_address, :office_school_number, :valid_id,
                 :source_of_income)
            """,
            {
                "funding_id": funding.funding_id,
                "nature_of_work": funding.nature_of_work,
                "business_school_name": funding.business_school_name,
                "office_school_address": funding.office_school_address,
                "office_school_number": funding.office_school_number,
                "valid_id": funding.valid_id,
                "source_of_income": funding.source_of_income,
            },
        )

    def funding_source_exists(self, funding_id: str) -> bool:
        row = self._first(
            "SELECT funding_id FROM source_of_funding WHERE funding_id = :funding_id",
            {"funding_id": funding_id},
        )
        return row is not None

    def insert_bank_details(self, bank: BankDetails) -> None:
        self._execute(
            """
            INSERT INTO bank_details
                (bank_acc_no, bank_acc_name, bank_acc_date_of_opening,
                 bank_name, branch)
            VALUES
                (:bank_acc_no, :bank_acc_name, :date_of_opening,
                 :bank_name, :branch)
            """,
            {
                "bank_acc_no": bank.account_number,
                "bank_acc_name": bank.account_name,
                "date_of_opening": bank.date_of_opening,
                "bank_name": bank.bank_name,
                "branch": bank.branch,
            },
        )

    def bank_details_exist(self, account_number: str) -> bool:
        row = self._first(
            "SELECT bank_acc_no FROM bank_details WHERE bank_acc_no = :bank_acc_no",
            {"bank_acc_no": account_number},
        )
        return row is not None

    def insert_account(
        self,
        acc_id: str,
        personal: PersonalData,
        password_hash: str,
        funding_id: str,
        bank_acc_no: str,
    ) -> None:
        try:
            self._execute(
                """
                INSERT INTO personal_data
                    (acc_id, p_name, p_address, p_postal_code, p_cell_number,
                     p_email, date_of_birth, employment_status,
                     purpose_of_opening, p_password, funding_id, bank_acc_no)
                VALUES
                    (:acc_id, :name, :address, :postal_code, :cell_number,
                     :email, :date_of_birth, :employment_status,
                     :purpose_of_opening, :password, :funding_id, :bank_acc_no)
                """,
                {
                    "acc_id": acc_id,
                    "name": personal.name,
                    "address": personal.address,
                    "postal_code": personal.postal_code,
                    "cell_number": personal.cell_number,
                    "email": personal.email,
                    "date_of_birth": personal.date_of_birth,
                    "employment_status": personal.employment_status,
                    "purpose_of_opening": personal.purpose_of_opening,
                    "password": password_hash,
                    "funding_id": funding_id,
                    "bank_acc_no": bank_acc_no,
                },
            )
        except IntegrityError as exc:
            _raise_duplicate(exc, personal.email, personal.cell_number)

    def insert_contact(self, contact: ContactDetails) -> None:
        self._execute(
            """
            INSERT INTO contact_person_details
                (contact_id, c_name, c_address, c_postal_code, c_email,
                 c_contact_number)
            VALUES
                (:contact_id, :name, :address, :postal_code, :email,
                 :contact_number)
            """,
            {
                "contact_id": contact.contact_id,
                "name": contact.name,
                "address": contact.address,
                "postal_code": contact.postal_code,
                "email": contact.email,
                "contact_number": contact.contact_number,
            },
        )

    def insert_contact_role(
        self,
        acc_id: str,
        contact_id: str,
        role: str,
        relationship: Optional[str],
    ) -> None:
        self._execute(
            """
            INSERT INTO role_of_contact (acc_id, c_role, contact_id, c_relationship)
            VALUES (:acc_id, :role, :contact_id, :relationship)
            """,
            {
                "acc_id": acc_id,
                "role": role,
                "contact_id": contact_id,
                "relationship": relationship,
            },
        )

    # -- reads --------------------------------------------------------

    def get_account(self, acc_id: str) -> Optional[AccountRecord]:
        row = self._first(
            "SELECT * FROM personal_data WHERE acc_id = :acc_id", {"acc_id": acc_id}
        )
        return _account_from_row(row) if row else None

    def find_account_by_email(self, email: str) -> Optional[AccountRecord]:
        row = self._first(
            "SELECT * FROM personal_data WHERE p_email = :email", {"email": email}
        )
        return _account_from_row(row) if row else None

    def find_account_by_phone(self, cell_number: str) -> Optional[AccountRecord]:
        row = self._first(
            "SELECT * FROM personal_data WHERE p_cell_number = :cell",
            {"cell": cell_number},
        )
        return _account_from_row(row) if row else None

    def get_bank_details(self, account_number: str) -> Optional[BankDetails]:
        row = self._first(
            "SELECT * FROM bank_details WHERE bank_acc_no = :bank_acc_no",
            {"bank_acc_no": account_number},
        )
        if row is None:
            return None
        return BankDetails(
            account_number=row["bank_acc_no"],
            account_name=row["bank_acc_name"],
            date_of_opening=_iso(row["bank_acc_date_of_opening"]),
            bank_name=row["bank_name"],
            branch=row["branch"],
        )

    def get_funding_source(self, funding_id: str) -> Optional[FundingSource]:
        row = self._first(
            "SELECT * FROM source_of_funding WHERE funding_id = :funding_id",
            {"funding_id": funding_id},
        )
        if row is None:
            return None
        return FundingSource(
            funding_id=row["funding_id"],
            nature_of_work=row["nature_of_work"],
            business_school_name=row["business_school_name"],
            office_school_address=row["office_school_address"],
            office_school_number=row["office_school_number"],
            valid_id=row["valid_id"],
            source_of_income=row["source_of_income"],
        )

    def list_contacts(self, acc_id: str) -> list[ContactAssignment]:
        rows = self._conn.execute(
            text(
                """
                SELECT cd.*, rc.c_role, rc.c_relationship
                FROM contact_person_details cd
                JOIN role_of_contact rc ON cd.contact_id = rc.contact_id
                WHERE rc.acc_id = :acc_id
                ORDER BY rc.c_role
                """
            ),
            {"acc_id": acc_id},
        ).mappings()
        return [
            ContactAssignment(
                role=row["c_role"],
                relationship=row["c_relationship"],
                details=ContactDetails(
                    contact_id=row["contact_id"],
                    contact_number=row["c_contact_number"],
                    name=row["c_name"],
                    address=row["c_address"],
                    postal_code=row["c_postal_code"],
                    email=row["c_email"],
                ),
            )
            for row in rows
        ]

    # -- updates ------------------------------------------------------

    def update_personal_data(self, acc_id: str, changes: dict[str, Any]) -> None:
        try:
            self._update(
                "personal_data",
                "acc_id",
                acc_id,
                PERSONAL_COLUMNS,
                changes,
                extra_set="updated_at = CURRENT_TIMESTAMP",
            )
        except IntegrityError as exc:
            _raise_duplicate(exc, changes.get("email"), changes.get("cell_number"))

    def update_bank_details(self, account_number: str, changes: dict[str, Any]) -> None:
        self._update("bank_details", "bank_acc_no", account_number, BANK_COLUMNS, changes)

    def update_funding_source(self, funding_id: str, changes: dict[str, Any]) -> None:
        self._update(
            "source_of_funding", "funding_id", funding_id, FUNDING_COLUMNS, changes
        )

    # -- deletes ------------------------------------------------------

    def delete_contact_roles(self, acc_id: str) -> list[str]:
        contact_ids = list(
            self._conn.execute(
                text("SELECT contact_id FROM role_of_contact WHERE acc_id = :acc_id"),
                {"acc_id": acc_id},
            ).scalars()
        )
        self._execute("DELETE FROM role_of_contact WHERE acc_id = :acc_id", {"acc_id": acc_id})
        return contact_ids

    def contact_is_referenced(self, contact_id: str) -> bool:
        row = self._first(
            "SELECT 1 FROM role_of_contact WHERE contact_id = :contact_id",
            {"contact_id": contact_id},
        )
        return row is not None

    def delete_contact(self, contact_id: str) -> None:
        self._execute(
            "DELETE FROM contact_person_details WHERE contact_id = :contact_id",
            {"contact_id": contact_id},
        )

    def delete_account(self, acc_id: str) -> None:
        self._execute("DELETE FROM personal_data WHERE acc_id = :acc_id", {"acc_id": acc_id})

    def delete_bank_details(self, account_number: str) -> None:
        self._execute(
            "DELETE FROM bank_details WHERE bank_acc_no = :bank_acc_no",
            {"bank_acc_no": account_number},
        )

    def delete_funding_source(self, funding_id: str) -> None:
        self._execute(
            "DELETE FROM source_of_funding WHERE funding_id = :funding_id",
            {"funding_id": funding_id},
        )


class SqlAccountStore(AccountStore):
    """Hands out SqlAccountRepository instances over gateway connections."""

    def __init__(self, database: Database) -> None:
        self._database = database

    @contextmanager
    def transaction(self) -> Iterator[SqlAccountRepository]:
        with self._database.transaction() as conn:
            yield SqlAccountRepository(conn)

    @contextmanager
    def session(self) -> Iterator[SqlAccountRepository]:
        with self._database.connect() as conn:
            yield SqlAccountRepository(conn)
