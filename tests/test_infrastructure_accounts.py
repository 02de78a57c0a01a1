"""
Tests for the accounts infrastructure layer.

Runs the SQL adapters and the persistence gateway against SQLite.
"""

import logging

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection
from sqlalchemy.engine.base import RootTransaction
from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import QueuePool

from app.domain.accounts.entities import (
    BankDetails,
    ContactDetails,
    FundingSource,
    PersonalData,
    SessionClaims,
)
from app.domain.accounts.errors import (
    DuplicateEmailError,
    DuplicatePhoneError,
    InvalidTokenError,
    PersistenceError,
)
from app.infrastructure.accounts.bank_directory import SqlBankDirectory
from app.infrastructure.accounts.security import BcryptPasswordHasher, JwtTokenService
from app.infrastructure.database import Database


def _seed_account(repo, acc_id: str, email: str, phone: str, bank_no: str, bank: str = "BDO"):
    funding_id = "F" + acc_id[1:].rjust(6, "0")
    repo.insert_funding_source(FundingSource(funding_id=funding_id, nature_of_work="Engineer"))
    repo.insert_bank_details(
        BankDetails(
            account_number=bank_no,
            account_name="Juan Dela Cruz",
            date_of_opening="2020-01-15",
            bank_name=bank,
            branch="Makati",
        )
    )
    repo.insert_account(
        acc_id,
        PersonalData(cell_number=phone, email=email, name="Juan Dela Cruz"),
        "hash",
        funding_id,
        bank_no,
    )


class TestDatabaseGateway:
    """Tests for the Database transaction scope."""

    def test_commit_on_success(self, database: Database, count_rows) -> None:
        with database.transaction() as conn:
            conn.execute(
                text("INSERT INTO source_of_funding (funding_id) VALUES ('F000001')")
            )
        assert count_rows("source_of_funding") == 1

    def test_rollback_on_error(self, database: Database, count_rows) -> None:
        """An exception inside the block undoes every statement in it."""
        with pytest.raises(RuntimeError):
            with database.transaction() as conn:
                conn.execute(
                    text("INSERT INTO source_of_funding (funding_id) VALUES ('F000001')")
                )
                raise RuntimeError("boom")
        assert count_rows("source_of_funding") == 0

    def test_sql_error_becomes_persistence_error(self, database: Database) -> None:
        with pytest.raises(PersistenceError):
            with database.transaction() as conn:
                conn.execute(text("SELECT * FROM no_such_table"))

    def test_rollback_failure_keeps_original_error(
        self, database: Database, monkeypatch, caplog
    ) -> None:
        """A failing rollback is logged and the block's own error propagates."""

        def broken_rollback(_self) -> None:
            raise OperationalError("ROLLBACK", {}, Exception("connection lost"))

        monkeypatch.setattr(RootTransaction, "rollback", broken_rollback)

        with caplog.at_level(logging.ERROR, logger="app.infrastructure.database"):
            with pytest.raises(KeyError):
                with database.transaction():
                    raise KeyError("acc_id")

        assert "Rollback failed after KeyError." in caplog.text

    def test_failed_begin_releases_connection(self, monkeypatch) -> None:
        """A transaction that cannot start still returns its connection."""
        engine = create_engine("sqlite://", poolclass=QueuePool, pool_size=1, max_overflow=0)
        database = Database(engine)

        def broken_begin(_self):
            raise OperationalError("BEGIN", {}, Exception("server closed the connection"))

        monkeypatch.setattr(Connection, "begin", broken_begin)

        with pytest.raises(PersistenceError):
            with database.transaction():
                pass
        assert engine.pool.checkedout() == 0
        database.dispose()

    def test_connections_released_on_every_path(self) -> None:
        """Checked-out connections return to the pool after success and failure."""
        engine = create_engine("sqlite://", poolclass=QueuePool, pool_size=1, max_overflow=0)
        database = Database(engine)

        with database.transaction() as conn:
            conn.execute(text("SELECT 1"))
        assert engine.pool.checkedout() == 0

        with pytest.raises(ValueError):
            with database.transaction():
                raise ValueError("boom")
        assert engine.pool.checkedout() == 0

        with database.connect() as conn:
            conn.execute(text("SELECT 1"))
        assert engine.pool.checkedout() == 0
        database.dispose()

    def test_pool_timeout_becomes_persistence_error(self) -> None:
        """Waiting for a connection beyond the pool timeout fails cleanly."""
        engine = create_engine(
            "sqlite://",
            poolclass=QueuePool,
            pool_size=1,
            max_overflow=0,
            pool_timeout=0.1,
        )
        database = Database(engine)
        with database.connect():
            with pytest.raises(PersistenceError) as exc_info:
                with database.connect():
                    pass
        assert exc_info.value.reason == "connection pool timeout"
        database.dispose()


class TestSqlAccountRepository:
    """Tests for SqlAccountRepository statements."""

    def test_insert_and_read_back(self, store) -> None:
        with store.transaction() as repo:
            _seed_account(repo, "A001", "juan@example.com", "09171234567", "1234567890123456789")

        with store.session() as repo:
            account = repo.get_account("A001")
            bank = repo.get_bank_details("1234567890123456789")

        assert account.personal.email == "juan@example.com"
        assert account.funding_id == "F000001"
        assert account.password_hash == "hash"
        assert bank.date_of_opening == "2020-01-15"

    def test_max_ids(self, store) -> None:
        with store.transaction() as repo:
            assert repo.max_account_id() is None
            _seed_account(repo, "A001", "a@example.com", "0917000001", "1000000000000000001")
            _seed_account(repo, "A002", "b@example.com", "0917000002", "1000000000000000002")
            assert repo.max_account_id() == "A002"
            assert repo.max_funding_id() == "F000002"

    def test_duplicate_email_constraint(self, store) -> None:
        """The UNIQUE constraint is reported as a duplicate email."""
        with store.transaction() as repo:
            _seed_account(repo, "A001", "juan@example.com", "0917000001", "1000000000000000001")

        with pytest.raises(DuplicateEmailError):
            with store.transaction() as repo:
                _seed_account(
                    repo, "A002", "juan@example.com", "0917000002", "1000000000000000002"
                )

    def test_duplicate_phone_constraint(self, store) -> None:
        with store.transaction() as repo:
            _seed_account(repo, "A001", "a@example.com", "0917000001", "1000000000000000001")

        with pytest.raises(DuplicatePhoneError):
            with store.transaction() as repo:
                _seed_account(repo, "A002", "b@example.com", "0917000001", "1000000000000000002")

    def test_email_taken_excludes_own_account(self, store) -> None:
        with store.transaction() as repo:
            _seed_account(repo, "A001", "a@example.com", "0917000001", "1000000000000000001")
            assert repo.email_taken("a@example.com")
            assert not repo.email_taken("a@example.com", exclude_acc_id="A001")
            assert repo.phone_taken("0917000001", exclude_acc_id="A002")

    def test_partial_update_only_touches_given_columns(self, store) -> None:
        with store.transaction() as repo:
            _seed_account(repo, "A001", "a@example.com", "0917000001", "1000000000000000001")
            repo.update_personal_data("A001", {"address": "456 Mabini St"})

        with store.session() as repo:
            personal = repo.get_account("A001").personal
        assert personal.address == "456 Mabini St"
        assert personal.name == "Juan Dela Cruz"
        assert personal.email == "a@example.com"

    def test_update_rejects_unknown_field(self, store) -> None:
        """Only whitelisted columns can be written."""
        with pytest.raises(ValueError):
            with store.transaction() as repo:
                _seed_account(repo, "A001", "a@example.com", "0917000001", "1000000000000000001")
                repo.update_personal_data("A001", {"acc_id": "A999"})

    def test_contacts_listed_with_roles(self, store) -> None:
        with store.transaction() as repo:
            _seed_account(repo, "A001", "a@example.com", "0917000001", "1000000000000000001")
            repo.insert_contact(ContactDetails(contact_id="C0001", contact_number="0918", name="Maria"))
            repo.insert_contact_role("A001", "C0001", "Kin", "Mother")
            assert repo.contact_exists("C0001")
            assert not repo.contact_exists("C0002")

        with store.session() as repo:
            contacts = repo.list_contacts("A001")
        assert len(contacts) == 1
        assert contacts[0].role == "Kin"
        assert contacts[0].relationship == "Mother"
        assert contacts[0].details.contact_id == "C0001"


class TestSqlBankDirectory:
    """Tests for bank verification and option lookups."""

    def test_lookups(self, database: Database, store) -> None:
        with store.transaction() as repo:
            _seed_account(repo, "A001", "a@example.com", "0917000001", "1000000000000000001")
            _seed_account(
                repo, "A002", "b@example.com", "0917000002", "1000000000000000002", bank="BPI"
            )
        directory = SqlBankDirectory(database)

        assert directory.account_matches("1000000000000000001", "Juan Dela Cruz", "BDO")
        assert not directory.account_matches("1000000000000000001", "Juan Dela Cruz", "BPI")
        assert directory.list_banks() == ["BDO", "BPI"]
        assert directory.list_branches("BDO") == ["Makati"]
        assert directory.list_branches("Metrobank") == []


class TestSecurityAdapters:
    """Tests for password hashing and session tokens."""

    def test_hash_and_verify(self) -> None:
        hasher = BcryptPasswordHasher(rounds=4)
        password_hash = hasher.hash("secret123")
        assert password_hash != "secret123"
        assert hasher.verify("secret123", password_hash)
        assert not hasher.verify("wrong-pass", password_hash)

    def test_verify_rejects_unusable_hash(self) -> None:
        hasher = BcryptPasswordHasher(rounds=4)
        assert not hasher.verify("secret123", "")
        assert not hasher.verify("secret123", "not-a-bcrypt-hash")

    def test_token_round_trip(self) -> None:
        tokens = JwtTokenService(secret="test-secret")
        token = tokens.issue(SessionClaims(acc_id="A001", email="a@example.com", phone="0917"))
        claims = tokens.decode(token)
        assert claims.acc_id == "A001"
        assert claims.email == "a@example.com"

    def test_token_signed_with_other_secret_rejected(self) -> None:
        token = JwtTokenService(secret="other").issue(
            SessionClaims(acc_id="A001", email=None, phone=None)
        )
        with pytest.raises(InvalidTokenError):
            JwtTokenService(secret="test-secret").decode(token)

    def test_expired_token_rejected(self) -> None:
        tokens = JwtTokenService(secret="test-secret", expires_minutes=-1)
        token = tokens.issue(SessionClaims(acc_id="A001", email=None, phone=None))
        with pytest.raises(InvalidTokenError):
            tokens.decode(token)
