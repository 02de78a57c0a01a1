"""
Tests for the accounts application layer (use cases).

Use cases run against the SQL store over SQLite so that atomicity can
be checked by counting rows. Failures are injected by patching single
repository methods.
"""

import re
from dataclasses import replace
from unittest.mock import MagicMock

import pytest

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
from app.application.accounts.steps import TransactionScript
from app.application.accounts.update_profile import UpdateProfileUseCase
from app.domain.accounts.entities import ContactDetails
from app.domain.accounts.errors import (
    AccountNotFoundError,
    DuplicateEmailError,
    DuplicatePhoneError,
    IdentifierExhaustedError,
    InsufficientContactsError,
    InvalidCredentialsError,
    RegistrationIntegrityError,
)
from app.domain.accounts.identifiers import IdentifierGenerator
from app.infrastructure.accounts.account_repository import SqlAccountRepository
from app.infrastructure.accounts.bank_directory import SqlBankDirectory

EMPTY = {
    "personal_data": 0,
    "source_of_funding": 0,
    "bank_details": 0,
    "contact_person_details": 0,
    "role_of_contact": 0,
}


@pytest.fixture
def register(store, identifiers, hasher, tokens):
    use_case = RegisterAccountUseCase(store, identifiers, hasher, tokens)

    def run(registration):
        return use_case.execute(RegisterAccountCommand(registration))

    return run


class TestTransactionScript:
    """Tests for ordered step execution."""

    def test_steps_run_in_order(self, store) -> None:
        calls: list[str] = []
        script = (
            TransactionScript("demo")
            .step("first", lambda repo: calls.append("first"))
            .step("second", lambda repo: calls.append("second"))
        )
        script.run(store)
        assert calls == ["first", "second"]
        assert script.labels == ["first", "second"]

    def test_failing_step_stops_script(self, store) -> None:
        calls: list[str] = []

        def fail(repo) -> None:
            raise RuntimeError("boom")

        script = (
            TransactionScript("demo")
            .step("fail", fail)
            .step("never", lambda repo: calls.append("never"))
        )
        with pytest.raises(RuntimeError):
            script.run(store)
        assert calls == []


class TestRegisterAccountUseCase:
    """Tests for the registration transaction."""

    def test_successful_registration(self, register, make_registration, table_counts) -> None:
        result = register(make_registration())

        assert result.account.acc_id == "A001"
        assert result.account.funding_id == "F000001"
        assert re.fullmatch(r"[1-9]\d{18}", result.account.bank_acc_no)
        assert result.account.password_hash is None
        assert result.token
        assert table_counts() == {
            "personal_data": 1,
            "source_of_funding": 1,
            "bank_details": 1,
            "contact_person_details": 3,
            "role_of_contact": 3,
        }

    def test_sequential_account_ids(self, register, make_registration) -> None:
        first = register(make_registration())
        second = register(make_registration(email="ana@example.com", phone="09179999999"))
        assert (first.account.acc_id, second.account.acc_id) == ("A001", "A002")
        assert second.account.funding_id == "F000002"

    def test_password_is_stored_hashed(self, register, make_registration, store, hasher) -> None:
        register(make_registration(password="secret123"))
        with store.session() as repo:
            stored = repo.get_account("A001").password_hash
        assert stored != "secret123"
        assert hasher.verify("secret123", stored)

    def test_two_contacts_rejected_without_writes(
        self, register, make_registration, table_counts
    ) -> None:
        with pytest.raises(InsufficientContactsError):
            register(make_registration(contacts=2))
        assert table_counts() == EMPTY

    def test_duplicate_email_rejected_without_writes(
        self, register, make_registration, table_counts
    ) -> None:
        register(make_registration())
        before = table_counts()
        with pytest.raises(DuplicateEmailError):
            register(make_registration(phone="09179999999"))
        assert table_counts() == before

    def test_duplicate_phone_rejected_without_writes(
        self, register, make_registration, table_counts
    ) -> None:
        register(make_registration())
        before = table_counts()
        with pytest.raises(DuplicatePhoneError):
            register(make_registration(email="other@example.com"))
        assert table_counts() == before

    @pytest.mark.parametrize(
        "method",
        [
            "insert_funding_source",
            "insert_bank_details",
            "insert_account",
            "insert_contact",
            "insert_contact_role",
        ],
    )
    def test_failure_at_any_insert_rolls_back_everything(
        self, method, register, make_registration, table_counts, monkeypatch
    ) -> None:
        """Whatever step fails, no row from the attempt survives."""

        def explode(self, *args, **kwargs):
            raise RuntimeError(f"{method} failed")

        monkeypatch.setattr(SqlAccountRepository, method, explode)
        with pytest.raises(RuntimeError):
            register(make_registration())
        assert table_counts() == EMPTY

    def test_failure_on_last_contact_rolls_back(
        self, register, make_registration, table_counts, monkeypatch
    ) -> None:
        """A failure after two contacts were written still leaves nothing behind."""
        original = SqlAccountRepository.insert_contact
        calls = {"count": 0}

        def third_fails(self, contact: ContactDetails) -> None:
            calls["count"] += 1
            if calls["count"] == 3:
                raise RuntimeError("third contact failed")
            original(self, contact)

        monkeypatch.setattr(SqlAccountRepository, "insert_contact", third_fails)
        with pytest.raises(RuntimeError):
            register(make_registration())
        assert table_counts() == EMPTY

    def test_unreadable_funding_row_aborts(
        self, register, make_registration, table_counts, monkeypatch
    ) -> None:
        monkeypatch.setattr(
            SqlAccountRepository, "funding_source_exists", lambda self, funding_id: False
        )
        with pytest.raises(RegistrationIntegrityError):
            register(make_registration())
        assert table_counts() == EMPTY

    def test_contact_id_exhaustion_rolls_back(
        self, store, hasher, tokens, make_registration, table_counts, monkeypatch
    ) -> None:
        monkeypatch.setattr(
            SqlAccountRepository, "contact_exists", lambda self, contact_id: True
        )
        use_case = RegisterAccountUseCase(
            store, IdentifierGenerator(max_contact_attempts=5), hasher, tokens
        )
        with pytest.raises(IdentifierExhaustedError):
            use_case.execute(RegisterAccountCommand(make_registration()))
        assert table_counts() == EMPTY

    def test_personal_email_falls_back_to_login_email(
        self, register, make_registration
    ) -> None:
        registration = make_registration(email="login@example.com")
        registration = replace(
            registration, personal=replace(registration.personal, email=None)
        )
        result = register(registration)
        assert result.account.personal.email == "login@example.com"


class TestLoginUseCase:
    """Tests for credential verification."""

    def test_login_by_email_and_phone(
        self, register, make_registration, store, hasher, tokens
    ) -> None:
        registered = register(make_registration())
        use_case = LoginUseCase(store, hasher, tokens)

        by_email = use_case.execute(LoginCommand(password="secret123", email="juan@example.com"))
        by_phone = use_case.execute(LoginCommand(password="secret123", phone="09171234567"))

        assert by_email.account.acc_id == registered.account.acc_id
        assert by_phone.account.acc_id == registered.account.acc_id
        assert by_email.account.password_hash is None
        assert tokens.decode(by_email.token).acc_id == registered.account.acc_id

    def test_wrong_password_and_unknown_user_look_the_same(
        self, register, make_registration, store, hasher, tokens
    ) -> None:
        register(make_registration())
        use_case = LoginUseCase(store, hasher, tokens)

        with pytest.raises(InvalidCredentialsError) as wrong_password:
            use_case.execute(LoginCommand(password="nope", email="juan@example.com"))
        with pytest.raises(InvalidCredentialsError) as unknown_user:
            use_case.execute(LoginCommand(password="secret123", email="nobody@example.com"))
        assert wrong_password.value.message == unknown_user.value.message


class TestGetProfileUseCase:
    def test_profile_assembled(self, register, make_registration, store) -> None:
        register(make_registration())
        profile = GetProfileUseCase(store).execute(GetProfileQuery(acc_id="A001"))

        assert profile.account.password_hash is None
        assert profile.bank.bank_name == "BDO"
        assert profile.funding.funding_id == "F000001"
        assert {contact.role for contact in profile.contacts} == {
            "Kin",
            "Referee 1",
            "Referee 2",
        }

    def test_missing_account(self, store) -> None:
        with pytest.raises(AccountNotFoundError):
            GetProfileUseCase(store).execute(GetProfileQuery(acc_id="A404"))


class TestUpdateProfileUseCase:
    """Tests for partial profile updates."""

    def test_partial_update_is_non_destructive(
        self, register, make_registration, store
    ) -> None:
        """Fields that were not sent keep their stored values."""
        register(make_registration())
        UpdateProfileUseCase(store).execute(
            UpdateProfileCommand(
                acc_id="A001",
                personal_data={"address": "456 Mabini St"},
                bank_details={"branch": "Ortigas"},
            )
        )
        profile = GetProfileUseCase(store).execute(GetProfileQuery(acc_id="A001"))

        assert profile.account.personal.address == "456 Mabini St"
        assert profile.account.personal.name == "Juan Dela Cruz"
        assert profile.account.personal.date_of_birth == "1990-05-15"
        assert profile.bank.branch == "Ortigas"
        assert profile.bank.bank_name == "BDO"
        assert profile.funding.nature_of_work == "Engineer"

    def test_missing_account(self, store) -> None:
        with pytest.raises(AccountNotFoundError):
            UpdateProfileUseCase(store).execute(
                UpdateProfileCommand(acc_id="A404", personal_data={"name": "X"})
            )

    def test_email_taken_by_other_account(self, register, make_registration, store) -> None:
        register(make_registration())
        register(make_registration(email="ana@example.com", phone="09179999999"))
        with pytest.raises(DuplicateEmailError):
            UpdateProfileUseCase(store).execute(
                UpdateProfileCommand(acc_id="A002", personal_data={"email": "juan@example.com"})
            )

    def test_keeping_own_email_is_allowed(self, register, make_registration, store) -> None:
        register(make_registration())
        UpdateProfileUseCase(store).execute(
            UpdateProfileCommand(acc_id="A001", personal_data={"email": "juan@example.com"})
        )


class TestDeleteProfileUseCase:
    """Tests for cascading account deletion."""

    def test_delete_removes_everything(
        self, register, make_registration, store, table_counts
    ) -> None:
        register(make_registration())
        result = DeleteProfileUseCase(store).execute(DeleteProfileCommand(acc_id="A001"))

        assert result.contacts_deleted == 3
        assert result.contacts_kept == 0
        assert table_counts() == EMPTY

    def test_shared_contact_survives(
        self, register, make_registration, store, count_rows
    ) -> None:
        """A contact still linked to another account is not deleted."""
        register(make_registration())
        register(make_registration(email="ana@example.com", phone="09179999999"))
        with store.session() as repo:
            shared = repo.list_contacts("A001")[0].details.contact_id
        with store.transaction() as repo:
            repo.delete_contact_roles("A002")
            repo.insert_contact_role("A002", shared, "Kin", "Friend")

        result = DeleteProfileUseCase(store).execute(DeleteProfileCommand(acc_id="A001"))

        assert result.contacts_kept == 1
        assert result.contacts_deleted == 2
        with store.session() as repo:
            assert repo.contact_exists(shared)
            assert repo.get_account("A001") is None
            assert repo.get_account("A002") is not None
        assert count_rows("role_of_contact") == 1

    def test_missing_account(self, store) -> None:
        with pytest.raises(AccountNotFoundError):
            DeleteProfileUseCase(store).execute(DeleteProfileCommand(acc_id="A404"))


class TestBankingUseCases:
    def test_verification_and_options(
        self, register, make_registration, database
    ) -> None:
        account = register(make_registration()).account
        directory = SqlBankDirectory(database)

        verified = VerifyBankAccountUseCase(directory).execute(
            VerifyBankAccountQuery(account.bank_acc_no, "Juan Dela Cruz", "BDO")
        )
        rejected = VerifyBankAccountUseCase(directory).execute(
            VerifyBankAccountQuery(account.bank_acc_no, "Someone Else", "BDO")
        )
        banks = GetBankOptionsUseCase(directory).execute()
        branches = GetBranchOptionsUseCase(directory).execute("BDO")

        assert verified.verified and verified.message == "Account verified successfully"
        assert not rejected.verified
        assert [(bank.id, bank.name, bank.code) for bank in banks] == [(1, "BDO", "BDO")]
        assert branches[0].address == "Makati Branch"


class TestUseCasesWithMockedPorts:
    """Orchestration checks with every port mocked."""

    def test_login_never_verifies_against_missing_account(self) -> None:
        repo = MagicMock()
        repo.find_account_by_email.return_value = None
        store = MagicMock()
        store.session.return_value.__enter__.return_value = repo
        hasher = MagicMock()
        tokens = MagicMock()

        with pytest.raises(InvalidCredentialsError):
            LoginUseCase(store, hasher, tokens).execute(
                LoginCommand(password="secret123", email=" juan@example.com ")
            )
        repo.find_account_by_email.assert_called_once_with("juan@example.com")
        hasher.verify.assert_not_called()
        tokens.issue.assert_not_called()

    def test_rule_violation_opens_no_transaction(self, make_registration) -> None:
        store = MagicMock()
        hasher = MagicMock()
        use_case = RegisterAccountUseCase(store, IdentifierGenerator(), hasher, MagicMock())

        with pytest.raises(InsufficientContactsError):
            use_case.execute(RegisterAccountCommand(make_registration(contacts=1)))
        store.transaction.assert_not_called()
        hasher.hash.assert_not_called()
