"""
Use case: Open a brokerage account.

Input: RegisterAccountCommand (personal data, funding source, bank
       details, contacts, credentials)
Output: AuthResult (sanitized account + session token)
Side effects: Inserts one row into source_of_funding, bank_details and
    personal_data, plus one contact and one role row per contact, all in
    one transaction.
Failure cases: InsufficientContactsError, MissingContactNumberError,
    InvalidContactRolesError, DuplicateEmailError, DuplicatePhoneError,
    IdentifierExhaustedError, RegistrationIntegrityError, PersistenceError.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional

from app.application.accounts.dtos import AuthResult, RegisterAccountCommand
from app.application.accounts.steps import StepAction, TransactionScript
from app.domain.accounts.entities import (
    AccountRecord,
    ContactAssignment,
    PersonalData,
    Registration,
    SessionClaims,
)
from app.domain.accounts.errors import (
    DuplicateEmailError,
    DuplicatePhoneError,
    RegistrationIntegrityError,
)
from app.domain.accounts.identifiers import IdentifierGenerator
from app.domain.accounts.ports import (
    AccountRepository,
    AccountStore,
    PasswordHasher,
    TokenService,
)
from app.domain.accounts.rules import check_contacts

logger = logging.getLogger(__name__)


@dataclass
class _GeneratedIds:
    """Identifiers produced by earlier steps and consumed by later ones."""

    funding_id: Optional[str] = None
    bank_acc_no: Optional[str] = None
    acc_id: Optional[str] = None


class RegisterAccountUseCase:
    """Orchestrates the multi-table registration transaction.

    Contact rules are checked before a connection is taken. The duplicate
    email/phone checks are the first steps of the transaction, so a
    rejection happens before any write. Inserts then follow the order
    funding source, bank details, account, then contacts and roles.
    """

    def __init__(
        self,
        store: AccountStore,
        identifiers: IdentifierGenerator,
        hasher: PasswordHasher,
        tokens: TokenService,
    ) -> None:
        self._store = store
        self._identifiers = identifiers
        self._hasher = hasher
        self._tokens = tokens

    def execute(self, command: RegisterAccountCommand) -> AuthResult:
        """Run the registration use case.

        Args:
            command: The registration payload.

        Returns:
            The new account (without its password hash) and a session token.

        Raises:
            AccountValidationError: If the contact list breaks a rule.
            DuplicateAccountError: If the email or phone is already registered.
        """
        registration = command.registration
        check_contacts(registration.contacts)

        personal = replace(registration.personal, email=registration.account_email)
        password_hash = self._hasher.hash(registration.credentials.password)
        ids = _GeneratedIds()

        script = self._build_script(registration, personal, password_hash, ids)
        script.run(self._store)

        logger.info(
            "Registered account %s with %d contacts.",
            ids.acc_id,
            len(registration.contacts),
        )

        account = AccountRecord(
            acc_id=ids.acc_id,
            personal=personal,
            funding_id=ids.funding_id,
            bank_acc_no=ids.bank_acc_no,
        )
        token = self._tokens.issue(
            SessionClaims(
                acc_id=account.acc_id,
                email=personal.email,
                phone=personal.cell_number,
            )
        )
        return AuthResult(account=account, token=token)

    def _build_script(
        self,
        registration: Registration,
        personal: PersonalData,
        password_hash: str,
        ids: _GeneratedIds,
    ) -> TransactionScript:
        def check_email(repo: AccountRepository) -> None:
            if repo.email_taken(personal.email):
                raise DuplicateEmailError(personal.email)

        def check_phone(repo: AccountRepository) -> None:
            if repo.phone_taken(personal.cell_number):
                raise DuplicatePhoneError(personal.cell_number)

        def insert_funding(repo: AccountRepository) -> None:
            ids.funding_id = self._identifiers.next_funding_id(repo)
            repo.insert_funding_source(
                replace(registration.funding, funding_id=ids.funding_id)
            )

        def verify_funding(repo: AccountRepository) -> None:
            if not repo.funding_source_exists(ids.funding_id):
                raise RegistrationIntegrityError(
                    f"funding source {ids.funding_id} not readable after insert"
                )

        def insert_bank(repo: AccountRepository) -> None:
            ids.bank_acc_no = self._identifiers.next_bank_account_number()
            repo.insert_bank_details(
                replace(registration.bank, account_number=ids.bank_acc_no)
            )

        def verify_bank(repo: AccountRepository) -> None:
            if not repo.bank_details_exist(ids.bank_acc_no):
                raise RegistrationIntegrityError(
                    "bank details not readable after insert"
                )

        def insert_account(repo: AccountRepository) -> None:
            ids.acc_id = self._identifiers.next_account_id(repo)
            repo.insert_account(
                ids.acc_id, personal, password_hash, ids.funding_id, ids.bank_acc_no
            )

        script = (
            TransactionScript("registration")
            .step("check duplicate email", check_email)
            .step("check duplicate phone", check_phone)
            .step("insert funding source", insert_funding)
            .step("verify funding source", verify_funding)
            .step("insert bank details", insert_bank)
            .step("verify bank details", verify_bank)
            .step("insert account", insert_account)
        )
        for position, contact in enumerate(registration.contacts, start=1):
            script.step(
                f"insert contact #{position} ({contact.role})",
                self._contact_step(contact, ids),
            )
        return script

    def _contact_step(
        self, contact: ContactAssignment, ids: _GeneratedIds
    ) -> StepAction:
        def insert_contact(repo: AccountRepository) -> None:
            contact_id = self._identifiers.next_contact_id(repo.contact_exists)
            repo.insert_contact(replace(contact.details, contact_id=contact_id))
            repo.insert_contact_role(
                ids.acc_id, contact_id, contact.role, contact.relationship
            )

        return insert_contact
