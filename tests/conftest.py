"""
Shared fixtures.

Persistence tests run against an in-memory SQLite database that lives
for one test. StaticPool keeps the single connection alive across
checkouts, and foreign keys are switched on for every connection so
delete ordering is enforced like in PostgreSQL.
"""

import copy
from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event, text
from sqlalchemy.pool import StaticPool

from app.core.config import Settings
from app.domain.accounts.entities import (
    BankDetails,
    ContactAssignment,
    ContactDetails,
    Credentials,
    FundingSource,
    PersonalData,
    Registration,
)
from app.domain.accounts.identifiers import IdentifierGenerator
from app.infrastructure.accounts.account_repository import SqlAccountStore
from app.infrastructure.accounts.security import BcryptPasswordHasher, JwtTokenService
from app.infrastructure.database import Database
from app.main import create_app

ACCOUNT_TABLES = (
    "personal_data",
    "source_of_funding",
    "bank_details",
    "contact_person_details",
    "role_of_contact",
)

REGISTRATION_PAYLOAD: dict[str, Any] = {
    "personalData": {
        "P_Name": "Juan Dela Cruz",
        "P_Address": "123 Rizal St, Manila",
        "P_Postal_Code": "1000",
        "P_Cell_Number": "09171234567",
        "P_Email": "juan@example.com",
        "Date_of_Birth": "1990-05-15",
        "Employment_Status": "Employed",
        "Purpose_of_Opening": "Investment",
    },
    "sourceOfFunding": {
        "Nature_of_Work": "Engineer",
        "Business/School_Name": "Acme Corp",
        "Office/School_Address": "Makati City",
        "Office/School_Number": "028123456",
        "Valid_ID": "Passport",
        "Source_of_Income": "Salary",
    },
    "bankDetails": {
        "Bank_Acc_Name": "Juan Dela Cruz",
        "Bank_Acc_Date_of_Opening": "2020-01-15",
        "Bank_Name": "BDO",
        "Branch": "Makati",
    },
    "contacts": [
        {
            "role": "Kin",
            "relationship": "Mother",
            "contactDetails": {
                "C_Name": "Maria Dela Cruz",
                "C_Address": "123 Rizal St, Manila",
                "C_Postal_Code": "1000",
                "C_Email": "maria@example.com",
                "C_Contact_Number": "09181111111",
            },
        },
        {
            "role": "Referee 1",
            "relationship": "Colleague",
            "contactDetails": {
                "C_Name": "Pedro Santos",
                "C_Contact_Number": "09182222222",
            },
        },
        {
            "role": "Referee 2",
            "relationship": "Friend",
            "contactDetails": {
                "C_Name": "Ana Reyes",
                "C_Contact_Number": "09183333333",
            },
        },
    ],
    "credentials": {"email": "juan@example.com", "password": "secret123"},
}


def _enable_foreign_keys(dbapi_connection, _record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
def database() -> Database:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", _enable_foreign_keys)
    db = Database(engine)
    db.create_schema()
    yield db
    db.dispose()


@pytest.fixture
def store(database: Database) -> SqlAccountStore:
    return SqlAccountStore(database)


@pytest.fixture
def hasher() -> BcryptPasswordHasher:
    return BcryptPasswordHasher(rounds=4)


@pytest.fixture
def tokens() -> JwtTokenService:
    return JwtTokenService(secret="test-secret")


@pytest.fixture
def identifiers() -> IdentifierGenerator:
    return IdentifierGenerator()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        environment="test",
        rate_limit_enabled=False,
        bcrypt_rounds=4,
        jwt_secret="test-secret",
        db_create_schema=False,
    )


@pytest.fixture
def client(test_settings: Settings, database: Database) -> TestClient:
    return TestClient(create_app(test_settings, database))


@pytest.fixture
def registration_payload() -> Callable[..., dict[str, Any]]:
    """Factory for a valid wizard payload; overrides replace the login identity."""

    def build(email: str = "juan@example.com", phone: str = "09171234567") -> dict[str, Any]:
        payload = copy.deepcopy(REGISTRATION_PAYLOAD)
        payload["personalData"]["P_Email"] = email
        payload["personalData"]["P_Cell_Number"] = phone
        payload["credentials"]["email"] = email
        return payload

    return build


@pytest.fixture
def make_registration() -> Callable[..., Registration]:
    """Factory for a domain Registration with three valid contacts."""

    def build(
        email: str = "juan@example.com",
        phone: str = "09171234567",
        contacts: int = 3,
        password: str = "secret123",
    ) -> Registration:
        roles = [("Kin", "Mother"), ("Referee 1", "Colleague"), ("Referee 2", "Friend")]
        return Registration(
            personal=PersonalData(
                cell_number=phone,
                email=email,
                name="Juan Dela Cruz",
                address="123 Rizal St, Manila",
                postal_code="1000",
                date_of_birth="1990-05-15",
                employment_status="Employed",
                purpose_of_opening="Investment",
            ),
            funding=FundingSource(
                nature_of_work="Engineer",
                business_school_name="Acme Corp",
                valid_id="Passport",
                source_of_income="Salary",
            ),
            bank=BankDetails(
                account_name="Juan Dela Cruz",
                date_of_opening="2020-01-15",
                bank_name="BDO",
                branch="Makati",
            ),
            contacts=tuple(
                ContactAssignment(
                    role=role,
                    relationship=relationship,
                    details=ContactDetails(
                        contact_number=f"0918000000{index}",
                        name=f"Contact {index}",
                    ),
                )
                for index, (role, relationship) in enumerate(roles[:contacts], start=1)
            ),
            credentials=Credentials(email=email, password=password),
        )

    return build


@pytest.fixture
def count_rows(database: Database) -> Callable[[str], int]:
    def count(table: str) -> int:
        with database.connect() as conn:
            return conn.execute(text(f"SELECT COUNT(*) FROM {table}")).scalar()

    return count


@pytest.fixture
def table_counts(count_rows: Callable[[str], int]) -> Callable[[], dict[str, int]]:
    def counts() -> dict[str, int]:
        return {table: count_rows(table) for table in ACCOUNT_TABLES}

    return counts
