"""
Relational schema for the accounts tables.

Declared with SQLAlchemy Core so the same metadata creates the tables
in PostgreSQL (development) and SQLite (tests). Statements elsewhere are
written as ``text()`` against these table and column names.
"""

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    MetaData,
    String,
    Table,
    UniqueConstraint,
    func,
)

metadata = MetaData()

source_of_funding = Table(
    "source_of_funding",
    metadata,
    Column("funding_id", String(7), primary_key=True),
    Column("nature_of_work", String(50)),
    Column("business_school_name", String(80)),
    Column("office_school_address", String(150)),
    Column("office_school_number", String(15)),
    Column("valid_id", String(30)),
    Column("source_of_income", String(30)),
)

bank_details = Table(
    "bank_details",
    metadata,
    Column("bank_acc_no", String(19), primary_key=True),
    Column("bank_acc_name", String(50)),
    Column("bank_acc_date_of_opening", Date),
    Column("bank_name", String(50)),
    Column("branch", String(30)),
)

personal_data = Table(
    "personal_data",
    metadata,
    Column("acc_id", String(4), primary_key=True),
    Column("p_name", String(50)),
    Column("p_address", String(150)),
    Column("p_postal_code", String(5)),
    Column("p_cell_number", String(20), nullable=False),
    Column("p_email", String(60), nullable=False),
    Column("date_of_birth", Date),
    Column("employment_status", String(20)),
    Column("purpose_of_opening", String(20)),
    Column("p_password", String(255)),
    Column("funding_id", String(7), ForeignKey("source_of_funding.funding_id"), nullable=False),
    Column("bank_acc_no", String(19), ForeignKey("bank_details.bank_acc_no"), nullable=False),
    Column("created_at", DateTime, server_default=func.current_timestamp()),
    Column("updated_at", DateTime, server_default=func.current_timestamp()),
    UniqueConstraint("p_email", name="uq_personal_data_email"),
    UniqueConstraint("p_cell_number", name="uq_personal_data_cell_number"),
)

contact_person_details = Table(
    "contact_person_details",
    metadata,
    Column("contact_id", String(5), primary_key=True),
    Column("c_name", String(50)),
    Column("c_address", String(150)),
    Column("c_postal_code", String(5)),
    Column("c_email", String(60)),
    Column("c_contact_number", String(45), nullable=False),
)

role_of_contact = Table(
    "role_of_contact",
    metadata,
    Column("acc_id", String(4), ForeignKey("personal_data.acc_id"), primary_key=True),
    Column(
        "contact_id",
        String(5),
        ForeignKey("contact_person_details.contact_id"),
        primary_key=True,
    ),
    Column("c_role", String(10), nullable=False),
    Column("c_relationship", String(20)),
    UniqueConstraint("acc_id", "c_role", name="uq_role_of_contact_role"),
)
