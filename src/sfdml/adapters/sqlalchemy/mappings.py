"""SQLAlchemy table metadata for the local record store.

Columns are named after platform API names so filters and records map onto
them without translation.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Final

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Dialect,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    TypeDecorator,
)

from sfdml.domain.model import SObjectType

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

ID_LENGTH: Final = 18

metadata = MetaData()


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


def _id_column() -> Column[str]:
    return Column("Id", String(ID_LENGTH), primary_key=True)


def _audit_columns() -> tuple[Column[datetime], Column[datetime]]:
    return (
        Column("CreatedDate", UTCDateTime(), nullable=False),
        Column("LastModifiedDate", UTCDateTime(), nullable=False),
    )


account_table = Table(
    "account",
    metadata,
    _id_column(),
    Column("Name", String(255), nullable=False, index=True),
    Column("Industry", String(255)),
    Column("Description", Text),
    Column("Type", String(255)),
    Column("Phone", String(40)),
    Column("Website", String(255)),
    Column("AnnualRevenue", Float),
    Column("NumberOfEmployees", Integer),
    *_audit_columns(),
)

contact_table = Table(
    "contact",
    metadata,
    _id_column(),
    Column("FirstName", String(40)),
    Column("LastName", String(80), nullable=False, index=True),
    Column("Email", String(80)),
    Column("Phone", String(40)),
    Column("Title", String(128)),
    Column("AccountId", String(ID_LENGTH), ForeignKey("account.Id"), index=True),
    *_audit_columns(),
)

opportunity_table = Table(
    "opportunity",
    metadata,
    _id_column(),
    Column("Name", String(120), nullable=False, index=True),
    Column("StageName", String(255), nullable=False),
    Column("CloseDate", Date, nullable=False),
    Column("Amount", Float),
    Column("Description", Text),
    Column("AccountId", String(ID_LENGTH), ForeignKey("account.Id"), index=True),
    *_audit_columns(),
)

lead_table = Table(
    "lead",
    metadata,
    _id_column(),
    Column("FirstName", String(40)),
    Column("LastName", String(80), nullable=False),
    Column("Company", String(255), nullable=False),
    Column("Email", String(80)),
    Column("Status", String(255)),
    *_audit_columns(),
)

case_table = Table(
    "case",
    metadata,
    _id_column(),
    Column("Subject", String(255)),
    Column("Status", String(255)),
    Column("Origin", String(255)),
    Column("Priority", String(255)),
    Column("Description", Text),
    Column("AccountId", String(ID_LENGTH), ForeignKey("account.Id"), index=True),
    Column("ContactId", String(ID_LENGTH), ForeignKey("contact.Id")),
    *_audit_columns(),
)

TABLE_BY_TYPE: dict[SObjectType, Table] = {
    SObjectType.ACCOUNT: account_table,
    SObjectType.CONTACT: contact_table,
    SObjectType.OPPORTUNITY: opportunity_table,
    SObjectType.LEAD: lead_table,
    SObjectType.CASE: case_table,
}


def create_all_tables(engine: Engine) -> None:
    metadata.create_all(engine)
