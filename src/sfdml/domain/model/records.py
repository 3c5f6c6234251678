"""
CRM records:
identity assigned by the store, fields addressed by platform API name.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Self

from ._internal import ApiField, api_field, api_fields
from .enums import SObjectType

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import date

    from .identifiers import RecordId


class UnknownFieldError(KeyError):
    """Raised when a record is addressed with an API name it does not declare."""

    def __init__(self, sobject_type: SObjectType, api_name: str) -> None:
        super().__init__(f"{sobject_type} has no field {api_name!r}")
        self.sobject_type = sobject_type
        self.api_name = api_name


@dataclass(eq=False, kw_only=True)
class Record:
    """A persisted-or-pending CRM record.

    ``id`` stays ``None`` until a store commits the record; identity is by
    object, so two unsaved records with equal fields are still distinct.
    """

    SOBJECT_TYPE: ClassVar[SObjectType]

    id: RecordId | None = api_field("Id")

    @property
    def sobject_type(self) -> SObjectType:
        return self.SOBJECT_TYPE

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    @classmethod
    def api_fields(cls) -> Mapping[str, ApiField]:
        return api_fields(cls)

    @classmethod
    def api_names(cls) -> tuple[str, ...]:
        return tuple(api_fields(cls))

    @classmethod
    def required_fields(cls) -> tuple[str, ...]:
        return tuple(name for name, spec in api_fields(cls).items() if spec.required)

    @classmethod
    def reference_fields(cls) -> dict[str, SObjectType]:
        return {
            name: spec.references
            for name, spec in api_fields(cls).items()
            if spec.references is not None
        }

    @classmethod
    def has_field(cls, api_name: str) -> bool:
        return api_name in api_fields(cls)

    @classmethod
    def _field(cls, api_name: str) -> ApiField:
        try:
            return api_fields(cls)[api_name]
        except KeyError:
            raise UnknownFieldError(cls.SOBJECT_TYPE, api_name) from None

    def get_field(self, api_name: str) -> object:
        return getattr(self, self._field(api_name).attribute)

    def set_field(self, api_name: str, value: object) -> None:
        setattr(self, self._field(api_name).attribute, value)

    def to_fields(
        self,
        *,
        include_id: bool = True,
        include_none: bool = False,
    ) -> dict[str, object]:
        """Return the record's values keyed by API name."""

        values: dict[str, object] = {}
        for api_name, spec in api_fields(type(self)).items():
            if api_name == "Id" and not include_id:
                continue
            value = getattr(self, spec.attribute)
            if value is None and not include_none:
                continue
            values[api_name] = value
        return values

    @classmethod
    def from_fields(cls, values: Mapping[str, object]) -> Self:
        """Build a record from API-name keyed values, rejecting unknown names."""

        record = cls()
        for api_name, value in values.items():
            record.set_field(api_name, value)
        return record

    def missing_required_fields(self) -> tuple[str, ...]:
        missing: list[str] = []
        for api_name in self.required_fields():
            value = self.get_field(api_name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(api_name)
        return tuple(missing)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"


@dataclass(eq=False, kw_only=True)
class Account(Record):
    SOBJECT_TYPE: ClassVar[SObjectType] = SObjectType.ACCOUNT

    name: str | None = api_field("Name", required=True)
    industry: str | None = api_field("Industry")
    description: str | None = api_field("Description")
    account_type: str | None = api_field("Type")
    phone: str | None = api_field("Phone")
    website: str | None = api_field("Website")
    annual_revenue: float | None = api_field("AnnualRevenue")
    number_of_employees: int | None = api_field("NumberOfEmployees")

    def __repr__(self) -> str:
        return f"Account(id={self.id!r}, name={self.name!r})"


@dataclass(eq=False, kw_only=True)
class Contact(Record):
    SOBJECT_TYPE: ClassVar[SObjectType] = SObjectType.CONTACT

    first_name: str | None = api_field("FirstName")
    last_name: str | None = api_field("LastName", required=True)
    email: str | None = api_field("Email")
    phone: str | None = api_field("Phone")
    title: str | None = api_field("Title")
    account_id: RecordId | None = api_field("AccountId", references=SObjectType.ACCOUNT)

    def __repr__(self) -> str:
        return f"Contact(id={self.id!r}, last_name={self.last_name!r})"


@dataclass(eq=False, kw_only=True)
class Opportunity(Record):
    SOBJECT_TYPE: ClassVar[SObjectType] = SObjectType.OPPORTUNITY

    name: str | None = api_field("Name", required=True)
    stage_name: str | None = api_field("StageName", required=True)
    close_date: date | None = api_field("CloseDate", required=True)
    amount: float | None = api_field("Amount")
    description: str | None = api_field("Description")
    account_id: RecordId | None = api_field("AccountId", references=SObjectType.ACCOUNT)

    def __repr__(self) -> str:
        return f"Opportunity(id={self.id!r}, name={self.name!r})"


@dataclass(eq=False, kw_only=True)
class Lead(Record):
    SOBJECT_TYPE: ClassVar[SObjectType] = SObjectType.LEAD

    first_name: str | None = api_field("FirstName")
    last_name: str | None = api_field("LastName", required=True)
    company: str | None = api_field("Company", required=True)
    email: str | None = api_field("Email")
    status: str | None = api_field("Status")

    def __repr__(self) -> str:
        return f"Lead(id={self.id!r}, last_name={self.last_name!r})"


@dataclass(eq=False, kw_only=True)
class Case(Record):
    SOBJECT_TYPE: ClassVar[SObjectType] = SObjectType.CASE

    subject: str | None = api_field("Subject")
    status: str | None = api_field("Status")
    origin: str | None = api_field("Origin")
    priority: str | None = api_field("Priority")
    description: str | None = api_field("Description")
    account_id: RecordId | None = api_field("AccountId", references=SObjectType.ACCOUNT)
    contact_id: RecordId | None = api_field("ContactId", references=SObjectType.CONTACT)


RECORD_CLASSES: dict[SObjectType, type[Record]] = {
    SObjectType.ACCOUNT: Account,
    SObjectType.CONTACT: Contact,
    SObjectType.OPPORTUNITY: Opportunity,
    SObjectType.LEAD: Lead,
    SObjectType.CASE: Case,
}


def record_class(sobject_type: SObjectType) -> type[Record]:
    return RECORD_CLASSES[sobject_type]
