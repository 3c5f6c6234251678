from __future__ import annotations

from datetime import date

import pytest

from sfdml.domain.model import (
    Account,
    Case,
    Contact,
    Lead,
    Opportunity,
    SObjectType,
    UnknownFieldError,
    record_class,
)


def test_record_fields_are_addressed_by_api_name() -> None:
    contact = Contact(first_name="Ada", last_name="Lovelace")

    contact.set_field("Email", "ada@example.com")

    assert contact.get_field("LastName") == "Lovelace"
    assert contact.email == "ada@example.com"


def test_unknown_api_name_raises() -> None:
    account = Account(name="Acme")

    with pytest.raises(UnknownFieldError) as exc:
        account.set_field("LastName", "Nope")

    assert exc.value.sobject_type is SObjectType.ACCOUNT
    assert exc.value.api_name == "LastName"


def test_to_fields_skips_unset_values_by_default() -> None:
    opportunity = Opportunity(name="Deal", close_date=date(2024, 4, 30))

    assert opportunity.to_fields() == {"Name": "Deal", "CloseDate": date(2024, 4, 30)}
    assert opportunity.to_fields(include_none=True)["Amount"] is None


def test_to_fields_can_exclude_id() -> None:
    account = Account(id="001000000000001AAA", name="Acme")

    assert "Id" in account.to_fields()
    assert account.to_fields(include_id=False) == {"Name": "Acme"}


def test_from_fields_round_trips_api_names() -> None:
    lead = Lead.from_fields({"LastName": "Smith", "Company": "Globex"})

    assert lead.last_name == "Smith"
    assert lead.company == "Globex"
    assert lead.id is None
    assert not lead.is_persisted


def test_required_fields_per_type() -> None:
    assert Account.required_fields() == ("Name",)
    assert Contact.required_fields() == ("LastName",)
    assert Opportunity.required_fields() == ("Name", "StageName", "CloseDate")
    assert Lead.required_fields() == ("LastName", "Company")
    assert Case.required_fields() == ()


def test_missing_required_fields_treats_blank_text_as_missing() -> None:
    lead = Lead(last_name="  ")

    assert lead.missing_required_fields() == ("LastName", "Company")


def test_reference_fields_name_their_targets() -> None:
    assert Contact.reference_fields() == {"AccountId": SObjectType.ACCOUNT}
    assert Case.reference_fields() == {
        "AccountId": SObjectType.ACCOUNT,
        "ContactId": SObjectType.CONTACT,
    }


def test_records_compare_by_identity() -> None:
    first = Account(name="Acme")
    second = Account(name="Acme")

    assert first != second
    assert first == first  # noqa: PLR0124


def test_record_class_lookup() -> None:
    assert record_class(SObjectType.OPPORTUNITY) is Opportunity
    assert Opportunity(name="Deal").sobject_type is SObjectType.OPPORTUNITY
