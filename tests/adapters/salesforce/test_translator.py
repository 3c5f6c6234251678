from __future__ import annotations

from datetime import date

from sfdml.adapters.salesforce import from_payload, to_payload
from sfdml.domain.model import Case, CaseStatus, Contact, Opportunity


def test_payload_omits_unset_fields() -> None:
    contact = Contact(id="003000000000001AAA", last_name="Smith")

    assert to_payload(contact, include_id=False) == {
        "attributes": {"type": "Contact"},
        "LastName": "Smith",
    }
    assert to_payload(contact, include_id=True)["Id"] == "003000000000001AAA"


def test_payload_serialises_dates_and_enums() -> None:
    opportunity = Opportunity(name="Deal", stage_name="Prospecting", close_date=date(2024, 4, 30))
    case = Case(subject="Broken", status=CaseStatus.NEW)

    assert to_payload(opportunity, include_id=False)["CloseDate"] == "2024-04-30"
    status = to_payload(case, include_id=False)["Status"]
    assert status == "New"
    assert type(status) is str


def test_rows_ignore_attributes_and_unknown_columns() -> None:
    row = {
        "attributes": {"type": "Contact"},
        "Id": "003000000000001AAA",
        "LastName": "Smith",
        "Email": None,
        "MailingCity": "Leeds",
    }

    contact = from_payload(Contact, row)

    assert (contact.id, contact.last_name, contact.email) == ("003000000000001AAA", "Smith", None)


def test_rows_parse_close_dates() -> None:
    opportunity = from_payload(Opportunity, {"Name": "Deal", "CloseDate": "2024-02-29"})

    assert opportunity.close_date == date(2024, 2, 29)
    assert opportunity.stage_name is None
