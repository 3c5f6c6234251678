from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

import pytest

from sfdml.domain.authorization import DeniedAction
from sfdml.domain.errors import RecordNotFoundError
from sfdml.domain.exercises import (
    DEFAULT_LEAD_COMPANY,
    DEFAULT_OPPORTUNITY_AMOUNT,
    add_months,
)
from sfdml.domain.model import (
    Account,
    Case,
    Contact,
    DmlOperation,
    Lead,
    Opportunity,
    OpportunityStage,
    SObjectType,
    make_record_id,
)
from sfdml.domain.reconciliation import NEW_ACCOUNT_DESCRIPTION, UPDATED_ACCOUNT_DESCRIPTION
from tests.helpers.records import make_exercises

if TYPE_CHECKING:
    from sfdml.adapters.memory import InMemoryRecordStore
    from tests.helpers.records import RecordingStore


@pytest.mark.parametrize(
    ("start", "months", "expected"),
    [
        (date(2024, 1, 15), 3, date(2024, 4, 15)),
        (date(2024, 1, 31), 1, date(2024, 2, 29)),
        (date(2023, 11, 30), 3, date(2024, 2, 29)),
        (date(2024, 10, 31), 3, date(2025, 1, 31)),
    ],
)
def test_add_months_clamps_to_month_end(start: date, months: int, expected: date) -> None:
    assert add_months(start, months) == expected


def test_insert_new_account_and_contact(memory_store: InMemoryRecordStore) -> None:
    exercises = make_exercises(memory_store)

    account_id = exercises.create_account("Acme", "Energy")
    assert account_id is not None
    contact_id = exercises.insert_new_contact(account_id, "Jo", "Smith")

    contact = memory_store.query(Contact)[0]
    assert contact.id == contact_id
    assert contact.account_id == account_id
    assert memory_store.query(Account)[0].industry == "Energy"


def test_insert_new_contact_requires_existing_account(memory_store: InMemoryRecordStore) -> None:
    exercises = make_exercises(memory_store)

    with pytest.raises(RecordNotFoundError):
        exercises.insert_new_contact(make_record_id(SObjectType.ACCOUNT, 7), "Jo", "Smith")

    assert memory_store.count(SObjectType.CONTACT) == 0


def test_update_exercises_write_single_fields(memory_store: InMemoryRecordStore) -> None:
    exercises = make_exercises(memory_store)
    account_id = exercises.insert_new_account("Acme")
    assert account_id is not None
    opportunity = Opportunity(
        name="Deal", stage_name="Prospecting", close_date=date(2024, 3, 1), account_id=account_id
    )
    memory_store.insert([opportunity])
    assert opportunity.id is not None

    assert exercises.update_opportunity_stage(opportunity.id, OpportunityStage.CLOSED_WON)
    assert exercises.update_account_fields(account_id, "Acme Corp", "Retail")

    assert memory_store.query(Opportunity)[0].stage_name == "Closed Won"
    account = memory_store.query(Account)[0]
    assert (account.name, account.industry) == ("Acme Corp", "Retail")


def test_upsert_opportunity_list_qualifies_every_record(memory_store: InMemoryRecordStore) -> None:
    exercises = make_exercises(memory_store)
    existing = Opportunity(name="Existing", stage_name="Prospecting", close_date=date(2024, 2, 1))
    memory_store.insert([existing])

    assert exercises.upsert_opportunity_list([existing, Opportunity(name="Fresh")])

    stored = memory_store.query(Opportunity)
    assert len(stored) == 2
    assert {opportunity.stage_name for opportunity in stored} == {"Qualification"}
    assert {opportunity.close_date for opportunity in stored} == {date(2024, 4, 30)}
    assert {opportunity.amount for opportunity in stored} == {DEFAULT_OPPORTUNITY_AMOUNT}


def test_upsert_opportunities_resolves_account_first(recording_store: RecordingStore) -> None:
    exercises = make_exercises(recording_store)

    result = exercises.upsert_opportunities("Acme", ["Renewal", "Expansion", "Renewal"])

    assert [(call.method, call.sobject_type) for call in recording_store.calls] == [
        ("query", SObjectType.ACCOUNT),
        ("upsert", SObjectType.ACCOUNT),
        ("query", SObjectType.OPPORTUNITY),
        ("upsert", SObjectType.OPPORTUNITY),
    ]
    account = recording_store.inner.query(Account)[0]
    assert result.committed
    assert len(result.records) == 2
    assert {opportunity.account_id for opportunity in result.records} == {account.id}
    assert {opportunity.stage_name for opportunity in result.records} == {"Prospecting"}


def test_upsert_opportunities_keeps_existing_stage(memory_store: InMemoryRecordStore) -> None:
    exercises = make_exercises(memory_store)
    first = exercises.upsert_opportunities("Acme", ["Renewal"])
    renewal_id = first.record_for("Renewal").id
    assert renewal_id is not None
    assert exercises.update_opportunity_stage(renewal_id, "Negotiation/Review")

    second = exercises.upsert_opportunities("Acme", ["Renewal", "Expansion"])

    assert (second.created, second.reused) == (1, 1)
    stages = {opp.name: opp.stage_name for opp in memory_store.query(Opportunity)}
    assert stages == {"Renewal": "Negotiation/Review", "Expansion": "Prospecting"}


def test_upsert_opportunities_skips_when_account_denied(recording_store: RecordingStore) -> None:
    recording_store.inner.permissions = recording_store.inner.permissions.deny(
        SObjectType.ACCOUNT, DmlOperation.CREATE
    )
    exercises = make_exercises(recording_store)

    result = exercises.upsert_opportunities("Acme", ["Renewal"])

    assert not result.committed
    assert recording_store.writes() == []
    assert recording_store.inner.count(SObjectType.OPPORTUNITY) == 0


def test_upsert_opportunities_rejects_blank_names_before_touching_accounts(
    recording_store: RecordingStore,
) -> None:
    with pytest.raises(ValueError, match="non-blank"):
        make_exercises(recording_store).upsert_opportunities("Acme", ["Renewal", "  "])

    assert recording_store.calls == []
    assert recording_store.inner.count(SObjectType.ACCOUNT) == 0


def test_upsert_opportunities_with_no_names(recording_store: RecordingStore) -> None:
    result = make_exercises(recording_store).upsert_opportunities("Acme", [])

    assert result.records == []
    assert recording_store.calls == []


def test_upsert_account_marks_new_then_updated(memory_store: InMemoryRecordStore) -> None:
    exercises = make_exercises(memory_store)

    created = exercises.upsert_account("Acme")
    reused = exercises.upsert_account("acme")

    assert created.description == NEW_ACCOUNT_DESCRIPTION
    assert reused.id == created.id
    assert reused.description == UPDATED_ACCOUNT_DESCRIPTION
    assert memory_store.count(SObjectType.ACCOUNT) == 1


def test_upsert_accounts_with_contacts_links_by_last_name(
    recording_store: RecordingStore,
) -> None:
    existing = Account(name="Smith")
    recording_store.inner.insert([existing])
    contacts = [
        Contact(first_name="Jo", last_name="Smith"),
        Contact(first_name="Al", last_name="Jones"),
        Contact(first_name="Sam", last_name="Smith"),
    ]

    assert make_exercises(recording_store).upsert_accounts_with_contacts(contacts)

    accounts = {account.name: account for account in recording_store.inner.query(Account)}
    assert set(accounts) == {"Smith", "Jones"}
    assert accounts["Smith"].id == existing.id
    assert [contact.account_id for contact in contacts] == [
        existing.id,
        accounts["Jones"].id,
        existing.id,
    ]
    assert recording_store.methods() == ["query", "upsert", "upsert"]


def test_upsert_accounts_with_contacts_requires_last_names(
    memory_store: InMemoryRecordStore,
) -> None:
    with pytest.raises(ValueError, match="position 1"):
        make_exercises(memory_store).upsert_accounts_with_contacts(
            [Contact(last_name="Smith"), Contact(first_name="Anon")]
        )

    assert memory_store.count(SObjectType.ACCOUNT) == 0


def test_upsert_accounts_with_contacts_skips_contacts_without_accounts(
    memory_store: InMemoryRecordStore,
) -> None:
    memory_store.permissions = memory_store.permissions.deny(
        SObjectType.ACCOUNT, DmlOperation.CREATE
    )
    contacts = [Contact(last_name="Smith")]

    assert not make_exercises(memory_store).upsert_accounts_with_contacts(contacts)

    assert contacts[0].account_id is None
    assert memory_store.count(SObjectType.CONTACT) == 0


def test_insert_and_delete_leads(recording_store: RecordingStore) -> None:
    assert make_exercises(recording_store).insert_and_delete_leads(["Smith", "Jones"])

    insert_call, delete_call = recording_store.calls
    assert (insert_call.method, insert_call.count) == ("insert", 2)
    assert (delete_call.method, delete_call.count) == ("delete", 2)
    assert recording_store.inner.count(SObjectType.LEAD) == 0


def test_insert_and_delete_leads_uses_default_company(memory_store: InMemoryRecordStore) -> None:
    memory_store.permissions = memory_store.permissions.deny(SObjectType.LEAD, DmlOperation.DELETE)

    make_exercises(memory_store).insert_and_delete_leads(["Smith"])

    (lead,) = memory_store.query(Lead)
    assert lead.company == DEFAULT_LEAD_COMPANY


def test_create_and_delete_cases(memory_store: InMemoryRecordStore) -> None:
    exercises = make_exercises(memory_store, on_denied=DeniedAction.RAISE)
    account_id = exercises.insert_new_account("Acme")
    assert account_id is not None

    assert exercises.create_and_delete_cases(account_id, 3)

    assert memory_store.count(SObjectType.CASE) == 0


def test_create_and_delete_cases_with_zero_count(recording_store: RecordingStore) -> None:
    assert not make_exercises(recording_store).create_and_delete_cases(
        make_record_id(SObjectType.ACCOUNT, 1), 0
    )
    assert recording_store.calls == []


def test_create_and_delete_cases_rejects_negative_count(memory_store: InMemoryRecordStore) -> None:
    with pytest.raises(ValueError, match="non-negative"):
        make_exercises(memory_store).create_and_delete_cases(
            make_record_id(SObjectType.ACCOUNT, 1), -1
        )


def test_cases_reference_their_account(memory_store: InMemoryRecordStore) -> None:
    memory_store.permissions = memory_store.permissions.deny(SObjectType.CASE, DmlOperation.DELETE)
    exercises = make_exercises(memory_store)
    account_id = exercises.insert_new_account("Acme")
    assert account_id is not None

    exercises.create_and_delete_cases(account_id, 2)

    cases = memory_store.query(Case)
    assert [case.subject for case in cases] == ["Case 1", "Case 2"]
    assert {case.account_id for case in cases} == {account_id}
    assert {case.status for case in cases} == {"New"}
