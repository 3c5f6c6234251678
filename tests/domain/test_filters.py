from __future__ import annotations

from sfdml.domain.filters import Equals, In, RecordFilter
from sfdml.domain.model import Account, Contact


def test_empty_filter_matches_everything() -> None:
    assert RecordFilter().matches(Account())


def test_equals_is_case_insensitive_for_text() -> None:
    where = RecordFilter.equals("Name", "ACME")

    assert where.matches(Account(name="acme"))
    assert not where.matches(Account(name="Acme Corp"))


def test_within_matches_any_value() -> None:
    where = RecordFilter.within("Name", ["Acme", "Globex"])

    assert where.matches(Account(name="globex"))
    assert not where.matches(Account(name="Initech"))


def test_unset_fields_never_match() -> None:
    assert not RecordFilter.equals("AccountId", "001000000000001AAA").matches(Contact())
    assert not RecordFilter.within("Industry", ["Energy"]).matches(Account(name="Acme"))


def test_conditions_are_conjunctive() -> None:
    where = RecordFilter.equals("AccountId", "001000000000001AAA").and_(In("LastName", ("Smith",)))

    assert where.fields == ("AccountId", "LastName")
    assert where.matches(Contact(last_name="Smith", account_id="001000000000001AAA"))
    assert not where.matches(Contact(last_name="Smith", account_id="001000000000002AAA"))


def test_merge_keeps_condition_order() -> None:
    merged = RecordFilter.equals("Name", "Acme").merge(RecordFilter.equals("Industry", "Energy"))

    assert merged.conditions == (Equals("Name", "Acme"), Equals("Industry", "Energy"))
