from __future__ import annotations

import pytest

from sfdml.domain.filters import Equals
from sfdml.domain.model import Account, Contact, Opportunity
from sfdml.domain.reconciliation import ReconciliationRequest, Scope


def test_scope_renders_as_equality_filter() -> None:
    scope = Scope.under("AccountId", "001000000000001AAA")

    assert scope.is_scoped
    assert scope.as_filter().conditions == (Equals("AccountId", "001000000000001AAA"),)


def test_scope_applies_its_fields_to_new_records() -> None:
    contact = Contact(last_name="Smith")

    Scope.under("AccountId", "001000000000001AAA").apply_to(contact)

    assert contact.account_id == "001000000000001AAA"


def test_unscoped_filter_is_empty() -> None:
    scope = Scope.unscoped()

    assert not scope.is_scoped
    assert scope.as_filter().conditions == ()


@pytest.mark.parametrize("parent_id", [None, "", "   "])
def test_scope_rejects_missing_parent_ids(parent_id: str | None) -> None:
    with pytest.raises(ValueError):
        Scope.under("AccountId", parent_id)


def test_scope_fields_are_read_only() -> None:
    scope = Scope({"AccountId": "001000000000001AAA"})

    with pytest.raises(TypeError):
        scope.fields["AccountId"] = "001000000000002AAA"  # type: ignore[index]


def test_request_rejects_unknown_key_field() -> None:
    with pytest.raises(ValueError, match="no natural key field"):
        ReconciliationRequest(record_type=Account, key_field="LastName", keys=("Acme",))


def test_request_rejects_id_as_natural_key() -> None:
    with pytest.raises(ValueError, match="store-assigned Id"):
        ReconciliationRequest(record_type=Account, key_field="Id", keys=("Acme",))


def test_request_rejects_blank_keys() -> None:
    with pytest.raises(ValueError, match="non-blank"):
        ReconciliationRequest(record_type=Account, key_field="Name", keys=("Acme", " "))


def test_request_rejects_scope_fields_the_type_lacks() -> None:
    with pytest.raises(ValueError, match="no scope field"):
        ReconciliationRequest(
            record_type=Opportunity,
            key_field="Name",
            keys=("Deal",),
            scope=Scope.under("ContactId", "003000000000001AAA"),
        )
