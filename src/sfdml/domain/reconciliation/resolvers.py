"""Parent resolution used before reconciling dependent records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from sfdml.domain.model import Account

from .request import ReconciliationRequest

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from .engine import ReconciliationResult, ReconcilingUpsert

NEW_ACCOUNT_DESCRIPTION = "New Account"
UPDATED_ACCOUNT_DESCRIPTION = "Updated Account"


@runtime_checkable
class AccountResolver(Protocol):
    """Return one committed-or-pending Account per requested name.

    Accounts that the resolver could not commit come back without an id;
    callers must not link children to them.
    """

    def __call__(self, names: Sequence[str]) -> Mapping[str, Account]: ...


def describe_account_origin(account: Account, _name: str) -> None:
    """Mark whether an Account was created or reused by this run."""

    account.description = (
        UPDATED_ACCOUNT_DESCRIPTION if account.is_persisted else NEW_ACCOUNT_DESCRIPTION
    )


def accounts_by_name_request(names: Sequence[str]) -> ReconciliationRequest[Account]:
    return ReconciliationRequest(
        record_type=Account,
        key_field="Name",
        keys=tuple(names),
        apply_fields=describe_account_origin,
    )


@dataclass(slots=True)
class AccountsByName:
    """Reconcile Accounts by ``Name`` and commit them as one batch."""

    upsert: ReconcilingUpsert

    def reconcile(self, names: Sequence[str]) -> ReconciliationResult[Account]:
        return self.upsert.reconcile(accounts_by_name_request(names))

    def __call__(self, names: Sequence[str]) -> Mapping[str, Account]:
        return self.reconcile(names).by_key
