"""Reconciling upsert for records identified by natural key.

Flow for one request:
1) fetch existing records in scope with a single query
2) index them by natural key (per call, never retained)
3) merge: reuse matches, create the rest, apply requested fields
4) authorize and commit the merged batch in one upsert

Dependent records are reconciled only after their parents are committed; see
``resolvers`` for the Account-first composition.
"""

from __future__ import annotations

from .engine import (
    MergeOutcome,
    ReconciliationResult,
    ReconcilingUpsert,
    fetch_existing,
    merge_records,
)
from .index import NaturalKeyIndex, normalize_key
from .request import FieldSetter, ReconciliationRequest, Scope, check_keys
from .resolvers import (
    NEW_ACCOUNT_DESCRIPTION,
    UPDATED_ACCOUNT_DESCRIPTION,
    AccountResolver,
    AccountsByName,
    accounts_by_name_request,
    describe_account_origin,
)

__all__ = [
    "NEW_ACCOUNT_DESCRIPTION",
    "UPDATED_ACCOUNT_DESCRIPTION",
    "AccountResolver",
    "AccountsByName",
    "FieldSetter",
    "MergeOutcome",
    "NaturalKeyIndex",
    "ReconciliationRequest",
    "ReconciliationResult",
    "ReconcilingUpsert",
    "Scope",
    "accounts_by_name_request",
    "check_keys",
    "describe_account_origin",
    "fetch_existing",
    "merge_records",
    "normalize_key",
]
