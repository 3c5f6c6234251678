"""Authorization policy consulted before every mutation.

The store answers *whether* an operation is permitted; the policy decides what
a denial means for the caller:

- ``skip``: drop the mutation quietly (logged at DEBUG)
- ``warn``: drop the mutation and log a warning
- ``raise``: raise ``AuthorizationDenied``

Callers always receive an ``AuthorizationDecision`` and must not mutate when
``allowed`` is false.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from sfdml.domain.errors import AuthorizationDenied

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sfdml.domain.model import DmlOperation, SObjectType
    from sfdml.domain.ports import AccessChecker

log = getLogger(__name__)


class DeniedAction(StrEnum):
    SKIP = "skip"
    WARN = "warn"
    RAISE = "raise"


@dataclass(frozen=True, slots=True)
class AuthorizationDecision:
    sobject_type: SObjectType
    operation: DmlOperation
    allowed: bool
    field: str | None = None

    def describe(self) -> str:
        target = f"{self.sobject_type}.{self.field}" if self.field else str(self.sobject_type)
        verdict = "allowed" if self.allowed else "denied"
        return f"{self.operation} {target} {verdict}"


@dataclass(slots=True)
class AuthorizationPolicy:
    checker: AccessChecker
    on_denied: DeniedAction = DeniedAction.SKIP

    def check(
        self,
        sobject_type: SObjectType,
        operation: DmlOperation,
        fields: Iterable[str] = (),
    ) -> AuthorizationDecision:
        """Return the first denial among the object and ``fields``, else an allowance."""

        if not self.checker.is_permitted(sobject_type, operation):
            return AuthorizationDecision(sobject_type, operation, allowed=False)
        for api_name in fields:
            if api_name == "Id":
                continue
            if not self.checker.is_permitted(sobject_type, operation, api_name):
                return AuthorizationDecision(sobject_type, operation, allowed=False, field=api_name)
        return AuthorizationDecision(sobject_type, operation, allowed=True)

    def authorize(
        self,
        sobject_type: SObjectType,
        operation: DmlOperation,
        fields: Iterable[str] = (),
    ) -> AuthorizationDecision:
        """Check permission and apply the denial policy."""

        decision = self.check(sobject_type, operation, fields)
        if decision.allowed:
            return decision

        match self.on_denied:
            case DeniedAction.RAISE:
                raise AuthorizationDenied(sobject_type, operation, decision.field)
            case DeniedAction.WARN:
                log.warning("Skipping mutation: %s", decision.describe())
            case DeniedAction.SKIP:
                log.debug("Skipping mutation: %s", decision.describe())
        return decision


type PermissionKey = tuple[SObjectType, DmlOperation, str | None]


@dataclass(frozen=True, slots=True)
class StaticPermissions:
    """Allow-by-default permission table for local stores.

    Denying an object denies all of its fields for that operation.
    """

    denied: frozenset[PermissionKey] = field(default_factory=frozenset)

    def deny(
        self,
        sobject_type: SObjectType,
        operation: DmlOperation,
        field: str | None = None,
    ) -> StaticPermissions:
        return StaticPermissions(self.denied | {(sobject_type, operation, field)})

    def is_permitted(
        self,
        sobject_type: SObjectType,
        operation: DmlOperation,
        field: str | None = None,
    ) -> bool:
        if (sobject_type, operation, None) in self.denied:
            return False
        return field is None or (sobject_type, operation, field) not in self.denied
