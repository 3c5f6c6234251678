"""DML exercises over Accounts, Contacts, Opportunities, Leads and Cases.

Each method is one self-contained pattern: create, update by id, upsert,
reconcile by natural key, or insert-then-delete.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date
from logging import getLogger
from typing import TYPE_CHECKING

from sfdml.domain.model import (
    Account,
    Case,
    CaseOrigin,
    CaseStatus,
    Contact,
    Lead,
    LeadStatus,
    Opportunity,
    OpportunityStage,
)
from sfdml.domain.operations import RecordOperations
from sfdml.domain.reconciliation import (
    AccountResolver,
    AccountsByName,
    ReconciliationRequest,
    ReconciliationResult,
    ReconcilingUpsert,
    Scope,
    check_keys,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from sfdml.domain.authorization import AuthorizationPolicy
    from sfdml.domain.model import RecordId
    from sfdml.domain.ports import RecordStore

log = getLogger(__name__)

DEFAULT_OPPORTUNITY_AMOUNT = 50000.0
DEFAULT_CLOSE_MONTHS = 3
DEFAULT_LEAD_COMPANY = "Unknown Company"


def add_months(start: date, months: int) -> date:
    """Shift ``start`` by whole months, clamping to the last day of short months."""

    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


@dataclass(slots=True)
class DmlExercises:
    store: RecordStore
    authorization: AuthorizationPolicy
    accounts: AccountResolver | None = None
    today: Callable[[], date] = date.today
    records: RecordOperations = field(init=False)
    reconciler: ReconcilingUpsert = field(init=False)

    def __post_init__(self) -> None:
        self.records = RecordOperations(self.store, self.authorization)
        self.reconciler = ReconcilingUpsert(self.store, self.authorization)
        if self.accounts is None:
            self.accounts = AccountsByName(self.reconciler)

    def _close_date(self) -> date:
        return add_months(self.today(), DEFAULT_CLOSE_MONTHS)

    def _resolve_accounts(self, names: Sequence[str]) -> dict[str, Account]:
        resolver = self.accounts
        if resolver is None:
            raise RuntimeError("No account resolver configured")
        return dict(resolver(names))

    # -- create ---------------------------------------------------------

    def insert_new_account(self, name: str) -> RecordId | None:
        """Create an Account with only a Name."""

        return self.records.insert_record(Account(name=name))

    def create_account(self, name: str, industry: str) -> RecordId | None:
        return self.records.insert_record(Account(name=name, industry=industry))

    def insert_new_contact(
        self,
        account_id: RecordId,
        first_name: str,
        last_name: str,
    ) -> RecordId | None:
        """Create a Contact under an existing Account."""

        account = self.records.get_record(Account, account_id)
        contact = Contact(first_name=first_name, last_name=last_name, account_id=account.id)
        return self.records.insert_record(contact)

    # -- update by id ---------------------------------------------------

    def update_contact_last_name(self, contact_id: RecordId, last_name: str) -> bool:
        return self.records.update_field(Contact, contact_id, "LastName", last_name)

    def update_opportunity_stage(self, opportunity_id: RecordId, stage: str) -> bool:
        return self.records.update_field(Opportunity, opportunity_id, "StageName", stage)

    def update_account_fields(self, account_id: RecordId, name: str, industry: str) -> bool:
        return self.records.update_fields(
            Account,
            account_id,
            {"Name": name, "Industry": industry},
        )

    # -- upsert ---------------------------------------------------------

    def upsert_opportunity_list(self, opportunities: Sequence[Opportunity]) -> bool:
        """Qualify each Opportunity and upsert the batch by id."""

        close_date = self._close_date()
        for opportunity in opportunities:
            opportunity.stage_name = OpportunityStage.QUALIFICATION
            opportunity.close_date = close_date
            opportunity.amount = DEFAULT_OPPORTUNITY_AMOUNT
        return self.records.upsert_all(opportunities)

    def upsert_opportunities(
        self,
        account_name: str,
        opportunity_names: Sequence[str],
    ) -> ReconciliationResult[Opportunity]:
        """Reconcile Opportunities by Name under the Account called ``account_name``.

        Names are validated before the Account is touched. The Account is
        resolved (and created if needed) before any Opportunity is built, so
        every Opportunity references a committed Account.
        """

        if not opportunity_names:
            return ReconciliationResult()
        check_keys(opportunity_names)

        account = self._resolve_accounts([account_name])[account_name]
        if account.id is None:
            log.info("Account %r was not committed; skipping its Opportunities", account_name)
            return ReconciliationResult()

        close_date = self._close_date()

        def open_defaults(opportunity: Opportunity, _name: str) -> None:
            if opportunity.stage_name is None:
                opportunity.stage_name = OpportunityStage.PROSPECTING
            if opportunity.close_date is None:
                opportunity.close_date = close_date

        return self.reconciler.reconcile(
            ReconciliationRequest(
                record_type=Opportunity,
                key_field="Name",
                keys=tuple(opportunity_names),
                scope=Scope.under("AccountId", account.id),
                apply_fields=open_defaults,
            )
        )

    def upsert_account(self, account_name: str) -> Account:
        """Create the Account called ``account_name`` or mark the existing one updated."""

        return self._resolve_accounts([account_name])[account_name]

    def upsert_accounts_with_contacts(self, contacts: Sequence[Contact]) -> bool:
        """Link each Contact to an Account named after its last name, then upsert them.

        Accounts are reconciled and committed as one batch first; Contacts are
        committed only when every Account they need has an id.
        """

        if not contacts:
            return False
        names: list[str] = []
        for position, contact in enumerate(contacts):
            if contact.last_name is None or not contact.last_name.strip():
                raise ValueError(f"Contact at position {position} has no LastName")
            names.append(contact.last_name)

        accounts = self._resolve_accounts(names)
        unresolved = sorted({name for name, account in accounts.items() if account.id is None})
        if unresolved:
            log.info("Accounts not committed (%s); skipping Contacts", ", ".join(unresolved))
            return False

        for contact in contacts:
            contact.account_id = accounts[contact.last_name].id  # type: ignore[index]
        return self.records.upsert_all(contacts)

    # -- transient data -------------------------------------------------

    def insert_and_delete_leads(self, lead_names: Sequence[str]) -> bool:
        leads = [
            Lead(last_name=name, company=DEFAULT_LEAD_COMPANY, status=LeadStatus.OPEN)
            for name in lead_names
        ]
        return self.records.insert_then_delete_all(leads)

    def create_and_delete_cases(self, account_id: RecordId, count: int) -> bool:
        """Open ``count`` Cases under an Account, then delete them."""

        if count < 0:
            raise ValueError("Case count must be non-negative")
        cases = [
            Case(
                account_id=account_id,
                subject=f"Case {number}",
                status=CaseStatus.NEW,
                origin=CaseOrigin.PHONE,
            )
            for number in range(1, count + 1)
        ]
        return self.records.insert_then_delete_all(cases)
