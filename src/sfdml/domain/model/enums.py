"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class SObjectType(StrEnum):
    """Supported CRM object types, valued by their platform API name."""

    ACCOUNT = "Account"
    CONTACT = "Contact"
    OPPORTUNITY = "Opportunity"
    LEAD = "Lead"
    CASE = "Case"

    @property
    def key_prefix(self) -> str:
        """Three-character prefix the platform puts in front of record ids."""
        return _KEY_PREFIXES[self]

    @classmethod
    def from_key_prefix(cls, prefix: str) -> SObjectType:
        for sobject_type, known in _KEY_PREFIXES.items():
            if known == prefix:
                return sobject_type
        raise ValueError(f"Unknown key prefix: {prefix!r}")


_KEY_PREFIXES: dict[SObjectType, str] = {
    SObjectType.ACCOUNT: "001",
    SObjectType.CONTACT: "003",
    SObjectType.OPPORTUNITY: "006",
    SObjectType.LEAD: "00Q",
    SObjectType.CASE: "500",
}


class DmlOperation(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class OpportunityStage(StrEnum):
    PROSPECTING = "Prospecting"
    QUALIFICATION = "Qualification"
    NEEDS_ANALYSIS = "Needs Analysis"
    PROPOSAL = "Proposal/Price Quote"
    NEGOTIATION = "Negotiation/Review"
    CLOSED_WON = "Closed Won"
    CLOSED_LOST = "Closed Lost"


class CaseStatus(StrEnum):
    NEW = "New"
    WORKING = "Working"
    ESCALATED = "Escalated"
    CLOSED = "Closed"


class CaseOrigin(StrEnum):
    PHONE = "Phone"
    EMAIL = "Email"
    WEB = "Web"


class LeadStatus(StrEnum):
    OPEN = "Open - Not Contacted"
    WORKING = "Working - Contacted"
    CLOSED_CONVERTED = "Closed - Converted"
    CLOSED_NOT_CONVERTED = "Closed - Not Converted"
