"""CRM domain model."""

from __future__ import annotations

from .enums import (
    CaseOrigin,
    CaseStatus,
    DmlOperation,
    LeadStatus,
    OpportunityStage,
    SObjectType,
)
from .identifiers import (
    RecordId,
    is_record_id,
    make_record_id,
    random_record_id,
    sobject_type_of,
    to_18_char,
)
from .records import (
    RECORD_CLASSES,
    Account,
    Case,
    Contact,
    Lead,
    Opportunity,
    Record,
    UnknownFieldError,
    record_class,
)

__all__ = [
    "RECORD_CLASSES",
    "Account",
    "Case",
    "CaseOrigin",
    "CaseStatus",
    "Contact",
    "DmlOperation",
    "Lead",
    "LeadStatus",
    "Opportunity",
    "OpportunityStage",
    "Record",
    "RecordId",
    "SObjectType",
    "UnknownFieldError",
    "is_record_id",
    "make_record_id",
    "random_record_id",
    "record_class",
    "sobject_type_of",
    "to_18_char",
]
