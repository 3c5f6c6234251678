"""Public interface for the Salesforce adapter."""

from __future__ import annotations

from .client import COLLECTION_LIMIT, COMPOSITE_LIMIT, SalesforceAPIError, SalesforceClient
from .schema import DescribeResult, SaveResult, TokenResponse
from .soql import build_select, quote
from .store import SalesforceRecordStore
from .translator import from_payload, to_payload

__all__ = [
    "COLLECTION_LIMIT",
    "COMPOSITE_LIMIT",
    "DescribeResult",
    "SalesforceAPIError",
    "SalesforceClient",
    "SalesforceRecordStore",
    "SaveResult",
    "TokenResponse",
    "build_select",
    "from_payload",
    "quote",
    "to_payload",
]
