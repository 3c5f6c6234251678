"""HTTP client for the Salesforce REST API."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Self

import httpx
from pydantic import TypeAdapter, ValidationError

from .schema import (
    ApiError,
    CompositeResponse,
    DescribeResult,
    OAuthErrorResponse,
    QueryResponse,
    SaveResult,
    TokenResponse,
)

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from types import TracebackType

    from sfdml.config.salesforce import SalesforceConfig
    from sfdml.domain.model import RecordId, SObjectType

log = getLogger(__name__)

COLLECTION_LIMIT = 200
COMPOSITE_LIMIT = 25

_API_ERRORS = TypeAdapter(list[ApiError])
_SAVE_RESULTS = TypeAdapter(list[SaveResult])


class SalesforceAPIError(RuntimeError):
    """Raised when Salesforce rejects a request as a whole."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        errors: Sequence[ApiError] = (),
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.errors = tuple(errors)


def _parse_errors(response: httpx.Response) -> list[ApiError]:
    try:
        return _API_ERRORS.validate_python(response.json())
    except (ValueError, ValidationError):
        return []


def _raise_for_status(response: httpx.Response) -> None:
    if response.is_success:
        return
    errors = _parse_errors(response)
    if errors:
        detail = "; ".join(f"{error.status_code}: {error.message}" for error in errors)
    else:
        detail = response.text or response.reason_phrase
    log.error(f"Salesforce API error {response.status_code} for {response.request.url.path}")
    raise SalesforceAPIError(
        f"Salesforce returned {response.status_code}: {detail}",
        status_code=response.status_code,
        errors=errors,
    )


class SalesforceClient:
    """Thin synchronous wrapper around the REST endpoints the record store needs.

    Use as a context manager; entering authenticates with the password flow
    unless the configuration already carries a session.
    """

    def __init__(
        self,
        config: SalesforceConfig,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config
        self._transport = transport
        self._client: httpx.Client | None = None

    def __enter__(self) -> Self:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._client is not None

    def open(self) -> None:
        if self._client is not None:
            return
        if self.config.access_token is not None and self.config.instance_url is not None:
            token = TokenResponse(
                access_token=self.config.access_token,
                instance_url=self.config.instance_url,
            )
        else:
            token = self.authenticate()
        self._client = httpx.Client(
            base_url=token.instance_url,
            headers={
                "Authorization": f"{token.token_type} {token.access_token}",
                "Accept": "application/json",
            },
            timeout=self.config.timeout_seconds,
            transport=self._transport,
        )

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
        self._client = None

    def authenticate(self) -> TokenResponse:
        """Request an access token with the OAuth2 username-password flow."""

        credentials = self.config.credentials
        if credentials is None:
            raise SalesforceAPIError("No credentials configured for the password flow")

        with httpx.Client(
            base_url=self.config.login_url,
            timeout=self.config.timeout_seconds,
            transport=self._transport,
        ) as client:
            response = client.post(
                "/services/oauth2/token",
                data={
                    "grant_type": "password",
                    "client_id": credentials.client_id,
                    "client_secret": credentials.client_secret,
                    "username": credentials.username,
                    "password": credentials.password + credentials.security_token,
                },
            )

        if not response.is_success:
            try:
                oauth_error = OAuthErrorResponse.model_validate(response.json())
                detail = f"{oauth_error.error}: {oauth_error.error_description}"
            except (ValueError, ValidationError):
                detail = response.text
            raise SalesforceAPIError(
                f"Salesforce authentication failed: {detail}",
                status_code=response.status_code,
            )

        token = TokenResponse.model_validate(response.json())
        log.info("Authenticated against %s", token.instance_url)
        return token

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        json: object = None,
    ) -> object:
        """Send a request relative to the instance and return the decoded body."""

        if self._client is None:
            raise SalesforceAPIError("Salesforce client is not open")
        response = self._client.request(method, path, params=params, json=json)
        _raise_for_status(response)
        if response.status_code == httpx.codes.NO_CONTENT or not response.content:
            return None
        return response.json()

    def _api(self, suffix: str) -> str:
        return f"{self.config.api_path}{suffix}"

    def query(self, soql: str) -> list[dict[str, object]]:
        """Run ``soql`` and follow ``nextRecordsUrl`` until the result is complete."""

        log.debug("SOQL: %s", soql)
        page = QueryResponse.model_validate(
            self.request("GET", self._api("/query"), params={"q": soql})
        )
        rows = list(page.records)
        while not page.done and page.next_records_url:
            page = QueryResponse.model_validate(self.request("GET", page.next_records_url))
            rows.extend(page.records)
        return rows

    def describe(self, sobject_type: SObjectType) -> DescribeResult:
        payload = self.request("GET", self._api(f"/sobjects/{sobject_type}/describe"))
        return DescribeResult.model_validate(payload)

    def create_records(self, payloads: Sequence[Mapping[str, object]]) -> list[SaveResult]:
        return self._collection("POST", payloads)

    def update_records(self, payloads: Sequence[Mapping[str, object]]) -> list[SaveResult]:
        return self._collection("PATCH", payloads)

    def delete_records(self, record_ids: Sequence[RecordId]) -> list[SaveResult]:
        self._check_size(record_ids, COLLECTION_LIMIT)
        payload = self.request(
            "DELETE",
            self._api("/composite/sobjects"),
            params={"ids": ",".join(record_ids), "allOrNone": "true"},
        )
        return _SAVE_RESULTS.validate_python(payload)

    def composite(
        self,
        subrequests: Sequence[Mapping[str, object]],
        *,
        all_or_none: bool = True,
    ) -> CompositeResponse:
        """Run up to 25 subrequests in one call, rolled back together if ``all_or_none``."""

        self._check_size(subrequests, COMPOSITE_LIMIT)
        payload = self.request(
            "POST",
            self._api("/composite"),
            json={"allOrNone": all_or_none, "compositeRequest": list(subrequests)},
        )
        return CompositeResponse.model_validate(payload)

    def sobject_url(self, sobject_type: SObjectType, record_id: RecordId | None = None) -> str:
        url = self._api(f"/sobjects/{sobject_type}")
        return f"{url}/{record_id}" if record_id is not None else url

    def _collection(
        self,
        method: str,
        payloads: Sequence[Mapping[str, object]],
    ) -> list[SaveResult]:
        self._check_size(payloads, COLLECTION_LIMIT)
        payload = self.request(
            method,
            self._api("/composite/sobjects"),
            json={"allOrNone": True, "records": list(payloads)},
        )
        return _SAVE_RESULTS.validate_python(payload)

    @staticmethod
    def _check_size(items: Sequence[object], limit: int) -> None:
        if len(items) > limit:
            raise ValueError(f"At most {limit} items per request, got {len(items)}")
