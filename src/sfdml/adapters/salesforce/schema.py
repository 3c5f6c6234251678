"""Pydantic models describing the Salesforce REST API payloads."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class SalesforceBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class TokenResponse(SalesforceBaseModel):
    access_token: str
    instance_url: str
    token_type: str = "Bearer"
    issued_at: str | None = None


class OAuthErrorResponse(SalesforceBaseModel):
    error: str
    error_description: str = ""


class ApiError(SalesforceBaseModel):
    """Error entry; save results say ``statusCode``, request errors say ``errorCode``."""

    status_code: str = Field(validation_alias=AliasChoices("statusCode", "errorCode"))
    message: str = ""
    fields: list[str] = Field(default_factory=list)


class SaveResult(SalesforceBaseModel):
    id: str | None = None
    success: bool
    errors: list[ApiError] = Field(default_factory=list)


class QueryResponse(SalesforceBaseModel):
    total_size: int = Field(alias="totalSize")
    done: bool
    next_records_url: str | None = Field(default=None, alias="nextRecordsUrl")
    records: list[dict[str, object]]


class CompositeSubresponse(SalesforceBaseModel):
    body: object = None
    http_status_code: int = Field(alias="httpStatusCode")
    reference_id: str = Field(alias="referenceId")

    @property
    def ok(self) -> bool:
        return 200 <= self.http_status_code < 300


class CompositeResponse(SalesforceBaseModel):
    composite_response: list[CompositeSubresponse] = Field(alias="compositeResponse")


class DescribeField(SalesforceBaseModel):
    name: str
    createable: bool = False
    updateable: bool = False


class DescribeResult(SalesforceBaseModel):
    name: str
    createable: bool = False
    updateable: bool = False
    deletable: bool = False
    queryable: bool = True
    fields: list[DescribeField] = Field(default_factory=list)

    def field(self, name: str) -> DescribeField | None:
        for candidate in self.fields:
            if candidate.name == name:
                return candidate
        return None
