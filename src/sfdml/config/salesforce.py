"""Salesforce connection configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import float_env_var, optional_env_var, require_env_vars
from .errors import ConfigurationError

SALESFORCE_LOGIN_URL = "https://login.salesforce.com"
SALESFORCE_API_VERSION = "61.0"
SALESFORCE_TIMEOUT_SECONDS = 30.0

_PASSWORD_FLOW_VARS = (
    "SALESFORCE_CLIENT_ID",
    "SALESFORCE_CLIENT_SECRET",
    "SALESFORCE_USERNAME",
    "SALESFORCE_PASSWORD",
)


@dataclass(frozen=True, slots=True)
class PasswordCredentials:
    """OAuth2 username-password flow credentials."""

    client_id: str
    client_secret: str
    username: str
    password: str
    security_token: str = ""


@dataclass(frozen=True, slots=True)
class SalesforceConfig:
    """Holds Salesforce REST API configuration values.

    Either ``access_token`` and ``instance_url`` are set (an already issued
    session) or ``credentials`` is, in which case a token is requested from
    ``login_url`` when the client opens.
    """

    login_url: str = SALESFORCE_LOGIN_URL
    api_version: str = SALESFORCE_API_VERSION
    timeout_seconds: float = SALESFORCE_TIMEOUT_SECONDS
    credentials: PasswordCredentials | None = None
    access_token: str | None = None
    instance_url: str | None = None

    def __post_init__(self) -> None:
        has_session = self.access_token is not None and self.instance_url is not None
        if not has_session and self.credentials is None:
            raise ConfigurationError(
                "Salesforce configuration needs either an access token with an instance URL "
                "or username-password credentials"
            )

    @property
    def api_path(self) -> str:
        return f"/services/data/v{self.api_version}"


def get_salesforce_config() -> SalesforceConfig:
    """Build a ``SalesforceConfig`` from ``SALESFORCE_*`` environment variables."""

    login_url = optional_env_var("SALESFORCE_LOGIN_URL", SALESFORCE_LOGIN_URL)
    api_version = optional_env_var("SALESFORCE_API_VERSION", SALESFORCE_API_VERSION)
    timeout = float_env_var("SALESFORCE_TIMEOUT_SECONDS", SALESFORCE_TIMEOUT_SECONDS)
    access_token = optional_env_var("SALESFORCE_ACCESS_TOKEN")
    instance_url = optional_env_var("SALESFORCE_INSTANCE_URL")

    if access_token is not None and instance_url is not None:
        return SalesforceConfig(
            login_url=login_url or SALESFORCE_LOGIN_URL,
            api_version=api_version or SALESFORCE_API_VERSION,
            timeout_seconds=timeout,
            access_token=access_token,
            instance_url=instance_url.rstrip("/"),
        )

    values = require_env_vars(_PASSWORD_FLOW_VARS)
    return SalesforceConfig(
        login_url=login_url or SALESFORCE_LOGIN_URL,
        api_version=api_version or SALESFORCE_API_VERSION,
        timeout_seconds=timeout,
        credentials=PasswordCredentials(
            client_id=values["SALESFORCE_CLIENT_ID"],
            client_secret=values["SALESFORCE_CLIENT_SECRET"],
            username=values["SALESFORCE_USERNAME"],
            password=values["SALESFORCE_PASSWORD"],
            security_token=optional_env_var("SALESFORCE_SECURITY_TOKEN", "") or "",
        ),
    )
