from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from sfdml.adapters.salesforce import SalesforceClient, SalesforceRecordStore
from sfdml.config import SalesforceConfig
from tests.helpers.salesforce import INSTANCE_URL, FakeSalesforce

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def fake_salesforce() -> FakeSalesforce:
    return FakeSalesforce()


@pytest.fixture
def session_config() -> SalesforceConfig:
    return SalesforceConfig(access_token="session-token", instance_url=INSTANCE_URL)


@pytest.fixture
def salesforce_client(
    session_config: SalesforceConfig,
    fake_salesforce: FakeSalesforce,
) -> Iterator[SalesforceClient]:
    with SalesforceClient(session_config, transport=fake_salesforce.transport()) as client:
        yield client


@pytest.fixture
def salesforce_store(salesforce_client: SalesforceClient) -> SalesforceRecordStore:
    return SalesforceRecordStore(salesforce_client)
