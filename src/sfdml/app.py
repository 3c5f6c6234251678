"""Application wiring: build exercises over a configured record store."""

from __future__ import annotations

from contextlib import contextmanager
from logging import getLogger
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from sfdml.adapters.memory import InMemoryRecordStore
from sfdml.adapters.salesforce import SalesforceClient, SalesforceRecordStore
from sfdml.adapters.sqlalchemy import SqlAlchemyRecordStore, is_started, startup
from sfdml.config import get_denied_action, get_salesforce_config
from sfdml.domain.authorization import AuthorizationPolicy
from sfdml.domain.exercises import DmlExercises

if TYPE_CHECKING:
    from collections.abc import Iterator

    import httpx

    from sfdml.config import SalesforceConfig
    from sfdml.domain.authorization import DeniedAction, StaticPermissions
    from sfdml.domain.ports import RecordStore

log = getLogger(__name__)


def build_exercises(
    store: RecordStore,
    *,
    on_denied: DeniedAction | None = None,
) -> DmlExercises:
    """Wrap ``store`` with the configured authorization policy."""

    policy = AuthorizationPolicy(store, on_denied or get_denied_action())
    log.debug("Denied mutations will %s", policy.on_denied)
    return DmlExercises(store, policy)


def in_memory_exercises(
    *,
    permissions: StaticPermissions | None = None,
    on_denied: DeniedAction | None = None,
) -> DmlExercises:
    store = (
        InMemoryRecordStore(permissions=permissions)
        if permissions is not None
        else InMemoryRecordStore()
    )
    return build_exercises(store, on_denied=on_denied)


def local_exercises(
    *,
    database_uri: str | None = None,
    on_denied: DeniedAction | None = None,
) -> DmlExercises:
    """Exercises over the local SQL store, starting the engine on first use."""

    load_dotenv()
    if not is_started():
        startup(database_uri=database_uri)
    return build_exercises(SqlAlchemyRecordStore(), on_denied=on_denied)


@contextmanager
def salesforce_exercises(
    *,
    config: SalesforceConfig | None = None,
    transport: httpx.BaseTransport | None = None,
    on_denied: DeniedAction | None = None,
) -> Iterator[DmlExercises]:
    """Open a Salesforce session for the duration of the ``with`` block."""

    if config is None:
        load_dotenv()
        config = get_salesforce_config()
    with SalesforceClient(config, transport=transport) as client:
        log.info("Connected to Salesforce API v%s", config.api_version)
        yield build_exercises(SalesforceRecordStore(client), on_denied=on_denied)
