"""Engine lifecycle for the SQLAlchemy record store."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy import create_engine

from sfdml.config.storage import DatabaseConfig, get_database_config

from .mappings import create_all_tables

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


class StartupError(RuntimeError):
    """Raised when the SQLAlchemy store is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    engine: Engine | None = None


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> Engine:
    """Initialise the engine and create the record tables."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy store already initialised. Pass force=True to reconfigure."
        )

    if engine is None:
        config = (
            get_database_config() if database_uri is None else DatabaseConfig(uri=database_uri)
        )
        engine = create_engine(config.uri, echo=config.echo, future=True)
    create_all_tables(engine)
    _STATE.engine = engine
    return engine


def configured_engine() -> Engine:
    """Return the engine managed by the adapter or raise if not started."""

    if _STATE.engine is None:
        raise StartupError(
            "SQLAlchemy store not initialised. Call sfdml.adapters.sqlalchemy."
            "startup() before creating a store."
        )
    return _STATE.engine


def is_started() -> bool:
    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None
