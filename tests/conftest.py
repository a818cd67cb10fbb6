"""Shared pytest fixtures for test modules."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    import sqlite3
    from collections.abc import Generator

from fantasy_draft_ledger.config import LedgerSettings
from fantasy_draft_ledger.db.connection import create_connection
from fantasy_draft_ledger.services.container import LedgerContainer
from tests.helpers import FixedClock, make_settings


@pytest.fixture
def conn() -> Generator[sqlite3.Connection]:
    connection = create_connection(":memory:")
    yield connection
    connection.close()


@pytest.fixture
def settings() -> LedgerSettings:
    return make_settings()


@pytest.fixture
def container(conn: sqlite3.Connection, settings: LedgerSettings) -> LedgerContainer:
    return LedgerContainer(conn, settings, clock=FixedClock())
