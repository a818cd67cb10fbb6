from collections.abc import Iterator
from contextlib import contextmanager

from fantasy_draft_ledger.config import LedgerSettings
from fantasy_draft_ledger.db.pool import ConnectionPool
from fantasy_draft_ledger.services.container import LedgerContainer


@contextmanager
def build_ledger_context(settings: LedgerSettings) -> Iterator[LedgerContainer]:
    """Composition-root context manager: checks a connection out of the ledger pool, yields the container.

    The pool is sized by ``db.pool_size`` and closed on exit.
    """
    pool = ConnectionPool(settings.db_path, size=settings.pool_size)
    try:
        with pool.connection() as conn:
            yield LedgerContainer(conn, settings)
    finally:
        pool.close_all()
