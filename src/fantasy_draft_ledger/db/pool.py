import logging
import queue
import sqlite3
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from fantasy_draft_ledger.db.connection import create_connection
from fantasy_draft_ledger.db.transaction import atomic

logger = logging.getLogger(__name__)


class ConnectionPool:
    """Fixed set of SQLite connections shared by worker threads.

    Each operation checks out one connection for its whole duration, so a
    connection is never used by two threads at once.
    """

    def __init__(self, path: str | Path, *, size: int = 5) -> None:
        if size < 1:
            raise ValueError(f"pool size must be positive, got {size}")
        logger.debug("Opening %d ledger connections on %s", size, path)
        self._closed = False
        self._conns = [create_connection(path, check_same_thread=False) for _ in range(size)]
        self._idle: queue.Queue[sqlite3.Connection] = queue.Queue(maxsize=size)
        for conn in self._conns:
            self._idle.put(conn)

    @property
    def size(self) -> int:
        return len(self._conns)

    def get(self, *, timeout: float | None = None) -> sqlite3.Connection:
        """Check out a connection; raises TimeoutError when none frees up in time."""
        if self._closed:
            raise RuntimeError("Connection pool is closed")
        try:
            return self._idle.get(timeout=timeout)
        except queue.Empty:
            logger.warning("All %d ledger connections are busy", self.size)
            raise TimeoutError("No connection available in pool") from None

    def release(self, conn: sqlite3.Connection) -> None:
        if self._closed:
            conn.close()
            return
        self._idle.put(conn)

    @contextmanager
    def connection(self) -> Generator[sqlite3.Connection]:
        conn = self.get()
        try:
            yield conn
        finally:
            if conn.in_transaction:
                conn.rollback()
            self.release(conn)

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection]:
        """Check out a connection and hold one atomic write block on it."""
        with self.connection() as conn, atomic(conn):
            yield conn

    def close_all(self) -> None:
        logger.debug("Closing %d ledger connections", len(self._conns))
        self._closed = True
        for conn in self._conns:
            conn.close()
        while True:
            try:
                self._idle.get_nowait()
            except queue.Empty:
                break
