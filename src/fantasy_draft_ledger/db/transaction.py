import itertools
import sqlite3
from collections.abc import Generator
from contextlib import contextmanager

_savepoint_ids = itertools.count(1)


@contextmanager
def atomic(conn: sqlite3.Connection) -> Generator[sqlite3.Connection]:
    """Run the block as one write transaction.

    The outermost block takes SQLite's write lock up front (``BEGIN
    IMMEDIATE``) so a read-modify-write inside it cannot interleave with
    another writer. Nested blocks become savepoints and roll back on their own.
    """
    if conn.in_transaction:
        name = f"sp_{next(_savepoint_ids)}"
        conn.execute(f"SAVEPOINT {name}")
        try:
            yield conn
        except BaseException:
            conn.execute(f"ROLLBACK TO SAVEPOINT {name}")
            conn.execute(f"RELEASE SAVEPOINT {name}")
            raise
        conn.execute(f"RELEASE SAVEPOINT {name}")
        return

    old_isolation = conn.isolation_level
    conn.isolation_level = None
    try:
        conn.execute("BEGIN IMMEDIATE")
        try:
            yield conn
        except BaseException:
            conn.execute("ROLLBACK")
            raise
        conn.execute("COMMIT")
    finally:
        conn.isolation_level = old_isolation
