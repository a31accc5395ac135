"""Async engine factory

SQLite needs help to honour the row locks the repositories ask for: the
driver neither emits BEGIN before a SELECT nor knows FOR UPDATE. Engines
for SQLite therefore open every transaction with BEGIN IMMEDIATE, which
takes the database write lock up front, so a read-check-write sequence
cannot interleave with another writer.
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

SQLITE_BUSY_TIMEOUT_SECONDS = 5.0


def create_db_engine(db_uri: str, **kwargs) -> AsyncEngine:
    """Create the application engine for db_uri"""
    if db_uri.startswith("sqlite"):
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("timeout", SQLITE_BUSY_TIMEOUT_SECONDS)
        engine = create_async_engine(db_uri, connect_args=connect_args, **kwargs)
        use_immediate_transactions(engine)
        return engine
    return create_async_engine(db_uri, **kwargs)


def use_immediate_transactions(engine: AsyncEngine) -> None:
    """Let SQLAlchemy, not the sqlite3 driver, start SQLite transactions"""

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")
