from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from familink.config import settings


def build_engine(url: str) -> Engine:
    """Create an engine for ``url``.

    SQLite only enforces ``ON DELETE CASCADE`` when foreign keys are switched
    on per connection, so the pragma is set on connect. SQLite has no row
    locks either; every transaction is opened with ``BEGIN IMMEDIATE`` so
    writers are serialized from their first statement, the way
    ``SELECT ... FOR UPDATE`` serializes them on MySQL.

    Other backends run at READ COMMITTED, so a read that follows a row lock
    sees every transaction committed before the lock was granted.
    """
    if url.startswith("sqlite"):
        sqlite_engine = create_engine(url, connect_args={"check_same_thread": False})

        @event.listens_for(sqlite_engine, "connect")
        def _configure_connection(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
            # pysqlite must not emit its own BEGIN
            dbapi_connection.isolation_level = None

        @event.listens_for(sqlite_engine, "begin")
        def _begin_immediate(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

        return sqlite_engine
    return create_engine(url, pool_pre_ping=True, isolation_level="READ COMMITTED")


engine = build_engine(settings.database_url)
SessionLocal = sessionmaker(bind=engine)


class Base(DeclarativeBase):
    pass
