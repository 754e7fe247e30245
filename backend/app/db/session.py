import logging
from collections.abc import Callable, Iterator
from typing import TypeVar

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.errors import StoreError
from app.models import Base

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Database:
    """Owns the engine and session factory for the catalog tables."""

    def __init__(self, url: str, echo: bool = False) -> None:
        self.url = url
        kwargs: dict = {}
        if url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if url in ("sqlite://", "sqlite:///:memory:"):
                kwargs["poolclass"] = StaticPool
        self.engine = create_engine(url, echo=echo, future=True, **kwargs)
        if url.startswith("sqlite"):
            _configure_sqlite(self.engine)
        self.SessionLocal = sessionmaker(bind=self.engine, autoflush=False, autocommit=False, future=True)

    def create_all(self) -> None:
        Base.metadata.create_all(self.engine)

    def dispose(self) -> None:
        self.engine.dispose()

    def session(self) -> Session:
        return self.SessionLocal()


def _configure_sqlite(engine) -> None:
    # pysqlite defers BEGIN and breaks SAVEPOINT; let SQLAlchemy emit BEGIN itself
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()


def run_in_transaction(db: Session, fn: Callable[[Session], T]) -> T:
    """Run ``fn`` against ``db`` and commit, or roll everything back on failure.

    Store failures surface as a single ``StoreError``; any other exception
    (validation, asset store, ...) is re-raised unchanged after the rollback.
    """
    try:
        result = fn(db)
        db.commit()
        return result
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Transaction rolled back")
        raise StoreError("Database transaction failed", details=str(exc)) from exc
    except Exception:
        db.rollback()
        raise
