"""
ORM Manager - Engine and session ownership for the document store.

One SQLite file holds every user's document tree. The manager is a process
singleton; tests point ``LEDGER_DB_PATH`` at a temporary file and reset it.

Every transaction starts with ``BEGIN IMMEDIATE``, so a session holds the
write lock from its first read. Read-modify-write updates such as counter
increments therefore never interleave.
"""

import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Generator, Optional

from sqlalchemy import create_engine, event, func, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from task_ledger_mcp.database.models import Base, Document

IN_MEMORY = ":memory:"

SQLITE_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
    "PRAGMA cache_size=-64000",  # 64MB
    "PRAGMA temp_store=MEMORY",
)

_global_orm_manager: Optional["ORMManager"] = None
_global_lock = threading.Lock()


def get_default_db_path() -> str:
    """Resolve the database file from ``LEDGER_DB_PATH`` or ``~/.task-ledger``.

    The parent directory is created if it does not exist yet.
    """
    configured = os.environ.get("LEDGER_DB_PATH")
    if configured == IN_MEMORY:
        return IN_MEMORY
    db_path = Path(configured) if configured else Path.home() / ".task-ledger" / "database.db"
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return str(db_path)


def _disable_pysqlite_transactions(dbapi_connection: Any, connection_record: Any) -> None:
    # pysqlite would otherwise emit its own deferred BEGIN before the first write
    dbapi_connection.isolation_level = None


def _apply_pragmas(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    for pragma in SQLITE_PRAGMAS:
        cursor.execute(pragma)
    cursor.close()


def _begin_immediate(conn: Any) -> None:
    conn.exec_driver_sql("BEGIN IMMEDIATE")


def get_orm_manager(db_path: Optional[str] = None) -> "ORMManager":
    """Return the process-wide ORM manager, creating it on first use."""
    global _global_orm_manager

    with _global_lock:
        if _global_orm_manager is None:
            _global_orm_manager = ORMManager(db_path)
        return _global_orm_manager


def reset_orm_manager() -> None:
    """Dispose of the process-wide ORM manager (for testing)."""
    global _global_orm_manager

    with _global_lock:
        if _global_orm_manager is not None:
            _global_orm_manager.close()
            _global_orm_manager = None


class ORMManager:
    """
    Owns the SQLAlchemy engine and hands out transactional sessions.

    Attributes:
        db_path: SQLite file path, or ``:memory:`` for a private in-memory store
    """

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path or get_default_db_path()
        # In-memory sessions share one connection and must take turns
        self._session_lock = threading.RLock()
        self._engine: Optional[Engine] = self._create_engine()
        self._session_factory: Optional[sessionmaker] = sessionmaker(
            bind=self._engine,
            autoflush=True,
            expire_on_commit=False,
        )
        Base.metadata.create_all(self._engine)

    @property
    def in_memory(self) -> bool:
        return self.db_path == IN_MEMORY

    def _create_engine(self) -> Engine:
        if self.in_memory:
            # A single shared connection, or every session would see an empty database
            engine = create_engine(
                "sqlite://",
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            engine = create_engine(
                f"sqlite:///{self.db_path}",
                pool_pre_ping=True,
                connect_args={"check_same_thread": False, "timeout": 30},
            )
            event.listen(engine, "connect", _apply_pragmas)

        event.listen(engine, "connect", _disable_pysqlite_transactions)
        event.listen(engine, "begin", _begin_immediate)
        return engine

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("ORM Manager is closed")
        return self._engine

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """
        Open a session that commits on success and rolls back on error.

        Every document write and every write batch runs inside exactly one
        of these sessions, which is what makes them atomic. In-memory
        sessions are serialized on a lock held until the session closes.
        """
        if self._session_factory is None:
            raise RuntimeError("ORM Manager is closed")

        with self._exclusive():
            session = self._session_factory()
            try:
                yield session
                session.commit()
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()

    @contextmanager
    def _exclusive(self) -> Generator[None, None, None]:
        if not self.in_memory:
            yield
            return
        with self._session_lock:
            yield

    def perform_health_check(self) -> Dict[str, Any]:
        """
        Check that the database answers and report what it holds.

        Returns:
            ``{"healthy": True, "database_path", "document_count", "user_count"}``
            or ``{"healthy": False, "error"}``.
        """
        try:
            with self.get_session() as session:
                session.execute(text("SELECT 1")).scalar_one()
                document_count = session.execute(
                    select(func.count()).select_from(Document)
                ).scalar_one()
                user_count = session.execute(
                    select(func.count()).select_from(Document).where(Document.collection == "users")
                ).scalar_one()
        except Exception as e:
            return {"healthy": False, "error": str(e)}

        return {
            "healthy": True,
            "database_path": self.db_path,
            "document_count": document_count,
            "user_count": user_count,
        }

    def close(self) -> None:
        """Dispose of the engine; the manager cannot be used afterwards."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None

    def __del__(self) -> None:
        self.close()
