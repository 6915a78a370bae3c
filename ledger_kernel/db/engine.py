"""
Engine and session management for the ledger kernel.

One engine per process, created by init_engine_from_url() (or the
``ledger_config.bridges.init_engine`` wrapper). Services never create
sessions themselves; callers obtain one from get_session() or
session_scope() and pass it in.

SQLite connections run with foreign keys on, and an in-memory database
shares a single connection so every session sees the same schema.
PostgreSQL runs at READ COMMITTED; find-or-create relies on unique
constraints rather than isolation.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ledger_kernel.logging_config import get_logger

logger = get_logger("db.engine")


@dataclass
class _EngineState:
    engine: Engine | None = None
    factory: sessionmaker[Session] | None = None

    def require_factory(self) -> sessionmaker[Session]:
        if self.factory is None:
            raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
        return self.factory


_state = _EngineState()


def _sqlite_connect(dbapi_connection: Any, _record: Any) -> None:
    # Let SQLAlchemy emit BEGIN itself so SAVEPOINT nests inside it
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


def _sqlite_begin(connection: Any) -> None:
    connection.exec_driver_sql("BEGIN")


def _build_sqlite(url: URL, echo: bool) -> Engine:
    options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if not url.database or url.database == ":memory:":
        options["poolclass"] = StaticPool
    engine = create_engine(url, echo=echo, **options)
    event.listen(engine, "connect", _sqlite_connect)
    event.listen(engine, "begin", _sqlite_begin)
    return engine


def _build_pooled(url: URL, echo: bool, pool: dict[str, Any]) -> Engine:
    return create_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        isolation_level="READ COMMITTED",
        **pool,
    )


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 10,
    max_overflow: int = 5,
    pool_timeout: int = 30,
    pool_recycle: int = 1800,
) -> Engine:
    """
    Create the process engine and session factory, replacing any previous one.

    Pool arguments only apply to server databases; SQLite ignores them.
    Sessions do not expire attributes on commit, so returned journals stay
    readable after JournalBuilder commits.
    """
    reset_engine()

    url = make_url(database_url)
    backend = url.get_backend_name()
    if backend == "sqlite":
        engine = _build_sqlite(url, echo)
    else:
        engine = _build_pooled(
            url,
            echo,
            {
                "pool_size": pool_size,
                "max_overflow": max_overflow,
                "pool_timeout": pool_timeout,
                "pool_recycle": pool_recycle,
            },
        )

    _state.engine = engine
    _state.factory = sessionmaker(bind=engine, expire_on_commit=False)
    logger.info("engine_initialized", extra={"dialect": backend, "echo": echo})
    return engine


def get_engine() -> Engine:
    if _state.engine is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _state.engine


def get_session_factory() -> sessionmaker[Session]:
    return _state.require_factory()


def get_session() -> Session:
    """A new, caller-owned session."""
    return _state.require_factory()()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """
    Commit on clean exit, roll back and re-raise on error, always close.

        with session_scope() as session:
            JournalBuilder(session, auto_commit=False).build(user_id, data)
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("session_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def _metadata():
    from ledger_kernel.db.base import Base
    import ledger_kernel.models  # noqa: F401  (registers tables on Base.metadata)

    return Base.metadata


def create_tables() -> None:
    _metadata().create_all(get_engine())


def drop_tables() -> None:
    """Drop every kernel table. Tests only."""
    _metadata().drop_all(get_engine())


def reset_engine() -> None:
    """Dispose the engine, if any, and forget the session factory."""
    if _state.engine is not None:
        _state.engine.dispose()
    _state.engine = None
    _state.factory = None
