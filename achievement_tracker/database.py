from typing import Any, Iterable
from sqlalchemy import create_engine
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session, sessionmaker
from .config import Settings, get_settings
from .errors import InternalError
from .models.base import Base

_engine = None
_SessionLocal = None

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _engine_options(settings: Settings) -> dict[str, Any]:
    if settings.DATABASE_URL.startswith("sqlite"):
        # sessions are handed across FastAPI's threadpool workers
        return {"pool_pre_ping": True, "connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True, "pool_size": settings.DB_POOL_SIZE}


def get_engine():
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_engine(settings.DATABASE_URL, **_engine_options(settings))
    return _engine


def get_sessionmaker():
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(bind=get_engine(), autoflush=False, expire_on_commit=True)
    return _SessionLocal


def reset_engine() -> None:
    """Drop the cached engine so the next call rebuilds it from fresh settings."""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine, _SessionLocal = None, None


def init_db() -> None:
    Base.metadata.create_all(bind=get_engine())


def get_db():
    db = get_sessionmaker()()
    try:
        yield db
    finally:
        db.close()


def upsert(
    db: Session,
    model,
    values: dict[str, Any],
    conflict_columns: Iterable[str],
    update_columns: Iterable[str],
) -> None:
    """Insert a row or overwrite the conflicting one in a single statement.

    Compiles to the dialect's ``INSERT ... ON CONFLICT DO UPDATE``; no prior
    read is issued.
    """
    dialect = db.get_bind().dialect.name
    insert = _INSERT_BY_DIALECT.get(dialect)
    if insert is None:
        raise InternalError(f"upsert is not supported on dialect {dialect!r}")
    stmt = insert(model).values(**values)
    stmt = stmt.on_conflict_do_update(
        index_elements=list(conflict_columns),
        set_={column: stmt.excluded[column] for column in update_columns},
    )
    db.execute(stmt)
