from contextlib import contextmanager
from typing import Generator, List, Optional

from sqlalchemy import create_engine
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session, sessionmaker

from ..filters.errors import StorageUnavailable
from .schema import create_all


def get_engine(sqlite_path: str, reference_fields: Optional[List[str]] = None):
    engine_url = f"sqlite:///{sqlite_path}"
    engine = create_engine(engine_url, future=True)
    try:
        create_all(engine, reference_fields)
    except DBAPIError as e:
        engine.dispose()
        raise StorageUnavailable(f"Cannot open database {sqlite_path}: {e}") from e
    return engine


def get_session(sqlite_path: str, reference_fields: Optional[List[str]] = None) -> Session:
    """Get a SQLAlchemy session (caller must close it)."""
    engine = get_engine(sqlite_path, reference_fields)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)()


@contextmanager
def session_context(
    sqlite_path: str,
    reference_fields: Optional[List[str]] = None,
) -> Generator[Session, None, None]:
    """
    Context manager for SQLAlchemy sessions.

    Rolls back on error and always closes the session. Callers that write
    commit explicitly.

    Usage:
        with session_context(sqlite_path, ["field_media_category"]) as session:
            ...
            session.commit()
    """
    session = get_session(sqlite_path, reference_fields)
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
