from contextlib import contextmanager
from typing import Dict, Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .schema import Base

_engines: Dict[str, Engine] = {}


def get_engine(sqlite_path: str) -> Engine:
    """Engine for a SQLite file, created once per path with the schema in place."""
    engine = _engines.get(sqlite_path)
    if engine is None:
        engine = create_engine(f"sqlite:///{sqlite_path}", future=True)
        Base.metadata.create_all(engine)
        _engines[sqlite_path] = engine
    return engine


def dispose_engine(sqlite_path: str) -> bool:
    """
    Close the pooled connections for a path and forget its engine.

    Returns:
        False if no engine was open for that path
    """
    engine = _engines.pop(sqlite_path, None)
    if engine is None:
        return False
    engine.dispose()
    return True


def get_session(sqlite_path: str) -> Session:
    """Get a SQLAlchemy session (caller must close it)."""
    engine = get_engine(sqlite_path)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)()


@contextmanager
def session_context(sqlite_path: str) -> Generator[Session, None, None]:
    """
    Context manager for SQLAlchemy sessions.

    Ensures rollback on error and session cleanup. Callers commit explicitly.

    Usage:
        with session_context(sqlite_path) as session:
            # use session
            session.commit()
    """
    session = get_session(sqlite_path)
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
