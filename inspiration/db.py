from contextlib import contextmanager

from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel, Session, create_engine

from .config import load_settings
from .errors import StorageError

_ENGINE = None
_ENGINE_URL = None  # URL of the cached engine; a new db_path swaps it


def _compute_url() -> str:
    db_path = load_settings().db_path.expanduser()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{db_path}"


def _enable_foreign_keys(dbapi_conn, _record):
    # SQLite ignores ON DELETE CASCADE unless this is set per connection
    cur = dbapi_conn.cursor()
    cur.execute("PRAGMA foreign_keys=ON")
    cur.close()


def get_engine():
    global _ENGINE, _ENGINE_URL
    url = _compute_url()
    if _ENGINE is None or _ENGINE_URL != url:
        if _ENGINE is not None:
            _ENGINE.dispose()
        _ENGINE = create_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
        )
        event.listen(_ENGINE, "connect", _enable_foreign_keys)
        _ENGINE_URL = url
    return _ENGINE


def reset_engine():
    """For tests: drop the cached engine so a new INSPIRATION_DB_PATH is picked up."""
    global _ENGINE, _ENGINE_URL
    if _ENGINE is not None:
        _ENGINE.dispose()
    _ENGINE = None
    _ENGINE_URL = None


def init_db():
    from . import models  # noqa: F401  registers the tables on SQLModel.metadata

    engine = get_engine()
    SQLModel.metadata.create_all(engine)


def get_session():
    # keep objects alive after commit so returned models retain values
    return Session(get_engine(), expire_on_commit=False)


@contextmanager
def session_scope():
    session = get_session()
    try:
        yield session
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        raise StorageError(f"Database error: {exc}") from exc
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
