# cms/db_helpers.py

import logging
import os
from contextlib import contextmanager
from typing import Callable, Iterator

from dotenv import load_dotenv
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from cms.exceptions import StorageFailure

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s | %(levelname)s | %(name)s\n%(message)s\n"
)

logger = logging.getLogger("cms_backend")

# --- Configuration ---
DATABASE_URL        = os.getenv("DATABASE_URL", "")
DB_HOST             = os.environ.get("DB_HOST", "localhost")
DB_PORT             = int(os.environ.get("DB_PORT", "5432"))
DB_NAME             = os.environ.get("DB_NAME", "content")
DB_USER             = os.environ.get("DB_USER", "postgres")
DB_PASSWORD         = os.environ.get("DB_PASSWORD")
SQLITE_PATH         = os.environ.get("SQLITE_PATH", "content.db")

HOST                = os.getenv("HOST", "0.0.0.0")
PORT                = int(os.getenv("PORT", "8000"))
CORS_ORIGINS        = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

IS_LOCAL_DB = (DB_HOST == "localhost")


def get_database_url() -> str:
    if DATABASE_URL:
        return DATABASE_URL

    if IS_LOCAL_DB:
        return f"sqlite:///{SQLITE_PATH}"

    if not DB_PASSWORD:
        raise RuntimeError("No DB_PASSWORD configured for remote DB_HOST")

    return f"postgresql+pg8000://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}"


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE SET NULL unless this is on for the connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


def get_db_engine(url: str | None = None) -> Engine:
    url = url or get_database_url()
    parsed = make_url(url)
    logger.info(f"[DB] Using URL: {parsed.render_as_string(hide_password=True)}")

    if parsed.get_backend_name() == "sqlite":
        kwargs = {"connect_args": {"check_same_thread": False}}
        if parsed.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, future=True, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    # pg8000 supports 'timeout' in seconds
    return create_engine(
        url,
        future=True,
        pool_pre_ping=True,
        connect_args={"timeout": 10},  # fail in 10s instead of hanging forever
    )


def create_session_factory(engine: Engine | None = None) -> sessionmaker:
    from cms.entities import Base

    engine = engine or get_db_engine()
    Base.metadata.create_all(engine)
    logger.info("[DB] Schema ready")
    return sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
    )


@contextmanager
def session_scope(session_factory: Callable[[], Session]) -> Iterator[Session]:
    """
    One unit of work: commit on success, roll back on any error.
    Storage errors come out as StorageFailure; domain errors pass through untouched.
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"[DB] storage error, rolled back: {e}", exc_info=True)
        raise StorageFailure(f"Storage operation failed: {e.__class__.__name__}") from e
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
