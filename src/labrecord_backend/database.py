import logging
import os
from typing import Generator
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker, Session
from labrecord_backend.settings import settings

logger = logging.getLogger(__name__)

ALEMBIC_INI = os.path.join(os.path.dirname(os.path.abspath(__file__)), "alembic.ini")

_postgres_options = {
    "pool_pre_ping": True,
    "pool_size": 10,
    "max_overflow": 5,
    "pool_timeout": 30,
    "pool_recycle": 300
}


def build_engine(url: str, **options) -> Engine:
    if url.startswith("sqlite"):
        engine = create_engine(url, connect_args={"check_same_thread": False}, **options)

        # SQLite ignores foreign keys (and therefore cascades) unless asked
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return create_engine(url, **{**_postgres_options, **options})


_engine = build_engine(settings.DATABASE_URL)
_SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_engine)


def get_engine() -> Engine:
    return _engine


def upgrade_database(revision: str = "head", engine: Engine = None):
    """Apply the alembic revisions up to ``revision`` on ``engine``."""
    config = Config(ALEMBIC_INI)
    config.attributes["configure_logger"] = False

    with (engine or _engine).begin() as connection:
        config.attributes["connection"] = connection
        command.upgrade(config, revision)

    logger.info("Database schema upgraded to %s", revision)


def get_db() -> Generator[Session, None, None]:

    db = _SessionLocal()

    try:
        yield db
    except OperationalError:
        logger.error("Database connection failed")
        db.rollback()
        raise
    finally:
        db.close()
