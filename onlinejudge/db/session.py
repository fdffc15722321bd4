import logging

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from onlinejudge.core.config import settings

_is_sqlite = settings.DATABASE_URL.startswith("sqlite")

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args={"check_same_thread": False} if _is_sqlite else {},
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
logger = logging.getLogger(__name__)


if _is_sqlite:
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA journal_mode=WAL;")
            cursor.execute("PRAGMA foreign_keys=ON;")
            cursor.execute("PRAGMA busy_timeout = 30000;")
            logger.info("SQLite PRAGMAs (journal_mode=WAL, foreign_keys=ON, busy_timeout=30000) set.")
        except Exception as e:
            logger.error(f"Failed to set SQLite PRAGMAs: {e}", exc_info=True)
        finally:
            cursor.close()


def init_db():
    from onlinejudge.db import models  # noqa: F401  registers the tables on Base.metadata
    from onlinejudge.db.base_class import Base

    Base.metadata.create_all(bind=engine)
