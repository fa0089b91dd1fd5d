import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from config import DATABASE_URL

logger = logging.getLogger(__name__)

Base = declarative_base()
db_engine = None
SessionLocal = None


def _engine_for(db_url: str):
    if db_url.startswith("sqlite"):
        # In-memory SQLite must share one connection across sessions
        return create_engine(
            db_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(db_url)


def init_db(database_url: str = None):
    global db_engine, SessionLocal
    database_url = database_url or DATABASE_URL
    if database_url:
        # Hosted Postgres hands out postgres:// but SQLAlchemy needs postgresql://
        db_url = database_url.replace("postgres://", "postgresql://", 1)
        db_engine = _engine_for(db_url)
        SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
        import models  # noqa: F401  registers the tables on Base.metadata
        try:
            Base.metadata.create_all(bind=db_engine)
            logger.info("Database initialized successfully")
        except Exception:
            logger.exception("Database table creation failed (will retry on first request)")
        return True
    else:
        logger.warning("DATABASE_URL not set - running without database storage")
        return False


def reset_db():
    """Drop and recreate every table. Used by the test suite."""
    if db_engine is None:
        return
    import models  # noqa: F401
    Base.metadata.drop_all(bind=db_engine)
    Base.metadata.create_all(bind=db_engine)


def get_db():
    if SessionLocal is None:
        return None
    return SessionLocal()
