import logging
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker, declarative_base
from flight_tracker.config import settings
from flight_tracker.errors import PersistenceError

logger = logging.getLogger(__name__)


def build_engine(database_url: str):
    """PostgreSQL gets connection pooling; SQLite (local runs, tests) does not support those options."""
    if database_url.startswith("sqlite"):
        return create_engine(database_url, connect_args={"check_same_thread": False})
    return create_engine(
        database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=True
    )


engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Centralized base for all models
Base = declarative_base()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_db(bind=None):
    """Create all tables that do not exist yet."""
    # Models register themselves on Base when imported
    from flight_tracker.models import destination, target_date, price_check  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)

@contextmanager
def unit_of_work(db: Session, action: str):
    """Commit on success. Storage failures roll back and surface as PersistenceError."""
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database failure while {action}: {e}")
        raise PersistenceError(f"Database failure while {action}") from e
    except BaseException:
        db.rollback()
        raise
