import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from wewallet.config import settings
# Import the single source of truth for Base
from wewallet.models.db_models import Base

logger = logging.getLogger(__name__)

SQLALCHEMY_DATABASE_URL = settings.database_url

connect_args = {}
if SQLALCHEMY_DATABASE_URL.startswith("sqlite"):
    connect_args["check_same_thread"] = False  # Sessions are handed across FastAPI's threadpool

engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Request-scoped session; always closed after the response."""
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.debug("Rolling back request session after %r", e)
        db.rollback()
        raise
    finally:
        db.close()


__all__ = ["Base", "engine", "SessionLocal", "get_db"]
