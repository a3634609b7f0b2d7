import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .exceptions import PersistenceError, TradingError

logger = logging.getLogger(__name__)


@contextmanager
def unit_of_work(db: Session, action: str):
    """Commit the session if the block succeeds, roll back otherwise.

    Driver errors surface as PersistenceError; domain errors propagate as is.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Database error during %s: %r", action, e)
        raise PersistenceError(f"Failed to {action}") from e
    except TradingError:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        logger.error("Unexpected error during %s: %r", action, e)
        raise
