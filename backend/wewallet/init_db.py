import logging

from sqlalchemy.engine import Engine

from wewallet.database import Base, engine

logger = logging.getLogger(__name__)


def init_db(bind: Engine = engine):
    logger.info("Using database at: %s", bind.url)
    # Create all tables defined in Base's metadata
    Base.metadata.create_all(bind=bind)
    logger.info("Database initialized and tables created.")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
