import logging

from sqlalchemy import text
from tenacity import retry, stop_after_attempt, wait_fixed

from database.models import Base

logger = logging.getLogger(__name__)


@retry(stop=stop_after_attempt(5), wait=wait_fixed(2), reraise=True)
def check_connection(engine) -> None:
    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))


def init_db(engine=None):
    """Wait for the database, then create any missing tables (existing tables are left untouched)."""
    if engine is None:
        from database.database import engine

    logger.info("Initializing database...")
    try:
        check_connection(engine)
        Base.metadata.create_all(bind=engine)
        logger.info("Tables created or verified.")
    except Exception as e:
        logger.error(f"Error initializing DB: {e}")
        raise


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
