#!/usr/bin/env python3
"""
Migration script to enforce one match per (expert, service request) pair.

Run this against a database created before the uq_expert_match_pair
constraint existed. Duplicate pairs are collapsed first, keeping the
oldest row, so the constraint can be added.
"""
import logging
import sys
from sqlalchemy import text, inspect
from database.database import engine

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

TABLE = 'expert_match_results'
CONSTRAINT = 'uq_expert_match_pair'
INDEX = 'idx_expert_match_notified'


def table_exists(table_name):
    inspector = inspect(engine)
    return table_name in inspector.get_table_names()


def constraint_exists(table_name, constraint_name):
    """Check if a unique constraint exists on a table."""
    inspector = inspect(engine)
    constraints = inspector.get_unique_constraints(table_name)
    return any(c['name'] == constraint_name for c in constraints)


def index_exists(table_name, index_name):
    """Check if an index exists on a table."""
    inspector = inspect(engine)
    indexes = inspector.get_indexes(table_name)
    return any(idx['name'] == index_name for idx in indexes)


def migrate():
    """Deduplicate pairs, add the pair constraint and the pending-notification index."""
    logger.info(f"Starting migration: Add {CONSTRAINT} to {TABLE}")

    if not table_exists(TABLE):
        logger.info(f"Table {TABLE} does not exist yet; init_db will create it with the constraint")
        return True

    try:
        with engine.begin() as connection:
            if not constraint_exists(TABLE, CONSTRAINT):
                logger.info("Removing duplicate (expert, request) pairs...")
                result = connection.execute(text(f"""
                    DELETE FROM {TABLE} m
                    USING {TABLE} keep
                    WHERE m.expert_id = keep.expert_id
                      AND m.service_request_id = keep.service_request_id
                      AND (m.created_at, m.id) > (keep.created_at, keep.id)
                """))
                logger.info(f"Removed {result.rowcount} duplicate rows")

                logger.info(f"Adding {CONSTRAINT}...")
                connection.execute(text(f"""
                    ALTER TABLE {TABLE}
                    ADD CONSTRAINT {CONSTRAINT} UNIQUE (expert_id, service_request_id)
                """))
                logger.info("Constraint added successfully")
            else:
                logger.info(f"{CONSTRAINT} already exists, skipping")

            if not index_exists(TABLE, INDEX):
                logger.info("Creating index on expert_notified...")
                connection.execute(text(f"""
                    CREATE INDEX {INDEX} ON {TABLE} (expert_notified)
                """))
                logger.info("Index created successfully")
            else:
                logger.info("Index already exists, skipping")

        logger.info("Migration completed successfully")
        return True

    except Exception as e:
        logger.error(f"Migration failed: {e}")
        return False


if __name__ == '__main__':
    success = migrate()
    sys.exit(0 if success else 1)
