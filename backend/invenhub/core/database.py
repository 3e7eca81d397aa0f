"""
PostgreSQL connection helpers

All database access goes through psycopg2. Repositories open one connection
per call, use RealDictCursor so rows come back as dicts, and close the
connection in a finally block.

Two flavours are provided:
- get_db_connection_dict(): single attempt, used by repositories
- get_db_connection_dict_with_retry(): retries transient connection failures
  with exponential backoff, used by health checks and background jobs
"""
import time
import logging

import psycopg2
from psycopg2.extras import RealDictCursor

from .config import settings

logger = logging.getLogger(__name__)


def _database_url() -> str:
    # Read at call time so tests and scripts can swap settings.DATABASE_URL
    database_url = settings.DATABASE_URL
    if not database_url:
        raise Exception("DATABASE_URL not configured")
    return database_url


def get_db_connection():
    """
    Get a direct psycopg2 database connection (returns tuples)

    Use this for DDL and bulk scripts.

    Raises:
        Exception if DATABASE_URL is not configured
    """
    return psycopg2.connect(_database_url())


def get_db_connection_dict():
    """
    Get a database connection with RealDictCursor (returns dictionaries)

    Example:
        conn = get_db_connection_dict()
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM products")
        results = cursor.fetchall()  # Returns list of dicts
        cursor.close()
        conn.close()
    """
    return psycopg2.connect(_database_url(), cursor_factory=RealDictCursor)


def get_db_connection_dict_with_retry(max_retries=3, retry_delay=1.0):
    """
    Get a psycopg2 connection with RealDictCursor and automatic retry

    Args:
        max_retries: Maximum number of connection attempts (default: 3)
        retry_delay: Initial delay between retries in seconds (default: 1.0)

    Returns:
        psycopg2 connection with RealDictCursor

    Raises:
        psycopg2.OperationalError: If all retry attempts fail
    """
    database_url = _database_url()
    last_error = None

    for attempt in range(1, max_retries + 1):
        try:
            logger.debug(f"Database connection attempt {attempt}/{max_retries}")
            conn = psycopg2.connect(database_url, cursor_factory=RealDictCursor)

            # Test connection with a simple query
            cursor = conn.cursor()
            cursor.execute("SELECT 1")
            cursor.close()

            return conn

        except psycopg2.OperationalError as e:
            last_error = e
            logger.warning(f"Connection error on attempt {attempt}/{max_retries}: {e}")

            if attempt < max_retries:
                delay = retry_delay * (2 ** (attempt - 1))
                logger.info(f"Retrying in {delay:.2f} seconds...")
                time.sleep(delay)
            else:
                logger.error(f"All {max_retries} connection attempts failed")
                raise

    raise last_error if last_error else Exception("Connection failed after all retries")
