import json
import logging
from typing import Any, Dict, List

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

from app.core.config import settings
from app.core.exceptions import ExecutionError

logger = logging.getLogger(__name__)

engine = create_async_engine(settings.DATABASE_URL, echo=False)

# Talk to the DB through async sessions without refreshes after closed conn to avoid errors in async programming
AsyncSessionLocal = async_sessionmaker(
    bind=engine, class_=AsyncSession, expire_on_commit=False
)


# This is the "Bridge" that gives my routes access to postgres
async def get_db():
    async with AsyncSessionLocal() as session:
        yield session


# Lists every table of the public schema with its column names
SCHEMA_QUERY = """
    SELECT
      table_name,
      json_agg(column_name) AS columns
    FROM
      information_schema.columns
    WHERE
      table_schema = 'public'
    GROUP BY
      table_name
    ORDER BY
      table_name
"""

RPC_STATEMENT = text("SELECT execute_sql_query(:query) AS data")


async def execute_sql_query(db: AsyncSession, query: str) -> List[Dict[str, Any]]:
    """
    Run arbitrary SQL through the execute_sql_query stored routine.

    The routine wraps the statement in json_agg, so the result is always a
    single JSON value: a list of row objects.

    Raises:
        ExecutionError: if the database rejects the statement or the call fails.
    """
    try:
        result = await db.execute(RPC_STATEMENT, {"query": query})
        data = result.scalar()
    except (SQLAlchemyError, OSError) as error:
        # An unreachable server surfaces as a bare OSError from the driver
        try:
            await db.rollback()
        except (SQLAlchemyError, OSError) as rollback_error:
            logger.warning(f"Rollback after failed query also failed: {rollback_error}")
        # DBAPIError keeps the driver message in .orig
        message = str(getattr(error, "orig", None) or error)
        raise ExecutionError(message) from error

    if data is None:
        return []
    # asyncpg hands back json columns as text
    if isinstance(data, (str, bytes)):
        data = json.loads(data)
    return data
