"""Orchestration layer for natural-language database questions.

Flow:
1. Read the schema through execute_sql_query
2. Ask the model for SQL against that schema
3. Execute the SQL (or the schema query for the "schema" shortcut)
4. Ask the model to phrase the rows as an answer
"""

import json
import logging
from typing import Any, Dict, List

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from app.ai_feature import llm
from app.core import schemas
from app.core.database import SCHEMA_QUERY, execute_sql_query
from app.core.exceptions import ExecutionError

logger = logging.getLogger(__name__)

SCHEMA_SHORTCUT = "schema"


def format_schema(rows: List[Dict[str, Any]]) -> str:
    """Render introspection rows as indented JSON for the prompt."""
    tables = [schemas.TableColumns.model_validate(row).model_dump() for row in rows]
    return json.dumps(tables, indent=2)


async def process_sql_query(
    db: AsyncSession, client: httpx.AsyncClient, user_input: str, query: str
) -> schemas.QueryResponse:
    """
    Execute the generated query and summarise its rows.

    Every failure in here collapses to the same generic error result.
    """
    try:
        if query.lower() == SCHEMA_SHORTCUT:
            data = await execute_sql_query(db, SCHEMA_QUERY)
        else:
            data = await execute_sql_query(db, query)

        natural_language_response = await llm.generate_natural_language_response(
            client, user_input, data
        )
        logger.info(natural_language_response)

        return schemas.QueryResponse(
            success=True, naturalLanguageResponse=natural_language_response
        )
    except Exception as error:
        logger.error(f"Error executing SQL query: {error}")
        return schemas.QueryResponse(success=False, error="Error executing SQL query")


async def answer_question(
    db: AsyncSession, client: httpx.AsyncClient, user_input: str
) -> schemas.QueryResponse:
    """
    Run the full question -> SQL -> rows -> answer flow.

    GenerationError from the SQL step is not caught here.
    """
    try:
        schema_data = await execute_sql_query(db, SCHEMA_QUERY)
    except ExecutionError as error:
        logger.error(f"Schema query failed: {error}")
        return schemas.QueryResponse(success=False, error=str(error))

    schema_text = format_schema(schema_data)
    logger.info(schema_text)

    generated_query = await llm.generate_sql_query(client, user_input, schema_text)

    return await process_sql_query(db, client, user_input, generated_query)
