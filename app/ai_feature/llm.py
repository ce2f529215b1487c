# app/ai_feature/llm.py
"""
LLM MODULE - Talk to the chat-completion API

Two calls per question:
    1. generate_sql_query() - question + schema → SQL text
    2. generate_natural_language_response() - question + rows → short answer

Data Flow:
    messages → create_chat_completion() → choices[0].message.content
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from app.core import schemas
from app.core.config import settings
from app.core.exceptions import GenerationError

logger = logging.getLogger(__name__)

# Matches {"query": "..."} inside loosely formatted text, escapes included
QUERY_PATTERN = re.compile(r'{\s*"query"\s*:\s*"((?:\\.|[^"\\])*)"')


# ============================================================================
# HTTP CLIENT
# ============================================================================


async def get_llm_client():
    """Yield an httpx client pointed at the chat-completion API."""
    async with httpx.AsyncClient(
        base_url=settings.OPENAI_BASE_URL,
        headers={"Authorization": f"Bearer {settings.OPENAI_API_KEY}"},
        timeout=settings.LLM_TIMEOUT_SECONDS,
    ) as client:
        yield client


async def create_chat_completion(
    client: httpx.AsyncClient, messages: List[Dict[str, str]], **opts: Any
) -> Optional[str]:
    """
    POST a chat completion and return the first choice's message content.

    Raises:
        GenerationError: on a non-2xx status or a reply without choices.
    """
    payload = {"model": settings.OPENAI_MODEL, "messages": messages, **opts}
    response = await client.post("/chat/completions", json=payload)

    if response.is_error:
        raise GenerationError(f"HTTP error! status: {response.status_code}")

    try:
        completion = schemas.ChatCompletion.model_validate(response.json())
    except (ValueError, ValidationError) as error:
        raise GenerationError(f"Unexpected chat completion payload: {error}") from error

    return completion.choices[0].message.content


# ============================================================================
# STEP 1: QUESTION → SQL
# ============================================================================


def parse_generated_query(content: str) -> str:
    """
    Pull the SQL text out of a model reply.

    Tries a strict JSON parse of the whole reply first, then falls back to
    finding {"query": "..."} anywhere in the text.

    Example:
        'Here you go: {"query": "SELECT * FROM t"} thanks' → "SELECT * FROM t"
    """
    try:
        parsed = json.loads(content)
    except json.JSONDecodeError:
        match = QUERY_PATTERN.search(content)
        if not match:
            raise GenerationError("Failed to extract SQL query from the response")
        # The captured group is the body of a JSON string literal
        try:
            return json.loads(f'"{match.group(1)}"')
        except json.JSONDecodeError as error:
            raise GenerationError(
                "Failed to extract SQL query from the response"
            ) from error

    try:
        return schemas.GeneratedQuery.model_validate(parsed).query
    except ValidationError as error:
        raise GenerationError(
            "Failed to extract SQL query from the response"
        ) from error


async def generate_sql_query(
    client: httpx.AsyncClient, user_input: str, schema_text: str
) -> str:
    messages = [
        {
            "role": "system",
            "content": (
                "You are an AI assistant that generates SQL queries for the database "
                f"{schema_text} based on natural language inputs. "
                "Always use proper SQL syntax and best practices.\n"
                "Return only a JSON object with a 'query' key. Do not end with ;"
            ),
        },
        {
            "role": "user",
            "content": (
                "Generate a SQL query based on the following request. Return the SQL "
                "query as a JSON object with a single key 'query' and the SQL as the "
                "value. Do not include any other text or explanation.\n"
                f"Request: {user_input}"
            ),
        },
    ]

    content = await create_chat_completion(
        client, messages, max_tokens=1000, temperature=0.7
    )
    generated_query = parse_generated_query((content or "").strip())

    logger.info(f"Generated SQL Query: {generated_query}")
    return generated_query


# ============================================================================
# STEP 2: ROWS → ANSWER
# ============================================================================


async def generate_natural_language_response(
    client: httpx.AsyncClient, user_input: str, query_result: Any
) -> str:
    messages = [
        {
            "role": "system",
            "content": (
                "You are an AI assistant that provides natural language responses to "
                "questions about data. Your responses should be concise and informative."
            ),
        },
        {
            "role": "user",
            "content": (
                "Given the following question and data result, provide a natural "
                "language response that answers the question:\n"
                f"Question: {user_input}\n"
                f"Data Result: {json.dumps(query_result, indent=2, default=str)}"
            ),
        },
    ]

    content = await create_chat_completion(client, messages, max_tokens=150)
    return content or ""
