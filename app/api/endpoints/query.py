from typing import Annotated

import httpx
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.ai_feature import service
from app.ai_feature.llm import get_llm_client
from app.core import schemas
from app.core.database import get_db

router = APIRouter(prefix="/api", tags=["Query"])

db_dep = Annotated[AsyncSession, Depends(get_db)]
llm_dep = Annotated[httpx.AsyncClient, Depends(get_llm_client)]


@router.post(
    "/processSqlQuery",
    response_model=schemas.QueryResponse,
    response_model_exclude_none=True,
)
async def process_sql_query(request: schemas.QueryRequest, db: db_dep, client: llm_dep):
    """
    Answer a free-text question about the database:
    schema -> generated SQL -> rows -> natural-language answer.
    """
    return await service.answer_question(db, client, request.userInput)
