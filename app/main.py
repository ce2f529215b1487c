import asyncio
import logging
from contextlib import asynccontextmanager

import alembic.config
import alembic.command
import httpx
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from app.api.router import api_router
from app.core.config import settings
from app.core.database import engine
from app.core.exceptions import SqlAssistantError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def run_migrations():
    """Sync function to run migrations"""
    alembic_cfg = alembic.config.Config("alembic.ini")
    alembic.command.upgrade(alembic_cfg, "head")


# Close the engine once everything is done and close all the sessions
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Install the execute_sql_query routine before serving requests
    if settings.RUN_MIGRATIONS:
        try:
            await asyncio.to_thread(run_migrations)
            logger.info("Migrations applied successfully (or already up-to-date)")
        except Exception as e:
            logger.error(f"Migration error during startup: {e}")

    yield
    await engine.dispose()


app = FastAPI(title="Natural Language SQL API", lifespan=lifespan)

# Include the master router containing all our endpoints
app.include_router(api_router)


# Failures outside the handled steps end up here as a generic 500
@app.exception_handler(SqlAssistantError)
@app.exception_handler(httpx.HTTPError)
async def unhandled_step_error(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": "Internal Server Error"},
    )


@app.get("/")
async def root():
    return {"message": "Welcome to the Natural Language SQL API"}
