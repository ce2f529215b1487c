import pytest

from app.core.database import execute_sql_query
from app.core.exceptions import ExecutionError
from tests.fakes import FakeSession, db_error


@pytest.mark.asyncio
async def test_json_text_result_is_decoded():
    session = FakeSession()
    session.responses["SELECT 1 AS one"] = '[{"one": 1}]'

    assert await execute_sql_query(session, "SELECT 1 AS one") == [{"one": 1}]


@pytest.mark.asyncio
async def test_decoded_result_passes_through():
    session = FakeSession()
    session.responses["SELECT 1 AS one"] = [{"one": 1}]

    assert await execute_sql_query(session, "SELECT 1 AS one") == [{"one": 1}]


@pytest.mark.asyncio
async def test_null_result_is_empty_list():
    session = FakeSession()
    session.responses["SELECT 1 WHERE false"] = None

    assert await execute_sql_query(session, "SELECT 1 WHERE false") == []


@pytest.mark.asyncio
async def test_database_error_becomes_execution_error():
    """Driver message is kept and the session rolled back"""
    session = FakeSession()
    session.responses["SELEC 1"] = db_error('syntax error at or near "SELEC"')

    with pytest.raises(ExecutionError, match="syntax error"):
        await execute_sql_query(session, "SELEC 1")
    assert session.rollbacks == 1


@pytest.mark.asyncio
async def test_unreachable_server_becomes_execution_error():
    """Connection failures from the driver are not SQLAlchemy errors"""
    session = FakeSession()
    session.responses["SELECT 1"] = ConnectionRefusedError(111, "Connect call failed")

    with pytest.raises(ExecutionError, match="Connect call failed"):
        await execute_sql_query(session, "SELECT 1")


@pytest.mark.asyncio
async def test_failed_rollback_keeps_execution_error():
    session = FakeSession()
    session.responses["SELECT 1"] = ConnectionRefusedError(111, "Connect call failed")
    session.rollback_error = ConnectionResetError(104, "Connection reset by peer")

    with pytest.raises(ExecutionError, match="Connect call failed"):
        await execute_sql_query(session, "SELECT 1")
    assert session.rollbacks == 1
