class SqlAssistantError(Exception):
    """Base error for the question -> SQL -> answer flow."""


class ExecutionError(SqlAssistantError):
    """The execute_sql_query routine failed (bad SQL, connection error, ...)."""


class GenerationError(SqlAssistantError):
    """The model reply could not be turned into a SQL query."""
