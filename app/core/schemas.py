from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field


# =========================
# QUERY
# =========================
class QueryRequest(BaseModel):
    userInput: str = Field(min_length=1)


class QueryResponse(BaseModel):
    success: bool
    naturalLanguageResponse: Optional[str] = None
    error: Optional[str] = None


# =========================
# SCHEMA / LLM
# =========================
class TableColumns(BaseModel):
    """One row of the schema introspection query."""

    table_name: str
    columns: List[str] = []


class ChatMessage(BaseModel):
    role: str = "assistant"
    content: Optional[str] = None


class ChatChoice(BaseModel):
    message: ChatMessage

    model_config = ConfigDict(extra="ignore")


class ChatCompletion(BaseModel):
    """The slice of a chat-completion reply this service reads."""

    choices: List[ChatChoice] = Field(min_length=1)

    model_config = ConfigDict(extra="ignore")


class GeneratedQuery(BaseModel):
    query: str

    model_config = ConfigDict(extra="ignore")
