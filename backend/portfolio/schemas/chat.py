from pydantic import BaseModel, Field, field_validator
from typing import List, Literal, Optional

class HistoryMessage(BaseModel):
    # System messages are never accepted from the client
    role: Literal["user", "assistant"]
    content: str

class ChatRequest(BaseModel):
    message: Optional[str] = None
    history: Optional[List[HistoryMessage]] = Field(default_factory=list)
    session_id: Optional[str] = Field(None, alias="sessionId")
    conversation_id: Optional[int] = Field(None, alias="conversationId")

    class Config:
        populate_by_name = True

    @field_validator("history", mode="before")
    @classmethod
    def null_history_is_empty(cls, value):
        return [] if value is None else value

class UsageResponse(BaseModel):
    usage: int
    limit: int
    remaining: int
    reset_date: str = Field(..., serialization_alias="resetDate")

class SuggestedQuestionsResponse(BaseModel):
    suggested_questions: List[str] = Field(..., serialization_alias="suggestedQuestions")
