# chatrelay/data_schemas/conversation_turn.py

from sqlmodel import SQLModel, Field
from datetime import datetime, timezone


class ConversationTurn(SQLModel, table=True):
    """One completed question/answer exchange within a session"""
    __tablename__ = "conversation_turn"

    id: int = Field(default=None, primary_key=True)
    session_id: str = Field(index=True)  # chat id + sender id
    question: str
    answer: str
    size: int  # len(question) + len(answer)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
