# chatrelay/data_schemas/seen_event.py

from sqlmodel import SQLModel, Field
from datetime import datetime, timezone
from typing import Optional


class SeenEvent(SQLModel, table=True):
    """Inbound webhook delivery that has already been accepted"""
    __tablename__ = "seen_event"

    id: int = Field(default=None, primary_key=True)
    event_id: str = Field(unique=True)  # Lark header.event_id
    # Raw message text. Stays empty in practice: the id is inserted on arrival
    # and the later insert carrying the text is rejected as a duplicate.
    content: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
