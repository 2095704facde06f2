from pydantic import BaseModel
from typing import Any, Dict, List, Literal, Optional


# Define Message structure for better type safety
class Message(BaseModel):
    """A message in the conversation."""

    role: Literal["user", "system", "assistant"]
    content: str


class QueryPayload(BaseModel):
    """
    Request body sent to the Flowise prediction endpoint.

    `question` is either a plain string (Teams relay) or the full assembled
    conversation (Lark relay). `overrideConfig` carries the session id so
    Flowise can keep its own memory per conversation.
    """

    question: Any
    overrideConfig: Optional[Dict[str, Any]] = None

    @classmethod
    def from_messages(cls, messages: List[Message]) -> "QueryPayload":
        return cls(question=[m.model_dump() for m in messages])

    @classmethod
    def for_session(cls, question: str, session_id: str) -> "QueryPayload":
        return cls(question=question, overrideConfig={"sessionId": session_id})

    def to_body(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class CommandRequest(BaseModel):
    """A slash command typed by the user."""

    action: str
    session_id: str
    message_id: str
