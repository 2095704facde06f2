from .conversation_turn import ConversationTurn
from .seen_event import SeenEvent

__all__ = ["ConversationTurn", "SeenEvent"]
