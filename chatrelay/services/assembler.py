# chatrelay/services/assembler.py

from typing import List

from chatrelay.services.message_store import MessageStore
from chatrelay.services.state import Message


class ConversationAssembler:
    """Turns the stored history of a session into a linear prompt."""

    def __init__(self, store: MessageStore):
        self.store = store

    def build_prompt(self, session_id: str, question: str) -> List[Message]:
        prompt: List[Message] = []
        for turn in self.store.history(session_id):
            prompt.append(Message(role="user", content=turn.question))
            prompt.append(Message(role="assistant", content=turn.answer))
        prompt.append(Message(role="user", content=question))
        return prompt
