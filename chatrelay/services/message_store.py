# chatrelay/services/message_store.py

import logging
from typing import List

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select, delete

from chatrelay.core.errors import StorageError, ValidationError
from chatrelay.data_schemas import ConversationTurn

logger = logging.getLogger(__name__)

# Maximum total size (question + answer characters) kept per session
TRIM_BUDGET = 1024


class MessageStore:
    """Durable question/answer log per session with a size-bounded retention.

    Every append is followed by a separate trim pass that walks the session
    newest first and drops each turn once the running size exceeds
    TRIM_BUDGET. The two steps are not transactional: a failure between them
    leaves the session over budget until the next append.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def append(self, session_id: str, question: str, answer: str) -> ConversationTurn:
        """Store a completed exchange and trim the session."""
        if not question or not answer:
            raise ValidationError("Question or answer is missing or empty.")

        turn = ConversationTurn(
            session_id=session_id,
            question=question,
            answer=answer,
            size=len(question) + len(answer),
        )
        try:
            with Session(self.engine) as session:
                session.add(turn)
                session.commit()
                session.refresh(turn)
        except SQLAlchemyError as e:
            logger.error(f"Error saving conversation for {session_id}: {str(e)}")
            raise StorageError(f"Failed to save conversation: {str(e)}") from e

        self.trim(session_id)
        return turn

    def history(self, session_id: str) -> List[ConversationTurn]:
        """Return all turns for the session, oldest first."""
        try:
            with Session(self.engine) as session:
                return list(
                    session.exec(
                        select(ConversationTurn)
                        .where(ConversationTurn.session_id == session_id)
                        .order_by(ConversationTurn.created_at, ConversationTurn.id)
                    ).all()
                )
        except SQLAlchemyError as e:
            logger.error(f"Error reading history for {session_id}: {str(e)}")
            raise StorageError(f"Failed to read conversation: {str(e)}") from e

    def clear(self, session_id: str) -> None:
        """Delete every turn of the session. No-op for unknown sessions."""
        try:
            with Session(self.engine) as session:
                session.exec(
                    delete(ConversationTurn).where(
                        ConversationTurn.session_id == session_id
                    )
                )
                session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error clearing history for {session_id}: {str(e)}")
            raise StorageError(f"Failed to clear conversation: {str(e)}") from e

    def trim(self, session_id: str) -> int:
        """Drop the oldest turns that push the session past TRIM_BUDGET.

        Returns the number of deleted turns.
        """
        deleted = 0
        try:
            with Session(self.engine) as session:
                turns = session.exec(
                    select(ConversationTurn)
                    .where(ConversationTurn.session_id == session_id)
                    .order_by(
                        ConversationTurn.created_at.desc(),
                        ConversationTurn.id.desc(),
                    )
                ).all()

                total_size = 0
                for turn in turns:
                    total_size += turn.size
                    if total_size > TRIM_BUDGET:
                        session.delete(turn)
                        session.commit()
                        deleted += 1
        except SQLAlchemyError as e:
            logger.error(f"Error trimming history for {session_id}: {str(e)}")
            raise StorageError(f"Failed to trim conversation: {str(e)}") from e

        if deleted:
            logger.debug(f"Trimmed {deleted} oldest turns for session {session_id}")
        return deleted
