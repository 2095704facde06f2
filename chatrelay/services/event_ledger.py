# chatrelay/services/event_ledger.py

import logging
from enum import Enum
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from chatrelay.core.errors import StorageError
from chatrelay.data_schemas import SeenEvent

logger = logging.getLogger(__name__)


class RecordResult(str, Enum):
    """Outcome of a ledger insert attempt."""

    INSERTED = "inserted"
    DUPLICATE = "duplicate"


class EventLedger:
    """Set of already accepted webhook event ids.

    The unique constraint on SeenEvent.event_id is the only authoritative
    guard. `exists` is a cheap pre-check; two concurrent deliveries can both
    pass it, and only one of them will get INSERTED from `record_if_new`.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def exists(self, event_id: str) -> bool:
        try:
            with Session(self.engine) as session:
                found = session.exec(
                    select(SeenEvent).where(SeenEvent.event_id == event_id)
                ).first()
                return found is not None
        except SQLAlchemyError as e:
            logger.error(f"Error looking up event {event_id}: {str(e)}")
            raise StorageError(f"Failed to look up event: {str(e)}") from e

    def record_if_new(self, event_id: str, content: Optional[str] = None) -> RecordResult:
        """Insert the event id, reporting a duplicate instead of raising."""
        try:
            with Session(self.engine) as session:
                session.add(SeenEvent(event_id=event_id, content=content))
                session.commit()
        except IntegrityError:
            logger.info(f"Duplicate event ID: {event_id}")
            return RecordResult.DUPLICATE
        except SQLAlchemyError as e:
            logger.error(f"Error recording event {event_id}: {str(e)}")
            raise StorageError(f"Failed to record event: {str(e)}") from e
        return RecordResult.INSERTED
