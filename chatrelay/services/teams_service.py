# chatrelay/services/teams_service.py

import logging
from typing import Any, Dict

from chatrelay.core.errors import UpstreamError, ValidationError
from chatrelay.core.flowise_client import FlowiseClient
from chatrelay.services import prompts

logger = logging.getLogger(__name__)


class TeamsRelayService:
    """Stateless relay for Microsoft Teams: Flowise keeps the session memory"""

    def __init__(self, flowise: FlowiseClient):
        self.flowise = flowise

    async def handle(self, body: Dict[str, Any]) -> str:
        text = body.get("text") if isinstance(body, dict) else None
        session_id = body.get("sessionId") if isinstance(body, dict) else None
        if not text or not session_id:
            raise ValidationError(prompts.TEAMS_INVALID_INPUT)

        try:
            return await self.flowise.ask(text, session_id)
        except UpstreamError as e:
            logger.error(f"Error handling Teams webhook: {str(e)}")
            raise
