# chatrelay/services/webhook_service.py

import logging
from typing import Any, Dict, Optional

import httpx

from chatrelay.core.config import Settings
from chatrelay.core.errors import LarkAPIError, UpstreamError, ValidationError
from chatrelay.core.flowise_client import FlowiseClient
from chatrelay.core.lark_client import LarkClient
from chatrelay.services import prompts
from chatrelay.services.assembler import ConversationAssembler
from chatrelay.services.doctor import doctor
from chatrelay.services.event_ledger import EventLedger, RecordResult
from chatrelay.services.message_store import MessageStore
from chatrelay.services.state import CommandRequest, QueryPayload

logger = logging.getLogger(__name__)

MESSAGE_RECEIVE_EVENT = "im.message.receive_v1"
SUPPORTED_CHAT_TYPES = ("p2p", "group")


class LarkWebhookService:
    def __init__(
        self,
        lark: LarkClient,
        ledger: EventLedger,
        store: MessageStore,
        assembler: ConversationAssembler,
        flowise: FlowiseClient,
        settings: Settings,
    ):
        self.lark = lark
        self.ledger = ledger
        self.store = store
        self.assembler = assembler
        self.flowise = flowise
        self.settings = settings
        self.commands = {
            "/help": self.cmd_help,
            "/clear": self.cmd_clear,
        }

    async def handle_webhook(self, body: Dict[str, Any], debug: bool = False):
        """Handle an incoming Lark event callback"""
        if not isinstance(body, dict):
            raise ValidationError("Webhook body must be a JSON object")

        if body.get("encrypt"):
            logger.info("user enable encrypt key")
            return {"code": 1, "message": prompts.ENCRYPT_KEY_ENABLED}

        if body.get("type") == "url_verification":
            logger.info("deal url_verification")
            return {"challenge": body.get("challenge")}

        if not body.get("header") or debug:
            logger.info("enter doctor")
            return doctor(self.settings)

        if not isinstance(body["header"], dict):
            raise ValidationError("Webhook header must be a JSON object")

        if body["header"].get("event_type") != MESSAGE_RECEIVE_EVENT:
            logger.info("return without other log")
            return {"code": 2}

        return await self.handle_message_event(body)

    async def handle_message_event(self, body: Dict[str, Any]):
        message_data = self.lark.extract_message_data(body)
        event_id = message_data["event_id"]
        message_id = message_data["message_id"]

        if self.ledger.exists(event_id):
            logger.info(f"skip repeat event {event_id}")
            return {"code": 1}

        # The unique insert is the real guard; exists() can race
        if self.ledger.record_if_new(event_id) == RecordResult.DUPLICATE:
            return {"code": 1, "message": "Duplicate event ID"}

        if message_data["chat_type"] not in SUPPORTED_CHAT_TYPES:
            logger.info(f"skip unsupported chat type {message_data['chat_type']}")
            return {"code": 2}

        if message_data["message_type"] != "text":
            await self.reply(message_id, prompts.UNSUPPORTED_FORMAT)
            logger.info("skip and reply not support")
            return {"code": 0}

        text = self.lark.parse_text_content(message_data["content"])
        return await self.handle_text(
            text, message_data["session_id"], message_id, event_id
        )

    async def handle_text(
        self, text: str, session_id: str, message_id: str, event_id: str
    ):
        """Answer a text message, either as a command or a conversational turn"""
        question = self.lark.strip_mentions(text)
        logger.info(f"question: {question}")

        if not question:
            # Mention with no text: nothing to ask Flowise
            await self.reply(message_id, prompts.HELP_TEXT)
            return {"code": 0}

        if question.startswith("/"):
            return await self.handle_command(
                CommandRequest(
                    action=question, session_id=session_id, message_id=message_id
                )
            )

        prompt = self.assembler.build_prompt(session_id, question)
        try:
            answer = await self.flowise.query(QueryPayload.from_messages(prompt))
        except UpstreamError as e:
            logger.error(f"Error answering event {event_id}: {str(e)}")
            await self.reply(message_id, prompts.GENERIC_FAILURE)
            raise

        self.store.append(session_id, question, answer)
        await self.reply(message_id, answer)

        # Best effort: the id was recorded on arrival, so this usually reports a duplicate
        if self.ledger.record_if_new(event_id, content=text) == RecordResult.DUPLICATE:
            logger.info(f"Event {event_id} already recorded, content not stored")
        return {"code": 0}

    async def handle_command(self, command: CommandRequest):
        name = command.action.split()[0].lower()
        handler = self.commands.get(name, self.cmd_help)
        await handler(command)
        return {"code": 0}

    async def cmd_help(self, command: CommandRequest):
        await self.reply(command.message_id, prompts.HELP_TEXT)

    async def cmd_clear(self, command: CommandRequest):
        self.store.clear(command.session_id)
        await self.reply(command.message_id, prompts.CLEAR_CONFIRMATION)

    async def reply(self, message_id: str, text: str) -> Optional[Dict[str, Any]]:
        """Reply through Lark; failures are logged and never raised"""
        try:
            return await self.lark.reply_message(message_id, text)
        except (LarkAPIError, httpx.HTTPError) as e:
            logger.error(f"send message to Lark error for {message_id}: {str(e)}")
            return None
