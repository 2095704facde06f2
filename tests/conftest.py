# tests/conftest.py

import json
import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel
from unittest.mock import AsyncMock

from chatrelay import create_app
from chatrelay.core.config import Settings
from chatrelay.core.database import build_engine, init_db
from chatrelay.core.flowise_client import FlowiseClient
from chatrelay.core.lark_client import LarkClient
from chatrelay.services.assembler import ConversationAssembler
from chatrelay.services.event_ledger import EventLedger
from chatrelay.services.message_store import MessageStore
from chatrelay.services.teams_service import TeamsRelayService
from chatrelay.services.webhook_service import LarkWebhookService


@pytest.fixture
def test_settings():
    """Settings with valid looking Lark credentials"""
    settings = Settings()
    settings.LARK_APP_ID = "cli_test_app_id"
    settings.LARK_APP_SECRET = "test_app_secret"
    settings.LARK_DOMAIN = "https://open.larksuite.test"
    settings.FLOWISE_API_URL = "http://flowise.test/api/v1/prediction/chatflow"
    settings.DATABASE_URL = "sqlite://"
    return settings


@pytest.fixture
def engine():
    """Fresh in-memory database for each test."""
    test_engine = build_engine("sqlite://")
    init_db(test_engine)
    yield test_engine
    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture
def store(engine):
    return MessageStore(engine)


@pytest.fixture
def ledger(engine):
    return EventLedger(engine)


@pytest.fixture
def mock_lark(test_settings):
    """Real Lark client with the network reply mocked out."""
    lark = LarkClient(
        test_settings.LARK_APP_ID,
        test_settings.LARK_APP_SECRET,
        base_url=test_settings.LARK_DOMAIN,
    )
    lark.reply_message = AsyncMock(return_value={"code": 0, "msg": "success"})
    return lark


@pytest.fixture
def mock_flowise(test_settings):
    flowise = FlowiseClient(test_settings.FLOWISE_API_URL)
    flowise.query = AsyncMock(return_value="generated answer")
    return flowise


@pytest.fixture
def webhook_service(mock_lark, ledger, store, mock_flowise, test_settings):
    return LarkWebhookService(
        lark=mock_lark,
        ledger=ledger,
        store=store,
        assembler=ConversationAssembler(store),
        flowise=mock_flowise,
        settings=test_settings,
    )


@pytest.fixture
def app(test_settings, engine, webhook_service, mock_flowise):
    """Create application for testing."""
    app = create_app(settings=test_settings, engine=engine)
    app.state.webhook_service = webhook_service
    app.state.teams_service = TeamsRelayService(mock_flowise)
    return app


@pytest.fixture
def client(app):
    """Create a test client for the app."""
    return TestClient(app)


@pytest.fixture
def lark_message_payload():
    """Generate a Lark im.message.receive_v1 event callback."""

    def _create_payload(
        text="hello",
        event_id="ev_0001",
        message_id="om_0001",
        chat_id="oc_chat",
        user_id="u_sender",
        chat_type="p2p",
        message_type="text",
        event_type="im.message.receive_v1",
    ):
        return {
            "schema": "2.0",
            "header": {
                "event_id": event_id,
                "event_type": event_type,
                "create_time": "1700000000000",
                "token": "verification_token",
                "app_id": "cli_test_app_id",
                "tenant_key": "tenant",
            },
            "event": {
                "sender": {
                    "sender_id": {
                        "union_id": "on_union",
                        "user_id": user_id,
                        "open_id": "ou_open",
                    },
                    "sender_type": "user",
                    "tenant_key": "tenant",
                },
                "message": {
                    "message_id": message_id,
                    "chat_id": chat_id,
                    "chat_type": chat_type,
                    "message_type": message_type,
                    "content": json.dumps({"text": text}),
                    "create_time": "1700000000000",
                },
            },
        }

    return _create_payload
