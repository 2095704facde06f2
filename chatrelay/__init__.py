import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from chatrelay.core.config import Settings, settings as default_settings, configure_logging
from chatrelay.core.database import engine as default_engine, init_db
from chatrelay.core.errors import StorageError, UpstreamError, ValidationError
from chatrelay.core.flowise_client import FlowiseClient
from chatrelay.core.lark_client import LarkClient
from chatrelay.routes.teams import router as teams_router
from chatrelay.routes.webhook import router as webhook_router
from chatrelay.services import prompts
from chatrelay.services.assembler import ConversationAssembler
from chatrelay.services.event_ledger import EventLedger
from chatrelay.services.message_store import MessageStore
from chatrelay.services.teams_service import TeamsRelayService
from chatrelay.services.webhook_service import LarkWebhookService


def create_app(settings: Settings = None, engine: Engine = None):
    settings = settings or default_settings
    engine = engine or default_engine

    # Initialize FastAPI app
    app = FastAPI(title="Lark Flowise Relay")

    # Configure logging
    configure_logging()

    # Initialize database
    init_db(engine)

    # Build the shared clients and services once; handlers read them from app.state
    lark = LarkClient(
        settings.LARK_APP_ID, settings.LARK_APP_SECRET, base_url=settings.LARK_DOMAIN
    )
    flowise = FlowiseClient(settings.FLOWISE_API_URL)
    store = MessageStore(engine)
    app.state.settings = settings
    app.state.webhook_service = LarkWebhookService(
        lark=lark,
        ledger=EventLedger(engine),
        store=store,
        assembler=ConversationAssembler(store),
        flowise=flowise,
        settings=settings,
    )
    app.state.teams_service = TeamsRelayService(flowise)

    # Register routes
    app.include_router(webhook_router)
    app.include_router(teams_router)

    @app.get("/health")
    async def health_check():
        return {"status": "UP", "message": "Chat relay is running"}

    @app.get("/hello")
    def hello():
        return {"message": "Hello, World!"}

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(UpstreamError)
    @app.exception_handler(StorageError)
    async def internal_error_handler(request: Request, exc: Exception):
        logging.error(f"Error handling {request.url.path}: {str(exc)}")
        return JSONResponse(status_code=500, content={"error": prompts.INTERNAL_ERROR})

    @app.exception_handler(404)
    async def not_found_handler(request: Request, exc: Exception):
        return JSONResponse(status_code=404, content={"error": "Not Found"})

    return app
