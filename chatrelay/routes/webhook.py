# chatrelay/routes/webhook.py

import json
from typing import Optional

from fastapi import APIRouter, Depends, Request

from chatrelay.core.errors import ValidationError
from chatrelay.services.webhook_service import LarkWebhookService

router = APIRouter()


def get_webhook_service(request: Request) -> LarkWebhookService:
    return request.app.state.webhook_service


async def read_json_body(request: Request):
    try:
        return await request.json()
    except json.JSONDecodeError as e:
        raise ValidationError("Request body is not valid JSON") from e


@router.post("/webhook")
async def webhook(
    request: Request,
    debug: Optional[str] = None,
    webhook_service: LarkWebhookService = Depends(get_webhook_service),
):
    body = await read_json_body(request)
    # Any non-empty debug value runs the doctor
    return await webhook_service.handle_webhook(body, debug=bool(debug))
