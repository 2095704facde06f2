# chatrelay/core/lark_client.py

from typing import Any, Dict, Optional
import json
import logging
import re
import time

import httpx

from chatrelay.core.errors import LarkAPIError, ValidationError

# Refresh the tenant token this many seconds before Lark expires it
TOKEN_REFRESH_MARGIN = 60

MENTION_PATTERN = re.compile(r"@_user_\d+")


class LarkClient:
    """Client for interacting with the Lark Open API"""

    def __init__(
        self,
        app_id: str,
        app_secret: str,
        base_url: str = "https://open.larksuite.com",
    ):
        """Initialize Lark client with app credentials"""
        self.app_id = app_id
        self.app_secret = app_secret
        self.base_url = base_url.rstrip("/")
        self._token: Optional[str] = None
        self._token_expires_at = 0.0

    async def get_tenant_access_token(self) -> str:
        """Return a cached tenant access token, fetching a new one when stale."""
        if self._token and time.monotonic() < self._token_expires_at:
            return self._token

        url = f"{self.base_url}/open-apis/auth/v3/tenant_access_token/internal"
        payload = {"app_id": self.app_id, "app_secret": self.app_secret}

        async with httpx.AsyncClient() as client:
            response = await client.post(url, json=payload)

        data = self._parse_response(response, "fetch tenant access token")
        if not data.get("tenant_access_token"):
            raise LarkAPIError("Failed to fetch tenant access token: no token in response")
        self._token = data["tenant_access_token"]
        self._token_expires_at = (
            time.monotonic() + int(data.get("expire", 0)) - TOKEN_REFRESH_MARGIN
        )
        return self._token

    def _prepare_reply_payload(self, text: str) -> Dict[str, Any]:
        """Prepare the text reply payload"""
        return {
            "msg_type": "text",
            "content": json.dumps({"text": text}, ensure_ascii=False),
        }

    async def reply_message(self, message_id: str, text: str) -> Dict[str, Any]:
        """Reply to a message in the chat it came from."""
        token = await self.get_tenant_access_token()
        url = f"{self.base_url}/open-apis/im/v1/messages/{message_id}/reply"
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json; charset=utf-8",
        }

        async with httpx.AsyncClient() as client:
            response = await client.post(
                url, headers=headers, json=self._prepare_reply_payload(text)
            )

        return self._parse_response(response, f"reply to message {message_id}")

    @staticmethod
    def _parse_response(response: httpx.Response, action: str) -> Dict[str, Any]:
        if response.status_code != 200:
            raise LarkAPIError(
                f"Failed to {action}: HTTP {response.status_code} {response.text}"
            )
        try:
            data = response.json()
        except json.JSONDecodeError as e:
            raise LarkAPIError(f"Failed to {action}: invalid JSON body") from e

        if data.get("code") != 0:
            raise LarkAPIError(
                f"Failed to {action}: code {data.get('code')} {data.get('msg')}"
            )
        return data

    @staticmethod
    def extract_message_data(body: Dict[str, Any]) -> Dict[str, Any]:
        """Extract relevant data from an im.message.receive_v1 event"""
        try:
            message = body["event"]["message"]
            chat_id = message["chat_id"]
            sender_id = body["event"]["sender"]["sender_id"]["user_id"]
            return {
                "event_id": body["header"]["event_id"],
                "message_id": message["message_id"],
                "chat_id": chat_id,
                "sender_id": sender_id,
                "session_id": f"{chat_id}{sender_id}",
                "chat_type": message.get("chat_type"),
                "message_type": message.get("message_type"),
                "content": message.get("content", ""),
            }
        except (KeyError, TypeError) as e:
            logging.error(f"Error extracting message data: {str(e)}")
            raise ValidationError(f"Malformed message event: missing {str(e)}") from e

    @staticmethod
    def parse_text_content(content: str) -> str:
        """Decode the JSON content of a text message"""
        try:
            text = json.loads(content).get("text")
        except (json.JSONDecodeError, TypeError, AttributeError) as e:
            raise ValidationError("Message content is not valid JSON") from e
        if not isinstance(text, str):
            raise ValidationError("Message content has no text")
        return text

    @staticmethod
    def strip_mentions(text: str) -> str:
        """Remove @_user_N mention placeholders"""
        return MENTION_PATTERN.sub("", text).strip()
