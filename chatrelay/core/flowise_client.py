# chatrelay/core/flowise_client.py

from typing import Any, Dict, Union
import json
import logging

import httpx

from chatrelay.core.errors import UpstreamError
from chatrelay.services.state import QueryPayload


class FlowiseClient:
    """Client for the Flowise prediction endpoint"""

    def __init__(self, api_url: str):
        self.api_url = api_url
        self.headers = {"Content-Type": "application/json"}

    async def query(self, payload: Union[QueryPayload, Dict[str, Any]]) -> str:
        """Send a payload to Flowise and return the generated text."""
        body = payload.to_body() if isinstance(payload, QueryPayload) else payload

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.api_url, headers=self.headers, json=body
                )
        except httpx.HTTPError as e:
            logging.error(f"Error querying Flowise API: {str(e)}")
            raise UpstreamError(f"Flowise API unreachable: {str(e)}") from e

        if not response.is_success:
            logging.error(
                f"Flowise API returned {response.status_code}: {response.text}"
            )
            raise UpstreamError(
                f"Flowise API returned an error: {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            result = response.json()
        except json.JSONDecodeError as e:
            logging.error(f"Flowise API returned non-JSON body: {response.text}")
            raise UpstreamError("Invalid response from Flowise API") from e

        text = result.get("text") if isinstance(result, dict) else None
        if not text or not isinstance(text, str):
            logging.error(f"Flowise API response has no text field: {result}")
            raise UpstreamError("Invalid response from Flowise API")
        return text

    async def ask(self, question: str, session_id: str) -> str:
        """Ask a single question, letting Flowise track the session itself."""
        return await self.query(QueryPayload.for_session(question, session_id))
