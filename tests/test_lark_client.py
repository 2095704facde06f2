# tests/test_lark_client.py

import json
import pytest
from unittest.mock import patch, MagicMock, AsyncMock
import httpx

from chatrelay.core.errors import LarkAPIError, ValidationError
from chatrelay.core.lark_client import LarkClient

BASE_URL = "https://open.larksuite.test"


def token_response(token="t-token", expire=7200):
    return httpx.Response(
        200, json={"code": 0, "msg": "ok", "tenant_access_token": token, "expire": expire}
    )


def reply_response():
    return httpx.Response(200, json={"code": 0, "msg": "success", "data": {"message_id": "om_reply"}})


def mock_async_client(*responses):
    mock_client = MagicMock()
    mock_client.__aenter__.return_value.post = AsyncMock(side_effect=list(responses))
    return mock_client


def test_lark_client_init():
    client = LarkClient("cli_app", "secret", base_url=BASE_URL + "/")
    assert client.app_id == "cli_app"
    assert client.app_secret == "secret"
    assert client.base_url == BASE_URL


def test_prepare_reply_payload():
    client = LarkClient("cli_app", "secret")
    payload = client._prepare_reply_payload("你好")
    assert payload["msg_type"] == "text"
    assert json.loads(payload["content"]) == {"text": "你好"}


@pytest.mark.asyncio
async def test_reply_message_fetches_token_once():
    client = LarkClient("cli_app", "secret", base_url=BASE_URL)
    mock_client = mock_async_client(token_response(), reply_response(), reply_response())

    with patch("httpx.AsyncClient", return_value=mock_client):
        await client.reply_message("om_1", "first")
        result = await client.reply_message("om_2", "second")

    assert result["data"]["message_id"] == "om_reply"
    post = mock_client.__aenter__.return_value.post
    assert post.call_count == 3

    token_call, first_reply, second_reply = post.call_args_list
    assert token_call.args[0] == f"{BASE_URL}/open-apis/auth/v3/tenant_access_token/internal"
    assert token_call.kwargs["json"] == {"app_id": "cli_app", "app_secret": "secret"}
    assert first_reply.args[0] == f"{BASE_URL}/open-apis/im/v1/messages/om_1/reply"
    assert first_reply.kwargs["headers"]["Authorization"] == "Bearer t-token"
    assert second_reply.args[0] == f"{BASE_URL}/open-apis/im/v1/messages/om_2/reply"


@pytest.mark.asyncio
async def test_expired_token_is_refreshed():
    client = LarkClient("cli_app", "secret", base_url=BASE_URL)
    # expire shorter than the refresh margin makes the token stale immediately
    mock_client = mock_async_client(
        token_response("t-old", expire=10),
        reply_response(),
        token_response("t-new"),
        reply_response(),
    )

    with patch("httpx.AsyncClient", return_value=mock_client):
        await client.reply_message("om_1", "first")
        await client.reply_message("om_2", "second")

    last_reply = mock_client.__aenter__.return_value.post.call_args_list[-1]
    assert last_reply.kwargs["headers"]["Authorization"] == "Bearer t-new"


@pytest.mark.asyncio
async def test_reply_message_api_error():
    client = LarkClient("cli_app", "secret", base_url=BASE_URL)
    error = httpx.Response(200, json={"code": 230002, "msg": "Bot is not in the chat"})
    mock_client = mock_async_client(token_response(), error)

    with patch("httpx.AsyncClient", return_value=mock_client):
        with pytest.raises(LarkAPIError, match="230002"):
            await client.reply_message("om_1", "text")


@pytest.mark.asyncio
async def test_token_http_error():
    client = LarkClient("cli_app", "wrong", base_url=BASE_URL)
    mock_client = mock_async_client(httpx.Response(400, text="bad request"))

    with patch("httpx.AsyncClient", return_value=mock_client):
        with pytest.raises(LarkAPIError, match="HTTP 400"):
            await client.get_tenant_access_token()


def test_extract_message_data(lark_message_payload):
    body = lark_message_payload(
        text="hi", event_id="ev_9", message_id="om_9", chat_id="oc_1", user_id="u_2",
        chat_type="group",
    )
    data = LarkClient.extract_message_data(body)

    assert data["event_id"] == "ev_9"
    assert data["message_id"] == "om_9"
    assert data["session_id"] == "oc_1u_2"
    assert data["chat_type"] == "group"
    assert data["message_type"] == "text"
    assert json.loads(data["content"]) == {"text": "hi"}


def test_extract_message_data_malformed():
    body = {"header": {"event_id": "ev_1", "event_type": "im.message.receive_v1"}}
    with pytest.raises(ValidationError):
        LarkClient.extract_message_data(body)


def test_parse_text_content():
    assert LarkClient.parse_text_content('{"text": "@_user_1 hello"}') == "@_user_1 hello"
    with pytest.raises(ValidationError):
        LarkClient.parse_text_content("not json")
    with pytest.raises(ValidationError):
        LarkClient.parse_text_content('{"image_key": "img_1"}')


def test_strip_mentions():
    assert LarkClient.strip_mentions("@_user_1 what is up") == "what is up"
    assert LarkClient.strip_mentions("@_user_1 @_user_12 /clear") == "/clear"
    assert LarkClient.strip_mentions("plain") == "plain"
