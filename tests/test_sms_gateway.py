from urllib.parse import parse_qs

import httpx
import pytest

from vetclinic.core.exceptions import GatewayError
from vetclinic.modules.reminders.gateway import SemaphoreGateway

API_URL = "https://api.semaphore.co/api/v4/messages"


@pytest.mark.asyncio
async def test_posts_form_encoded_message():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["path"] = request.url.path
        captured["content_type"] = request.headers["content-type"]
        captured["form"] = parse_qs(request.content.decode())
        return httpx.Response(200, json=[{"message_id": 1, "status": "Queued"}])

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        gateway = SemaphoreGateway(api_url=API_URL, api_key="key-123", sender_name="FixUp", client=client)
        await gateway.send("09171234567", "Hello")

    assert captured["path"] == "/api/v4/messages"
    assert captured["content_type"] == "application/x-www-form-urlencoded"
    assert captured["form"] == {
        "apikey": ["key-123"],
        "number": ["09171234567"],
        "message": ["Hello"],
        "sendername": ["FixUp"],
    }


@pytest.mark.asyncio
async def test_non_2xx_is_a_gateway_error():
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(400, text="Invalid number")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        gateway = SemaphoreGateway(api_url=API_URL, api_key="key-123", client=client)
        with pytest.raises(GatewayError) as excinfo:
            await gateway.send("bad", "Hello")

    assert "Invalid number" in excinfo.value.detail
    assert excinfo.value.status_code == 502


@pytest.mark.asyncio
async def test_timeout_is_a_gateway_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        gateway = SemaphoreGateway(api_url=API_URL, api_key="key-123", client=client)
        with pytest.raises(GatewayError, match="timed out"):
            await gateway.send("09171234567", "Hello")


@pytest.mark.asyncio
async def test_network_error_is_a_gateway_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("boom", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        gateway = SemaphoreGateway(api_url=API_URL, api_key="key-123", client=client)
        with pytest.raises(GatewayError, match="unavailable"):
            await gateway.send("09171234567", "Hello")


@pytest.mark.asyncio
async def test_missing_api_key_fails_without_calling_provider():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        gateway = SemaphoreGateway(api_url=API_URL, api_key="", client=client)
        with pytest.raises(GatewayError):
            await gateway.send("09171234567", "Hello")

    assert calls == []
