"""httpx transports against a mocked network."""

import json

import httpx
import pytest

from clients import PayPalClient, SendGridMailer, WebhookClient
from errors import TransportError


def _client(handler, **kwargs) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), **kwargs)


@pytest.mark.asyncio
async def test_paypal_lookup_uses_bearer_token():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path == "/v1/oauth2/token":
            assert request.headers["Authorization"].startswith("Basic ")
            return httpx.Response(200, json={"access_token": "tok"})
        assert request.url.path == "/v2/checkout/orders/PAY-123"
        assert request.headers["Authorization"] == "Bearer tok"
        return httpx.Response(200, json={"id": "PAY-123", "status": "COMPLETED"})

    async with _client(handler, base_url="https://paypal.test") as http:
        details = await PayPalClient(http, "id", "secret").lookup_payment("PAY-123")

    assert details["status"] == "COMPLETED"
    assert len(seen) == 2


@pytest.mark.asyncio
async def test_paypal_unknown_payment_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/v1/oauth2/token":
            return httpx.Response(200, json={"access_token": "tok"})
        return httpx.Response(404, json={"name": "RESOURCE_NOT_FOUND"})

    async with _client(handler, base_url="https://paypal.test") as http:
        with pytest.raises(TransportError):
            await PayPalClient(http, "id", "secret").lookup_payment("nope")


@pytest.mark.asyncio
async def test_paypal_bad_credentials_raise():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"error": "invalid_client"})

    async with _client(handler, base_url="https://paypal.test") as http:
        with pytest.raises(TransportError):
            await PayPalClient(http, "id", "wrong").lookup_payment("PAY-123")


@pytest.mark.asyncio
async def test_webhook_posts_json():
    bodies = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(204)

    async with _client(handler) as http:
        await WebhookClient(http).post_json("https://hooks.test/x", {"content": "hi"})

    assert bodies == [{"content": "hi"}]


@pytest.mark.asyncio
async def test_webhook_network_error_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as http:
        with pytest.raises(TransportError):
            await WebhookClient(http).post_json("https://hooks.test/x", {"content": "hi"})


@pytest.mark.asyncio
async def test_sendgrid_payload():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(202)

    async with _client(handler) as http:
        mailer = SendGridMailer(http, "SG.key", "shop@example.com", sender_name="Shop")
        await mailer.send_mail("ada@example.com", "Hello", "<p>Hi</p>")

    request = requests[0]
    body = json.loads(request.content)
    assert request.url == "https://api.sendgrid.com/v3/mail/send"
    assert request.headers["Authorization"] == "Bearer SG.key"
    assert body["personalizations"] == [{"to": [{"email": "ada@example.com"}]}]
    assert body["from"] == {"email": "shop@example.com", "name": "Shop"}
    assert body["content"] == [{"type": "text/html", "value": "<p>Hi</p>"}]


@pytest.mark.asyncio
async def test_sendgrid_rejection_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, text="forbidden")

    async with _client(handler) as http:
        with pytest.raises(TransportError):
            await SendGridMailer(http, "SG.key", "shop@example.com").send_mail("a@b.c", "s", "b")
