"""Outbound transports: payment provider, team webhook, transactional mail"""

import logging
from typing import Optional, Protocol

import httpx

from errors import TransportError

logger = logging.getLogger(__name__)

SENDGRID_API_BASE = "https://api.sendgrid.com"


class PaymentProvider(Protocol):
    async def lookup_payment(self, payment_id: str) -> dict: ...


class WebhookTransport(Protocol):
    async def post_json(self, url: str, payload: dict) -> None: ...


class MailTransport(Protocol):
    async def send_mail(self, to: str, subject: str, html_body: str) -> None: ...


def _raise_for_status(response: httpx.Response, what: str) -> None:
    if response.is_success:
        return
    raise TransportError(f"{what} failed with HTTP {response.status_code}: {response.text[:200]}")


class PayPalClient:
    """Read-only PayPal Orders API client (client-credentials OAuth)"""

    def __init__(self, http: httpx.AsyncClient, client_id: str, client_secret: str):
        self._http = http
        self._client_id = client_id
        self._client_secret = client_secret

    async def _access_token(self) -> str:
        try:
            response = await self._http.post(
                "/v1/oauth2/token",
                data={"grant_type": "client_credentials"},
                auth=(self._client_id, self._client_secret),
            )
        except httpx.HTTPError as e:
            raise TransportError(f"PayPal token request failed: {e}") from e
        _raise_for_status(response, "PayPal token request")
        return response.json()["access_token"]

    async def lookup_payment(self, payment_id: str) -> dict:
        token = await self._access_token()
        try:
            response = await self._http.get(
                f"/v2/checkout/orders/{payment_id}",
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as e:
            raise TransportError(f"PayPal order lookup failed: {e}") from e
        _raise_for_status(response, f"PayPal order lookup for {payment_id}")
        return response.json()


class WebhookClient:
    def __init__(self, http: httpx.AsyncClient):
        self._http = http

    async def post_json(self, url: str, payload: dict) -> None:
        try:
            response = await self._http.post(url, json=payload)
        except httpx.HTTPError as e:
            raise TransportError(f"Webhook POST failed: {e}") from e
        _raise_for_status(response, "Webhook POST")


class SendGridMailer:
    """SendGrid v3 mail/send over httpx"""

    def __init__(self, http: httpx.AsyncClient, api_key: str, sender: str, sender_name: Optional[str] = None):
        self._http = http
        self._api_key = api_key
        self._sender = sender
        self._sender_name = sender_name

    def _payload(self, to: str, subject: str, html_body: str) -> dict:
        sender = {"email": self._sender}
        if self._sender_name:
            sender["name"] = self._sender_name
        return {
            "personalizations": [{"to": [{"email": to}]}],
            "from": sender,
            "subject": subject,
            "content": [{"type": "text/html", "value": html_body}],
        }

    async def send_mail(self, to: str, subject: str, html_body: str) -> None:
        try:
            response = await self._http.post(
                f"{SENDGRID_API_BASE}/v3/mail/send",
                json=self._payload(to, subject, html_body),
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
        except httpx.HTTPError as e:
            raise TransportError(f"SendGrid request failed: {e}") from e
        _raise_for_status(response, "SendGrid mail/send")
        logger.debug("SendGrid accepted message to %s (HTTP %s)", to, response.status_code)
