"""Checkout activities with fake transports."""

import pytest
from temporalio.exceptions import ApplicationError
from temporalio.testing import ActivityEnvironment

from activities import CheckoutActivities
from errors import TransportError
from models import CustomerEmail, Outcome, TeamAlert


class FakeProvider:
    def __init__(self, details=None, error=None):
        self.details = details or {}
        self.error = error
        self.calls = []

    async def lookup_payment(self, payment_id):
        self.calls.append(payment_id)
        if self.error:
            raise self.error
        return self.details


class FakeWebhooks:
    def __init__(self, error=None):
        self.error = error
        self.posts = []

    async def post_json(self, url, payload):
        if self.error:
            raise self.error
        self.posts.append((url, payload))


class FakeMailer:
    def __init__(self):
        self.sent = []

    async def send_mail(self, to, subject, html_body):
        self.sent.append((to, subject, html_body))


@pytest.fixture
def env():
    return ActivityEnvironment()


@pytest.mark.asyncio
async def test_lookup_payment_reads_status_and_payer(env):
    provider = FakeProvider(
        {
            "id": "PAY-123",
            "status": "COMPLETED",
            "payer": {"email_address": "ada@example.com", "name": {"given_name": "Ada", "surname": "Lovelace"}},
        }
    )
    activities = CheckoutActivities(payments=provider)

    lookup = await env.run(activities.lookup_payment, "PAY-123")

    assert provider.calls == ["PAY-123"]
    assert lookup.status == "COMPLETED"
    assert lookup.payer_email == "ada@example.com"
    assert lookup.payer_name == "Ada Lovelace"


@pytest.mark.asyncio
async def test_lookup_payment_without_status(env):
    activities = CheckoutActivities(payments=FakeProvider({"id": "PAY-9"}))

    lookup = await env.run(activities.lookup_payment, "PAY-9")

    assert lookup.status == ""
    assert lookup.payer_email is None


@pytest.mark.asyncio
async def test_lookup_payment_failure_is_non_retryable(env):
    activities = CheckoutActivities(payments=FakeProvider(error=TransportError("HTTP 401")))

    with pytest.raises(ApplicationError) as exc_info:
        await env.run(activities.lookup_payment, "PAY-123")

    assert exc_info.value.type == "PaymentLookupError"
    assert exc_info.value.non_retryable


@pytest.mark.asyncio
async def test_lookup_payment_without_provider(env):
    with pytest.raises(ApplicationError) as exc_info:
        await env.run(CheckoutActivities(payments=None).lookup_payment, "PAY-123")

    assert exc_info.value.type == "PaymentLookupError"


@pytest.mark.asyncio
async def test_team_alert_posted(env):
    webhooks = FakeWebhooks()
    activities = CheckoutActivities(None, webhooks=webhooks, order_alerts_webhook_url="https://hooks.test/orders")

    outcome = await env.run(activities.post_team_alert, TeamAlert(title="New order ORD-1", content="details"))

    assert outcome == Outcome.SENT.value
    url, payload = webhooks.posts[0]
    assert url == "https://hooks.test/orders"
    assert payload["content"] == "**New order ORD-1**\ndetails"


@pytest.mark.asyncio
async def test_team_alert_skipped_without_url(env):
    webhooks = FakeWebhooks()
    activities = CheckoutActivities(None, webhooks=webhooks)

    outcome = await env.run(activities.post_team_alert, TeamAlert(title="t", content="c"))

    assert outcome == Outcome.SKIPPED.value
    assert webhooks.posts == []


@pytest.mark.asyncio
async def test_team_alert_failure_propagates(env):
    activities = CheckoutActivities(
        None, webhooks=FakeWebhooks(error=TransportError("HTTP 500")), order_alerts_webhook_url="https://hooks.test"
    )

    with pytest.raises(TransportError):
        await env.run(activities.post_team_alert, TeamAlert(title="t", content="c"))


@pytest.mark.asyncio
async def test_customer_email_sent(env):
    mailer = FakeMailer()
    activities = CheckoutActivities(None, mailer=mailer)

    outcome = await env.run(
        activities.send_customer_email,
        CustomerEmail(to="ada@example.com", subject="Paid", html_body="<p>ok</p>"),
    )

    assert outcome == Outcome.SENT.value
    assert mailer.sent == [("ada@example.com", "Paid", "<p>ok</p>")]


@pytest.mark.asyncio
async def test_customer_email_skipped_without_mailer(env):
    outcome = await env.run(
        CheckoutActivities(None).send_customer_email,
        CustomerEmail(to="ada@example.com", subject="Paid", html_body="<p>ok</p>"),
    )

    assert outcome == Outcome.SKIPPED.value
