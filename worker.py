import asyncio
import logging
from contextlib import AsyncExitStack

import httpx
from temporalio.client import Client
from temporalio.worker import Worker

from activities import CheckoutActivities
from clients import PayPalClient, SendGridMailer, WebhookClient
from config import Settings
from workflow import WORKFLOWS

logger = logging.getLogger(__name__)


async def build_activities(settings: Settings, stack: AsyncExitStack) -> CheckoutActivities:
    """Create the transport clients once for the life of the worker"""
    timeout = httpx.Timeout(settings.http_timeout_seconds)

    payments = None
    if settings.paypal_client_id and settings.paypal_client_secret:
        paypal_http = await stack.enter_async_context(
            httpx.AsyncClient(base_url=settings.paypal_base_url, timeout=timeout)
        )
        payments = PayPalClient(paypal_http, settings.paypal_client_id, settings.paypal_client_secret)
    else:
        logger.warning("PayPal credentials missing - payment confirmation will fail")

    http = await stack.enter_async_context(httpx.AsyncClient(timeout=timeout))

    webhooks = WebhookClient(http) if settings.order_alerts_webhook_url else None
    mailer = None
    if settings.mail_enabled:
        mailer = SendGridMailer(http, settings.sendgrid_api_key, settings.mail_from)

    logger.info(
        "Channels: team alert %s, customer email %s",
        "on" if webhooks else "off",
        "on" if mailer else "off",
    )
    return CheckoutActivities(
        payments=payments,
        webhooks=webhooks,
        mailer=mailer,
        order_alerts_webhook_url=settings.order_alerts_webhook_url,
    )


async def main():
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Connect to Temporal server
    client = await Client.connect(settings.temporal_address, namespace=settings.temporal_namespace)

    async with AsyncExitStack() as stack:
        checkout = await build_activities(settings, stack)

        worker = Worker(
            client,
            task_queue=settings.task_queue,
            workflows=WORKFLOWS,
            activities=[
                checkout.lookup_payment,
                checkout.post_team_alert,
                checkout.send_customer_email,
            ],
        )

        logger.info("⚡ Worker started! Listening on '%s'...", settings.task_queue)
        await worker.run()


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
