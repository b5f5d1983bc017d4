from typing import Optional

from temporalio import activity
from temporalio.exceptions import ApplicationError

from clients import MailTransport, PaymentProvider, WebhookTransport
from errors import PaymentLookupError
from models import CustomerEmail, Outcome, PaymentLookup, TeamAlert


def _payer(details: dict) -> tuple:
    payer = details.get("payer") or {}
    name = payer.get("name") or {}
    full_name = " ".join(p for p in (name.get("given_name"), name.get("surname")) if p) or None
    return payer.get("email_address"), full_name


class CheckoutActivities:
    """Side-effecting steps of the checkout workflows.

    Transports are injected once at worker start; a transport left as None
    means that channel is not configured and its activity reports SKIPPED.
    """

    def __init__(
        self,
        payments: Optional[PaymentProvider],
        webhooks: Optional[WebhookTransport] = None,
        mailer: Optional[MailTransport] = None,
        order_alerts_webhook_url: Optional[str] = None,
    ):
        self.payments = payments
        self.webhooks = webhooks
        self.mailer = mailer
        self.order_alerts_webhook_url = order_alerts_webhook_url

    # =========================================================================
    # PAYMENT ACTIVITIES
    # =========================================================================

    @activity.defn
    async def lookup_payment(self, payment_id: str) -> PaymentLookup:
        """Ask the payment provider for the authoritative payment state"""
        if self.payments is None:
            raise ApplicationError(
                "Payment provider is not configured",
                type=PaymentLookupError.__name__,
                non_retryable=True,
            )
        try:
            details = await self.payments.lookup_payment(payment_id)
        except Exception as e:
            activity.logger.error(f"💳 Payment lookup for {payment_id} failed: {e}")
            raise ApplicationError(
                f"Payment lookup for {payment_id} failed: {e}",
                type=PaymentLookupError.__name__,
                non_retryable=True,
            ) from e

        payer_email, payer_name = _payer(details)
        status = str(details.get("status", ""))
        activity.logger.info(f"💳 Payment {payment_id} reported as {status or '<none>'}")
        return PaymentLookup(
            payment_id=payment_id,
            status=status,
            payer_email=payer_email,
            payer_name=payer_name,
        )

    # =========================================================================
    # NOTIFICATION ACTIVITIES
    # =========================================================================

    @activity.defn
    async def post_team_alert(self, alert: TeamAlert) -> str:
        """Post an alert to the team webhook"""
        if self.webhooks is None or not self.order_alerts_webhook_url:
            activity.logger.info(f"📣 Team alert skipped (no webhook configured): {alert.title}")
            return Outcome.SKIPPED.value

        await self.webhooks.post_json(
            self.order_alerts_webhook_url,
            {"username": "Shop", "content": f"**{alert.title}**\n{alert.content}"},
        )
        activity.logger.info(f"📣 Team alert posted: {alert.title}")
        return Outcome.SENT.value

    @activity.defn
    async def send_customer_email(self, email: CustomerEmail) -> str:
        """Send a transactional email to the customer"""
        if self.mailer is None:
            activity.logger.info(f"📧 Email to {email.to} skipped (mail not configured)")
            return Outcome.SKIPPED.value

        await self.mailer.send_mail(email.to, email.subject, email.html_body)
        activity.logger.info(f"📧 Email to {email.to}: {email.subject}")
        return Outcome.SENT.value
