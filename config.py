import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional

from models import ShippingPolicy

PAYPAL_BASE_URLS = {
    "sandbox": "https://api-m.sandbox.paypal.com",
    "live": "https://api-m.paypal.com",
}


def _optional(env: Mapping[str, str], key: str) -> Optional[str]:
    value = env.get(key, "").strip()
    return value or None


def _money(env: Mapping[str, str], key: str, default: str) -> str:
    value = env.get(key, default).strip()
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise ValueError(f"{key} must be a decimal amount, got {value!r}")
    if not amount.is_finite() or amount < 0:
        raise ValueError(f"{key} must be a non-negative amount, got {value!r}")
    return value


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, read once at startup"""
    temporal_address: str = "localhost:7233"
    temporal_namespace: str = "default"
    task_queue: str = "checkout-queue"

    paypal_client_id: Optional[str] = None
    paypal_client_secret: Optional[str] = None
    paypal_env: str = "sandbox"

    order_alerts_webhook_url: Optional[str] = None
    newsletter_webhook_url: Optional[str] = None

    sendgrid_api_key: Optional[str] = None
    mail_from: Optional[str] = None

    free_shipping_threshold: str = "50.00"
    flat_shipping_fee: str = "3.49"
    currency: str = "EUR"

    http_timeout_seconds: float = 10.0
    workflow_timeout_seconds: float = 60.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        return cls(
            temporal_address=env.get("TEMPORAL_ADDRESS", cls.temporal_address),
            temporal_namespace=env.get("TEMPORAL_NAMESPACE", cls.temporal_namespace),
            task_queue=env.get("TASK_QUEUE", cls.task_queue),
            paypal_client_id=_optional(env, "PAYPAL_CLIENT_ID"),
            paypal_client_secret=_optional(env, "PAYPAL_CLIENT_SECRET"),
            paypal_env=env.get("PAYPAL_ENV", cls.paypal_env).lower(),
            order_alerts_webhook_url=_optional(env, "ORDER_ALERTS_WEBHOOK_URL"),
            newsletter_webhook_url=_optional(env, "NEWSLETTER_WEBHOOK_URL"),
            sendgrid_api_key=_optional(env, "SENDGRID_API_KEY"),
            mail_from=_optional(env, "MAIL_FROM"),
            free_shipping_threshold=_money(env, "FREE_SHIPPING_THRESHOLD", cls.free_shipping_threshold),
            flat_shipping_fee=_money(env, "FLAT_SHIPPING_FEE", cls.flat_shipping_fee),
            currency=env.get("CURRENCY", cls.currency),
            http_timeout_seconds=float(env.get("HTTP_TIMEOUT_SECONDS", cls.http_timeout_seconds)),
            workflow_timeout_seconds=float(env.get("WORKFLOW_TIMEOUT_SECONDS", cls.workflow_timeout_seconds)),
            log_level=env.get("LOG_LEVEL", cls.log_level).upper(),
        )

    @property
    def paypal_base_url(self) -> str:
        return PAYPAL_BASE_URLS.get(self.paypal_env, PAYPAL_BASE_URLS["sandbox"])

    @property
    def mail_enabled(self) -> bool:
        return bool(self.sendgrid_api_key and self.mail_from)

    @property
    def shipping_policy(self) -> ShippingPolicy:
        return ShippingPolicy(
            free_shipping_threshold=self.free_shipping_threshold,
            flat_shipping_fee=self.flat_shipping_fee,
            currency=self.currency,
        )
