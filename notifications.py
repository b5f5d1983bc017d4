"""Message builders for the notification channels"""

from decimal import Decimal
from html import escape
from typing import List

from models import (
    Channel,
    Customer,
    CustomerEmail,
    NotificationEvent,
    Order,
    OrderCreated,
    OrderPaid,
    PaymentConfirmation,
    TeamAlert,
)

PAYMENT_PENDING = "PAYMENT PENDING"
PAYMENT_CONFIRMED = "PAYMENT CONFIRMED"


def event_name(event: NotificationEvent) -> str:
    if isinstance(event, OrderCreated):
        return "order_created"
    if isinstance(event, OrderPaid):
        return "order_paid"
    raise TypeError(f"Unknown notification event: {event!r}")


def channels_for(event: NotificationEvent) -> List[Channel]:
    """Channels an event fans out to"""
    if isinstance(event, OrderCreated):
        return [Channel.TEAM_ALERT]
    if isinstance(event, OrderPaid):
        return [Channel.TEAM_ALERT, Channel.CUSTOMER_EMAIL]
    raise TypeError(f"Unknown notification event: {event!r}")


def format_money(amount: Decimal, currency: str) -> str:
    return f"{amount:.2f} {currency}"


def _item_line(item, currency: str) -> str:
    variant = ", ".join(v for v in (item.selected_size, item.selected_color) if v)
    suffix = f" ({variant})" if variant else ""
    return f"- {item.quantity}x {item.name}{suffix} @ {format_money(Decimal(str(item.price)), currency)}"


def _order_alert(order: Order) -> TeamAlert:
    customer = order.customer
    lines = [
        f"Order {order.order_id} [{PAYMENT_PENDING}]",
        f"Customer: {customer.full_name} <{customer.email}>",
        "Items:",
    ]
    lines.extend(_item_line(item, order.currency) for item in order.items)
    lines.append(f"Subtotal: {format_money(order.subtotal, order.currency)}")
    lines.append(f"Shipping: {format_money(order.shipping_cost, order.currency)}")
    lines.append(f"Total: {format_money(order.total, order.currency)}")
    if customer.address:
        address = customer.address
        lines.append(f"Deliver to: {address.street}, {address.zip} {address.city}")
    return TeamAlert(title=f"New order {order.order_id}", content="\n".join(lines))


def _paid_alert(confirmation: PaymentConfirmation, recipient: Customer = None) -> TeamAlert:
    lines = [
        f"Order {confirmation.order_id} [{PAYMENT_CONFIRMED}]",
        f"Transaction: {confirmation.payment_transaction_id}",
        f"Paid at: {confirmation.paid_at.isoformat()}",
    ]
    if recipient:
        lines.append(f"Customer: {recipient.full_name} <{recipient.email}>")
    return TeamAlert(title=f"Payment received for {confirmation.order_id}", content="\n".join(lines))


def build_team_alert(event: NotificationEvent) -> TeamAlert:
    if isinstance(event, OrderCreated):
        return _order_alert(event.order)
    if isinstance(event, OrderPaid):
        return _paid_alert(event.confirmation, event.recipient)
    raise TypeError(f"Unknown notification event: {event!r}")


def build_customer_email(confirmation: PaymentConfirmation, recipient: Customer) -> CustomerEmail:
    name = escape(recipient.full_name or "there")
    order_id = escape(confirmation.order_id)
    html_body = (
        f"<h2>Thank you for your order, {name}!</h2>"
        f"<p>We have received your payment for order <strong>{order_id}</strong>.</p>"
        f"<p>Transaction ID: {escape(confirmation.payment_transaction_id)}</p>"
        "<p>We will let you know as soon as your order ships.</p>"
    )
    return CustomerEmail(
        to=recipient.email,
        subject=f"Payment confirmed - order {confirmation.order_id}",
        html_body=html_body,
    )
