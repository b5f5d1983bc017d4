from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Union


class OrderStatus(Enum):
    """Order state machine: pending -> paid, never back"""
    PENDING = "pending"
    PAID = "paid"

    def can_transition_to(self, new_state: "OrderStatus") -> bool:
        return self is new_state or (self is OrderStatus.PENDING and new_state is OrderStatus.PAID)


class ProviderPaymentStatus(Enum):
    """Order states reported by the payment provider"""
    CREATED = "CREATED"
    SAVED = "SAVED"
    APPROVED = "APPROVED"
    VOIDED = "VOIDED"
    COMPLETED = "COMPLETED"
    PAYER_ACTION_REQUIRED = "PAYER_ACTION_REQUIRED"
    UNRECOGNIZED = "UNRECOGNIZED"

    @classmethod
    def _missing_(cls, value):
        return cls.UNRECOGNIZED


class Verdict(Enum):
    COMPLETED = "completed"
    NOT_COMPLETED = "not_completed"


class Channel(Enum):
    TEAM_ALERT = "team_alert"
    CUSTOMER_EMAIL = "customer_email"


class Outcome(Enum):
    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"


# =============================================================================
# INTAKE
# =============================================================================

@dataclass(frozen=True)
class Address:
    street: str
    zip: str
    city: str


@dataclass(frozen=True)
class Customer:
    full_name: str
    email: str
    address: Optional[Address] = None


@dataclass(frozen=True)
class LineItem:
    name: str
    price: float
    quantity: int = 1
    selected_size: Optional[str] = None
    selected_color: Optional[str] = None


@dataclass(frozen=True)
class ShippingPolicy:
    """Shipping terms handed to the order workflow (decimal strings)"""
    free_shipping_threshold: str = "50.00"
    flat_shipping_fee: str = "3.49"
    currency: str = "EUR"


@dataclass
class OrderRequest:
    """Create-order workflow input"""
    customer: Optional[Customer]
    items: List[LineItem]
    shipping: ShippingPolicy = field(default_factory=ShippingPolicy)


@dataclass
class ConfirmationRequest:
    """Confirm-order workflow input"""
    order_id: str
    payment_id: Optional[str]
    customer: Optional[Customer] = None


# =============================================================================
# LIFECYCLE RECORDS
# =============================================================================

@dataclass(frozen=True)
class PriceBreakdown:
    subtotal: Decimal
    shipping_cost: Decimal
    total: Decimal


@dataclass
class Order:
    order_id: str
    customer: Customer
    items: List[LineItem]
    subtotal: Decimal
    shipping_cost: Decimal
    total: Decimal
    created_at: datetime
    currency: str = "EUR"
    status: OrderStatus = OrderStatus.PENDING


@dataclass(frozen=True)
class PaymentLookup:
    """What the payment provider says about a payment id"""
    payment_id: str
    status: str
    payer_email: Optional[str] = None
    payer_name: Optional[str] = None


@dataclass(frozen=True)
class PaymentConfirmation:
    order_id: str
    payment_transaction_id: str
    paid_at: datetime
    status: OrderStatus = OrderStatus.PAID


# =============================================================================
# NOTIFICATIONS
# =============================================================================

@dataclass(frozen=True)
class OrderCreated:
    order: Order


@dataclass(frozen=True)
class OrderPaid:
    confirmation: PaymentConfirmation
    recipient: Optional[Customer] = None


NotificationEvent = Union[OrderCreated, OrderPaid]


@dataclass(frozen=True)
class TeamAlert:
    """Team-alert webhook message"""
    title: str
    content: str


@dataclass(frozen=True)
class CustomerEmail:
    to: str
    subject: str
    html_body: str


@dataclass(frozen=True)
class ChannelResult:
    channel: Channel
    outcome: Outcome
    reason: Optional[str] = None


@dataclass
class DispatchReport:
    event: str
    results: List[ChannelResult] = field(default_factory=list)

    @property
    def failures(self) -> List[ChannelResult]:
        return [r for r in self.results if r.outcome is Outcome.FAILED]

    @property
    def all_succeeded(self) -> bool:
        return not self.failures

    def to_dict(self) -> dict:
        return {
            "event": self.event,
            "results": [
                {"channel": r.channel.value, "outcome": r.outcome.value, "reason": r.reason}
                for r in self.results
            ],
        }
