from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Mapping, Sequence

from errors import InvalidInputError
from models import PriceBreakdown, ShippingPolicy

CENTS = Decimal("0.01")
MAX_PRICE = Decimal("1000000")
MAX_QUANTITY = 10000
DEFAULT_POLICY = ShippingPolicy()


def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def _price(item: Any) -> Decimal:
    raw = _field(item, "price")
    if raw is None or isinstance(raw, bool):
        raise InvalidInputError(f"Item {_field(item, 'name')!r} has no valid price")
    try:
        price = Decimal(str(raw))
    except InvalidOperation:
        raise InvalidInputError(f"Item {_field(item, 'name')!r} has a non-numeric price: {raw!r}")
    if not price.is_finite() or price <= 0 or price > MAX_PRICE:
        raise InvalidInputError(f"Item {_field(item, 'name')!r} has an invalid price: {raw!r}")
    return price


def _quantity(item: Any) -> int:
    raw = _field(item, "quantity")
    if raw is None:
        return 1
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 1 or raw > MAX_QUANTITY:
        raise InvalidInputError(f"Item {_field(item, 'name')!r} has an invalid quantity: {raw!r}")
    return raw


def compute(items: Sequence[Any], policy: ShippingPolicy = DEFAULT_POLICY) -> PriceBreakdown:
    """Price a basket.

    Items may be ``LineItem`` instances or plain mappings. Money is summed
    as exact decimals and rounded to cents once; shipping is free when the
    rounded subtotal reaches the policy threshold.
    """
    if isinstance(items, (str, bytes, Mapping)) or not isinstance(items, Sequence):
        raise InvalidInputError("Items must be a list")
    if not items:
        raise InvalidInputError("Order must contain at least one item")

    prices = [(_price(item), _quantity(item)) for item in items]
    try:
        subtotal = sum((price * quantity for price, quantity in prices), Decimal("0"))
        subtotal = subtotal.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvalidInputError("Order total is out of range")

    # Threshold applies to the subtotal the customer sees
    threshold = Decimal(policy.free_shipping_threshold)
    shipping_cost = Decimal("0") if subtotal >= threshold else Decimal(policy.flat_shipping_fee)
    shipping_cost = shipping_cost.quantize(CENTS, rounding=ROUND_HALF_UP)

    return PriceBreakdown(subtotal=subtotal, shipping_cost=shipping_cost, total=subtotal + shipping_cost)
