"""
Purchase order arithmetic.

Line figures:
    cost_excl_tax = quantity * unit_cost
    total_tax     = round(cost_excl_tax * tax_rate / 100, 2)
    cost_incl_tax = cost_excl_tax + total_tax
    total_price   = cost_incl_tax + shipping

Order totals are plain sums of the line figures. Payment and shipping
status are derived from payments and received quantities, never stored.
"""

import enum
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Iterable, NamedTuple


CENT = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


class PaymentStatus(str, enum.Enum):
    pending = "pending"
    partial = "partial"
    paid = "paid"


class ShippingStatus(str, enum.Enum):
    pending = "pending"
    partial = "partial"
    received = "received"
    cancelled = "cancelled"


def to_decimal(value) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    try:
        # str() first so floats like 0.1 do not drag binary noise along
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {value!r}")


def to_money(value) -> Decimal:
    """Round to cents, half away from zero."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


class LineAmounts(NamedTuple):
    cost_excl_tax: Decimal
    total_tax: Decimal
    cost_incl_tax: Decimal
    shipping: Decimal
    total_price: Decimal


class OrderTotals(NamedTuple):
    subtotal: Decimal
    tax_amount: Decimal
    shipping_amount: Decimal
    total_amount: Decimal


def compute_line(quantity, unit_cost, tax_rate=0, shipping=0) -> LineAmounts:
    """Compute the stored figures for one purchase order line."""
    qty = int(quantity)
    cost = to_decimal(unit_cost)
    rate = to_decimal(tax_rate)
    ship = to_money(shipping)

    if qty <= 0:
        raise ValueError("Quantity must be greater than 0")
    if cost < 0:
        raise ValueError("Unit cost cannot be negative")
    if rate < 0 or rate > HUNDRED:
        raise ValueError("Tax rate must be between 0 and 100")
    if ship < 0:
        raise ValueError("Shipping cannot be negative")

    cost_excl_tax = to_money(Decimal(qty) * cost)
    total_tax = to_money(cost_excl_tax * rate / HUNDRED)
    cost_incl_tax = cost_excl_tax + total_tax
    total_price = cost_incl_tax + ship

    return LineAmounts(
        cost_excl_tax=cost_excl_tax,
        total_tax=total_tax,
        cost_incl_tax=cost_incl_tax,
        shipping=ship,
        total_price=total_price,
    )


def compute_totals(lines: Iterable) -> OrderTotals:
    """Sum line figures. Accepts LineAmounts or PurchaseOrderItem rows."""
    subtotal = ZERO
    tax_amount = ZERO
    shipping_amount = ZERO
    for line in lines:
        subtotal += to_money(line.cost_excl_tax)
        tax_amount += to_money(line.total_tax)
        shipping_amount += to_money(line.shipping)
    return OrderTotals(
        subtotal=subtotal,
        tax_amount=tax_amount,
        shipping_amount=shipping_amount,
        total_amount=subtotal + tax_amount + shipping_amount,
    )


def balance_due(total_amount, total_paid) -> Decimal:
    return to_money(total_amount) - to_money(total_paid)


def payment_status(total_amount, total_paid) -> PaymentStatus:
    total = to_money(total_amount)
    paid = to_money(total_paid)
    if paid <= 0:
        return PaymentStatus.pending
    if total > 0 and paid >= total:
        return PaymentStatus.paid
    return PaymentStatus.partial


def shipping_status(items: Iterable, cancelled: bool = False) -> ShippingStatus:
    """Derive receiving progress from (quantity_ordered, quantity_received) of each line."""
    if cancelled:
        return ShippingStatus.cancelled
    items = list(items)
    if not items:
        return ShippingStatus.pending
    if all((i.quantity_received or 0) >= i.quantity_ordered for i in items):
        return ShippingStatus.received
    if any((i.quantity_received or 0) > 0 for i in items):
        return ShippingStatus.partial
    return ShippingStatus.pending


def receivable_quantity(quantity_ordered: int, quantity_received: int, requested: int) -> int:
    """Quantity that can actually be booked in: never more than what is still outstanding."""
    outstanding = quantity_ordered - (quantity_received or 0)
    return max(0, min(int(requested), outstanding))
