"""
Point-of-sale arithmetic.

Line figures:
    gross    = quantity * price
    net      = gross - line discount
    tax      = round(net * tax_rate / 100, 2)
    subtotal = net + tax

Bill figures:
    subtotal        = sum(gross)
    discount_amount = sum(line discounts) + bill discount
    tax_amount      = sum(line tax) scaled by the share of net left after the bill discount
    total_amount    = subtotal - discount_amount + tax_amount
"""

from collections import OrderedDict
from decimal import Decimal
from typing import Iterable, List, NamedTuple, Optional

from backoffice.utils.purchase_math import HUNDRED, ZERO, to_decimal, to_money


class SaleLine(NamedTuple):
    quantity: int
    price: Decimal
    gross: Decimal
    discount: Decimal
    tax: Decimal
    subtotal: Decimal


class SaleTotals(NamedTuple):
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal


def compute_sale_line(quantity, price, tax_rate=0, discount=0) -> SaleLine:
    qty = int(quantity)
    unit_price = to_money(price)
    rate = to_decimal(tax_rate)
    line_discount = to_money(discount)

    if qty <= 0:
        raise ValueError("Quantity must be greater than 0")
    if line_discount < 0:
        raise ValueError("Discount cannot be negative")

    gross = to_money(unit_price * qty)
    if line_discount > gross:
        raise ValueError(f"Line discount ({line_discount}) exceeds line amount ({gross})")

    net = gross - line_discount
    tax = to_money(net * rate / HUNDRED)
    return SaleLine(qty, unit_price, gross, line_discount, tax, net + tax)


def compute_sale_totals(lines: Iterable[SaleLine], bill_discount=0) -> SaleTotals:
    lines = list(lines)
    bill = to_money(bill_discount)
    if bill < 0:
        raise ValueError("Discount cannot be negative")

    subtotal = sum((l.gross for l in lines), ZERO)
    line_discounts = sum((l.discount for l in lines), ZERO)
    line_tax = sum((l.tax for l in lines), ZERO)
    net = subtotal - line_discounts
    if bill > net:
        raise ValueError(f"Discount ({bill}) exceeds the bill amount ({net})")

    tax_amount = line_tax
    if bill and net > 0:
        tax_amount = to_money(line_tax * (net - bill) / net)

    discount_amount = line_discounts + bill
    return SaleTotals(
        subtotal=subtotal,
        discount_amount=discount_amount,
        tax_amount=tax_amount,
        total_amount=subtotal - discount_amount + tax_amount,
    )


def consolidate_lines(items: Iterable[dict]) -> List[dict]:
    """Merge lines for the same product, adding quantities and discounts. First-seen order is kept."""
    merged = OrderedDict()
    for item in items:
        key = item["product_id"]
        if key in merged:
            merged[key]["quantity"] += int(item["quantity"])
            merged[key]["discount"] = to_money(merged[key]["discount"]) + to_money(item.get("discount") or 0)
        else:
            merged[key] = {
                "product_id": key,
                "quantity": int(item["quantity"]),
                "discount": to_money(item.get("discount") or 0),
            }
    return list(merged.values())


def check_split(total, cash: Optional[Decimal], card: Optional[Decimal], digital: Optional[Decimal]) -> None:
    """Split tenders must cover the bill to the cent."""
    parts = [to_money(p or 0) for p in (cash, card, digital)]
    if any(p < 0 for p in parts):
        raise ValueError("Split amounts cannot be negative")
    paid = sum(parts, ZERO)
    if paid != to_money(total):
        raise ValueError(f"Split amounts ({paid}) must equal the total ({to_money(total)})")
