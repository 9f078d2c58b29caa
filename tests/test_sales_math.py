"""
Unit tests for point-of-sale line and bill arithmetic
"""
from decimal import Decimal

import pytest

from backoffice.utils import sales_math


def test_line_tax_is_on_the_discounted_amount():
    line = sales_math.compute_sale_line(3, "10.00", "10", "5.00")

    assert line.gross == Decimal("30.00")
    assert line.discount == Decimal("5.00")
    assert line.tax == Decimal("2.50")
    assert line.subtotal == Decimal("27.50")


def test_bill_discount_scales_tax():
    lines = [
        sales_math.compute_sale_line(2, "10.00", "10"),
        sales_math.compute_sale_line(1, "5.00", "0"),
    ]
    totals = sales_math.compute_sale_totals(lines, "5.00")

    assert totals.subtotal == Decimal("25.00")
    assert totals.discount_amount == Decimal("5.00")
    assert totals.tax_amount == Decimal("1.60")
    assert totals.total_amount == Decimal("21.60")


def test_totals_without_bill_discount_keep_line_tax():
    lines = [sales_math.compute_sale_line(1, "9.99", "8.25", "0.99")]
    totals = sales_math.compute_sale_totals(lines)

    assert totals.tax_amount == Decimal("0.74")
    assert totals.total_amount == Decimal("9.74")


def test_full_bill_discount_leaves_nothing_to_tax():
    lines = [sales_math.compute_sale_line(1, "10.00", "10")]
    totals = sales_math.compute_sale_totals(lines, "10.00")
    assert totals.tax_amount == Decimal("0.00")
    assert totals.total_amount == Decimal("0.00")


@pytest.mark.parametrize("args", [
    (0, "1.00", 0, 0),
    (1, "1.00", 0, "-0.01"),
    (1, "1.00", 0, "1.01"),
])
def test_invalid_lines(args):
    with pytest.raises(ValueError):
        sales_math.compute_sale_line(*args)


def test_bill_discount_cannot_exceed_net():
    lines = [sales_math.compute_sale_line(2, "5.00", 0, "4.00")]
    with pytest.raises(ValueError):
        sales_math.compute_sale_totals(lines, "6.01")


def test_consolidate_merges_repeated_products():
    merged = sales_math.consolidate_lines([
        {"product_id": "PRD-B", "quantity": 1},
        {"product_id": "PRD-A", "quantity": 2, "discount": "1.00"},
        {"product_id": "PRD-B", "quantity": 3, "discount": "0.50"},
    ])
    assert [(m["product_id"], m["quantity"], m["discount"]) for m in merged] == [
        ("PRD-B", 4, Decimal("0.50")),
        ("PRD-A", 2, Decimal("1.00")),
    ]


def test_split_must_match_to_the_cent():
    sales_math.check_split("21.60", "10.00", "11.60", None)
    with pytest.raises(ValueError):
        sales_math.check_split("21.60", "10.00", "11.59", None)
    with pytest.raises(ValueError):
        sales_math.check_split("5.00", "6.00", "-1.00", None)
