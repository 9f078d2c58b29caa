from decimal import Decimal

import pytest

from backoffice.models.payment import PaymentType
from backoffice.services.payment_service import signed_amount
from conftest import API, create_po, receive_all


@pytest.mark.parametrize("payment_type, given, stored", [
    (PaymentType.sale, "25.00", "25.00"),
    (PaymentType.sale, "-25.00", "25.00"),
    (PaymentType.refund, "10.00", "-10.00"),
    (PaymentType.vendor, "10.00", "-10.00"),
    (PaymentType.expense, "7.50", "-7.50"),
    (PaymentType.adjustment, "-3.00", "-3.00"),
    (PaymentType.adjustment, "3.00", "3.00"),
])
def test_sign_convention(payment_type, given, stored):
    assert signed_amount(payment_type, given) == Decimal(stored)


def test_zero_amount_is_rejected():
    with pytest.raises(ValueError):
        signed_amount(PaymentType.sale, 0)


def test_create_and_list_with_totals(client, auth_headers):
    for payload in (
        {"type": "sale", "amount": "100.00", "method": "card", "order_ref": "ORD-1"},
        {"type": "sale", "amount": "50.00"},
        {"type": "refund", "amount": "20.00"},
        {"type": "expense", "amount": "5.00"},
    ):
        resp = client.post(f"{API}/payments", json=payload, headers=auth_headers)
        assert resp.status_code == 201, resp.text

    body = client.get(f"{API}/payments", headers=auth_headers).json()
    assert body["total"] == 4
    assert Decimal(body["total_in"]) == Decimal("150.00")
    assert Decimal(body["total_out"]) == Decimal("25.00")
    assert Decimal(body["net"]) == Decimal("125.00")

    body = client.get(f"{API}/payments", params={"type": "refund"}, headers=auth_headers).json()
    assert body["total"] == 1
    assert Decimal(body["payments"][0]["amount"]) == Decimal("-20.00")

    body = client.get(f"{API}/payments", params={"method": "card"}, headers=auth_headers).json()
    assert body["total"] == 1


def test_zero_payment_is_a_validation_error(client, auth_headers):
    resp = client.post(f"{API}/payments", json={"type": "sale", "amount": "0"}, headers=auth_headers)
    assert resp.status_code == 422
    assert resp.json()["success"] is False


def test_vendor_payment_rules(client, auth_headers, vendor, make_product):
    # vendor payments need a vendor or an order
    resp = client.post(f"{API}/payments", json={"type": "vendor", "amount": "10.00"}, headers=auth_headers)
    assert resp.status_code == 400

    # nothing owed yet
    resp = client.post(
        f"{API}/payments", json={"type": "vendor", "amount": "10.00", "vendor_id": vendor.id}, headers=auth_headers
    )
    assert resp.status_code == 400

    product = make_product()
    po = create_po(client, auth_headers, vendor.id, [{"product_id": product.id, "quantity_ordered": 2, "unit_cost": "15.00"}])
    receive_all(client, auth_headers, po)

    resp = client.post(
        f"{API}/payments", json={"type": "vendor", "amount": "10.00", "vendor_id": vendor.id}, headers=auth_headers
    )
    assert resp.status_code == 201
    assert Decimal(resp.json()["amount"]) == Decimal("-10.00")

    # routed through the order when the order is given
    resp = client.post(
        f"{API}/payments",
        json={"type": "vendor", "amount": "5.00", "purchase_order_id": po["id"]},
        headers=auth_headers,
    )
    assert resp.status_code == 201
    assert resp.json()["order_ref"] == po["po_number"]

    # only vendor payments may reference an order
    resp = client.post(
        f"{API}/payments", json={"type": "sale", "amount": "5.00", "purchase_order_id": po["id"]}, headers=auth_headers
    )
    assert resp.status_code == 400

    balance = client.get(f"{API}/vendors/{vendor.id}/balance", headers=auth_headers).json()
    assert Decimal(balance["balance"]) == Decimal("15.00")


def test_delete_payment_removes_ledger_rows(client, auth_headers, vendor, make_product):
    product = make_product()
    po = create_po(client, auth_headers, vendor.id, [{"product_id": product.id, "quantity_ordered": 1, "unit_cost": "30.00"}])
    receive_all(client, auth_headers, po)
    payment = client.post(
        f"{API}/purchase-orders/{po['id']}/payments", json={"amount": "30.00"}, headers=auth_headers
    ).json()

    rows = client.get(f"{API}/ledger", params={"reference_id": payment["id"]}, headers=auth_headers).json()
    assert rows["total"] == 2

    assert client.delete(f"{API}/payments/{payment['id']}", headers=auth_headers).status_code == 200
    rows = client.get(f"{API}/ledger", params={"reference_id": payment["id"]}, headers=auth_headers).json()
    assert rows["total"] == 0

    balance = client.get(f"{API}/vendors/{vendor.id}/balance", headers=auth_headers).json()
    assert Decimal(balance["balance"]) == Decimal("30.00")
    assert client.get(f"{API}/payments/{payment['id']}", headers=auth_headers).status_code == 404


def test_direct_payment_settles_order_payable(client, auth_headers, vendor, make_product):
    product = make_product()
    po = create_po(client, auth_headers, vendor.id, [{"product_id": product.id, "quantity_ordered": 3, "unit_cost": "10.00"}])
    receive_all(client, auth_headers, po)

    resp = client.post(
        f"{API}/payments", json={"type": "vendor", "amount": "30.00", "vendor_id": vendor.id}, headers=auth_headers
    )
    assert resp.status_code == 201

    # the order still shows 30.00 due, but the vendor is already paid
    resp = client.post(f"{API}/purchase-orders/{po['id']}/payments", json={"amount": "30.00"}, headers=auth_headers)
    assert resp.status_code == 400
    resp = client.post(f"{API}/purchase-orders/{po['id']}/payments", json={"amount": "0.01"}, headers=auth_headers)
    assert resp.status_code == 400

    balance = client.get(f"{API}/vendors/{vendor.id}/balance", headers=auth_headers).json()
    assert Decimal(balance["balance"]) == Decimal("0")


def test_advance_on_open_order_does_not_block_paying_received_one(client, auth_headers, vendor, make_product):
    product = make_product()
    received = create_po(client, auth_headers, vendor.id, [{"product_id": product.id, "quantity_ordered": 3, "unit_cost": "10.00"}])
    receive_all(client, auth_headers, received)

    open_po = create_po(client, auth_headers, vendor.id, [{"product_id": product.id, "quantity_ordered": 2, "unit_cost": "10.00"}])
    assert client.post(f"{API}/purchase-orders/{open_po['id']}/send", headers=auth_headers).status_code == 200
    resp = client.post(f"{API}/purchase-orders/{open_po['id']}/payments", json={"amount": "20.00"}, headers=auth_headers)
    assert resp.status_code == 201

    # the ledger nets to 10.00 but the received order still owes 30.00
    resp = client.post(f"{API}/purchase-orders/{received['id']}/payments", json={"amount": "30.00"}, headers=auth_headers)
    assert resp.status_code == 201

    # nothing is left to pay directly
    resp = client.post(
        f"{API}/payments", json={"type": "vendor", "amount": "1.00", "vendor_id": vendor.id}, headers=auth_headers
    )
    assert resp.status_code == 400
