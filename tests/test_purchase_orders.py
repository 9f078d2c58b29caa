"""
Purchase order lifecycle: create, edit, send, receive, cancel, delete and
vendor payments against an order.
"""
from decimal import Decimal

from conftest import API, create_po, receive_all


def po_lines(make_product):
    a = make_product(name="Bolt")
    b = make_product(name="Nut")
    return [
        {"product_id": a.id, "quantity_ordered": 10, "unit_cost": "4.50", "tax_rate": "8.25", "shipping": "3.00"},
        {"product_id": b.id, "quantity_ordered": 2, "unit_cost": "20.00", "shipping": "5.00"},
    ], (a, b)


def test_create_purchase_order_computes_totals(client, auth_headers, vendor, make_product):
    lines, _ = po_lines(make_product)
    po = create_po(client, auth_headers, vendor.id, lines, notes="First order")

    assert po["status"] == "draft"
    assert po["po_number"].startswith("P") and len(po["po_number"]) == 6
    assert po["vendor_name"] == "Acme Supplies"
    assert Decimal(po["subtotal"]) == Decimal("85.00")
    assert Decimal(po["tax_amount"]) == Decimal("3.71")
    assert Decimal(po["shipping_amount"]) == Decimal("8.00")
    assert Decimal(po["total_amount"]) == Decimal("96.71")
    assert Decimal(po["balance_due"]) == Decimal("96.71")
    assert po["payment_status"] == "pending"
    assert po["shipping_status"] == "pending"

    first = po["items"][0]
    assert first["product_name"] == "Bolt"
    assert Decimal(first["cost_excl_tax"]) == Decimal("45.00")
    assert Decimal(first["total_tax"]) == Decimal("3.71")
    assert Decimal(first["total_price"]) == Decimal("51.71")
    assert first["quantity_outstanding"] == 10


def test_create_with_explicit_po_number_must_be_unique(client, auth_headers, vendor, make_product):
    lines, _ = po_lines(make_product)
    create_po(client, auth_headers, vendor.id, lines, po_number="P-CUSTOM-1")

    resp = client.post(
        f"{API}/purchase-orders/",
        json={"vendor_id": vendor.id, "po_number": "P-CUSTOM-1", "items": lines},
        headers=auth_headers,
    )
    assert resp.status_code == 400
    assert "already exists" in resp.json()["message"]


def test_create_rejects_unknown_vendor_and_product(client, auth_headers, vendor, make_product):
    lines, _ = po_lines(make_product)
    resp = client.post(f"{API}/purchase-orders/", json={"vendor_id": "VEN-NOPE", "items": lines}, headers=auth_headers)
    assert resp.status_code == 400

    bad_line = [{"product_id": "PRD-NOPE", "quantity_ordered": 1, "unit_cost": "1.00"}]
    resp = client.post(f"{API}/purchase-orders/", json={"vendor_id": vendor.id, "items": bad_line}, headers=auth_headers)
    assert resp.status_code == 400


def test_create_validates_line_input(client, auth_headers, vendor, make_product):
    product = make_product()
    for bad in (
        {"quantity_ordered": 0, "unit_cost": "1.00"},
        {"quantity_ordered": 1, "unit_cost": "1.005"},
        {"quantity_ordered": 1, "unit_cost": "1.00", "tax_rate": "120"},
        {"quantity_ordered": 1, "unit_cost": "1.00", "tax_rate": "8.255"},
        {"quantity_ordered": 1, "unit_cost": "1.00", "shipping": "-2"},
        {"quantity_ordered": 1, "unit_cost": "1.00", "shipping": "0.001"},
    ):
        line = {"product_id": product.id, **bad}
        resp = client.post(
            f"{API}/purchase-orders/", json={"vendor_id": vendor.id, "items": [line]}, headers=auth_headers
        )
        assert resp.status_code == 422, bad


def test_update_draft_replaces_items(client, auth_headers, vendor, make_product):
    lines, (bolt, _) = po_lines(make_product)
    po = create_po(client, auth_headers, vendor.id, lines)

    resp = client.put(
        f"{API}/purchase-orders/{po['id']}",
        json={"items": [{"product_id": bolt.id, "quantity_ordered": 4, "unit_cost": "2.50"}], "notes": "trimmed"},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert len(body["items"]) == 1
    assert Decimal(body["total_amount"]) == Decimal("10.00")
    assert body["notes"] == "trimmed"


def test_only_draft_can_be_edited_or_deleted(client, auth_headers, vendor, make_product):
    lines, _ = po_lines(make_product)
    po = create_po(client, auth_headers, vendor.id, lines)
    assert client.post(f"{API}/purchase-orders/{po['id']}/send", headers=auth_headers).json()["status"] == "sent"

    resp = client.put(f"{API}/purchase-orders/{po['id']}", json={"notes": "late edit"}, headers=auth_headers)
    assert resp.status_code == 400
    assert client.delete(f"{API}/purchase-orders/{po['id']}", headers=auth_headers).status_code == 400
    assert client.post(f"{API}/purchase-orders/{po['id']}/send", headers=auth_headers).status_code == 400


def test_delete_draft(client, auth_headers, vendor, make_product):
    lines, _ = po_lines(make_product)
    po = create_po(client, auth_headers, vendor.id, lines)

    resp = client.delete(f"{API}/purchase-orders/{po['id']}", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert client.get(f"{API}/purchase-orders/{po['id']}", headers=auth_headers).status_code == 404


def test_partial_then_full_receive(client, auth_headers, vendor, make_product, db):
    lines, (bolt, nut) = po_lines(make_product)
    po = create_po(client, auth_headers, vendor.id, lines)
    client.post(f"{API}/purchase-orders/{po['id']}/send", headers=auth_headers)
    bolt_item, nut_item = po["items"]

    resp = client.post(
        f"{API}/purchase-orders/{po['id']}/receive",
        json={"items": [{"item_id": bolt_item["id"], "quantity_received": 4}]},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "partial"
    assert body["shipping_status"] == "partial"
    assert body["received_at"] is None
    db.refresh(bolt)
    assert bolt.stock_quantity == 4

    # no payable until everything has arrived
    balance = client.get(f"{API}/vendors/{vendor.id}/balance", headers=auth_headers).json()
    assert Decimal(balance["balance"]) == Decimal("0")

    resp = client.post(
        f"{API}/purchase-orders/{po['id']}/receive",
        json={"items": [
            {"item_id": bolt_item["id"], "quantity_received": 50},
            {"item_id": nut_item["id"], "quantity_received": 2},
        ]},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "received"
    assert body["shipping_status"] == "received"
    assert body["received_at"] is not None

    db.refresh(bolt)
    db.refresh(nut)
    assert bolt.stock_quantity == 10  # over-receipt clamped to the outstanding 6
    assert nut.stock_quantity == 2

    movements = client.get(f"{API}/products/{bolt.id}/movements", headers=auth_headers).json()
    assert [m["quantity_change"] for m in movements["movements"]] == [6, 4]
    assert all(m["movement_type"] == "PURCHASE" for m in movements["movements"])

    balance = client.get(f"{API}/vendors/{vendor.id}/balance", headers=auth_headers).json()
    assert Decimal(balance["balance"]) == Decimal("96.71")

    ledger = client.get(f"{API}/ledger", params={"reference_id": po["id"]}, headers=auth_headers).json()
    assert ledger["total"] == 2
    assert Decimal(ledger["total_debit"]) == Decimal(ledger["total_credit"]) == Decimal("96.71")
    assert {e["account_type"] for e in ledger["entries"]} == {"VENDOR", "PURCHASE"}


def test_receive_draft_is_allowed(client, auth_headers, vendor, make_product):
    lines, _ = po_lines(make_product)
    po = create_po(client, auth_headers, vendor.id, lines)
    body = receive_all(client, auth_headers, po)
    assert body["status"] == "received"


def test_receive_rejects_unknown_items_and_closed_orders(client, auth_headers, vendor, make_product):
    lines, _ = po_lines(make_product)
    po = create_po(client, auth_headers, vendor.id, lines)

    resp = client.post(
        f"{API}/purchase-orders/{po['id']}/receive",
        json={"items": [{"item_id": 999999, "quantity_received": 1}]},
        headers=auth_headers,
    )
    assert resp.status_code == 400

    receive_all(client, auth_headers, po)
    resp = client.post(
        f"{API}/purchase-orders/{po['id']}/receive",
        json={"items": [{"item_id": po["items"][0]["id"], "quantity_received": 1}]},
        headers=auth_headers,
    )
    assert resp.status_code == 400


def test_cancel(client, auth_headers, vendor, make_product):
    lines, _ = po_lines(make_product)
    po = create_po(client, auth_headers, vendor.id, lines)

    resp = client.post(f"{API}/purchase-orders/{po['id']}/cancel", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["status"] == "cancelled"
    assert resp.json()["shipping_status"] == "cancelled"

    assert client.post(f"{API}/purchase-orders/{po['id']}/cancel", headers=auth_headers).status_code == 400
    resp = client.post(
        f"{API}/purchase-orders/{po['id']}/receive",
        json={"items": [{"item_id": po["items"][0]["id"], "quantity_received": 1}]},
        headers=auth_headers,
    )
    assert resp.status_code == 400


def test_received_order_cannot_be_cancelled(client, auth_headers, vendor, make_product):
    lines, _ = po_lines(make_product)
    po = create_po(client, auth_headers, vendor.id, lines)
    receive_all(client, auth_headers, po)
    assert client.post(f"{API}/purchase-orders/{po['id']}/cancel", headers=auth_headers).status_code == 400


def test_vendor_payments_against_order(client, auth_headers, vendor, make_product):
    lines, _ = po_lines(make_product)
    po = create_po(client, auth_headers, vendor.id, lines)

    # drafts cannot be paid
    resp = client.post(f"{API}/purchase-orders/{po['id']}/payments", json={"amount": "10.00"}, headers=auth_headers)
    assert resp.status_code == 400

    receive_all(client, auth_headers, po)

    resp = client.post(
        f"{API}/purchase-orders/{po['id']}/payments",
        json={"amount": "50.00", "method": "cash", "reference": "R-1"},
        headers=auth_headers,
    )
    assert resp.status_code == 201
    payment = resp.json()
    assert payment["type"] == "vendor"
    assert Decimal(payment["amount"]) == Decimal("-50.00")
    assert payment["order_ref"] == po["po_number"]
    assert payment["vendor_id"] == vendor.id

    body = client.get(f"{API}/purchase-orders/{po['id']}", headers=auth_headers).json()
    assert Decimal(body["total_paid"]) == Decimal("50.00")
    assert Decimal(body["balance_due"]) == Decimal("46.71")
    assert body["payment_status"] == "partial"

    # more than the balance due
    resp = client.post(f"{API}/purchase-orders/{po['id']}/payments", json={"amount": "46.72"}, headers=auth_headers)
    assert resp.status_code == 400

    resp = client.post(f"{API}/purchase-orders/{po['id']}/payments", json={"amount": "46.71"}, headers=auth_headers)
    assert resp.status_code == 201

    body = client.get(f"{API}/purchase-orders/{po['id']}", headers=auth_headers).json()
    assert body["payment_status"] == "paid"
    assert Decimal(body["balance_due"]) == Decimal("0")

    payments = client.get(f"{API}/purchase-orders/{po['id']}/payments", headers=auth_headers).json()
    assert len(payments) == 2

    balance = client.get(f"{API}/vendors/{vendor.id}/balance", headers=auth_headers).json()
    assert Decimal(balance["balance"]) == Decimal("0")

    cash = client.get(f"{API}/ledger", params={"account_type": "CASH"}, headers=auth_headers).json()
    assert Decimal(cash["total_debit"]) == Decimal("50.00")


def test_payment_amount_must_be_positive(client, auth_headers, vendor, make_product):
    lines, _ = po_lines(make_product)
    po = create_po(client, auth_headers, vendor.id, lines)
    receive_all(client, auth_headers, po)

    resp = client.post(f"{API}/purchase-orders/{po['id']}/payments", json={"amount": "0"}, headers=auth_headers)
    assert resp.status_code == 422


def test_list_filters_and_search(client, auth_headers, vendor, make_product):
    lines, _ = po_lines(make_product)
    first = create_po(client, auth_headers, vendor.id, lines, po_number="P10001")
    create_po(client, auth_headers, vendor.id, lines, po_number="P10002")
    client.post(f"{API}/purchase-orders/{first['id']}/send", headers=auth_headers)

    body = client.get(f"{API}/purchase-orders/", headers=auth_headers).json()
    assert body["total"] == 2

    body = client.get(f"{API}/purchase-orders/", params={"status": "sent"}, headers=auth_headers).json()
    assert [po["po_number"] for po in body["purchase_orders"]] == ["P10001"]

    body = client.get(f"{API}/purchase-orders/", params={"search": "10002"}, headers=auth_headers).json()
    assert body["total"] == 1

    body = client.get(f"{API}/purchase-orders/", params={"search": "acme"}, headers=auth_headers).json()
    assert body["total"] == 2


def test_generate_number(client, auth_headers):
    resp = client.get(f"{API}/purchase-orders/generate-number", headers=auth_headers)
    assert resp.status_code == 200
    number = resp.json()["po_number"]
    assert number.startswith("P") and number[1:].isdigit() and len(number) == 6


def test_missing_order_is_404(client, auth_headers):
    assert client.get(f"{API}/purchase-orders/PO-MISSING", headers=auth_headers).status_code == 404
    assert client.post(f"{API}/purchase-orders/PO-MISSING/send", headers=auth_headers).status_code == 404
