from decimal import Decimal

from conftest import API, points_of, stock_of


def place_order(client, headers, lines, **extra):
    payload = {"items": lines, **extra}
    resp = client.post(f"{API}/orders/", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_placing_an_order_takes_stock(client, auth_headers, make_product):
    product = make_product(stock=10)
    order = place_order(
        client, auth_headers,
        [{"product_id": product.id, "quantity": 2}, {"product_id": product.id, "quantity": 1}],
        customer_name="Walk-in",
    )

    assert order["order_number"].startswith("ORD")
    assert order["status"] == "placed"
    assert order["payment_status"] == "pending"
    assert order["pickup_location"] == "Store Pickup"
    assert len(order["items"]) == 1
    assert order["items"][0]["quantity"] == 3
    assert Decimal(order["total_amount"]) == Decimal("29.97")
    assert [h["status"] for h in order["status_history"]] == ["placed"]
    assert stock_of(client, auth_headers, product.id) == 7

    movements = client.get(f"{API}/products/{product.id}/movements", headers=auth_headers).json()
    assert any(m["movement_type"] == "SALE" and m["quantity_change"] == -3 for m in movements["movements"])


def test_order_needs_stock_and_a_name(client, auth_headers, make_product):
    product = make_product(name="Blue Mug", stock=1)

    resp = client.post(
        f"{API}/orders/", json={"items": [{"product_id": product.id, "quantity": 2}], "customer_name": "Walk-in"},
        headers=auth_headers,
    )
    assert resp.status_code == 400
    assert "Insufficient stock for Blue Mug" in resp.json()["detail"]
    assert stock_of(client, auth_headers, product.id) == 1

    resp = client.post(f"{API}/orders/", json={"items": [{"product_id": product.id, "quantity": 1}]}, headers=auth_headers)
    assert resp.status_code == 400


def test_paying_an_order_records_sale_and_points(client, auth_headers, make_product, customer):
    product = make_product(stock=10)
    order = place_order(client, auth_headers, [{"product_id": product.id, "quantity": 3}], customer_id=customer.id)
    assert order["customer_name"] == "Maria Anders"
    assert points_of(client, auth_headers, customer.id) == 0

    resp = client.post(f"{API}/orders/{order['id']}/pay", json={"method": "card"}, headers=auth_headers)
    assert resp.status_code == 200, resp.text
    paid = resp.json()
    assert paid["payment_status"] == "paid"
    assert paid["payment_method"] == "card"
    assert paid["paid_at"] is not None
    assert paid["points_awarded"] == 29
    assert points_of(client, auth_headers, customer.id) == 29

    payments = client.get(f"{API}/payments", params={"type": "sale"}, headers=auth_headers).json()
    assert payments["total"] == 1
    assert Decimal(payments["payments"][0]["amount"]) == Decimal("29.97")
    assert payments["payments"][0]["order_ref"] == order["order_number"]

    resp = client.post(f"{API}/orders/{order['id']}/pay", json={"method": "cash"}, headers=auth_headers)
    assert resp.status_code == 400


def test_order_paid_at_placement(client, auth_headers, make_product, customer):
    product = make_product(stock=5)
    order = place_order(
        client, auth_headers, [{"product_id": product.id, "quantity": 1}],
        customer_id=customer.id, payment_method="cash",
    )
    assert order["payment_status"] == "paid"
    assert order["points_awarded"] == 9
    assert points_of(client, auth_headers, customer.id) == 9


def test_cancelling_a_paid_order_restocks_and_refunds(client, auth_headers, make_product, customer):
    product = make_product(stock=10)
    order = place_order(client, auth_headers, [{"product_id": product.id, "quantity": 3}], customer_id=customer.id)
    client.post(f"{API}/orders/{order['id']}/pay", json={"method": "cash"}, headers=auth_headers)

    resp = client.put(
        f"{API}/orders/{order['id']}/status", json={"status": "cancelled", "notes": "Customer changed mind"},
        headers=auth_headers,
    )
    assert resp.status_code == 200, resp.text
    cancelled = resp.json()
    assert cancelled["status"] == "cancelled"
    assert cancelled["payment_status"] == "refunded"
    assert cancelled["points_awarded"] == 0
    assert stock_of(client, auth_headers, product.id) == 10
    assert points_of(client, auth_headers, customer.id) == 0

    refunds = client.get(f"{API}/payments", params={"type": "refund"}, headers=auth_headers).json()
    assert refunds["total"] == 1
    assert Decimal(refunds["payments"][0]["amount"]) == Decimal("-29.97")

    resp = client.put(f"{API}/orders/{order['id']}/status", json={"status": "placed"}, headers=auth_headers)
    assert resp.status_code == 400
    resp = client.post(f"{API}/orders/{order['id']}/pay", json={"method": "cash"}, headers=auth_headers)
    assert resp.status_code == 400


def test_cancelling_an_unpaid_order_only_restocks(client, auth_headers, make_product):
    product = make_product(stock=4)
    order = place_order(client, auth_headers, [{"product_id": product.id, "quantity": 4}], customer_name="Walk-in")
    assert stock_of(client, auth_headers, product.id) == 0

    resp = client.put(f"{API}/orders/{order['id']}/status", json={"status": "cancelled"}, headers=auth_headers)
    assert resp.json()["payment_status"] == "pending"
    assert stock_of(client, auth_headers, product.id) == 4
    assert client.get(f"{API}/payments", headers=auth_headers).json()["total"] == 0


def test_status_flow(client, auth_headers, make_product):
    product = make_product(stock=5)
    order = place_order(client, auth_headers, [{"product_id": product.id, "quantity": 1}], customer_name="Walk-in")
    url = f"{API}/orders/{order['id']}/status"

    assert client.put(url, json={"status": "placed"}, headers=auth_headers).status_code == 400
    for next_status in ("packed", "ready_for_pickup", "completed"):
        resp = client.put(url, json={"status": next_status}, headers=auth_headers)
        assert resp.status_code == 200, resp.text

    body = client.get(f"{API}/orders/{order['id']}", headers=auth_headers).json()
    assert [h["status"] for h in body["status_history"]] == ["placed", "packed", "ready_for_pickup", "completed"]

    # completed orders are final
    assert client.put(url, json={"status": "cancelled"}, headers=auth_headers).status_code == 400
    assert stock_of(client, auth_headers, product.id) == 4


def test_list_and_search_orders(client, auth_headers, make_product, customer):
    product = make_product(stock=20)
    first = place_order(client, auth_headers, [{"product_id": product.id, "quantity": 1}], customer_id=customer.id)
    place_order(client, auth_headers, [{"product_id": product.id, "quantity": 1}], customer_name="Thomas Hardy")
    client.post(f"{API}/orders/{first['id']}/pay", json={"method": "cash"}, headers=auth_headers)

    body = client.get(f"{API}/orders/", headers=auth_headers).json()
    assert body["total"] == 2

    body = client.get(f"{API}/orders/", params={"search": "hardy"}, headers=auth_headers).json()
    assert [o["customer_name"] for o in body["orders"]] == ["Thomas Hardy"]

    body = client.get(f"{API}/orders/", params={"payment_status": "paid"}, headers=auth_headers).json()
    assert [o["id"] for o in body["orders"]] == [first["id"]]

    body = client.get(f"{API}/orders/", params={"customer_id": customer.id}, headers=auth_headers).json()
    assert body["total"] == 1

    assert client.get(f"{API}/orders/ORD-MISSING", headers=auth_headers).status_code == 404


def test_invoicing_an_order(client, auth_headers, make_product, customer):
    product = make_product(stock=10)
    order = place_order(client, auth_headers, [{"product_id": product.id, "quantity": 2}], customer_id=customer.id)

    resp = client.post(
        f"{API}/orders/{order['id']}/invoice", json={"adjustment": "-0.98", "terms": "Due on pickup"},
        headers=auth_headers,
    )
    assert resp.status_code == 201, resp.text
    invoice = resp.json()
    assert invoice["invoice_number"].startswith("INV")
    assert invoice["order_id"] == order["id"]
    assert invoice["invoice_type"] == "store_pickup"
    assert invoice["customer_email"] == "maria@alfreds.example.com"
    assert Decimal(invoice["subtotal"]) == Decimal("19.98")
    assert Decimal(invoice["total_amount"]) == Decimal("19.00")
    assert invoice["payment_status"] == "pending"
    assert len(invoice["items"]) == 1

    resp = client.post(f"{API}/orders/{order['id']}/invoice", json={}, headers=auth_headers)
    assert resp.status_code == 400

    # paying the order settles its invoice
    client.post(f"{API}/orders/{order['id']}/pay", json={"method": "card"}, headers=auth_headers)
    body = client.get(f"{API}/invoices/{invoice['id']}", headers=auth_headers).json()
    assert body["payment_status"] == "paid"
    assert body["payment_method"] == "card"


def test_invoice_refused_for_cancelled_order_or_negative_total(client, auth_headers, make_product):
    product = make_product(stock=3)
    order = place_order(client, auth_headers, [{"product_id": product.id, "quantity": 1}], customer_name="Walk-in")

    resp = client.post(
        f"{API}/orders/{order['id']}/invoice", json={"adjustment": "-100.00"}, headers=auth_headers
    )
    assert resp.status_code == 400

    client.put(f"{API}/orders/{order['id']}/status", json={"status": "cancelled"}, headers=auth_headers)
    resp = client.post(f"{API}/orders/{order['id']}/invoice", json={}, headers=auth_headers)
    assert resp.status_code == 400
    assert client.post(f"{API}/orders/ORD-MISSING/invoice", json={}, headers=auth_headers).status_code == 404
    assert client.get(f"{API}/invoices", headers=auth_headers).json()["total"] == 0


def test_product_on_an_order_cannot_be_deleted(client, auth_headers, make_product):
    product = make_product(stock=3)
    place_order(client, auth_headers, [{"product_id": product.id, "quantity": 1}], customer_name="Walk-in")

    resp = client.delete(f"{API}/products/{product.id}", headers=auth_headers)
    assert resp.status_code == 400
    assert "Deactivate it instead" in resp.json()["detail"]
