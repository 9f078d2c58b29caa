from decimal import Decimal

from conftest import API, stock_of


def create_shipment(client, headers, items, **extra):
    resp = client.post(f"{API}/shipments", json={"items": items, **extra}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_create_and_move_through_statuses(client, auth_headers, make_product):
    product = make_product(stock=10)
    shipment = create_shipment(
        client, auth_headers, [{"product_id": product.id, "quantity": 2}],
        transporter_name="Blue Dart", lr_number="LR-1001", freight_charge="150.00",
    )
    assert shipment["shipment_number"].startswith("SH-")
    assert shipment["status"] == "PENDING"
    assert Decimal(shipment["freight_charge"]) == Decimal("150.00")
    assert shipment["items"][0]["product_name"] == product.name
    url = f"{API}/shipments/{shipment['id']}/status"

    body = client.patch(url, json={"status": "PACKED"}, headers=auth_headers).json()
    assert body["items"][0]["status"] == "PACKED"
    body = client.patch(url, json={"status": "DISPATCHED"}, headers=auth_headers).json()
    assert body["dispatch_date"] is not None
    assert body["items"][0]["status"] == "DISPATCHED"

    # closing statuses have their own endpoints
    assert client.patch(url, json={"status": "DELIVERED"}, headers=auth_headers).status_code == 400
    assert client.patch(url, json={"status": "RETURNED"}, headers=auth_headers).status_code == 400
    assert stock_of(client, auth_headers, product.id) == 10


def test_create_validation(client, auth_headers, make_product):
    product = make_product(stock=1)
    resp = client.post(
        f"{API}/shipments", json={"items": [{"product_id": "PRD-MISSING", "quantity": 1}]}, headers=auth_headers
    )
    assert resp.status_code == 400
    resp = client.post(
        f"{API}/shipments", json={"items": [{"product_id": product.id, "quantity": 1}], "invoice_id": "INV-MISSING"},
        headers=auth_headers,
    )
    assert resp.status_code == 400
    resp = client.post(
        f"{API}/shipments", json={"items": [{"product_id": product.id, "quantity": 1}], "freight_charge": "-1"},
        headers=auth_headers,
    )
    assert resp.status_code == 422


def test_delivery_moves_stock_only_for_uninvoiced_goods(client, auth_headers, make_product):
    product = make_product(stock=10)

    loose = create_shipment(client, auth_headers, [{"product_id": product.id, "quantity": 3}])
    resp = client.post(
        f"{API}/shipments/{loose['id']}/mark-delivered", json={"proof_of_delivery_url": "https://pod.example.com/1.jpg"},
        headers=auth_headers,
    )
    assert resp.status_code == 200, resp.text
    delivered = resp.json()
    assert delivered["status"] == "DELIVERED"
    assert delivered["delivered_date"] is not None
    assert delivered["proof_of_delivery_url"] == "https://pod.example.com/1.jpg"
    assert delivered["items"][0]["status"] == "DELIVERED"
    assert stock_of(client, auth_headers, product.id) == 7

    # a sold order already took its stock
    order = client.post(
        f"{API}/orders/", json={"items": [{"product_id": product.id, "quantity": 2}], "customer_name": "Walk-in"},
        headers=auth_headers,
    ).json()
    invoice = client.post(f"{API}/orders/{order['id']}/invoice", json={}, headers=auth_headers).json()
    assert stock_of(client, auth_headers, product.id) == 5

    billed = create_shipment(
        client, auth_headers, [{"product_id": product.id, "quantity": 2}], invoice_id=invoice["id"]
    )
    assert billed["invoice_number"] == invoice["invoice_number"]
    client.post(f"{API}/shipments/{billed['id']}/mark-delivered", json={}, headers=auth_headers)
    assert stock_of(client, auth_headers, product.id) == 5

    # closed shipments are read-only
    resp = client.post(f"{API}/shipments/{loose['id']}/mark-delivered", json={}, headers=auth_headers)
    assert resp.status_code == 400
    resp = client.put(f"{API}/shipments/{loose['id']}", json={"notes": "late"}, headers=auth_headers)
    assert resp.status_code == 400
    resp = client.patch(f"{API}/shipments/{loose['id']}/status", json={"status": "IN_TRANSIT"}, headers=auth_headers)
    assert resp.status_code == 400

    body = client.get(f"{API}/shipments", params={"invoice_id": invoice["id"]}, headers=auth_headers).json()
    assert [s["id"] for s in body["shipments"]] == [billed["id"]]


def test_delivery_cannot_take_stock_below_zero(client, auth_headers, make_product):
    product = make_product(stock=1)
    shipment = create_shipment(client, auth_headers, [{"product_id": product.id, "quantity": 2}])

    resp = client.post(f"{API}/shipments/{shipment['id']}/mark-delivered", json={}, headers=auth_headers)
    assert resp.status_code == 400
    body = client.get(f"{API}/shipments/{shipment['id']}", headers=auth_headers).json()
    assert body["status"] == "PENDING"
    assert stock_of(client, auth_headers, product.id) == 1


def test_update_transport_details(client, auth_headers, make_product):
    product = make_product(stock=1)
    shipment = create_shipment(client, auth_headers, [{"product_id": product.id, "quantity": 1}])

    resp = client.put(
        f"{API}/shipments/{shipment['id']}",
        json={"vehicle_number": "MH-12-AB-1234", "expected_delivery_date": "2026-11-02", "weight_kg": "12.5"},
        headers=auth_headers,
    )
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["vehicle_number"] == "MH-12-AB-1234"
    assert body["expected_delivery_date"] == "2026-11-02"
    assert Decimal(body["weight_kg"]) == Decimal("12.5")


def test_return_shipment_restocks_and_raises_credit_memo(client, auth_headers, make_product, customer):
    product = make_product(price="20.00", stock=5)
    shipment = create_shipment(
        client, auth_headers, [{"product_id": product.id, "quantity": 2}],
        shipment_type="GROUND_RG", customer_id=customer.id,
    )
    assert shipment["shipment_number"].startswith("RG-")

    resp = client.post(f"{API}/shipments/{shipment['id']}/mark-delivered", json={}, headers=auth_headers)
    assert resp.status_code == 400

    resp = client.post(
        f"{API}/shipments/{shipment['id']}/mark-return-received", json={"auto_create_credit_memo": True},
        headers=auth_headers,
    )
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["shipment"]["status"] == "RETURNED"
    assert body["shipment"]["items"][0]["status"] == "RETURNED"
    assert stock_of(client, auth_headers, product.id) == 7

    memo = body["credit_memo"]
    assert memo["type"] == "CUSTOMER"
    assert memo["reason"] == "RETURN"
    assert memo["status"] == "DRAFT"
    assert memo["customer_id"] == customer.id
    assert memo["shipment_id"] == shipment["id"]
    assert memo["affects_inventory"] is False
    assert Decimal(memo["total_amount"]) == Decimal("40.00")

    # approving the memo does not restock a second time
    resp = client.post(f"{API}/credit-memos/{memo['id']}/approve", headers=auth_headers)
    assert resp.status_code == 200, resp.text
    assert stock_of(client, auth_headers, product.id) == 7

    resp = client.post(f"{API}/shipments/{shipment['id']}/mark-return-received", json={}, headers=auth_headers)
    assert resp.status_code == 400


def test_return_without_customer_cannot_raise_memo(client, auth_headers, make_product):
    product = make_product(stock=0)
    shipment = create_shipment(
        client, auth_headers, [{"product_id": product.id, "quantity": 1}], shipment_type="GROUND_RG"
    )

    resp = client.post(
        f"{API}/shipments/{shipment['id']}/mark-return-received", json={"auto_create_credit_memo": True},
        headers=auth_headers,
    )
    assert resp.status_code == 400

    resp = client.post(f"{API}/shipments/{shipment['id']}/mark-return-received", json={}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["credit_memo"] is None
    assert stock_of(client, auth_headers, product.id) == 1

    assert client.get(f"{API}/shipments", params={"shipment_type": "GROUND_RG"}, headers=auth_headers).json()["total"] == 1
    assert client.get(f"{API}/shipments/SHP-MISSING", headers=auth_headers).status_code == 404
