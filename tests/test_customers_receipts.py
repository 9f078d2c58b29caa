from decimal import Decimal

from conftest import API


def create_customer(client, headers, **fields):
    payload = {"name": "Maria Anders", "phone": "5550100", "email": "maria@alfreds.example.com",
               "city": "Berlin", "state": "BE", **fields}
    resp = client.post(f"{API}/customers/", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_receipt(client, headers, **fields):
    resp = client.post(f"{API}/receipts", json=fields, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def points_of(client, headers, customer_id):
    return client.get(f"{API}/customers/{customer_id}", headers=headers).json()["loyalty_points"]


def test_customer_crud_and_search(client, auth_headers):
    customer = create_customer(client, auth_headers, company="Alfreds Futterkiste")
    assert customer["loyalty_points"] == 0
    assert customer["is_active"] is True

    create_customer(client, auth_headers, name="Thomas Hardy", email="thomas@around.example.com", phone="5550199")

    body = client.get(f"{API}/customers/", params={"search": "futter"}, headers=auth_headers).json()
    assert [c["name"] for c in body["customers"]] == ["Maria Anders"]

    resp = client.put(f"{API}/customers/{customer['id']}", json={"is_active": False}, headers=auth_headers)
    assert resp.json()["is_active"] is False
    body = client.get(f"{API}/customers/", params={"is_active": True}, headers=auth_headers).json()
    assert body["total"] == 1


def test_customer_email_must_be_unique(client, auth_headers):
    create_customer(client, auth_headers)
    resp = client.post(
        f"{API}/customers/", json={"name": "Copy", "phone": "1", "email": "maria@alfreds.example.com"}, headers=auth_headers
    )
    assert resp.status_code == 400


def test_receipt_defaults_from_customer_and_awards_points(client, auth_headers):
    customer = create_customer(client, auth_headers)
    receipt = create_receipt(client, auth_headers, customer_id=customer["id"], amount_received="125.75", invoice_num="INV-1")

    assert receipt["trx_id"].startswith("RT") and len(receipt["trx_id"]) == 10
    assert receipt["customer_name"] == "Maria Anders"
    assert receipt["city"] == "Berlin"
    assert receipt["pmt_mode"] == "Credit Card"
    assert receipt["points_awarded"] == 125
    assert points_of(client, auth_headers, customer["id"]) == 125


def test_walk_in_receipt_needs_a_name(client, auth_headers):
    resp = client.post(f"{API}/receipts", json={"amount_received": "10.00"}, headers=auth_headers)
    assert resp.status_code == 400

    receipt = create_receipt(client, auth_headers, customer_name="Walk-in", amount_received="10.00", pmt_mode="Cash")
    assert receipt["points_awarded"] == 0


def test_receipt_update_and_delete_move_points(client, auth_headers):
    customer = create_customer(client, auth_headers)
    receipt = create_receipt(client, auth_headers, customer_id=customer["id"], amount_received="100.00")

    resp = client.put(f"{API}/receipts/{receipt['id']}", json={"amount_received": "40.00"}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["points_awarded"] == 40
    assert points_of(client, auth_headers, customer["id"]) == 40

    assert client.delete(f"{API}/receipts/{receipt['id']}", headers=auth_headers).status_code == 200
    assert points_of(client, auth_headers, customer["id"]) == 0


def test_duplicate_trx_id_is_rejected(client, auth_headers):
    create_receipt(client, auth_headers, trx_id="RT00000001", customer_name="A", amount_received="1.00")
    resp = client.post(
        f"{API}/receipts", json={"trx_id": "RT00000001", "customer_name": "B", "amount_received": "1.00"}, headers=auth_headers
    )
    assert resp.status_code == 400


def test_receipt_list_filters(client, auth_headers):
    customer = create_customer(client, auth_headers)
    create_receipt(client, auth_headers, customer_id=customer["id"], amount_received="10.00", trx_date="2026-01-10")
    create_receipt(client, auth_headers, customer_name="Walk-in", amount_received="20.00", trx_date="2026-02-10")

    body = client.get(f"{API}/receipts", params={"customer_id": customer["id"]}, headers=auth_headers).json()
    assert body["total"] == 1

    body = client.get(f"{API}/receipts", params={"start_date": "2026-02-01"}, headers=auth_headers).json()
    assert [r["customer_name"] for r in body["receipts"]] == ["Walk-in"]


def test_redeem_points(client, auth_headers):
    customer = create_customer(client, auth_headers)
    create_receipt(client, auth_headers, customer_id=customer["id"], amount_received="500.00")

    resp = client.post(f"{API}/customers/{customer['id']}/redeem-points", json={"points": 200}, headers=auth_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["redeemed_points"] == 200
    assert body["remaining_points"] == 300
    assert Decimal(body["discount_amount"]) == Decimal("2.00")

    resp = client.post(f"{API}/customers/{customer['id']}/redeem-points", json={"points": 301}, headers=auth_headers)
    assert resp.status_code == 400

    resp = client.post(f"{API}/customers/{customer['id']}/redeem-points", json={"points": 0}, headers=auth_headers)
    assert resp.status_code == 422

    resp = client.post(f"{API}/customers/CUS-MISSING/redeem-points", json={"points": 1}, headers=auth_headers)
    assert resp.status_code == 404


def test_deleting_customer_keeps_receipts(client, auth_headers):
    customer = create_customer(client, auth_headers)
    receipt = create_receipt(client, auth_headers, customer_id=customer["id"], amount_received="5.00")

    assert client.delete(f"{API}/customers/{customer['id']}", headers=auth_headers).status_code == 200
    body = client.get(f"{API}/receipts/{receipt['id']}", headers=auth_headers).json()
    assert body["customer_id"] is None
    assert body["customer_name"] == "Maria Anders"


def test_editing_receipt_after_redeeming_keeps_points_spent(client, auth_headers):
    customer = create_customer(client, auth_headers)
    receipt = create_receipt(client, auth_headers, customer_id=customer["id"], amount_received="100.00")
    resp = client.post(f"{API}/customers/{customer['id']}/redeem-points", json={"points": 100}, headers=auth_headers)
    assert resp.status_code == 200
    assert points_of(client, auth_headers, customer["id"]) == 0

    resp = client.put(f"{API}/receipts/{receipt['id']}", json={"invoice_num": "INV-9"}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["points_awarded"] == 100
    assert points_of(client, auth_headers, customer["id"]) == 0

    # raising the amount only adds the difference
    resp = client.put(f"{API}/receipts/{receipt['id']}", json={"amount_received": "130.00"}, headers=auth_headers)
    assert resp.json()["points_awarded"] == 130
    assert points_of(client, auth_headers, customer["id"]) == 30


def test_moving_receipt_to_another_customer(client, auth_headers):
    first = create_customer(client, auth_headers)
    second = create_customer(client, auth_headers, name="Ana Trujillo", email="ana@trujillo.example.com", phone="5550111")
    receipt = create_receipt(client, auth_headers, customer_id=first["id"], amount_received="60.00")

    resp = client.put(f"{API}/receipts/{receipt['id']}", json={"customer_id": second["id"]}, headers=auth_headers)
    assert resp.status_code == 200
    assert points_of(client, auth_headers, first["id"]) == 0
    assert points_of(client, auth_headers, second["id"]) == 60

    resp = client.put(f"{API}/receipts/{receipt['id']}", json={"customer_id": None}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["points_awarded"] == 0
    assert points_of(client, auth_headers, second["id"]) == 0


def test_receipt_update_rejects_null_for_required_fields(client, auth_headers):
    receipt = create_receipt(client, auth_headers, customer_name="Walk-in", amount_received="12.00")

    for field in ("amount_received", "customer_name", "trx_date", "pmt_mode", "trx_id"):
        resp = client.put(f"{API}/receipts/{receipt['id']}", json={field: None}, headers=auth_headers)
        assert resp.status_code == 422, field

    body = client.get(f"{API}/receipts/{receipt['id']}", headers=auth_headers).json()
    assert Decimal(body["amount_received"]) == Decimal("12.00")
