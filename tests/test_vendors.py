from decimal import Decimal

from backoffice.models.ledger import LedgerAccountType, LedgerReferenceType
from backoffice.services import ledger_service, vendor_service
from conftest import API, create_po, receive_all


def vendor_payload(**overrides):
    payload = {
        "name": "Northwind Traders",
        "contact_name": "Ana Trujillo",
        "email": "ana@northwind.example.com",
        "city": "Seattle",
        "payment_terms_days": 30,
        "credit_limit": "10000.00",
    }
    payload.update(overrides)
    return payload


def test_create_vendor_generates_supplier_code(client, auth_headers):
    resp = client.post(f"{API}/vendors/", json=vendor_payload(), headers=auth_headers)
    assert resp.status_code == 201
    body = resp.json()
    assert body["supplier_code"].startswith("SUP")
    assert len(body["supplier_code"]) == 8
    assert body["status"] == "ACTIVE"
    assert body["is_active"] is True


def test_supplier_code_must_be_unique(client, auth_headers):
    client.post(f"{API}/vendors/", json=vendor_payload(supplier_code="SUP00001"), headers=auth_headers)
    resp = client.post(f"{API}/vendors/", json=vendor_payload(name="Other", supplier_code="SUP00001"), headers=auth_headers)
    assert resp.status_code == 400


def test_payment_terms_must_be_standard(client, auth_headers):
    resp = client.post(f"{API}/vendors/", json=vendor_payload(payment_terms_days=20), headers=auth_headers)
    assert resp.status_code == 400


def test_update_status_drives_is_active(client, auth_headers):
    vendor = client.post(f"{API}/vendors/", json=vendor_payload(), headers=auth_headers).json()

    resp = client.put(f"{API}/vendors/{vendor['id']}", json={"status": "BLOCKED"}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["is_active"] is False

    resp = client.put(f"{API}/vendors/{vendor['id']}", json={"status": "ACTIVE", "city": "Portland"}, headers=auth_headers)
    body = resp.json()
    assert body["is_active"] is True
    assert body["city"] == "Portland"


def test_list_search_and_status_filter(client, auth_headers):
    client.post(f"{API}/vendors/", json=vendor_payload(), headers=auth_headers)
    client.post(f"{API}/vendors/", json=vendor_payload(name="Globex", email=None, status="INACTIVE"), headers=auth_headers)

    assert client.get(f"{API}/vendors/", headers=auth_headers).json()["total"] == 2

    body = client.get(f"{API}/vendors/", params={"search": "north"}, headers=auth_headers).json()
    assert [v["name"] for v in body["vendors"]] == ["Northwind Traders"]

    body = client.get(f"{API}/vendors/", params={"status": "INACTIVE"}, headers=auth_headers).json()
    assert [v["name"] for v in body["vendors"]] == ["Globex"]


def test_delete_vendor_without_orders(client, auth_headers, vendor, make_product, db):
    product = make_product()
    resp = client.delete(f"{API}/vendors/{vendor.id}", headers=auth_headers)
    assert resp.status_code == 200
    db.refresh(product)
    assert product.vendor_id is None
    assert client.get(f"{API}/vendors/{vendor.id}", headers=auth_headers).status_code == 404


def test_delete_vendor_with_orders_is_rejected(client, auth_headers, vendor, make_product):
    product = make_product()
    create_po(client, auth_headers, vendor.id, [{"product_id": product.id, "quantity_ordered": 1, "unit_cost": "1.00"}])

    resp = client.delete(f"{API}/vendors/{vendor.id}", headers=auth_headers)
    assert resp.status_code == 400
    assert "Deactivate" in resp.json()["message"]


def test_delete_vendor_with_payments_is_rejected(client, auth_headers, vendor):
    resp = client.post(
        f"{API}/payments", json={"type": "expense", "amount": "12.00", "vendor_id": vendor.id}, headers=auth_headers
    )
    assert resp.status_code == 201, resp.text

    resp = client.delete(f"{API}/vendors/{vendor.id}", headers=auth_headers)
    assert resp.status_code == 400
    assert "payments" in resp.json()["message"]
    assert client.get(f"{API}/vendors/{vendor.id}", headers=auth_headers).status_code == 200


def test_delete_vendor_with_ledger_history_is_rejected(client, auth_headers, db):
    opening = vendor_service.create_vendor(db, name="Opening Balance Co")
    ledger_service.post_vendor_ledger(
        db,
        opening.id,
        [
            {"account_type": LedgerAccountType.PURCHASE, "debit": Decimal("40.00"),
             "reference_type": LedgerReferenceType.PAYMENT, "reference_id": "OPENING-1"},
            {"account_type": LedgerAccountType.VENDOR, "credit": Decimal("40.00"),
             "reference_type": LedgerReferenceType.PAYMENT, "reference_id": "OPENING-1"},
        ],
    )
    db.commit()

    resp = client.delete(f"{API}/vendors/{opening.id}", headers=auth_headers)
    assert resp.status_code == 400
    assert "ledger entries" in resp.json()["message"]


def test_balance_statement_and_outstanding(client, auth_headers, vendor, make_product):
    product = make_product()
    po = create_po(client, auth_headers, vendor.id, [{"product_id": product.id, "quantity_ordered": 10, "unit_cost": "10.00"}])
    receive_all(client, auth_headers, po)
    client.post(f"{API}/purchase-orders/{po['id']}/payments", json={"amount": "40.00"}, headers=auth_headers)

    balance = client.get(f"{API}/vendors/{vendor.id}/balance", headers=auth_headers).json()
    assert Decimal(balance["balance"]) == Decimal("60.00")

    statement = client.get(f"{API}/vendors/{vendor.id}/ledger", headers=auth_headers).json()
    assert Decimal(statement["opening_balance"]) == Decimal("0")
    assert [Decimal(e["balance"]) for e in statement["entries"]] == [Decimal("100.00"), Decimal("60.00")]
    assert Decimal(statement["closing_balance"]) == Decimal("60.00")

    # a window after today holds no entries but opens at the full balance
    future = client.get(
        f"{API}/vendors/{vendor.id}/ledger",
        params={"from_date": "2999-01-01", "to_date": "2999-12-31"},
        headers=auth_headers,
    ).json()
    assert future["entries"] == []
    assert Decimal(future["opening_balance"]) == Decimal("60.00")
    assert Decimal(future["closing_balance"]) == Decimal("60.00")

    outstanding = client.get(f"{API}/vendors/outstanding", headers=auth_headers).json()
    assert Decimal(outstanding["total_outstanding"]) == Decimal("60.00")
    assert outstanding["vendors"][0]["vendor_id"] == vendor.id


def test_statement_rejects_inverted_window(client, auth_headers, vendor):
    resp = client.get(
        f"{API}/vendors/{vendor.id}/ledger",
        params={"from_date": "2026-02-01", "to_date": "2026-01-01"},
        headers=auth_headers,
    )
    assert resp.status_code == 400


def test_balance_as_of_before_any_activity(client, auth_headers, vendor, make_product):
    product = make_product()
    po = create_po(client, auth_headers, vendor.id, [{"product_id": product.id, "quantity_ordered": 1, "unit_cost": "5.00"}])
    receive_all(client, auth_headers, po)

    balance = client.get(f"{API}/vendors/{vendor.id}/balance", params={"as_of": "2000-01-01"}, headers=auth_headers).json()
    assert Decimal(balance["balance"]) == Decimal("0")


def test_generate_code_and_missing_vendor(client, auth_headers):
    code = client.get(f"{API}/vendors/generate-code", headers=auth_headers).json()["supplier_code"]
    assert code.startswith("SUP") and code[3:].isdigit()
    assert client.get(f"{API}/vendors/VEN-MISSING/balance", headers=auth_headers).status_code == 404
