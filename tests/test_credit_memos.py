from decimal import Decimal

from conftest import API, create_po, receive_all, stock_of


def create_memo(client, headers, **payload):
    resp = client.post(f"{API}/credit-memos", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def vendor_balance(client, headers, vendor_id):
    return Decimal(client.get(f"{API}/vendors/{vendor_id}/balance", headers=headers).json()["balance"])


def received_stock(client, headers, vendor, product, quantity=3, unit_cost="10.00"):
    po = create_po(
        client, headers, vendor.id, [{"product_id": product.id, "quantity_ordered": quantity, "unit_cost": unit_cost}]
    )
    return receive_all(client, headers, po)


def test_vendor_memo_reduces_payable_and_returns_stock(client, auth_headers, vendor, make_product):
    product = make_product()
    received_stock(client, auth_headers, vendor, product)
    assert vendor_balance(client, auth_headers, vendor.id) == Decimal("30.00")
    assert stock_of(client, auth_headers, product.id) == 3

    memo = create_memo(
        client, auth_headers, type="VENDOR", reason="DAMAGED", vendor_id=vendor.id,
        items=[{"product_id": product.id, "quantity": 1, "unit_price": "10.00", "tax_percent": "5"}],
    )
    assert memo["credit_memo_number"].startswith("CM")
    assert memo["status"] == "DRAFT"
    assert memo["party_name"] == "Acme Supplies"
    assert Decimal(memo["subtotal"]) == Decimal("10.00")
    assert Decimal(memo["tax_amount"]) == Decimal("0.50")
    assert Decimal(memo["total_amount"]) == Decimal("10.50")

    # drafts post nothing
    assert vendor_balance(client, auth_headers, vendor.id) == Decimal("30.00")

    resp = client.post(f"{API}/credit-memos/{memo['id']}/approve", headers=auth_headers)
    assert resp.status_code == 200, resp.text
    approved = resp.json()
    assert approved["status"] == "APPROVED"
    assert approved["approved_at"] is not None

    assert vendor_balance(client, auth_headers, vendor.id) == Decimal("19.50")
    assert stock_of(client, auth_headers, product.id) == 2

    ledger = client.get(
        f"{API}/ledger", params={"reference_type": "CREDIT_MEMO", "reference_id": memo["id"]}, headers=auth_headers
    ).json()
    assert ledger["total"] == 2
    assert Decimal(ledger["total_debit"]) == Decimal(ledger["total_credit"]) == Decimal("10.50")
    accounts = {e["account_type"] for e in ledger["entries"]}
    assert accounts == {"PURCHASE_RETURN", "VENDOR"}

    resp = client.post(f"{API}/credit-memos/{memo['id']}/approve", headers=auth_headers)
    assert resp.status_code == 400


def test_cancelling_an_approved_memo_reverses_it(client, auth_headers, vendor, make_product):
    product = make_product()
    received_stock(client, auth_headers, vendor, product)
    memo = create_memo(
        client, auth_headers, type="VENDOR", reason="RETURN", vendor_id=vendor.id,
        items=[{"product_id": product.id, "quantity": 2, "unit_price": "10.00"}],
    )
    client.post(f"{API}/credit-memos/{memo['id']}/approve", headers=auth_headers)
    assert vendor_balance(client, auth_headers, vendor.id) == Decimal("10.00")
    assert stock_of(client, auth_headers, product.id) == 1

    resp = client.post(f"{API}/credit-memos/{memo['id']}/cancel", headers=auth_headers)
    assert resp.status_code == 200, resp.text
    assert resp.json()["status"] == "CANCELLED"
    assert vendor_balance(client, auth_headers, vendor.id) == Decimal("30.00")
    assert stock_of(client, auth_headers, product.id) == 3

    assert client.post(f"{API}/credit-memos/{memo['id']}/cancel", headers=auth_headers).status_code == 400
    assert client.post(f"{API}/credit-memos/{memo['id']}/approve", headers=auth_headers).status_code == 400


def test_vendor_return_needs_stock_on_hand(client, auth_headers, vendor, make_product):
    product = make_product(stock=1)
    memo = create_memo(
        client, auth_headers, type="VENDOR", reason="RETURN", vendor_id=vendor.id,
        items=[{"product_id": product.id, "quantity": 2, "unit_price": "4.50"}],
    )

    resp = client.post(f"{API}/credit-memos/{memo['id']}/approve", headers=auth_headers)
    assert resp.status_code == 400
    body = client.get(f"{API}/credit-memos/{memo['id']}", headers=auth_headers).json()
    assert body["status"] == "DRAFT"
    assert client.get(f"{API}/ledger", params={"reference_type": "CREDIT_MEMO"}, headers=auth_headers).json()["total"] == 0


def test_customer_memo_restocks_and_credits_customer(client, auth_headers, make_product, customer):
    product = make_product(stock=0)
    memo = create_memo(
        client, auth_headers, type="CUSTOMER", reason="RETURN", customer_id=customer.id,
        items=[
            {"product_id": product.id, "quantity": 2, "unit_price": "9.99"},
            {"product_name": "Handling fee refund", "quantity": 1, "unit_price": "2.00"},
        ],
    )
    assert memo["party_name"] == "Maria Anders"
    assert Decimal(memo["total_amount"]) == Decimal("21.98")

    client.post(f"{API}/credit-memos/{memo['id']}/approve", headers=auth_headers)
    assert stock_of(client, auth_headers, product.id) == 2

    ledger = client.get(f"{API}/ledger", params={"party_id": customer.id}, headers=auth_headers).json()
    assert ledger["total"] == 1
    assert ledger["entries"][0]["account_type"] == "CUSTOMER"
    assert Decimal(ledger["entries"][0]["credit"]) == Decimal("21.98")


def test_memo_validation(client, auth_headers, vendor, customer):
    resp = client.post(
        f"{API}/credit-memos",
        json={"type": "VENDOR", "reason": "OTHER", "items": [{"product_name": "Misc", "quantity": 1, "unit_price": "1.00"}]},
        headers=auth_headers,
    )
    assert resp.status_code == 400

    resp = client.post(
        f"{API}/credit-memos",
        json={"type": "CUSTOMER", "reason": "OTHER", "customer_id": customer.id,
              "items": [{"quantity": 1, "unit_price": "1.00"}]},
        headers=auth_headers,
    )
    assert resp.status_code == 400

    resp = client.post(
        f"{API}/credit-memos",
        json={"type": "VENDOR", "reason": "OTHER", "vendor_id": vendor.id, "items": []},
        headers=auth_headers,
    )
    assert resp.status_code == 422


def test_only_drafts_can_be_edited(client, auth_headers, vendor, make_product):
    product = make_product(stock=5)
    memo = create_memo(
        client, auth_headers, type="VENDOR", reason="DAMAGED", vendor_id=vendor.id,
        items=[{"product_id": product.id, "quantity": 1, "unit_price": "4.50"}],
    )

    resp = client.put(
        f"{API}/credit-memos/{memo['id']}",
        json={"reason": "RATE_DIFFERENCE", "affects_inventory": False,
              "items": [{"product_id": product.id, "quantity": 3, "unit_price": "1.00"}]},
        headers=auth_headers,
    )
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["reason"] == "RATE_DIFFERENCE"
    assert len(body["items"]) == 1
    assert Decimal(body["total_amount"]) == Decimal("3.00")

    client.post(f"{API}/credit-memos/{memo['id']}/approve", headers=auth_headers)
    # rate differences do not move stock
    assert stock_of(client, auth_headers, product.id) == 5

    resp = client.put(f"{API}/credit-memos/{memo['id']}", json={"notes": "late edit"}, headers=auth_headers)
    assert resp.status_code == 400


def test_list_and_analytics(client, auth_headers, vendor, make_product, customer):
    mug = make_product(name="Blue Mug", stock=10)
    plate = make_product(name="Red Plate", stock=10)

    def approved(**payload):
        memo = create_memo(client, auth_headers, **payload)
        client.post(f"{API}/credit-memos/{memo['id']}/approve", headers=auth_headers)
        return memo

    approved(type="VENDOR", reason="DAMAGED", vendor_id=vendor.id,
             items=[{"product_id": mug.id, "quantity": 1, "unit_price": "10.00"}])
    approved(type="VENDOR", reason="DAMAGED", vendor_id=vendor.id,
             items=[{"product_id": mug.id, "quantity": 2, "unit_price": "10.00"}])
    approved(type="CUSTOMER", reason="RETURN", customer_id=customer.id,
             items=[{"product_id": plate.id, "quantity": 1, "unit_price": "5.00"}])
    # drafts are left out of the analytics
    create_memo(client, auth_headers, type="VENDOR", reason="SCHEME", vendor_id=vendor.id,
                items=[{"product_id": plate.id, "quantity": 9, "unit_price": "1.00"}])

    body = client.get(f"{API}/credit-memos", headers=auth_headers).json()
    assert body["total"] == 4
    body = client.get(f"{API}/credit-memos", params={"type": "VENDOR", "status": "APPROVED"}, headers=auth_headers).json()
    assert body["total"] == 2
    body = client.get(f"{API}/credit-memos", params={"customer_id": customer.id}, headers=auth_headers).json()
    assert body["total"] == 1

    by_vendor = client.get(f"{API}/credit-memos/analytics/returns-by-vendor", headers=auth_headers).json()
    assert [(v["vendor_id"], v["vendor_name"], v["count"]) for v in by_vendor] == [(vendor.id, "Acme Supplies", 2)]
    assert Decimal(by_vendor[0]["total_amount"]) == Decimal("30.00")

    reasons = client.get(f"{API}/credit-memos/analytics/reason-breakdown", headers=auth_headers).json()
    assert [(r["reason"], r["count"], r["percent"]) for r in reasons] == [("DAMAGED", 2, 66.7), ("RETURN", 1, 33.3)]

    products = client.get(f"{API}/credit-memos/analytics/returns-by-product", headers=auth_headers).json()
    assert [(p["product_name"], p["quantity_returned"]) for p in products] == [("Blue Mug", 3), ("Red Plate", 1)]
    assert Decimal(products[0]["total_value"]) == Decimal("30.00")


def test_vendor_with_credit_memo_cannot_be_deleted(client, auth_headers, vendor):
    create_memo(
        client, auth_headers, type="VENDOR", reason="SCHEME", vendor_id=vendor.id,
        items=[{"product_name": "Volume rebate", "quantity": 1, "unit_price": "25.00"}],
    )

    resp = client.delete(f"{API}/vendors/{vendor.id}", headers=auth_headers)
    assert resp.status_code == 400
    assert "credit memos" in resp.json()["message"]
