from decimal import Decimal

from conftest import API, points_of, stock_of


def ring_up(client, headers, **payload):
    resp = client.post(f"{API}/pos/sales", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_product_search(client, auth_headers, make_product, db):
    mug = make_product(name="Blue Mug", stock=3)
    mug.barcode = "4006381333931"
    db.commit()
    make_product(name="Red Plate", stock=3)

    def found(**params):
        resp = client.get(f"{API}/pos/products/search", params=params, headers=auth_headers)
        assert resp.status_code == 200, resp.text
        return [p["name"] for p in resp.json()["products"]]

    assert found(q="mug") == ["Blue Mug"]
    assert found(q="4006381333931", type="barcode") == ["Blue Mug"]
    assert found(q="40063", type="barcode") == []
    assert found(q=mug.sku, type="sku") == ["Blue Mug"]
    assert found(q="SKU") == ["Blue Mug", "Red Plate"]

    resp = client.get(f"{API}/pos/products/search", params={"q": "mug", "type": "colour"}, headers=auth_headers)
    assert resp.status_code == 422


def test_sale_totals_with_tax_and_bill_discount(client, auth_headers, make_product):
    taxed = make_product(price="10.00", tax_rate="10", stock=5)
    plain = make_product(price="5.00", stock=5)

    sale = ring_up(
        client, auth_headers,
        items=[{"product_id": taxed.id, "quantity": 2}, {"product_id": plain.id, "quantity": 1}],
        payment_method="cash",
        discount_amount="5.00",
    )
    assert sale["sale_number"].startswith("POS")
    assert Decimal(sale["subtotal"]) == Decimal("25.00")
    assert Decimal(sale["discount_amount"]) == Decimal("5.00")
    assert Decimal(sale["tax_amount"]) == Decimal("1.60")
    assert Decimal(sale["total_amount"]) == Decimal("21.60")
    assert sale["customer_name"] is None
    assert sale["points_awarded"] == 0

    assert stock_of(client, auth_headers, taxed.id) == 3
    assert stock_of(client, auth_headers, plain.id) == 4

    invoice = client.get(f"{API}/invoices/{sale['invoice_id']}", headers=auth_headers).json()
    assert invoice["invoice_number"] == sale["invoice_number"]
    assert Decimal(invoice["total_amount"]) == Decimal("21.60")
    assert len(invoice["items"]) == 2

    payments = client.get(f"{API}/payments", params={"type": "sale"}, headers=auth_headers).json()
    assert payments["total"] == 1
    assert Decimal(payments["payments"][0]["amount"]) == Decimal("21.60")


def test_split_payment_must_match_total(client, auth_headers, make_product):
    product = make_product(price="10.00", stock=5)
    line = [{"product_id": product.id, "quantity": 2}]

    resp = client.post(
        f"{API}/pos/sales",
        json={"items": line, "payment_method": "split", "split_cash": "5.00", "split_card": "10.00"},
        headers=auth_headers,
    )
    assert resp.status_code == 400
    assert stock_of(client, auth_headers, product.id) == 5

    sale = ring_up(
        client, auth_headers, items=line, payment_method="split", split_cash="5.00", split_card="15.00"
    )
    assert Decimal(sale["split_cash"]) == Decimal("5.00")
    assert Decimal(sale["split_card"]) == Decimal("15.00")

    payments = client.get(f"{API}/payments", params={"type": "sale"}, headers=auth_headers).json()
    assert sorted(Decimal(p["amount"]) for p in payments["payments"]) == [Decimal("5.00"), Decimal("15.00")]
    assert sorted(p["method"] for p in payments["payments"]) == ["card", "cash"]


def test_sale_rejects_short_stock_and_excess_discount(client, auth_headers, make_product):
    product = make_product(price="10.00", stock=1)

    resp = client.post(
        f"{API}/pos/sales", json={"items": [{"product_id": product.id, "quantity": 2}], "payment_method": "cash"},
        headers=auth_headers,
    )
    assert resp.status_code == 400

    resp = client.post(
        f"{API}/pos/sales",
        json={"items": [{"product_id": product.id, "quantity": 1, "discount": "11.00"}], "payment_method": "cash"},
        headers=auth_headers,
    )
    assert resp.status_code == 400

    resp = client.post(
        f"{API}/pos/sales",
        json={"items": [{"product_id": product.id, "quantity": 1}], "payment_method": "cash", "discount_amount": "10.01"},
        headers=auth_headers,
    )
    assert resp.status_code == 400
    assert client.get(f"{API}/invoices", headers=auth_headers).json()["total"] == 0


def test_sale_to_a_customer_awards_points(client, auth_headers, make_product, customer):
    product = make_product(price="40.00", stock=5)
    sale = ring_up(
        client, auth_headers,
        items=[{"product_id": product.id, "quantity": 1, "discount": "0.50"}],
        payment_method="card",
        customer_id=customer.id,
    )
    assert sale["customer_name"] == "Maria Anders"
    assert Decimal(sale["total_amount"]) == Decimal("39.50")
    assert sale["points_awarded"] == 39
    assert points_of(client, auth_headers, customer.id) == 39


def test_list_sales_with_total(client, auth_headers, make_product):
    product = make_product(price="10.00", stock=10)
    ring_up(client, auth_headers, items=[{"product_id": product.id, "quantity": 1}], payment_method="cash")
    ring_up(
        client, auth_headers, items=[{"product_id": product.id, "quantity": 2}], payment_method="digital",
        sale_type="website",
    )

    body = client.get(f"{API}/pos/sales", headers=auth_headers).json()
    assert body["total"] == 2
    assert Decimal(body["total_amount"]) == Decimal("30.00")

    body = client.get(f"{API}/pos/sales", params={"sale_type": "website"}, headers=auth_headers).json()
    assert body["total"] == 1
    sale = client.get(f"{API}/pos/sales/{body['sales'][0]['id']}", headers=auth_headers).json()
    assert sale["items"][0]["quantity"] == 2

    assert client.get(f"{API}/pos/sales/POS-MISSING", headers=auth_headers).status_code == 404
