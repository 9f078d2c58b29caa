from decimal import Decimal

from conftest import API


def invoiced_order(client, headers, product_id, **order_fields):
    order = client.post(
        f"{API}/orders/", json={"items": [{"product_id": product_id, "quantity": 1}], **order_fields}, headers=headers
    ).json()
    resp = client.post(f"{API}/orders/{order['id']}/invoice", json={}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_list_filters_and_search(client, auth_headers, make_product, customer):
    product = make_product(stock=10)
    first = invoiced_order(client, auth_headers, product.id, customer_id=customer.id)
    invoiced_order(client, auth_headers, product.id, customer_name="Thomas Hardy")
    client.post(
        f"{API}/pos/sales", json={"items": [{"product_id": product.id, "quantity": 1}], "payment_method": "cash"},
        headers=auth_headers,
    )

    body = client.get(f"{API}/invoices", headers=auth_headers).json()
    assert body["total"] == 3

    body = client.get(f"{API}/invoices", params={"search": "5550100"}, headers=auth_headers).json()
    assert [i["id"] for i in body["invoices"]] == [first["id"]]

    body = client.get(f"{API}/invoices", params={"search": first["invoice_number"]}, headers=auth_headers).json()
    assert body["total"] == 1

    body = client.get(f"{API}/invoices", params={"invoice_type": "pos"}, headers=auth_headers).json()
    assert body["total"] == 1
    assert body["invoices"][0]["customer_name"] == "Walk-in Customer"
    assert body["invoices"][0]["payment_status"] == "paid"

    body = client.get(f"{API}/invoices", params={"payment_status": "pending"}, headers=auth_headers).json()
    assert body["total"] == 2


def test_update_changes_descriptive_fields_only(client, auth_headers, make_product):
    product = make_product(stock=5)
    invoice = invoiced_order(client, auth_headers, product.id, customer_name="Walk-in")

    resp = client.put(
        f"{API}/invoices/{invoice['id']}",
        json={"terms": "Net 7", "customer_address": "Obere Str. 57", "total_amount": "1.00"},
        headers=auth_headers,
    )
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["terms"] == "Net 7"
    assert body["customer_address"] == "Obere Str. 57"
    assert Decimal(body["total_amount"]) == Decimal("9.99")


def test_missing_invoice(client, auth_headers):
    assert client.get(f"{API}/invoices/INV-MISSING", headers=auth_headers).status_code == 404
    resp = client.put(f"{API}/invoices/INV-MISSING", json={"terms": "x"}, headers=auth_headers)
    assert resp.status_code == 404
