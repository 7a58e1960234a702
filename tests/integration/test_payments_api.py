import pytest


@pytest.fixture()
def order_id(client, customer_headers, shipping_payload, make_product):
    p = make_product(price=5000)
    client.post("/api/cart", json={"productId": p.id}, headers=customer_headers)
    r = client.post("/api/checkout", json={"shippingAddress": shipping_payload, "paymentMethod": "COD"},
                    headers=customer_headers)
    return r.json()["id"]


def test_webhook_requires_internal_key(client, order_id):
    event = {"type": "payment.succeeded", "orderId": order_id}
    assert client.post("/api/payment/webhook", json=event).status_code == 401
    r = client.post("/api/payment/webhook", json=event, headers={"X-Internal-Key": "wrong"})
    assert r.status_code == 401
    assert r.json() == {"message": "Unauthorized"}


def test_webhook_confirms_payment(client, internal_headers, customer_headers, order_id):
    event = {"type": "payment.succeeded", "orderId": order_id, "paymentIntentId": "pi_1"}
    r = client.post("/api/payment/webhook", json=event, headers=internal_headers)
    assert r.json() == {"received": True, "handled": True}

    order = client.get(f"/api/orders/{order_id}", headers=customer_headers).json()
    assert order["paymentStatus"] == "Paid"
    assert order["paymentIntentId"] == "pi_1"


def test_webhook_replay_keeps_first_payment_time(client, internal_headers, customer_headers, order_id):
    event = {"type": "payment.succeeded", "orderId": order_id, "paymentIntentId": "pi_1"}
    client.post("/api/payment/webhook", json=event, headers=internal_headers)
    first = client.get(f"/api/orders/{order_id}", headers=customer_headers).json()["paidAt"]

    client.post("/api/payment/webhook", json=event, headers=internal_headers)
    assert client.get(f"/api/orders/{order_id}", headers=customer_headers).json()["paidAt"] == first


def test_webhook_ignores_other_events(client, internal_headers, order_id):
    r = client.post("/api/payment/webhook", json={"type": "payment.failed", "orderId": order_id},
                    headers=internal_headers)
    assert r.json() == {"received": True, "handled": False}


def test_webhook_unknown_order(client, internal_headers):
    r = client.post("/api/payment/webhook", json={"type": "payment.succeeded", "orderId": 9999},
                    headers=internal_headers)
    assert r.status_code == 404
    assert r.json() == {"message": "Order not found"}
