from datetime import timedelta

from fastapi.testclient import TestClient

from storefront.core.timeutils import now_utc
from storefront.db.models import Order


def checkout_body(shipping, method="COD", coupon=None):
    body = {"shippingAddress": shipping, "paymentMethod": method}
    if coupon is not None:
        body["couponCode"] = coupon
    return body


def test_checkout_creates_order(client, customer_headers, shipping_payload, make_product, events):
    p = make_product("Air Zoom", price=12999, stock=5)
    client.post("/api/cart", json={"productId": p.id, "quantity": 2}, headers=customer_headers)

    r = client.post("/api/checkout", json=checkout_body(shipping_payload), headers=customer_headers)

    assert r.status_code == 201, r.text
    body = r.json()
    assert body["userEmail"] == "cust@example.com"
    assert body["totalAmount"] == 25998
    assert body["amountDue"] == 25998
    assert body["discountAmount"] == 0
    assert body["paymentStatus"] == "Pending"
    assert body["orderStatus"] == "Processing"
    assert body["shippingAddress"]["country"] == "IN"
    assert body["items"] == [{
        "productId": p.id,
        "title": "Air Zoom",
        "unitPrice": 12999,
        "quantity": 2,
        "imageUrl": "https://cdn.test/air-zoom.jpg",
    }]
    assert client.get("/api/cart", headers=customer_headers).json() == {"items": []}
    assert events[-1]["type"] == "order.created"


def test_checkout_with_coupon(client, db, customer_headers, shipping_payload, make_product, make_coupon):
    p = make_product(price=10000)
    c = make_coupon("SAVE20", discount_value=20, max_discount_amount=500)
    client.post("/api/cart", json={"productId": p.id}, headers=customer_headers)

    r = client.post("/api/checkout", json=checkout_body(shipping_payload, "Card", "save20"), headers=customer_headers)

    assert r.status_code == 201, r.text
    body = r.json()
    assert body["couponCode"] == "SAVE20"
    assert (body["totalAmount"], body["discountAmount"], body["amountDue"]) == (10000, 500, 9500)
    assert body["paymentStatus"] == "Paid"
    assert body["paidAt"] is not None
    db.refresh(c)
    assert c.used_count == 1


def test_checkout_with_expired_coupon(client, db, customer_headers, shipping_payload, make_product, make_coupon):
    p = make_product()
    make_coupon("OLD", expiry_date=now_utc() - timedelta(hours=1))
    client.post("/api/cart", json={"productId": p.id}, headers=customer_headers)

    r = client.post("/api/checkout", json=checkout_body(shipping_payload, coupon="OLD"), headers=customer_headers)

    assert r.status_code == 400
    assert r.json() == {"message": "Coupon has expired"}
    assert db.query(Order).count() == 0


def test_empty_cart(client, db, customer_headers, shipping_payload):
    r = client.post("/api/checkout", json=checkout_body(shipping_payload), headers=customer_headers)
    assert r.status_code == 400
    assert r.json() == {"message": "Cart is empty"}
    assert db.query(Order).count() == 0


def test_insufficient_stock(client, db, customer_headers, shipping_payload, make_product):
    p = make_product("Trail Blazer", stock=5)
    client.post("/api/cart", json={"productId": p.id, "quantity": 2}, headers=customer_headers)
    p.stock = 1
    db.commit()

    r = client.post("/api/checkout", json=checkout_body(shipping_payload), headers=customer_headers)

    assert r.status_code == 400
    assert r.json() == {"message": "Insufficient stock for Trail Blazer"}
    assert len(client.get("/api/cart", headers=customer_headers).json()["items"]) == 1


def test_product_removed_after_adding(client, db, customer_headers, shipping_payload, make_product):
    p = make_product()
    pid = p.id
    client.post("/api/cart", json={"productId": pid}, headers=customer_headers)
    db.delete(p); db.commit()

    r = client.post("/api/checkout", json=checkout_body(shipping_payload), headers=customer_headers)

    assert r.status_code == 404
    assert r.json() == {"message": f"Product not found: {pid}"}


def test_requires_authentication(client, shipping_payload):
    r = client.post("/api/checkout", json=checkout_body(shipping_payload))
    assert r.status_code == 401
    assert r.json() == {"message": "Not authenticated"}


def test_invalid_token(client, shipping_payload):
    r = client.post("/api/checkout", json=checkout_body(shipping_payload), headers={"Authorization": "Bearer nope"})
    assert r.status_code == 401
    assert r.json() == {"message": "Invalid token"}


def test_malformed_address(client, customer_headers, shipping_payload):
    shipping_payload.pop("city")
    r = client.post("/api/checkout", json=checkout_body(shipping_payload), headers=customer_headers)
    assert r.status_code == 422
    assert r.json()["message"].startswith("shippingAddress.city")


def test_unexpected_failure_is_a_500_with_message(app, customer_headers, shipping_payload, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr("storefront.services.checkout.checkout", boom)
    with TestClient(app, raise_server_exceptions=False) as c:
        r = c.post("/api/checkout", json=checkout_body(shipping_payload), headers=customer_headers)

    assert r.status_code == 500
    assert r.json() == {"message": "database unavailable"}
