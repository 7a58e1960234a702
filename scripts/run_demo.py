#!/usr/bin/env python3
"""
run_demo.py - End-to-end demo for the storefront API
- Mints admin & customer access tokens (shared JWT_SECRET)
- Admin creates category/product/coupon
- Customer adds to cart, quotes the coupon, checks out with it
- Payment bridge confirms payment through the webhook
- Prints the final order
"""

import requests
import json
import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, Any, Optional, List

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))
from storefront.core.auth import create_access_token  # noqa: E402


class DemoRunner:
    def __init__(self):
        self.base_url = os.getenv("STOREFRONT_URL", "http://localhost:8000")
        self.api_url = f"{self.base_url}/api"

        self.admin_email = "admin@example.com"
        self.cust_email = "cust@example.com"

        # Internal key (payment webhook)
        self.internal_key = os.getenv("SVC_INTERNAL_KEY", "devkey")

        self.admin_access_token, _ = create_access_token(self.admin_email, "admin")
        self.cust_access_token, _ = create_access_token(self.cust_email, "customer")

    # ---------- helpers ----------
    def show_step(self, title: str):
        print(f"\n=== {title} ===")

    def mask_token(self, token: str) -> str:
        if not token:
            return "<none>"
        return token if len(token) <= 12 else f"{token[:8]}...{token[-6:]}"

    def call_api(
        self,
        method: str,
        url: str,
        headers: Optional[Dict] = None,
        data: Optional[Any] = None,
        expected_status: List[int] = [200, 201, 202, 204],
        quiet: bool = False,
        timeout: int = 30,
    ):
        if not quiet:
            print(f"\n-> {method} {url}")
            if headers:
                ph = headers.copy()
                if "Authorization" in ph:
                    tok = ph["Authorization"].replace("Bearer ", "")
                    ph["Authorization"] = f"Bearer {self.mask_token(tok)}"
                print(f"   Headers: {json.dumps(ph, indent=2)}")
            if data is not None:
                print(f"   Body: {json.dumps(data, indent=2)}")

        try:
            resp = requests.request(
                method=method,
                url=url,
                headers=headers,
                json=data if isinstance(data, (dict, list)) else None,
                timeout=timeout,
            )
            if not quiet:
                status_color = "\033[92m" if resp.status_code in expected_status else "\033[93m"
                print(f"   Status: {status_color}{resp.status_code}\033[0m")

            try:
                js = resp.json()
                if not quiet:
                    print("   JSON:")
                    print(json.dumps(js, indent=2))
                return {"status": resp.status_code, "data": js, "raw": resp.text}
            except json.JSONDecodeError:
                if resp.text and not quiet:
                    print("   Content:")
                    print(resp.text)
                return {"status": resp.status_code, "data": None, "raw": resp.text}
        except requests.exceptions.RequestException as e:
            if not quiet:
                print(f"   Error: \033[91m{e}\033[0m")
            return {"status": None, "data": None, "raw": None, "error": str(e)}

    # ---------- flow ----------
    def preflight_health_checks(self) -> bool:
        self.show_step("Preflight: service health")
        result = self.call_api("GET", f"{self.base_url}/health", expected_status=[200], quiet=True)
        ok = result.get("status") == 200
        color = "\033[92m" if ok else "\033[91m"
        print(f"  - {'storefront'.ljust(14)} -> {color}{'OK' if ok else 'FAIL'}\033[0m")
        return ok

    def run_demo(self):
        print("Starting Storefront Demo")
        print("=" * 50)

        if not self.preflight_health_checks():
            print("Storefront is not reachable; start it with `uvicorn storefront.main:app`.")
            return

        admin_hdrs = {"Authorization": f"Bearer {self.admin_access_token}"}
        cust_hdrs = {"Authorization": f"Bearer {self.cust_access_token}"}

        # 1) Admin creates category + product + coupon
        self.show_step("Admin: create category")
        cat = self.call_api("POST", f"{self.api_url}/categories", headers=admin_hdrs,
                            data={"name": "Shoes"}, expected_status=[201, 409])
        category_id = (cat.get("data") or {}).get("id")

        self.show_step("Admin: create product")
        prod = self.call_api(
            "POST",
            f"{self.api_url}/products",
            headers=admin_hdrs,
            data={
                "title": "Air Zoom",
                "description": "Runner",
                "price": 1299900,
                "stock": 50,
                "images": ["https://cdn.example.local/air-zoom.jpg"],
                "categoryId": category_id,
            },
            expected_status=[201],
        )
        product_id = (prod.get("data") or {}).get("id")

        self.show_step("Admin: create coupon")
        expiry = (datetime.now(timezone.utc) + timedelta(days=7)).isoformat()
        self.call_api(
            "POST",
            f"{self.api_url}/coupons",
            headers=admin_hdrs,
            data={"code": "demo20", "discountType": "percentage", "discountValue": 20,
                  "maxDiscountAmount": 50000, "expiryDate": expiry, "usageLimit": 10},
            expected_status=[201, 400],
        )

        # 2) Customer cart
        self.show_step("Customer: add to cart")
        if not product_id:
            print("Skipping cart - no product")
            return
        self.call_api("POST", f"{self.api_url}/cart", headers=cust_hdrs,
                      data={"productId": product_id, "quantity": 2}, expected_status=[201])

        self.show_step("Customer: quote coupon")
        self.call_api("POST", f"{self.api_url}/coupons/apply", headers=cust_hdrs,
                      data={"couponCode": "DEMO20", "cartTotal": 2 * 1299900})

        # 3) Checkout
        self.show_step("Customer: checkout")
        co = self.call_api(
            "POST",
            f"{self.api_url}/checkout",
            headers=cust_hdrs,
            data={
                "shippingAddress": {
                    "fullName": "Demo Customer",
                    "addressLine1": "1 Demo Street",
                    "city": "Bengaluru",
                    "state": "KA",
                    "postcode": "560001",
                    "country": "IN",
                    "phone": "+910000000000",
                },
                "paymentMethod": "Card",
                "couponCode": "DEMO20",
            },
            expected_status=[201],
        )
        order_id = (co.get("data") or {}).get("id")
        print(f"Order ID: {order_id}; Amount due: {(co.get('data') or {}).get('amountDue')}")

        # 4) Payment confirmation
        self.show_step("Payment: webhook payment.succeeded")
        if order_id:
            self.call_api(
                "POST",
                f"{self.api_url}/payment/webhook",
                headers={"X-Internal-Key": self.internal_key},
                data={"type": "payment.succeeded", "orderId": order_id, "paymentIntentId": f"pi_demo_{order_id}"},
            )
        else:
            print("Skipping payment - no order")

        # 5) Order status
        self.show_step("Order: check status")
        if order_id:
            self.call_api("GET", f"{self.api_url}/orders/{order_id}", headers=cust_hdrs, expected_status=[200])

        print("\n\033[92m=== DEMO COMPLETE ===\033[0m")


if __name__ == "__main__":
    DemoRunner().run_demo()
