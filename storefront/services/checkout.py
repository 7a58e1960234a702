"""
Checkout: turn the user's cart into an order.

Flow: read cart lines -> re-fetch every product and validate stock -> snapshot
lines into an order and total them at live prices -> (optional) redeem a
coupon -> commit -> clear the cart -> publish ``order.created``.

Stock is read-checked only. Nothing is reserved or decremented here, so two
concurrent checkouts of the last unit can both pass validation.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from kafka.errors import KafkaError
from redis import RedisError
from sqlalchemy.orm import Session

from storefront.core.config import settings
from storefront.core.errors import (
    EmptyCartError,
    InsufficientStockError,
    ProductNotFoundError,
    UsageLimitExceededError,
)
from storefront.core.timeutils import now_utc
from storefront.db import repository
from storefront.db.models import COD, Order, OrderItem, PaymentStatus
from storefront.kafka.producer import emit_order_event
from storefront.services.coupons import evaluate_coupon
from storefront.store import cart_store

logger = logging.getLogger(__name__)


@dataclass
class ValidatedLine:
    product_id: int
    title: str
    unit_price: int
    quantity: int
    image_url: str

    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity


def validate_lines(db: Session, cart_lines: List[Dict[str, Any]]) -> List[ValidatedLine]:
    """Re-fetch each product; the whole cart must pass before anything is written."""
    validated: List[ValidatedLine] = []
    for line in cart_lines:
        product_id = int(line["product_id"])
        quantity = int(line["quantity"])
        product = repository.get_product(db, product_id)
        if product is None or not product.is_active:
            raise ProductNotFoundError(product_id)
        if product.stock < quantity:
            raise InsufficientStockError(product.title)
        validated.append(ValidatedLine(
            product_id=product.id,
            title=product.title,
            unit_price=product.price,
            quantity=quantity,
            image_url=(product.images or [""])[0] or "",
        ))
    return validated


def order_total(lines: List[ValidatedLine]) -> int:
    return sum(l.line_total for l in lines)


def initial_payment_status(payment_method: str) -> str:
    # Card orders are marked Paid at creation; the payment webhook confirms later.
    return PaymentStatus.PENDING.value if payment_method == COD else PaymentStatus.PAID.value


def checkout(db: Session, user_email: str, shipping_address: Dict[str, Any], payment_method: str,
             coupon_code: Optional[str] = None) -> Order:
    cart_lines = cart_store.get_lines(user_email)
    if not cart_lines:
        raise EmptyCartError()

    lines = validate_lines(db, cart_lines)
    total = order_total(lines)

    coupon = None
    discount = 0
    if coupon_code:
        coupon = repository.get_coupon_by_code(db, coupon_code)
        quote = evaluate_coupon(coupon, total)
        discount = quote.discount_amount

    payment_status = initial_payment_status(payment_method)
    order = Order(
        user_email=user_email,
        full_name=shipping_address.get("full_name") or "",
        address_line1=shipping_address["address_line1"],
        address_line2=shipping_address.get("address_line2") or "",
        city=shipping_address["city"],
        state=shipping_address.get("state") or "",
        postcode=shipping_address["postcode"],
        country=shipping_address["country"].upper(),
        phone=shipping_address.get("phone") or "",
        payment_method=payment_method,
        payment_status=payment_status,
        total_amount=total,
        coupon_code=coupon.code if coupon else None,
        discount_amount=discount,
        amount_due=total - discount,
        currency=settings.CURRENCY,
        paid_at=now_utc() if payment_status == PaymentStatus.PAID.value else None,
        items=[
            OrderItem(
                product_id=l.product_id,
                title=l.title,
                unit_price=l.unit_price,
                quantity=l.quantity,
                image_url=l.image_url,
            )
            for l in lines
        ],
    )

    try:
        repository.create_order(db, order)
        if coupon is not None and not repository.increment_coupon_usage(db, coupon.id):
            raise UsageLimitExceededError()
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(order)
    logger.info("order created id=%s user=%s total=%s due=%s method=%s",
                order.id, user_email, order.total_amount, order.amount_due, payment_method)

    # The order is committed; a cart that fails to clear is left for the user.
    try:
        cart_store.clear_cart(user_email)
    except RedisError:
        logger.exception("cart clear failed after order id=%s user=%s", order.id, user_email)

    _publish_created(order)
    return order


def _publish_created(order: Order) -> None:
    try:
        emit_order_event({
            "type": "order.created",
            "order_id": order.id,
            "user_email": order.user_email,
            "amount": order.amount_due,
            "currency": order.currency,
            "items": [
                {"product_id": it.product_id, "quantity": it.quantity, "unit_price": it.unit_price}
                for it in order.items
            ],
        })
    except KafkaError:
        logger.exception("order.created publish failed id=%s", order.id)
