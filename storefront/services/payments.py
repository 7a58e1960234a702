import logging
from typing import Optional

from kafka.errors import KafkaError
from sqlalchemy.orm import Session

from storefront.core.errors import OrderNotFoundError
from storefront.core.timeutils import now_utc
from storefront.db import repository
from storefront.db.models import Order, PaymentStatus
from storefront.kafka.producer import emit_order_event

logger = logging.getLogger(__name__)

PAYMENT_SUCCEEDED = "payment.succeeded"

def mark_order_paid(db: Session, order_id: int, payment_intent_id: Optional[str] = None) -> Order:
    """
    Confirm payment for an order. Safe to repeat: a Paid order keeps its first
    ``paid_at`` and records the payment intent id it is given. ``order.paid``
    is published only on the Pending -> Paid transition.
    """
    order = repository.get_order(db, order_id)
    if order is None:
        raise OrderNotFoundError()

    data = {}
    if order.payment_status != PaymentStatus.PAID.value:
        data["payment_status"] = PaymentStatus.PAID.value
    if order.paid_at is None:
        data["paid_at"] = now_utc()
    if payment_intent_id and order.payment_intent_id != payment_intent_id:
        data["payment_intent_id"] = payment_intent_id
    if not data:
        return order

    order = repository.update_order(db, order, data)
    logger.info("order %s marked as paid intent=%s", order.id, order.payment_intent_id)
    if "payment_status" not in data:
        return order
    try:
        emit_order_event({"type": "order.paid", "order_id": order.id, "user_email": order.user_email,
                          "amount": order.amount_due, "currency": order.currency})
    except KafkaError:
        logger.exception("order.paid publish failed id=%s", order.id)
    return order

def process_event(db: Session, event: dict) -> bool:
    """Handle one payment event. Returns False for event types this service does not act on."""
    if event.get("type") != PAYMENT_SUCCEEDED:
        logger.info("ignoring payment event type=%s", event.get("type"))
        return False
    mark_order_paid(db, int(event["order_id"]), event.get("payment_intent_id"))
    return True
