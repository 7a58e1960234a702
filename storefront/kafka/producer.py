import json
import logging
from kafka import KafkaProducer
from storefront.core.config import settings

logger = logging.getLogger(__name__)

_producer = None

def _get_producer() -> KafkaProducer:
    global _producer
    if _producer is None:
        _producer = KafkaProducer(
            bootstrap_servers=[settings.KAFKA_BOOTSTRAP],
            value_serializer=lambda v: json.dumps(v).encode("utf-8"),
            key_serializer=lambda v: (v.encode("utf-8") if isinstance(v, str) else v),
            linger_ms=5,
            retries=3,
        )
    return _producer

def send(topic: str, key: str, value: dict):
    if not settings.KAFKA_BOOTSTRAP:
        logger.debug("events disabled, dropping %s key=%s", value.get("type"), key)
        return
    p = _get_producer()
    p.send(topic, key=key, value=value)
    p.flush(5)

def emit_order_event(event: dict):
    """Emit to order.events (configurable), keyed by order id."""
    send(settings.TOPIC_ORDER_EVENTS, key=str(event.get("order_id", "")), value=event)
