
import json
import logging
from typing import Dict, Any, List
from redis import Redis
from storefront.core.config import settings

logger = logging.getLogger(__name__)

def get_client() -> Redis:
    return Redis.from_url(settings.REDIS_URL, decode_responses=True)

def cart_key(email: str) -> str:
    return f"cart:{email}"

def get_lines(email: str) -> List[Dict[str, Any]]:
    r = get_client()
    items = r.hgetall(cart_key(email))  # {product_id_str: json}
    lines = []
    for pid, val in items.items():
        try:
            line = json.loads(val)
        except ValueError:
            logger.warning("dropping unreadable cart line user=%s product_id=%s", email, pid)
            continue
        if int(line.get("quantity") or 0) <= 0:
            continue
        lines.append(line)
    lines.sort(key=lambda l: int(l["product_id"]))
    return lines

def get_cart(email: str) -> Dict[str, Any]:
    return {"items": get_lines(email)}

def get_line(email: str, product_id: int) -> Dict[str, Any] | None:
    raw = get_client().hget(cart_key(email), str(product_id))
    return json.loads(raw) if raw else None

def put_item(email: str, item: Dict[str, Any]):
    r = get_client()
    r.hset(cart_key(email), str(item["product_id"]), json.dumps(item))

def delete_item(email: str, product_id: int):
    r = get_client()
    r.hdel(cart_key(email), str(product_id))

def clear_cart(email: str):
    r = get_client()
    r.delete(cart_key(email))
