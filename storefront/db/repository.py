"""
Thin store functions over the SQLAlchemy session.

Services call these instead of querying models directly so the checkout and
coupon flows read as a sequence of store calls.
"""
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from storefront.db import models


# products
def get_product(db: Session, product_id: int) -> Optional[models.Product]:
    return db.get(models.Product, product_id)


def list_products(db: Session, keyword: str = "", category_slug: str = "",
                  limit: int = 50, offset: int = 0) -> List[models.Product]:
    stmt = select(models.Product).where(models.Product.is_active.is_(True))
    if keyword:
        stmt = stmt.where(models.Product.title.ilike(f"%{keyword.lower()}%"))
    if category_slug:
        stmt = stmt.join(models.Category).where(models.Category.slug == category_slug)
    stmt = stmt.order_by(models.Product.id).offset(offset).limit(limit)
    return list(db.execute(stmt).scalars().all())


# orders
def create_order(db: Session, order: models.Order) -> models.Order:
    db.add(order)
    db.flush()
    return order


def get_order(db: Session, order_id: int) -> Optional[models.Order]:
    return db.get(models.Order, order_id)


def update_order(db: Session, order: models.Order, data: Dict[str, Any]) -> models.Order:
    for k, v in data.items():
        setattr(order, k, v)
    db.add(order); db.commit(); db.refresh(order)
    return order


def list_orders(db: Session, user_email: Optional[str] = None, limit: int = 100) -> List[models.Order]:
    stmt = select(models.Order)
    if user_email is not None:
        stmt = stmt.where(models.Order.user_email == user_email)
    stmt = stmt.order_by(models.Order.created_at.desc(), models.Order.id.desc()).limit(limit)
    return list(db.execute(stmt).scalars().all())


# coupons
def get_coupon_by_code(db: Session, code: str) -> Optional[models.Coupon]:
    return db.execute(
        select(models.Coupon).where(models.Coupon.code == code.strip().upper())
    ).scalar_one_or_none()


def increment_coupon_usage(db: Session, coupon_id: int) -> bool:
    """Bump used_count unless the limit is already reached. Returns False when it is."""
    c = models.Coupon
    stmt = (
        update(c)
        .where(c.id == coupon_id)
        .where((c.usage_limit.is_(None)) | (c.used_count < c.usage_limit))
        .values(used_count=c.used_count + 1)
        .execution_options(synchronize_session=False)
    )
    return db.execute(stmt).rowcount == 1
