from fastapi import APIRouter, Depends
from typing import List
from sqlalchemy.orm import Session

from storefront.api.deps import get_db
from storefront.core.auth import get_current_identity, require_admin
from storefront.core.errors import OrderNotFoundError
from storefront.core.timeutils import now_utc
from storefront.db import repository
from storefront.db.models import OrderStatus, PaymentStatus
from storefront.schemas import Message, OrderRead, OrderStatusUpdate, PaymentStatusUpdate
from storefront.services.payments import mark_order_paid

router = APIRouter()
admin_router = APIRouter()

@router.get("/myorders", response_model=List[OrderRead])
def my_orders(identity: dict = Depends(get_current_identity), db: Session = Depends(get_db)):
    return [OrderRead.from_order(o) for o in repository.list_orders(db, user_email=identity.get("sub"))]

@router.get("/{order_id}", response_model=OrderRead)
def get_order(order_id: int, identity: dict = Depends(get_current_identity), db: Session = Depends(get_db)):
    obj = repository.get_order(db, order_id)
    # other users' orders are reported as missing
    if not obj or (obj.user_email != identity.get("sub") and identity.get("role") != "admin"):
        raise OrderNotFoundError()
    return OrderRead.from_order(obj)

def _get_or_404(db: Session, order_id: int):
    obj = repository.get_order(db, order_id)
    if not obj:
        raise OrderNotFoundError()
    return obj

@admin_router.get("", response_model=List[OrderRead])
def list_all_orders(limit: int = 100, db: Session = Depends(get_db), _=Depends(require_admin)):
    return [OrderRead.from_order(o) for o in repository.list_orders(db, limit=limit)]

@admin_router.get("/{order_id}", response_model=OrderRead)
def admin_get_order(order_id: int, db: Session = Depends(get_db), _=Depends(require_admin)):
    return OrderRead.from_order(_get_or_404(db, order_id))

@admin_router.put("/{order_id}/status", response_model=OrderRead)
def update_order_status(order_id: int, payload: OrderStatusUpdate, db: Session = Depends(get_db), _=Depends(require_admin)):
    obj = _get_or_404(db, order_id)
    data = {"order_status": payload.order_status.value}
    if payload.order_status == OrderStatus.DELIVERED and obj.delivered_at is None:
        data["delivered_at"] = now_utc()
    return OrderRead.from_order(repository.update_order(db, obj, data))

@admin_router.put("/{order_id}/payment", response_model=OrderRead)
def update_payment_status(order_id: int, payload: PaymentStatusUpdate, db: Session = Depends(get_db), _=Depends(require_admin)):
    if payload.payment_status == PaymentStatus.PAID:
        return OrderRead.from_order(mark_order_paid(db, order_id))
    obj = _get_or_404(db, order_id)
    data = {"payment_status": PaymentStatus.PENDING.value, "paid_at": None}
    return OrderRead.from_order(repository.update_order(db, obj, data))

@admin_router.delete("/{order_id}", response_model=Message)
def delete_order(order_id: int, db: Session = Depends(get_db), _=Depends(require_admin)):
    obj = _get_or_404(db, order_id)
    db.delete(obj); db.commit()
    return {"message": "Order removed"}
