from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import get_db
from storefront.core.auth import get_current_identity
from storefront.schemas import CheckoutRequest, OrderRead
from storefront.services import checkout as checkout_service

router = APIRouter()

@router.post("", response_model=OrderRead, status_code=201)
def checkout(payload: CheckoutRequest, identity: dict = Depends(get_current_identity), db: Session = Depends(get_db)):
    order = checkout_service.checkout(
        db,
        user_email=identity.get("sub"),
        shipping_address=payload.shipping_address.model_dump(),
        payment_method=payload.payment_method,
        coupon_code=payload.coupon_code,
    )
    return OrderRead.from_order(order)
