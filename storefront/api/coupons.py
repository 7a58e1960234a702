import logging
from fastapi import APIRouter, Depends
from typing import List
from sqlalchemy.orm import Session

from storefront.api.deps import get_db
from storefront.core.auth import get_current_identity, require_admin
from storefront.core.errors import NotFoundError, ValidationError
from storefront.core.timeutils import as_naive_utc
from storefront.db import repository
from storefront.db.models import Coupon
from storefront.schemas import CouponApply, CouponApplyResult, CouponCreate, CouponRead, CouponUpdate, Message
from storefront.services.coupons import apply_coupon as quote_coupon

logger = logging.getLogger(__name__)

router = APIRouter()

CLEARABLE_FIELDS = {"max_discount_amount", "usage_limit"}

@router.post("", response_model=CouponRead, status_code=201)
def create_coupon(payload: CouponCreate, db: Session = Depends(get_db), identity: dict = Depends(require_admin)):
    code = payload.code.strip().upper()
    if repository.get_coupon_by_code(db, code):
        raise ValidationError("Coupon code already exists")
    data = payload.model_dump()
    data.update(
        code=code,
        discount_type=payload.discount_type.value,
        expiry_date=as_naive_utc(payload.expiry_date),
        created_by=identity.get("sub"),
    )
    obj = Coupon(**data)
    db.add(obj); db.commit(); db.refresh(obj)
    logger.info("coupon created code=%s by=%s", obj.code, obj.created_by)
    return obj

@router.get("", response_model=List[CouponRead])
def list_coupons(db: Session = Depends(get_db), _=Depends(require_admin)):
    return db.query(Coupon).order_by(Coupon.created_at.desc(), Coupon.id.desc()).all()

# declared before /{coupon_id} so "apply" is never read as an id
@router.post("/apply", response_model=CouponApplyResult)
def apply_coupon(payload: CouponApply, db: Session = Depends(get_db), _=Depends(get_current_identity)):
    if not payload.coupon_code or not payload.cart_total or payload.cart_total <= 0:
        raise ValidationError("Missing coupon code or cart total")
    quote = quote_coupon(db, payload.coupon_code, payload.cart_total)
    return CouponApplyResult(
        coupon_code=quote.coupon_code,
        discount_amount=quote.discount_amount,
        final_amount=quote.final_amount,
    )

@router.put("/{coupon_id}", response_model=CouponRead)
def update_coupon(coupon_id: int, payload: CouponUpdate, db: Session = Depends(get_db), _=Depends(require_admin)):
    obj = db.get(Coupon, coupon_id)
    if not obj:
        raise NotFoundError("Coupon not found")
    # null keeps the stored value, except for the two optional limits where it clears them
    data = {k: v for k, v in payload.model_dump(exclude_unset=True).items()
            if v is not None or k in CLEARABLE_FIELDS}
    if data.get("code"):
        data["code"] = data["code"].strip().upper()
        other = repository.get_coupon_by_code(db, data["code"])
        if other and other.id != obj.id:
            raise ValidationError("Coupon code already exists")
    if data.get("discount_type"):
        data["discount_type"] = data["discount_type"].value
    if data.get("expiry_date"):
        data["expiry_date"] = as_naive_utc(data["expiry_date"])
    for k, v in data.items():
        setattr(obj, k, v)
    db.add(obj); db.commit(); db.refresh(obj)
    logger.info("coupon updated code=%s fields=%s", obj.code, sorted(data))
    return obj

@router.delete("/{coupon_id}", response_model=Message)
def disable_coupon(coupon_id: int, db: Session = Depends(get_db), _=Depends(require_admin)):
    obj = db.get(Coupon, coupon_id)
    if not obj:
        raise NotFoundError("Coupon not found")
    obj.is_active = False
    db.add(obj); db.commit()
    logger.info("coupon disabled code=%s", obj.code)
    return {"message": "Coupon disabled"}
