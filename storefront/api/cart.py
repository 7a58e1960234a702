
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import get_db
from storefront.core.auth import get_current_identity
from storefront.core.errors import NotFoundError, ProductNotFoundError
from storefront.db import repository
from storefront.schemas import CartItemAdd, CartItemUpdate, CartRead
from storefront.store.cart_store import get_cart, get_line, put_item, delete_item, clear_cart

router = APIRouter()

@router.get("", response_model=CartRead)
def get_my_cart(identity: dict = Depends(get_current_identity)):
    email = identity.get("sub")
    return get_cart(email)

@router.post("", response_model=CartRead, status_code=201)
def add_item(payload: CartItemAdd, identity: dict = Depends(get_current_identity), db: Session = Depends(get_db)):
    email = identity.get("sub")
    p = repository.get_product(db, payload.product_id)
    if not p or not p.is_active:
        raise ProductNotFoundError()
    existing = get_line(email, payload.product_id)
    # title/price are a display snapshot; checkout re-reads the product
    item = {
        "product_id": p.id,
        "quantity": payload.quantity + (existing["quantity"] if existing else 0),
        "unit_price": p.price,
        "title": p.title,
    }
    put_item(email, item)
    return get_cart(email)

@router.put("/{product_id}", response_model=CartRead)
def update_item(product_id: int, payload: CartItemUpdate, identity: dict = Depends(get_current_identity)):
    email = identity.get("sub")
    if payload.quantity == 0:
        delete_item(email, product_id)
        return get_cart(email)
    exists = get_line(email, product_id)
    if not exists:
        raise NotFoundError("Item not in cart")
    exists["quantity"] = payload.quantity
    put_item(email, exists)
    return get_cart(email)

@router.delete("/{product_id}", response_model=CartRead)
def remove_item(product_id: int, identity: dict = Depends(get_current_identity)):
    email = identity.get("sub")
    delete_item(email, product_id)
    return get_cart(email)

@router.delete("", response_model=CartRead)
def clear(identity: dict = Depends(get_current_identity)):
    email = identity.get("sub")
    clear_cart(email)
    return get_cart(email)
