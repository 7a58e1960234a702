from fastapi import APIRouter, Depends
from typing import List
from sqlalchemy.orm import Session
from storefront.api.deps import get_db
from storefront.core.auth import require_admin
from storefront.core.errors import NotFoundError, ProductNotFoundError
from storefront.db import models, repository
from storefront.schemas import ProductCreate, ProductUpdate, ProductRead, Message

router = APIRouter()

@router.get('', response_model=List[ProductRead])
def list_products(db: Session = Depends(get_db), keyword: str = '', category: str = '', limit: int = 50, offset: int = 0):
    return repository.list_products(db, keyword=keyword, category_slug=category, limit=limit, offset=offset)

@router.get('/{product_id}', response_model=ProductRead)
def get_product(product_id: int, db: Session = Depends(get_db)):
    obj = repository.get_product(db, product_id)
    if not obj or not obj.is_active: raise ProductNotFoundError()
    return obj

def _check_category(db: Session, category_id):
    if category_id is not None and not db.get(models.Category, category_id):
        raise NotFoundError('Category not found')

@router.post('', response_model=ProductRead, status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db), _=Depends(require_admin)):
    _check_category(db, payload.category_id)
    obj = models.Product(**payload.model_dump())
    db.add(obj); db.commit(); db.refresh(obj)
    return obj

@router.put('/{product_id}', response_model=ProductRead)
def update_product(product_id: int, payload: ProductUpdate, db: Session = Depends(get_db), _=Depends(require_admin)):
    obj = repository.get_product(db, product_id)
    if not obj: raise ProductNotFoundError()
    # only category_id may be cleared with null
    data = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None or k == 'category_id'}
    if 'category_id' in data: _check_category(db, data['category_id'])
    for k, v in data.items(): setattr(obj, k, v)
    db.add(obj); db.commit(); db.refresh(obj)
    return obj

@router.delete('/{product_id}', response_model=Message)
def delete_product(product_id: int, db: Session = Depends(get_db), _=Depends(require_admin)):
    obj = repository.get_product(db, product_id)
    if not obj: raise ProductNotFoundError()
    db.delete(obj); db.commit()
    return {'message': 'Product removed'}
