import re
from fastapi import APIRouter, Depends
from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import List
from storefront.api.deps import get_db
from storefront.core.auth import require_admin
from storefront.core.errors import ConflictError, NotFoundError
from storefront.db.models import Category
from storefront.schemas import CategoryCreate, CategoryRead, CategoryUpdate, Message

router = APIRouter()

def slugify(name: str) -> str:
    return re.sub(r'[^a-z0-9]+', '-', name.lower()).strip('-')

def _check_unique(db: Session, name: str, slug: str, exclude_id=None):
    # name and slug are both unique
    q = db.query(Category).filter(or_(Category.name == name, Category.slug == slug))
    if exclude_id is not None: q = q.filter(Category.id != exclude_id)
    if q.first(): raise ConflictError('Category already exists')

@router.get('', response_model=List[CategoryRead])
def list_categories(db: Session = Depends(get_db)):
    return db.query(Category).filter(Category.is_active.is_(True)).order_by(Category.name).all()

@router.post('', response_model=CategoryRead, status_code=201)
def create_category(payload: CategoryCreate, db: Session = Depends(get_db), _=Depends(require_admin)):
    slug = payload.slug or slugify(payload.name)
    _check_unique(db, payload.name, slug)
    obj = Category(name=payload.name, slug=slug, is_active=payload.is_active)
    db.add(obj); db.commit(); db.refresh(obj)
    return obj

@router.put('/{category_id}', response_model=CategoryRead)
def update_category(category_id: int, payload: CategoryUpdate, db: Session = Depends(get_db), _=Depends(require_admin)):
    obj = db.get(Category, category_id)
    if not obj: raise NotFoundError('Category not found')
    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    if 'name' in data and 'slug' not in data: data['slug'] = slugify(data['name'])
    _check_unique(db, data.get('name', obj.name), data.get('slug', obj.slug), exclude_id=obj.id)
    for k, v in data.items(): setattr(obj, k, v)
    db.add(obj); db.commit(); db.refresh(obj)
    return obj

@router.delete('/{category_id}', response_model=Message)
def delete_category(category_id: int, db: Session = Depends(get_db), _=Depends(require_admin)):
    obj = db.get(Category, category_id)
    if not obj: raise NotFoundError('Category not found')
    for p in obj.products: p.category_id = None
    db.delete(obj); db.commit()
    return {'message': 'Category removed'}
