from typing import List, Optional

from sqlalchemy.orm import Session

from exceptions import ReferentialError, ValidationError
from models.category import Category, CategoryType
from schemas.categories import CategoryCreate, CategoryUpdate
from utils import reject_null_columns
from utils.actor import ActorContext


def get_category(db: Session, category_id: int, tenant_id: int) -> Optional[Category]:
    return db.query(Category).filter(Category.id == category_id, Category.tenant_id == tenant_id).first()


def get_categories(db: Session, tenant_id: int, category_type: Optional[CategoryType] = None,
                   parent_category_id: Optional[int] = None, skip: int = 0, limit: int = 100) -> List[Category]:
    query = db.query(Category).filter(Category.tenant_id == tenant_id)
    if category_type:
        query = query.filter(Category.type == category_type)
    if parent_category_id is not None:
        query = query.filter(Category.parent_category_id == parent_category_id)
    return query.order_by(Category.name).offset(skip).limit(limit).all()


def _check_parent(db: Session, tenant_id: int, parent_category_id: Optional[int], category_id: Optional[int] = None):
    """Reject a parent from another tenant, or one that would close a cycle."""
    if parent_category_id is None:
        return
    parent = get_category(db, parent_category_id, tenant_id)
    if parent is None:
        raise ReferentialError(f"Parent category {parent_category_id} not found for tenant {tenant_id}")
    if category_id is None:
        return

    seen = set()
    node = parent
    while node is not None:
        if node.id == category_id:
            raise ValidationError(f"Category {category_id} cannot be its own ancestor")
        if node.id in seen:
            break
        seen.add(node.id)
        node = node.parent


def create_category(db: Session, category: CategoryCreate, tenant_id: int, actor: ActorContext) -> Category:
    _check_parent(db, tenant_id, category.parent_category_id)
    if db.query(Category).filter(Category.tenant_id == tenant_id, Category.name == category.name).first():
        raise ValidationError(f"Category '{category.name}' already exists")

    db_category = Category(**category.model_dump(), tenant_id=tenant_id,
                           created_by=actor.user_id, updated_by=actor.user_id)
    db.add(db_category)
    db.commit()
    db.refresh(db_category)
    return db_category


def update_category(db: Session, category_id: int, category: CategoryUpdate, tenant_id: int,
                    actor: ActorContext) -> Optional[Category]:
    db_category = get_category(db, category_id, tenant_id)
    if not db_category:
        return None

    update_data = category.model_dump(exclude_unset=True)
    reject_null_columns(Category, update_data)
    if "parent_category_id" in update_data:
        _check_parent(db, tenant_id, update_data["parent_category_id"], category_id)
    if "name" in update_data and update_data["name"] != db_category.name:
        if db.query(Category).filter(Category.tenant_id == tenant_id, Category.name == update_data["name"]).first():
            raise ValidationError(f"Category '{update_data['name']}' already exists")

    for key, value in update_data.items():
        setattr(db_category, key, value)
    db_category.updated_by = actor.user_id
    db.commit()
    db.refresh(db_category)
    return db_category
