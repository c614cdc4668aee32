from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional

from database import get_db
from models.category import CategoryType
from schemas.categories import Category, CategoryCreate, CategoryUpdate
from utils.actor import ActorContext
from utils.auth_utils import require_permission
from crud import categories as crud_categories

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.post("/", response_model=Category, status_code=status.HTTP_201_CREATED)
def create_category(
    category: CategoryCreate,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("account.manage")),
):
    return crud_categories.create_category(db, category, actor.tenant_id, actor)


@router.get("/", response_model=List[Category])
def read_categories(
    type: Optional[CategoryType] = None,
    parent_category_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("account.view")),
):
    return crud_categories.get_categories(db, actor.tenant_id, type, parent_category_id, skip, limit)


@router.get("/{category_id}", response_model=Category)
def read_category(
    category_id: int,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("account.view")),
):
    db_category = crud_categories.get_category(db, category_id, actor.tenant_id)
    if db_category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return db_category


@router.patch("/{category_id}", response_model=Category)
def update_category(
    category_id: int,
    category: CategoryUpdate,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("account.manage")),
):
    updated = crud_categories.update_category(db, category_id, category, actor.tenant_id, actor)
    if updated is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return updated
