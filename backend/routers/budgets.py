from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
import logging

from database import get_db
from schemas.budgets import Budget, BudgetCreate, BudgetLineItem, BudgetLineItemCreate, BudgetUpdate
from utils.actor import ActorContext
from utils.auth_utils import require_permission
from crud import budgets as crud_budgets

router = APIRouter(prefix="/budgets", tags=["Budgets"])
logger = logging.getLogger("budgets")


@router.post("/", response_model=Budget, status_code=status.HTTP_201_CREATED)
def create_budget(
    budget: BudgetCreate,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("budget.manage")),
):
    return crud_budgets.create_budget(db, budget, actor.tenant_id, actor)


@router.get("/", response_model=List[Budget])
def read_budgets(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("tx.view")),
):
    return crud_budgets.get_budgets(db, actor.tenant_id, skip, limit)


@router.get("/{budget_id}", response_model=Budget)
def read_budget(
    budget_id: int,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("tx.view")),
):
    db_budget = crud_budgets.get_budget(db, budget_id, actor.tenant_id)
    if db_budget is None:
        raise HTTPException(status_code=404, detail="Budget not found")
    return db_budget


@router.patch("/{budget_id}", response_model=Budget)
def update_budget(
    budget_id: int,
    budget: BudgetUpdate,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("budget.manage")),
):
    updated = crud_budgets.update_budget(db, budget_id, budget, actor.tenant_id, actor)
    if updated is None:
        raise HTTPException(status_code=404, detail="Budget not found")
    return updated


@router.delete("/{budget_id}")
def delete_budget(
    budget_id: int,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("budget.manage")),
):
    if not crud_budgets.delete_budget(db, budget_id, actor.tenant_id, actor):
        raise HTTPException(status_code=404, detail="Budget not found")
    logger.info(f"Budget {budget_id} deleted by user {actor.user_id} for tenant {actor.tenant_id}")
    return {"message": "Budget deleted successfully"}


@router.post("/{budget_id}/line-items", response_model=BudgetLineItem, status_code=status.HTTP_201_CREATED)
def add_budget_line_item(
    budget_id: int,
    item: BudgetLineItemCreate,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("budget.manage")),
):
    return crud_budgets.add_line_item(db, budget_id, item, actor.tenant_id, actor)


@router.delete("/{budget_id}/line-items/{item_id}")
def delete_budget_line_item(
    budget_id: int,
    item_id: int,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("budget.manage")),
):
    if not crud_budgets.delete_line_item(db, budget_id, item_id, actor.tenant_id):
        raise HTTPException(status_code=404, detail="Budget line item not found")
    return {"message": "Budget line item deleted successfully"}
