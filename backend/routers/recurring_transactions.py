from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from database import get_db
from models.audit_mixin import now_local
from schemas.recurring_transactions import (
    RecurringTransaction,
    RecurringTransactionCreate,
    RecurringTransactionUpdate,
)
from utils.actor import ActorContext
from utils.auth_utils import require_permission
from crud import recurring_transactions as crud_recurring

router = APIRouter(prefix="/recurring-transactions", tags=["Recurring Transactions"])


@router.post("/", response_model=RecurringTransaction, status_code=status.HTTP_201_CREATED)
def create_recurring_transaction(
    recurring: RecurringTransactionCreate,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("budget.manage")),
):
    return crud_recurring.create_recurring_transaction(db, recurring, actor.tenant_id, actor)


@router.get("/", response_model=List[RecurringTransaction])
def read_recurring_transactions(
    active_only: bool = False,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("tx.view")),
):
    return crud_recurring.get_recurring_transactions(db, actor.tenant_id, active_only, skip, limit)


@router.post("/generate")
def generate_due_transactions(
    as_of: Optional[date] = Query(None, description="Generate occurrences due on or before this date"),
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("budget.manage")),
):
    """Post due occurrences for this tenant now instead of waiting for the nightly run."""
    generated = crud_recurring.generate_due_transactions(
        db, as_of or now_local().date(), tenant_id=actor.tenant_id, actor=actor
    )
    return {"generated": generated}


@router.get("/{recurring_id}", response_model=RecurringTransaction)
def read_recurring_transaction(
    recurring_id: int,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("tx.view")),
):
    db_recurring = crud_recurring.get_recurring_transaction(db, recurring_id, actor.tenant_id)
    if db_recurring is None:
        raise HTTPException(status_code=404, detail="Recurring transaction not found")
    return db_recurring


@router.patch("/{recurring_id}", response_model=RecurringTransaction)
def update_recurring_transaction(
    recurring_id: int,
    recurring: RecurringTransactionUpdate,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("budget.manage")),
):
    updated = crud_recurring.update_recurring_transaction(db, recurring_id, recurring, actor.tenant_id, actor)
    if updated is None:
        raise HTTPException(status_code=404, detail="Recurring transaction not found")
    return updated


@router.delete("/{recurring_id}")
def deactivate_recurring_transaction(
    recurring_id: int,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("budget.manage")),
):
    if not crud_recurring.deactivate_recurring_transaction(db, recurring_id, actor.tenant_id, actor):
        raise HTTPException(status_code=404, detail="Recurring transaction not found")
    return {"message": "Recurring transaction deactivated successfully"}
