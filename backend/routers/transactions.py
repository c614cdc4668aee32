from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from models.transaction import TransactionType
from schemas.audit_log import AuditLogEntry
from schemas.transactions import Transaction, TransactionCreate, TransactionUpdate
from utils.actor import ActorContext
from utils.auth_utils import require_permission
from crud import audit_log as crud_audit_log
from crud import transactions as crud_transactions

router = APIRouter(prefix="/transactions", tags=["Transactions"])
logger = logging.getLogger("transactions")


@router.post("/", response_model=Transaction, status_code=status.HTTP_201_CREATED)
def create_transaction(
    transaction: TransactionCreate,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("tx.create")),
):
    """Record a balanced transaction together with its journal entries."""
    return crud_transactions.record_transaction(db, actor.tenant_id, transaction, actor)


@router.get("/", response_model=List[Transaction])
def read_transactions(
    start_date: Optional[date] = Query(None, description="Earliest transaction date"),
    end_date: Optional[date] = Query(None, description="Latest transaction date"),
    type: Optional[TransactionType] = None,
    account_id: Optional[int] = Query(None, description="Only transactions touching this account"),
    category_id: Optional[int] = None,
    is_reconciled: Optional[bool] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("tx.view")),
):
    return crud_transactions.list_transactions(
        db, actor.tenant_id,
        start_date=start_date,
        end_date=end_date,
        transaction_type=type,
        account_id=account_id,
        category_id=category_id,
        is_reconciled=is_reconciled,
        skip=skip,
        limit=limit,
    )


@router.get("/{transaction_id}", response_model=Transaction)
def read_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("tx.view")),
):
    db_transaction = crud_transactions.get_transaction(db, transaction_id, actor.tenant_id)
    if db_transaction is None:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return db_transaction


@router.patch("/{transaction_id}", response_model=Transaction)
def update_transaction(
    transaction_id: int,
    transaction: TransactionUpdate,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("tx.update")),
):
    """Amend a transaction. Supplying journal_entries replaces the whole leg set."""
    return crud_transactions.amend_transaction(db, actor.tenant_id, transaction_id, transaction, actor)


@router.delete("/{transaction_id}")
def delete_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("tx.delete")),
):
    crud_transactions.delete_transaction(db, actor.tenant_id, transaction_id, actor)
    return {"message": "Transaction deleted successfully"}


@router.get("/{transaction_id}/audit", response_model=List[AuditLogEntry])
def get_transaction_audit_history(
    transaction_id: int,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("tx.view")),
):
    """Amendments and deletion of a transaction, oldest first."""
    return crud_audit_log.get_audit_logs(db, actor.tenant_id, "transactions", transaction_id)
