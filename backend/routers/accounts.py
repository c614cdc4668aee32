from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from models.account import AccountType
from models.audit_mixin import now_local
from schemas.accounts import Account, AccountCreate, AccountUpdate
from schemas.transactions import AccountBalance
from utils.actor import ActorContext
from utils.auth_utils import require_permission
from crud import accounts as crud_accounts
from crud import balances as crud_balances

router = APIRouter(prefix="/accounts", tags=["Accounts"])
logger = logging.getLogger("accounts")


@router.post("/", response_model=Account, status_code=status.HTTP_201_CREATED)
def create_account(
    account: AccountCreate,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("account.manage")),
):
    new_account = crud_accounts.create_account(db, account, actor.tenant_id, actor)
    logger.info(f"Account '{new_account.name}' created by user {actor.user_id} for tenant {actor.tenant_id}")
    return new_account


@router.get("/", response_model=List[Account])
def read_accounts(
    account_type: Optional[AccountType] = None,
    include_inactive: bool = False,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("account.view")),
):
    return crud_accounts.get_accounts(db, actor.tenant_id, account_type, include_inactive, skip, limit)


@router.get("/{account_id}", response_model=Account)
def read_account(
    account_id: int,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("account.view")),
):
    db_account = crud_accounts.get_account(db, account_id, actor.tenant_id)
    if db_account is None:
        raise HTTPException(status_code=404, detail="Account not found")
    return db_account


@router.get("/{account_id}/balance", response_model=AccountBalance)
def read_account_balance(
    account_id: int,
    as_of: Optional[date] = Query(None, description="Balance as of this date (inclusive); defaults to today"),
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("tx.view")),
):
    return crud_balances.compute_account_balance(db, actor.tenant_id, account_id, as_of or now_local().date())


@router.patch("/{account_id}", response_model=Account)
def update_account(
    account_id: int,
    account: AccountUpdate,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("account.manage")),
):
    updated = crud_accounts.update_account(db, account_id, account, actor.tenant_id, actor)
    if updated is None:
        raise HTTPException(status_code=404, detail="Account not found")
    logger.info(f"Account '{updated.name}' (ID: {account_id}) updated by user {actor.user_id} for tenant {actor.tenant_id}")
    return updated


@router.delete("/{account_id}")
def deactivate_account(
    account_id: int,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("account.manage")),
):
    """Deactivate an account. Accounts with journal entries cannot be deactivated."""
    if not crud_accounts.deactivate_account(db, account_id, actor.tenant_id, actor):
        raise HTTPException(status_code=404, detail="Account not found")
    logger.info(f"Account {account_id} deactivated by user {actor.user_id} for tenant {actor.tenant_id}")
    return {"message": "Account deactivated successfully"}
