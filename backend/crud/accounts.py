from typing import List, Optional

from sqlalchemy.orm import Session

from crud.currencies import get_currency
from exceptions import ReferentialError, ValidationError
from models.account import Account, AccountType
from models.journal_entry import JournalEntry
from schemas.accounts import AccountCreate, AccountUpdate
from utils import reject_null_columns
from utils.actor import ActorContext


def get_account(db: Session, account_id: int, tenant_id: int) -> Optional[Account]:
    return db.query(Account).filter(Account.id == account_id, Account.tenant_id == tenant_id).first()


def get_accounts(db: Session, tenant_id: int, account_type: Optional[AccountType] = None,
                 include_inactive: bool = False, skip: int = 0, limit: int = 100) -> List[Account]:
    query = db.query(Account).filter(Account.tenant_id == tenant_id)
    if not include_inactive:
        query = query.filter(Account.is_active == True)
    if account_type:
        query = query.filter(Account.account_type == account_type)
    return query.order_by(Account.account_code, Account.name).offset(skip).limit(limit).all()


def is_account_in_use(db: Session, account_id: int) -> bool:
    return db.query(JournalEntry.id).filter(JournalEntry.account_id == account_id).first() is not None


def _check_unique(db: Session, tenant_id: int, name: Optional[str], account_code: Optional[str],
                  exclude_id: Optional[int] = None):
    query = db.query(Account).filter(Account.tenant_id == tenant_id)
    if exclude_id is not None:
        query = query.filter(Account.id != exclude_id)
    if name and query.filter(Account.name == name).first():
        raise ValidationError(f"Account with name '{name}' already exists")
    if account_code and query.filter(Account.account_code == account_code).first():
        raise ValidationError(f"Account with code '{account_code}' already exists")


def create_account(db: Session, account: AccountCreate, tenant_id: int, actor: ActorContext) -> Account:
    if get_currency(db, account.currency_code) is None:
        raise ReferentialError(f"Currency {account.currency_code} not found")
    _check_unique(db, tenant_id, account.name, account.account_code)

    db_account = Account(**account.model_dump(), tenant_id=tenant_id,
                         created_by=actor.user_id, updated_by=actor.user_id)
    db.add(db_account)
    db.commit()
    db.refresh(db_account)
    return db_account


def update_account(db: Session, account_id: int, account: AccountUpdate, tenant_id: int,
                   actor: ActorContext) -> Optional[Account]:
    db_account = get_account(db, account_id, tenant_id)
    if not db_account:
        return None

    update_data = account.model_dump(exclude_unset=True)
    reject_null_columns(Account, update_data)
    if "currency_code" in update_data and update_data["currency_code"] is not None:
        update_data["currency_code"] = update_data["currency_code"].upper()
        if get_currency(db, update_data["currency_code"]) is None:
            raise ReferentialError(f"Currency {update_data['currency_code']} not found")

    changes_ledger_meaning = (
        update_data.get("account_type", db_account.account_type) != db_account.account_type
        or update_data.get("currency_code", db_account.currency_code) != db_account.currency_code
        or update_data.get("is_active") is False
    )
    if changes_ledger_meaning and is_account_in_use(db, account_id):
        raise ValidationError(
            f"Account {account_id} has journal entries; its type, currency and active flag cannot change"
        )
    _check_unique(db, tenant_id, update_data.get("name"), update_data.get("account_code"), exclude_id=account_id)

    for key, value in update_data.items():
        setattr(db_account, key, value)
    db_account.updated_by = actor.user_id
    db.commit()
    db.refresh(db_account)
    return db_account


def deactivate_account(db: Session, account_id: int, tenant_id: int, actor: ActorContext) -> bool:
    return update_account(db, account_id, AccountUpdate(is_active=False), tenant_id, actor) is not None
