import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from crud.transactions import record_transaction
from exceptions import LedgerError, ReferentialError, ValidationError
from models.account import Account
from models.journal_entry import EntryType
from models.recurring_transaction import RecurringTransaction, RecurringType
from models.transaction import TransactionType
from schemas.recurring_transactions import RecurringTransactionCreate, RecurringTransactionUpdate
from schemas.transactions import JournalEntryCreate, TransactionCreate
from utils import reject_null_columns
from utils.actor import ActorContext, SYSTEM_ACTOR
from utils.recurrence import advance

logger = logging.getLogger(__name__)

TRANSACTION_TYPES = {
    RecurringType.INCOME: TransactionType.INCOME,
    RecurringType.EXPENSE: TransactionType.EXPENSE,
    RecurringType.TRANSFER: TransactionType.TRANSFER,
}


def get_recurring_transaction(db: Session, recurring_id: int, tenant_id: int) -> Optional[RecurringTransaction]:
    return db.query(RecurringTransaction).filter(
        RecurringTransaction.id == recurring_id,
        RecurringTransaction.tenant_id == tenant_id
    ).first()


def get_recurring_transactions(db: Session, tenant_id: int, active_only: bool = False,
                               skip: int = 0, limit: int = 100) -> List[RecurringTransaction]:
    query = db.query(RecurringTransaction).filter(RecurringTransaction.tenant_id == tenant_id)
    if active_only:
        query = query.filter(RecurringTransaction.is_active == True)
    return query.order_by(RecurringTransaction.next_due_date, RecurringTransaction.id).offset(skip).limit(limit).all()


def _check_accounts(db: Session, tenant_id: int, *account_ids: int):
    for account_id in account_ids:
        account = db.query(Account).filter(Account.id == account_id, Account.tenant_id == tenant_id).first()
        if account is None:
            raise ReferentialError(f"Account {account_id} not found for tenant {tenant_id}")
        if not account.is_active:
            raise ReferentialError(f"Account {account_id} ({account.name}) is inactive")


def create_recurring_transaction(db: Session, recurring: RecurringTransactionCreate, tenant_id: int,
                                 actor: ActorContext) -> RecurringTransaction:
    _check_accounts(db, tenant_id, recurring.account_id, recurring.counter_account_id)
    db_recurring = RecurringTransaction(
        **recurring.model_dump(),
        tenant_id=tenant_id,
        next_due_date=recurring.start_date,
        is_active=True,
        created_by=actor.user_id,
        updated_by=actor.user_id,
    )
    db.add(db_recurring)
    db.commit()
    db.refresh(db_recurring)
    return db_recurring


def update_recurring_transaction(db: Session, recurring_id: int, recurring: RecurringTransactionUpdate,
                                 tenant_id: int, actor: ActorContext) -> Optional[RecurringTransaction]:
    db_recurring = get_recurring_transaction(db, recurring_id, tenant_id)
    if not db_recurring:
        return None

    update_data = recurring.model_dump(exclude_unset=True)
    reject_null_columns(RecurringTransaction, update_data)
    end_date = update_data.get("end_date", db_recurring.end_date)
    if end_date is not None and end_date < db_recurring.start_date:
        raise ValidationError("end_date must be on or after start_date")

    for key, value in update_data.items():
        setattr(db_recurring, key, value)
    db_recurring.updated_by = actor.user_id
    db.commit()
    db.refresh(db_recurring)
    return db_recurring


def deactivate_recurring_transaction(db: Session, recurring_id: int, tenant_id: int, actor: ActorContext) -> bool:
    db_recurring = get_recurring_transaction(db, recurring_id, tenant_id)
    if not db_recurring:
        return False
    db_recurring.is_active = False
    db_recurring.updated_by = actor.user_id
    db.commit()
    return True


def build_transaction(recurring: RecurringTransaction, occurrence: date) -> TransactionCreate:
    """Two balanced legs for one occurrence of a recurring item."""
    if recurring.type == RecurringType.INCOME:
        debit_account, credit_account = recurring.account_id, recurring.counter_account_id
    else:
        # Expenses and transfers move value out of the primary account.
        debit_account, credit_account = recurring.counter_account_id, recurring.account_id

    legs = [
        JournalEntryCreate(account_id=debit_account, entry_type=EntryType.DEBIT,
                           amount=recurring.amount, currency_code=recurring.currency_code),
        JournalEntryCreate(account_id=credit_account, entry_type=EntryType.CREDIT,
                           amount=recurring.amount, currency_code=recurring.currency_code),
    ]
    return TransactionCreate(
        transaction_date=occurrence,
        description=recurring.description,
        type=TRANSACTION_TYPES[recurring.type],
        category_id=recurring.category_id,
        amount=recurring.amount,
        currency_code=recurring.currency_code,
        notes=recurring.notes,
        journal_entries=legs,
    )


def generate_for_item(db: Session, recurring: RecurringTransaction, as_of: date,
                      actor: ActorContext = SYSTEM_ACTOR) -> int:
    """
    Post every occurrence due on or before as_of. Returns how many were posted.

    Each occurrence and the schedule advance past it are committed together,
    so a failed commit leaves the occurrence due rather than posted twice.
    """
    posted = 0
    while (
        recurring.is_active
        and recurring.next_due_date is not None
        and recurring.next_due_date <= as_of
    ):
        occurrence = recurring.next_due_date
        if recurring.end_date is not None and occurrence > recurring.end_date:
            break
        record_transaction(db, recurring.tenant_id, build_transaction(recurring, occurrence), actor, commit=False)
        recurring.last_generated_date = occurrence
        recurring.next_due_date = advance(
            occurrence, recurring.frequency_value, recurring.frequency_unit, anchor_day=recurring.start_date.day
        )
        db.commit()
        posted += 1
        logger.info(f"Posted occurrence {occurrence} of recurring transaction {recurring.id}")

    if recurring.end_date is not None and recurring.next_due_date is not None \
            and recurring.next_due_date > recurring.end_date and recurring.is_active:
        recurring.is_active = False
        db.commit()
        logger.info(f"Recurring transaction {recurring.id} passed its end date and was deactivated")
    return posted


def generate_due_transactions(db: Session, as_of: date, tenant_id: Optional[int] = None,
                              actor: ActorContext = SYSTEM_ACTOR) -> int:
    """Generate due occurrences for every active recurring item, optionally for one tenant."""
    query = db.query(RecurringTransaction).filter(
        RecurringTransaction.is_active == True,
        RecurringTransaction.next_due_date <= as_of
    )
    if tenant_id is not None:
        query = query.filter(RecurringTransaction.tenant_id == tenant_id)

    total = 0
    for recurring in query.order_by(RecurringTransaction.id).all():
        recurring_id, recurring_tenant_id = recurring.id, recurring.tenant_id
        try:
            total += generate_for_item(db, recurring, as_of, actor)
        except LedgerError as e:
            db.rollback()
            logger.error(
                f"Skipping recurring transaction {recurring_id} for tenant {recurring_tenant_id}: "
                f"{e.kind}: {e.message}"
            )
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                f"Storage failure on recurring transaction {recurring_id} for tenant {recurring_tenant_id}: {e}",
                exc_info=True
            )
    logger.info(f"Generated {total} recurring transactions as of {as_of}")
    return total
