"""
Ledger consistency engine.

Every write of a transaction and its journal entries goes through this
module. A transaction is persisted only when its legs are well formed,
reference active accounts of the same tenant, can be converted between
currencies, and balance (debits equal credits in the transaction currency).
The header row and all of its legs are committed as one unit of work.
"""
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from crud.audit_log import create_audit_log
from crud.exchange_rates import resolve_rate
from exceptions import ImbalancedEntryError, ReferentialError, StorageError, ValidationError
from models.account import Account
from models.category import Category
from models.journal_entry import EntryType, JournalEntry
from models.tag import Tag
from models.tenant import Tenant
from models.transaction import Transaction, TransactionType
from schemas.audit_log import AuditLogCreate
from schemas.transactions import JournalEntryCreate, TransactionCreate, TransactionUpdate
from utils import sqlalchemy_to_dict
from utils.actor import ActorContext

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")
BALANCE_TOLERANCE = Decimal("0.01")

# Fields whose change requires the leg set to be validated again.
LEDGER_FIELDS = {"amount", "currency_code", "transaction_date", "journal_entries"}
# The only fields a reconciled transaction still accepts.
RECONCILIATION_FIELDS = {"is_reconciled", "reconciliation_date", "notes"}
NOT_NULL_FIELDS = {"transaction_date", "description", "type", "amount", "currency_code", "is_reconciled"}


@dataclass
class PreparedLeg:
    leg: JournalEntryCreate
    account: Account
    exchange_rate: Optional[Decimal]
    converted_amount: Decimal
    # Amount in the transaction currency, used only for the balance check.
    balancing_amount: Decimal


def quantize_amount(value) -> Decimal:
    return Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def _check_leg_shape(legs: List[JournalEntryCreate]):
    if len(legs) < 2:
        raise ValidationError("A transaction needs at least two journal entries")

    seen = set()
    for leg in legs:
        key = (leg.account_id, leg.entry_type)
        if key in seen:
            raise ValidationError(
                f"Account {leg.account_id} has more than one {leg.entry_type.value} entry"
            )
        seen.add(key)

    if all(leg.amount == 0 for leg in legs):
        raise ValidationError("A transaction must move a non-zero amount")


def _load_accounts(db: Session, tenant_id: int, legs: List[JournalEntryCreate]) -> Dict[int, Account]:
    account_ids = sorted({leg.account_id for leg in legs})
    accounts = {
        account.id: account
        for account in db.query(Account).filter(Account.id.in_(account_ids)).all()
    }
    for account_id in account_ids:
        account = accounts.get(account_id)
        if account is None or account.tenant_id != tenant_id:
            raise ReferentialError(f"Account {account_id} not found for tenant {tenant_id}")
        if not account.is_active:
            raise ReferentialError(f"Account {account_id} ({account.name}) is inactive")
    return accounts


def _ensure_tenant(db: Session, tenant_id: int):
    if db.query(Tenant.id).filter(Tenant.id == tenant_id).first() is None:
        raise ReferentialError(f"Tenant {tenant_id} not found")


def _check_classification(db: Session, tenant_id: int, category_id: Optional[int], tag_ids: Optional[List[int]]):
    if category_id is not None:
        found = db.query(Category.id).filter(Category.id == category_id, Category.tenant_id == tenant_id).first()
        if found is None:
            raise ReferentialError(f"Category {category_id} not found for tenant {tenant_id}")
    if tag_ids:
        wanted = set(tag_ids)
        found = {
            row.id for row in db.query(Tag.id).filter(
                Tag.id.in_(wanted), Tag.tenant_id == tenant_id, Tag.is_active == True
            ).all()
        }
        missing = sorted(wanted - found)
        if missing:
            raise ReferentialError(f"Tags {missing} not found for tenant {tenant_id}")


def prepare_legs(db: Session, tenant_id: int, currency_code: str, transaction_date: date,
                 legs: List[JournalEntryCreate], amount: Optional[Decimal] = None) -> List[PreparedLeg]:
    """
    Validate a proposed leg set and compute converted amounts.

    When `amount` is given it must equal the debit total in the transaction
    currency. Nothing is written. Raises ValidationError, ReferentialError,
    MissingExchangeRateError or ImbalancedEntryError, in that order of checks.
    """
    _check_leg_shape(legs)
    accounts = _load_accounts(db, tenant_id, legs)

    prepared = []
    for leg in legs:
        account = accounts[leg.account_id]
        if leg.currency_code == account.currency_code:
            if leg.exchange_rate is not None:
                raise ValidationError(
                    f"Entry for account {account.id} is already in {account.currency_code}; "
                    f"an exchange rate cannot be supplied"
                )
            rate = None
            converted = quantize_amount(leg.amount)
        else:
            rate = leg.exchange_rate
            if rate is None:
                rate = resolve_rate(db, tenant_id, leg.currency_code, account.currency_code, transaction_date)
            converted = quantize_amount(leg.amount * rate)

        if leg.currency_code == currency_code:
            balancing = quantize_amount(leg.amount)
        elif account.currency_code == currency_code:
            balancing = converted
        else:
            to_transaction = resolve_rate(db, tenant_id, leg.currency_code, currency_code, transaction_date)
            balancing = quantize_amount(leg.amount * to_transaction)

        prepared.append(PreparedLeg(
            leg=leg,
            account=account,
            exchange_rate=rate,
            converted_amount=converted,
            balancing_amount=balancing,
        ))

    total_debit = sum((p.balancing_amount for p in prepared if p.leg.entry_type == EntryType.DEBIT), Decimal("0"))
    total_credit = sum((p.balancing_amount for p in prepared if p.leg.entry_type == EntryType.CREDIT), Decimal("0"))
    if abs(total_debit - total_credit) > BALANCE_TOLERANCE:
        logger.warning(
            f"Rejected imbalanced transaction for tenant {tenant_id}: "
            f"debits {total_debit} != credits {total_credit} {currency_code}"
        )
        raise ImbalancedEntryError(total_debit, total_credit, currency_code)
    if amount is not None and abs(total_debit - quantize_amount(amount)) > BALANCE_TOLERANCE:
        raise ValidationError(
            f"Transaction amount {quantize_amount(amount)} {currency_code} does not match "
            f"the debit total {total_debit} of its journal entries"
        )
    return prepared


def _build_entry(prepared: PreparedLeg, actor: ActorContext) -> JournalEntry:
    leg = prepared.leg
    return JournalEntry(
        account_id=leg.account_id,
        entry_type=leg.entry_type,
        amount=quantize_amount(leg.amount),
        currency_code=leg.currency_code,
        exchange_rate=prepared.exchange_rate,
        converted_amount=prepared.converted_amount,
        memo=leg.memo,
        created_by=actor.user_id,
        updated_by=actor.user_id,
    )


def _commit(db: Session, action: str):
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Storage failure while trying to {action}: {e}", exc_info=True)
        raise StorageError(f"Could not {action}", original=e) from e


def _flush(db: Session, action: str):
    try:
        db.flush()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Storage failure while trying to {action}: {e}", exc_info=True)
        raise StorageError(f"Could not {action}", original=e) from e


def _snapshot(db_transaction: Transaction) -> dict:
    values = sqlalchemy_to_dict(db_transaction)
    values["journal_entries"] = [sqlalchemy_to_dict(entry) for entry in db_transaction.journal_entries]
    return values


def get_transaction(db: Session, transaction_id: int, tenant_id: int) -> Optional[Transaction]:
    return db.query(Transaction).filter(
        Transaction.id == transaction_id,
        Transaction.tenant_id == tenant_id
    ).first()


def list_transactions(db: Session, tenant_id: int, start_date: Optional[date] = None,
                      end_date: Optional[date] = None, transaction_type: Optional[TransactionType] = None,
                      account_id: Optional[int] = None, category_id: Optional[int] = None,
                      is_reconciled: Optional[bool] = None, skip: int = 0, limit: int = 100) -> List[Transaction]:
    query = db.query(Transaction).filter(Transaction.tenant_id == tenant_id)
    if start_date:
        query = query.filter(Transaction.transaction_date >= start_date)
    if end_date:
        query = query.filter(Transaction.transaction_date <= end_date)
    if transaction_type:
        query = query.filter(Transaction.type == transaction_type)
    if category_id:
        query = query.filter(Transaction.category_id == category_id)
    if is_reconciled is not None:
        query = query.filter(Transaction.is_reconciled == is_reconciled)
    if account_id:
        query = query.filter(Transaction.journal_entries.any(JournalEntry.account_id == account_id))
    return query.order_by(Transaction.transaction_date.desc(), Transaction.id.desc()).offset(skip).limit(limit).all()


def record_transaction(db: Session, tenant_id: int, transaction: TransactionCreate, actor: ActorContext,
                       commit: bool = True) -> Transaction:
    """
    Validate and persist a transaction together with all of its legs.

    With commit=False the rows are only flushed, leaving the caller to commit
    them together with its own changes.
    """
    _ensure_tenant(db, tenant_id)
    prepared = prepare_legs(
        db, tenant_id, transaction.currency_code, transaction.transaction_date, transaction.journal_entries,
        amount=transaction.amount,
    )
    _check_classification(db, tenant_id, transaction.category_id, transaction.tag_ids)

    db_transaction = Transaction(
        **transaction.model_dump(exclude={"journal_entries"}),
        tenant_id=tenant_id,
        created_by=actor.user_id,
        updated_by=actor.user_id,
    )
    db_transaction.journal_entries = [_build_entry(p, actor) for p in prepared]
    db.add(db_transaction)
    if not commit:
        _flush(db, "record transaction")
        return db_transaction
    _commit(db, "record transaction")
    db.refresh(db_transaction)

    logger.info(
        f"Recorded transaction {db_transaction.id} ({db_transaction.type.value}, "
        f"{db_transaction.amount} {db_transaction.currency_code}) with "
        f"{len(prepared)} journal entries for tenant {tenant_id} by user {actor.user_id}"
    )
    return db_transaction


def _existing_legs(db_transaction: Transaction) -> List[JournalEntryCreate]:
    return [
        JournalEntryCreate(
            account_id=entry.account_id,
            entry_type=entry.entry_type,
            amount=entry.amount,
            currency_code=entry.currency_code,
            exchange_rate=entry.exchange_rate,
            memo=entry.memo,
        )
        for entry in db_transaction.journal_entries
    ]


def amend_transaction(db: Session, tenant_id: int, transaction_id: int, update: TransactionUpdate,
                      actor: ActorContext) -> Transaction:
    """
    Apply a partial update to a transaction.

    Changes touching amount, currency, date or legs re-run the full validation
    against the proposed leg set before anything is written. Supplied legs
    replace the existing ones.
    """
    db_transaction = get_transaction(db, transaction_id, tenant_id)
    if db_transaction is None:
        raise ReferentialError(f"Transaction {transaction_id} not found for tenant {tenant_id}")

    changes = update.model_dump(exclude_unset=True, exclude={"journal_entries"})
    requested = set(update.model_fields_set)

    if db_transaction.is_reconciled:
        locked = requested - RECONCILIATION_FIELDS
        if locked:
            raise ValidationError(
                f"Transaction {transaction_id} is reconciled; "
                f"only {sorted(RECONCILIATION_FIELDS)} may change (got {sorted(locked)})"
            )

    null_fields = sorted(k for k, v in changes.items() if v is None and k in NOT_NULL_FIELDS)
    if null_fields:
        raise ValidationError(f"Fields cannot be null: {null_fields}")
    if "journal_entries" in requested and update.journal_entries is None:
        raise ValidationError("journal_entries cannot be null")

    if "category_id" in changes or "tag_ids" in changes:
        _check_classification(db, tenant_id, changes.get("category_id"), changes.get("tag_ids"))

    prepared = None
    if requested & LEDGER_FIELDS:
        legs = update.journal_entries if update.journal_entries is not None else _existing_legs(db_transaction)
        prepared = prepare_legs(
            db,
            tenant_id,
            changes.get("currency_code", db_transaction.currency_code),
            changes.get("transaction_date", db_transaction.transaction_date),
            legs,
            amount=changes.get("amount", db_transaction.amount),
        )

    old_values = _snapshot(db_transaction)

    for key, value in changes.items():
        setattr(db_transaction, key, value)
    db_transaction.updated_by = actor.user_id

    if prepared is not None:
        if update.journal_entries is not None:
            # Old legs are removed before the new ones are inserted so the
            # per-transaction (account, entry_type) uniqueness holds at flush.
            db_transaction.journal_entries.clear()
            _flush(db, "amend transaction")
            db_transaction.journal_entries.extend(_build_entry(p, actor) for p in prepared)
        else:
            for entry, p in zip(db_transaction.journal_entries, prepared):
                entry.exchange_rate = p.exchange_rate
                entry.converted_amount = p.converted_amount
                entry.updated_by = actor.user_id

    _flush(db, "amend transaction")
    create_audit_log(db=db, log_entry=AuditLogCreate(
        tenant_id=tenant_id,
        table_name='transactions',
        record_id=transaction_id,
        changed_by=actor.user_id,
        action='UPDATE',
        old_values=old_values,
        new_values=_snapshot(db_transaction),
    ))
    _commit(db, "amend transaction")
    db.refresh(db_transaction)

    logger.info(
        f"Amended transaction {transaction_id} ({sorted(requested)}) for tenant {tenant_id} by user {actor.user_id}"
    )
    return db_transaction


def delete_transaction(db: Session, tenant_id: int, transaction_id: int, actor: ActorContext) -> bool:
    """Delete a transaction and its legs in one unit of work."""
    db_transaction = get_transaction(db, transaction_id, tenant_id)
    if db_transaction is None:
        raise ReferentialError(f"Transaction {transaction_id} not found for tenant {tenant_id}")
    if db_transaction.is_reconciled:
        raise ValidationError(f"Transaction {transaction_id} is reconciled and cannot be deleted")

    old_values = _snapshot(db_transaction)
    entry_count = len(db_transaction.journal_entries)

    # The delete-orphan cascade removes the journal entries before the header.
    db.delete(db_transaction)
    _flush(db, "delete transaction")
    create_audit_log(db=db, log_entry=AuditLogCreate(
        tenant_id=tenant_id,
        table_name='transactions',
        record_id=transaction_id,
        changed_by=actor.user_id,
        action='DELETE',
        old_values=old_values,
        new_values=None,
    ))
    _commit(db, "delete transaction")

    logger.info(
        f"Deleted transaction {transaction_id} and {entry_count} journal entries "
        f"for tenant {tenant_id} by user {actor.user_id}"
    )
    return True
