"""Read-side balance computation. Balances are always derived from journal entries."""
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from crud.transactions import quantize_amount
from exceptions import ReferentialError
from models.account import Account, AccountType
from models.journal_entry import EntryType, JournalEntry
from models.transaction import Transaction
from schemas.transactions import AccountBalance

ZERO = Decimal("0.00")


def _signed(account_type: AccountType, debit: Decimal, credit: Decimal) -> Decimal:
    if account_type.normal_balance == EntryType.DEBIT:
        return quantize_amount(debit - credit)
    return quantize_amount(credit - debit)


def _totals_by_account(db: Session, tenant_id: int, account_ids: Optional[Iterable[int]] = None,
                       start_date: Optional[date] = None, end_date: Optional[date] = None) -> Dict[int, Dict[EntryType, Decimal]]:
    amount = func.coalesce(JournalEntry.converted_amount, JournalEntry.amount)
    query = (
        db.query(JournalEntry.account_id, JournalEntry.entry_type, func.sum(amount))
        .join(Transaction, JournalEntry.transaction_id == Transaction.id)
        .filter(Transaction.tenant_id == tenant_id)
    )
    if account_ids is not None:
        query = query.filter(JournalEntry.account_id.in_(list(account_ids)))
    if start_date:
        query = query.filter(Transaction.transaction_date >= start_date)
    if end_date:
        query = query.filter(Transaction.transaction_date <= end_date)

    totals: Dict[int, Dict[EntryType, Decimal]] = {}
    for account_id, entry_type, total in query.group_by(JournalEntry.account_id, JournalEntry.entry_type).all():
        totals.setdefault(account_id, {})[entry_type] = Decimal(str(total or 0))
    return totals


def compute_account_balance(db: Session, tenant_id: int, account_id: int, as_of: date) -> AccountBalance:
    """
    Balance of one account in its own currency as of a date (inclusive).

    Debit-normal accounts (assets, expenses) count debits as positive,
    credit-normal accounts count credits as positive.
    """
    account = db.query(Account).filter(Account.id == account_id, Account.tenant_id == tenant_id).first()
    if account is None:
        raise ReferentialError(f"Account {account_id} not found for tenant {tenant_id}")

    totals = _totals_by_account(db, tenant_id, [account.id], end_date=as_of).get(account.id, {})
    balance = _signed(account.account_type, totals.get(EntryType.DEBIT, ZERO), totals.get(EntryType.CREDIT, ZERO))
    return AccountBalance(
        account_id=account.id,
        as_of=as_of,
        currency_code=account.currency_code,
        normal_balance=account.account_type.normal_balance,
        balance=balance,
    )


def compute_account_activity(db: Session, tenant_id: int, start_date: Optional[date] = None,
                             end_date: Optional[date] = None, account_types: Optional[Iterable[AccountType]] = None):
    """Signed movement per account over a period, as (account, amount) pairs."""
    query = db.query(Account).filter(Account.tenant_id == tenant_id)
    if account_types:
        query = query.filter(Account.account_type.in_(list(account_types)))
    accounts = query.order_by(Account.account_type, Account.name).all()

    totals = _totals_by_account(db, tenant_id, [a.id for a in accounts], start_date, end_date)
    result = []
    for account in accounts:
        per_side = totals.get(account.id, {})
        result.append((account, _signed(
            account.account_type, per_side.get(EntryType.DEBIT, ZERO), per_side.get(EntryType.CREDIT, ZERO)
        )))
    return result
