from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from crud import recurring_transactions as crud_recurring
from crud.balances import compute_account_balance
from exceptions import ValidationError
from models.journal_entry import EntryType
from models.recurring_transaction import FrequencyUnit, RecurringType
from models.transaction import Transaction, TransactionType
from schemas.recurring_transactions import RecurringTransactionCreate, RecurringTransactionUpdate
from tasks.eod_tasks import run_eod_tasks
from utils.recurrence import add_months, advance


def _monthly_rent(accounts, **overrides):
    data = dict(
        description="Office rent",
        type=RecurringType.EXPENSE,
        account_id=accounts["Cash"].id,
        counter_account_id=accounts["Operating Expenses"].id,
        amount=Decimal("1200.00"),
        currency_code="USD",
        frequency_value=1,
        frequency_unit=FrequencyUnit.MONTH,
        start_date=date(2026, 1, 31),
    )
    data.update(overrides)
    return RecurringTransactionCreate(**data)


def test_add_months_clamps_to_month_end():
    assert add_months(date(2026, 1, 31), 1) == date(2026, 2, 28)
    assert add_months(date(2028, 1, 31), 1) == date(2028, 2, 29)
    assert add_months(date(2026, 11, 30), 3) == date(2027, 2, 28)


def test_monthly_schedule_keeps_its_day():
    feb = advance(date(2026, 1, 31), 1, FrequencyUnit.MONTH, anchor_day=31)
    assert feb == date(2026, 2, 28)
    assert advance(feb, 1, FrequencyUnit.MONTH, anchor_day=31) == date(2026, 3, 31)
    assert advance(date(2026, 3, 1), 2, FrequencyUnit.WEEK) == date(2026, 3, 15)
    assert advance(date(2028, 2, 29), 1, FrequencyUnit.YEAR, anchor_day=29) == date(2029, 2, 28)


def test_create_sets_next_due_date(db, tenant, actor, accounts):
    recurring = crud_recurring.create_recurring_transaction(db, _monthly_rent(accounts), tenant.id, actor)
    assert recurring.next_due_date == date(2026, 1, 31)
    assert recurring.is_active


def test_generation_posts_balanced_expense(db, tenant, actor, accounts):
    recurring = crud_recurring.create_recurring_transaction(db, _monthly_rent(accounts), tenant.id, actor)

    posted = crud_recurring.generate_due_transactions(db, date(2026, 3, 31))

    assert posted == 3
    dates = [t.transaction_date for t in db.query(Transaction).order_by(Transaction.transaction_date)]
    assert dates == [date(2026, 1, 31), date(2026, 2, 28), date(2026, 3, 31)]
    first = db.query(Transaction).order_by(Transaction.id).first()
    assert first.type == TransactionType.EXPENSE
    assert {(e.account_id, e.entry_type) for e in first.journal_entries} == {
        (accounts["Operating Expenses"].id, EntryType.DEBIT),
        (accounts["Cash"].id, EntryType.CREDIT),
    }
    assert compute_account_balance(db, tenant.id, accounts["Cash"].id, date(2026, 3, 31)).balance == Decimal("-3600.00")

    db.refresh(recurring)
    assert recurring.last_generated_date == date(2026, 3, 31)
    assert recurring.next_due_date == date(2026, 4, 30)


def test_income_debits_primary_account(db, tenant, actor, accounts):
    crud_recurring.create_recurring_transaction(db, _monthly_rent(
        accounts,
        description="Retainer",
        type=RecurringType.INCOME,
        counter_account_id=accounts["Sales Revenue"].id,
        start_date=date(2026, 3, 1),
    ), tenant.id, actor)

    crud_recurring.generate_due_transactions(db, date(2026, 3, 1))

    assert compute_account_balance(db, tenant.id, accounts["Cash"].id, date(2026, 3, 1)).balance == Decimal("1200.00")
    assert compute_account_balance(db, tenant.id, accounts["Sales Revenue"].id, date(2026, 3, 1)).balance == Decimal("1200.00")


def test_item_past_end_date_is_deactivated(db, tenant, actor, accounts):
    recurring = crud_recurring.create_recurring_transaction(
        db, _monthly_rent(accounts, end_date=date(2026, 2, 28)), tenant.id, actor
    )

    posted = crud_recurring.generate_due_transactions(db, date(2026, 6, 30))

    assert posted == 2
    db.refresh(recurring)
    assert recurring.is_active is False


def test_failing_item_does_not_stop_others(db, tenant, actor, accounts):
    broken = crud_recurring.create_recurring_transaction(
        db, _monthly_rent(accounts, description="Broken", counter_account_id=accounts["Accounts Payable"].id),
        tenant.id, actor,
    )
    crud_recurring.create_recurring_transaction(db, _monthly_rent(accounts, start_date=date(2026, 2, 1)),
                                                tenant.id, actor)
    accounts["Accounts Payable"].is_active = False
    db.commit()

    posted = crud_recurring.generate_due_transactions(db, date(2026, 2, 1))

    assert posted == 1
    db.refresh(broken)
    assert broken.last_generated_date is None
    assert broken.next_due_date == date(2026, 1, 31)


def test_generation_can_be_limited_to_one_tenant(db, tenant, actor, accounts):
    crud_recurring.create_recurring_transaction(db, _monthly_rent(accounts), tenant.id, actor)
    assert crud_recurring.generate_due_transactions(db, date(2026, 1, 31), tenant_id=tenant.id + 1) == 0
    assert crud_recurring.generate_due_transactions(db, date(2026, 1, 31), tenant_id=tenant.id) == 1


def test_eod_job_uses_its_own_session(db, tenant, actor, accounts):
    crud_recurring.create_recurring_transaction(db, _monthly_rent(accounts), tenant.id, actor)

    run_eod_tasks(as_of=date(2026, 2, 28))

    db.expire_all()
    assert db.query(Transaction).count() == 2


def test_failed_commit_leaves_occurrence_due_and_others_continue(db, tenant, actor, accounts, monkeypatch):
    first = crud_recurring.create_recurring_transaction(db, _monthly_rent(accounts, description="Rent A"),
                                                        tenant.id, actor)
    crud_recurring.create_recurring_transaction(
        db, _monthly_rent(accounts, description="Rent B", start_date=date(2026, 2, 1)), tenant.id, actor
    )
    real_commit = db.commit
    calls = []

    def commit_failing_once():
        calls.append(1)
        if len(calls) == 1:
            raise OperationalError("COMMIT", {}, Exception("connection reset"))
        real_commit()

    monkeypatch.setattr(db, "commit", commit_failing_once)
    posted = crud_recurring.generate_due_transactions(db, date(2026, 2, 1))
    monkeypatch.undo()

    assert posted == 1
    assert [t.description for t in db.query(Transaction)] == ["Rent B"]
    db.refresh(first)
    assert first.last_generated_date is None
    assert first.next_due_date == date(2026, 1, 31)

    # The retried run posts the missed occurrence exactly once.
    assert crud_recurring.generate_due_transactions(db, date(2026, 2, 1)) == 1
    assert sorted(t.description for t in db.query(Transaction)) == ["Rent A", "Rent B"]


def test_update_rejects_null_for_required_fields(db, tenant, actor, accounts):
    recurring = crud_recurring.create_recurring_transaction(db, _monthly_rent(accounts), tenant.id, actor)

    for field in ("description", "amount", "frequency_value", "frequency_unit", "is_active"):
        with pytest.raises(ValidationError):
            crud_recurring.update_recurring_transaction(
                db, recurring.id, RecurringTransactionUpdate(**{field: None}), tenant.id, actor
            )

    updated = crud_recurring.update_recurring_transaction(
        db, recurring.id, RecurringTransactionUpdate(end_date=None, notes=None), tenant.id, actor
    )
    assert updated.amount == Decimal("1200.00")
    assert updated.end_date is None
