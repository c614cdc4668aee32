from datetime import date, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from crud import audit_log as crud_audit_log
from crud import transactions as crud_transactions
from crud.balances import compute_account_balance
from exceptions import (
    ImbalancedEntryError,
    MissingExchangeRateError,
    ReferentialError,
    StorageError,
    ValidationError,
)
from models.account import Account
from models.journal_entry import EntryType, JournalEntry
from models.transaction import Transaction, TransactionType
from schemas.transactions import TransactionCreate, TransactionUpdate
from utils.actor import ActorContext
from tests.factories import TX_DATE, add_rate, leg, make_tenant, make_user, sale


def _count(db, model):
    return db.query(model).count()


def test_record_balanced_transaction(db, tenant, actor, accounts):
    cash, revenue = accounts["Cash"], accounts["Sales Revenue"]

    tx = crud_transactions.record_transaction(db, tenant.id, sale(cash.id, revenue.id, "250.00"), actor)

    assert tx.id is not None
    assert tx.created_by == actor.user_id
    assert [(e.account_id, e.entry_type) for e in tx.journal_entries] == [
        (cash.id, EntryType.DEBIT),
        (revenue.id, EntryType.CREDIT),
    ]
    assert all(e.converted_amount == Decimal("250.00") for e in tx.journal_entries)
    assert all(e.exchange_rate is None for e in tx.journal_entries)


def test_recorded_transaction_reads_back_identically(db, tenant, actor, accounts):
    request = sale(accounts["Cash"].id, accounts["Sales Revenue"].id, "42.50", notes="walk-in")
    tx = crud_transactions.record_transaction(db, tenant.id, request, actor)

    stored = crud_transactions.get_transaction(db, tx.id, tenant.id)

    assert stored.description == request.description
    assert stored.amount == request.amount
    assert stored.notes == "walk-in"
    assert [(e.account_id, e.entry_type, e.amount, e.currency_code, e.memo) for e in stored.journal_entries] == [
        (l.account_id, l.entry_type, l.amount, l.currency_code, l.memo) for l in request.journal_entries
    ]


def test_single_leg_is_rejected(db, tenant, actor, accounts):
    request = TransactionCreate(
        transaction_date=TX_DATE, description="Half entry", type=TransactionType.ADJUSTMENT,
        amount=Decimal("10.00"), currency_code="USD",
        journal_entries=[leg(accounts["Cash"].id, EntryType.DEBIT, "10.00")],
    )

    with pytest.raises(ValidationError):
        crud_transactions.record_transaction(db, tenant.id, request, actor)
    assert _count(db, Transaction) == 0


def test_duplicate_account_and_side_is_rejected(db, tenant, actor, accounts):
    cash, revenue = accounts["Cash"], accounts["Sales Revenue"]
    request = sale(cash.id, revenue.id, "100.00")
    request.journal_entries.append(leg(cash.id, EntryType.DEBIT, "0.00"))

    with pytest.raises(ValidationError):
        crud_transactions.record_transaction(db, tenant.id, request, actor)


def test_all_zero_legs_are_rejected(db, tenant, actor, accounts):
    request = sale(accounts["Cash"].id, accounts["Sales Revenue"].id, "0.01")
    for entry in request.journal_entries:
        entry.amount = Decimal("0.00")

    with pytest.raises(ValidationError):
        crud_transactions.record_transaction(db, tenant.id, request, actor)


def test_imbalanced_transaction_persists_nothing(db, tenant, actor, accounts):
    request = sale(accounts["Cash"].id, accounts["Sales Revenue"].id, "100.00")
    request.journal_entries[1].amount = Decimal("90.00")

    with pytest.raises(ImbalancedEntryError) as excinfo:
        crud_transactions.record_transaction(db, tenant.id, request, actor)

    assert excinfo.value.total_debit == Decimal("100.00")
    assert excinfo.value.total_credit == Decimal("90.00")
    assert _count(db, Transaction) == 0
    assert _count(db, JournalEntry) == 0


def test_rounding_tolerance_is_one_cent(db, tenant, actor, accounts):
    cash, revenue = accounts["Cash"].id, accounts["Sales Revenue"].id

    within = sale(cash, revenue, "100.00")
    within.journal_entries[1].amount = Decimal("99.99")
    crud_transactions.record_transaction(db, tenant.id, within, actor)

    beyond = sale(cash, revenue, "100.00")
    beyond.journal_entries[1].amount = Decimal("99.98")
    with pytest.raises(ImbalancedEntryError):
        crud_transactions.record_transaction(db, tenant.id, beyond, actor)


def test_account_of_another_tenant_is_rejected(db, tenant, actor, accounts):
    other_owner = make_user(db, email="rival@example.com")
    other = make_tenant(db, other_owner, name="Rival Inc")
    foreign_cash = db.query(Account).filter_by(tenant_id=other.id, name="Cash").one()

    with pytest.raises(ReferentialError):
        crud_transactions.record_transaction(
            db, tenant.id, sale(foreign_cash.id, accounts["Sales Revenue"].id), actor
        )


def test_inactive_account_is_rejected(db, tenant, actor, accounts):
    payable = accounts["Accounts Payable"]
    payable.is_active = False
    db.commit()

    with pytest.raises(ReferentialError):
        crud_transactions.record_transaction(db, tenant.id, sale(accounts["Cash"].id, payable.id), actor)


def test_unknown_tenant_is_rejected(db, actor, accounts):
    with pytest.raises(ReferentialError):
        crud_transactions.record_transaction(
            db, 9999, sale(accounts["Cash"].id, accounts["Sales Revenue"].id), actor
        )


def test_leg_in_foreign_currency_without_rate_is_rejected(db, tenant, actor, accounts, eur_account):
    # USD leg against a EUR account with no supplied or stored USD->EUR rate
    with pytest.raises(MissingExchangeRateError) as excinfo:
        crud_transactions.record_transaction(
            db, tenant.id, sale(eur_account.id, accounts["Sales Revenue"].id, "100.00"), actor
        )
    assert (excinfo.value.base_currency_code, excinfo.value.target_currency_code) == ("USD", "EUR")
    assert _count(db, Transaction) == 0


def test_supplied_rate_converts_into_account_currency(db, tenant, actor, accounts, eur_account):
    request = sale(eur_account.id, accounts["Sales Revenue"].id, "100.00")
    request.journal_entries[0].exchange_rate = Decimal("0.9")

    tx = crud_transactions.record_transaction(db, tenant.id, request, actor)

    eur_leg = next(e for e in tx.journal_entries if e.account_id == eur_account.id)
    assert eur_leg.amount == Decimal("100.00")
    assert eur_leg.converted_amount == Decimal("90.00")
    assert eur_leg.exchange_rate == Decimal("0.900000")


def test_stored_rate_is_used_when_none_supplied(db, tenant, actor, accounts, eur_account):
    add_rate(db, "USD", "EUR", "0.92")

    tx = crud_transactions.record_transaction(
        db, tenant.id, sale(eur_account.id, accounts["Sales Revenue"].id, "100.00"), actor
    )

    eur_leg = next(e for e in tx.journal_entries if e.account_id == eur_account.id)
    assert eur_leg.converted_amount == Decimal("92.00")


def test_legs_in_different_currencies_balance_in_transaction_currency(db, tenant, actor, accounts, eur_account):
    add_rate(db, "EUR", "USD", "1.10")
    request = TransactionCreate(
        transaction_date=TX_DATE, description="Transfer to EUR float", type=TransactionType.TRANSFER,
        amount=Decimal("110.00"), currency_code="USD",
        journal_entries=[
            leg(eur_account.id, EntryType.DEBIT, "100.00", "EUR"),
            leg(accounts["Cash"].id, EntryType.CREDIT, "110.00", "USD"),
        ],
    )

    tx = crud_transactions.record_transaction(db, tenant.id, request, actor)

    assert {e.account_id: e.converted_amount for e in tx.journal_entries} == {
        eur_account.id: Decimal("100.00"),
        accounts["Cash"].id: Decimal("110.00"),
    }


def test_storage_failure_rolls_back_and_raises(db, tenant, actor, accounts, monkeypatch):
    def failing_commit():
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db, "commit", failing_commit)

    with pytest.raises(StorageError):
        crud_transactions.record_transaction(
            db, tenant.id, sale(accounts["Cash"].id, accounts["Sales Revenue"].id), actor
        )

    monkeypatch.undo()
    assert _count(db, Transaction) == 0
    assert _count(db, JournalEntry) == 0


def test_amend_header_only(db, tenant, actor, accounts):
    tx = crud_transactions.record_transaction(
        db, tenant.id, sale(accounts["Cash"].id, accounts["Sales Revenue"].id), actor
    )

    amended = crud_transactions.amend_transaction(
        db, tenant.id, tx.id, TransactionUpdate(description="Invoice 1001 (corrected)"), actor
    )

    assert amended.description == "Invoice 1001 (corrected)"
    assert len(amended.journal_entries) == 2
    logs = crud_audit_log.get_audit_logs(db, tenant.id, "transactions", tx.id)
    assert [log.action for log in logs] == ["UPDATE"]
    assert logs[0].old_values["description"] == "Invoice 1001"


def test_amend_adding_third_leg_that_keeps_balance(db, tenant, actor, accounts):
    cash, revenue, equity = accounts["Cash"], accounts["Sales Revenue"], accounts["Owner's Equity"]
    tx = crud_transactions.record_transaction(db, tenant.id, sale(cash.id, revenue.id, "100.00"), actor)

    amended = crud_transactions.amend_transaction(db, tenant.id, tx.id, TransactionUpdate(journal_entries=[
        leg(cash.id, EntryType.DEBIT, "100.00"),
        leg(revenue.id, EntryType.CREDIT, "60.00"),
        leg(equity.id, EntryType.CREDIT, "40.00"),
    ]), actor)

    assert len(amended.journal_entries) == 3
    assert _count(db, JournalEntry) == 3


def test_amend_replacing_legs_with_same_accounts(db, tenant, actor, accounts):
    cash, revenue = accounts["Cash"], accounts["Sales Revenue"]
    tx = crud_transactions.record_transaction(db, tenant.id, sale(cash.id, revenue.id, "100.00"), actor)

    amended = crud_transactions.amend_transaction(db, tenant.id, tx.id, TransactionUpdate(
        amount=Decimal("150.00"),
        journal_entries=[leg(cash.id, EntryType.DEBIT, "150.00"), leg(revenue.id, EntryType.CREDIT, "150.00")],
    ), actor)

    assert [e.amount for e in amended.journal_entries] == [Decimal("150.00"), Decimal("150.00")]
    assert compute_account_balance(db, tenant.id, cash.id, TX_DATE).balance == Decimal("150.00")


def test_amend_that_breaks_balance_changes_nothing(db, tenant, actor, accounts):
    cash, revenue = accounts["Cash"], accounts["Sales Revenue"]
    tx = crud_transactions.record_transaction(db, tenant.id, sale(cash.id, revenue.id, "100.00"), actor)

    with pytest.raises(ImbalancedEntryError):
        crud_transactions.amend_transaction(db, tenant.id, tx.id, TransactionUpdate(
            description="should not stick",
            journal_entries=[leg(cash.id, EntryType.DEBIT, "100.00"), leg(revenue.id, EntryType.CREDIT, "80.00")],
        ), actor)

    db.expire_all()
    stored = crud_transactions.get_transaction(db, tx.id, tenant.id)
    assert stored.description == "Invoice 1001"
    assert [e.amount for e in stored.journal_entries] == [Decimal("100.00"), Decimal("100.00")]


def test_amend_date_revalidates_existing_legs(db, tenant, actor, accounts, eur_account):
    add_rate(db, "USD", "EUR", "0.90")
    tx = crud_transactions.record_transaction(
        db, tenant.id, sale(eur_account.id, accounts["Sales Revenue"].id, "100.00"), actor
    )

    # The recorded rate travels with the leg, so a new date needs no new rate.
    amended = crud_transactions.amend_transaction(
        db, tenant.id, tx.id, TransactionUpdate(transaction_date=TX_DATE + timedelta(days=1)), actor
    )
    assert amended.transaction_date == TX_DATE + timedelta(days=1)
    assert next(e for e in amended.journal_entries if e.account_id == eur_account.id).converted_amount == Decimal("90.00")


def test_amend_unknown_transaction(db, tenant, actor):
    with pytest.raises(ReferentialError):
        crud_transactions.amend_transaction(db, tenant.id, 12345, TransactionUpdate(notes="x"), actor)


def test_amend_from_another_tenant_is_not_found(db, tenant, actor, accounts):
    tx = crud_transactions.record_transaction(
        db, tenant.id, sale(accounts["Cash"].id, accounts["Sales Revenue"].id), actor
    )
    other_owner = make_user(db, email="rival@example.com")
    other = make_tenant(db, other_owner, name="Rival Inc")

    with pytest.raises(ReferentialError):
        crud_transactions.amend_transaction(
            db, other.id, tx.id, TransactionUpdate(notes="x"), ActorContext(other_owner.id, other.id)
        )


def test_reconciled_transaction_is_locked(db, tenant, actor, accounts):
    tx = crud_transactions.record_transaction(
        db, tenant.id,
        sale(accounts["Cash"].id, accounts["Sales Revenue"].id, is_reconciled=True, reconciliation_date=TX_DATE),
        actor,
    )

    with pytest.raises(ValidationError):
        crud_transactions.amend_transaction(db, tenant.id, tx.id, TransactionUpdate(description="edit"), actor)
    with pytest.raises(ValidationError):
        crud_transactions.delete_transaction(db, tenant.id, tx.id, actor)

    amended = crud_transactions.amend_transaction(
        db, tenant.id, tx.id, TransactionUpdate(notes="matched to statement 7"), actor
    )
    assert amended.notes == "matched to statement 7"


def test_delete_removes_legs(db, tenant, actor, accounts):
    tx = crud_transactions.record_transaction(
        db, tenant.id, sale(accounts["Cash"].id, accounts["Sales Revenue"].id), actor
    )

    assert crud_transactions.delete_transaction(db, tenant.id, tx.id, actor) is True

    assert _count(db, Transaction) == 0
    assert _count(db, JournalEntry) == 0
    assert [log.action for log in crud_audit_log.get_audit_logs(db, tenant.id, "transactions", tx.id)] == ["DELETE"]
    with pytest.raises(ReferentialError):
        crud_transactions.delete_transaction(db, tenant.id, tx.id, actor)


def test_balance_respects_normal_side_and_as_of(db, tenant, actor, accounts):
    cash, revenue, expenses = accounts["Cash"], accounts["Sales Revenue"], accounts["Operating Expenses"]
    crud_transactions.record_transaction(db, tenant.id, sale(cash.id, revenue.id, "500.00"), actor)
    crud_transactions.record_transaction(
        db, tenant.id, sale(expenses.id, cash.id, "120.00", transaction_date=TX_DATE + timedelta(days=10)), actor
    )

    assert compute_account_balance(db, tenant.id, cash.id, TX_DATE).balance == Decimal("500.00")
    assert compute_account_balance(db, tenant.id, cash.id, TX_DATE + timedelta(days=10)).balance == Decimal("380.00")
    assert compute_account_balance(db, tenant.id, revenue.id, TX_DATE).balance == Decimal("500.00")
    assert compute_account_balance(db, tenant.id, expenses.id, date(2026, 12, 31)).balance == Decimal("120.00")
    assert compute_account_balance(db, tenant.id, cash.id, TX_DATE - timedelta(days=1)).balance == Decimal("0.00")


def test_balance_of_unknown_account(db, tenant):
    with pytest.raises(ReferentialError):
        compute_account_balance(db, tenant.id, 4242, TX_DATE)


def test_list_filters_by_account(db, tenant, actor, accounts):
    cash, revenue, expenses = accounts["Cash"], accounts["Sales Revenue"], accounts["Operating Expenses"]
    crud_transactions.record_transaction(db, tenant.id, sale(cash.id, revenue.id), actor)
    expense = crud_transactions.record_transaction(db, tenant.id, sale(expenses.id, cash.id, "20.00"), actor)

    listed = crud_transactions.list_transactions(db, tenant.id, account_id=expenses.id)

    assert [t.id for t in listed] == [expense.id]


def test_header_amount_must_match_legs(db, tenant, actor, accounts):
    request = TransactionCreate(
        transaction_date=TX_DATE, description="Invoice 1002", type=TransactionType.INCOME,
        amount=Decimal("500.00"), currency_code="USD",
        journal_entries=[
            leg(accounts["Cash"].id, EntryType.DEBIT, "100.00"),
            leg(accounts["Sales Revenue"].id, EntryType.CREDIT, "100.00"),
        ],
    )

    with pytest.raises(ValidationError):
        crud_transactions.record_transaction(db, tenant.id, request, actor)
    assert _count(db, Transaction) == 0


def test_amend_of_amount_alone_is_checked_against_legs(db, tenant, actor, accounts):
    tx = crud_transactions.record_transaction(
        db, tenant.id, sale(accounts["Cash"].id, accounts["Sales Revenue"].id, "100.00"), actor
    )

    with pytest.raises(ValidationError):
        crud_transactions.amend_transaction(
            db, tenant.id, tx.id, TransactionUpdate(amount=Decimal("999999.00")), actor
        )

    db.expire_all()
    assert crud_transactions.get_transaction(db, tx.id, tenant.id).amount == Decimal("100.00")


def test_amend_rejects_null_for_required_fields(db, tenant, actor, accounts):
    tx = crud_transactions.record_transaction(
        db, tenant.id, sale(accounts["Cash"].id, accounts["Sales Revenue"].id), actor
    )

    with pytest.raises(ValidationError):
        crud_transactions.amend_transaction(db, tenant.id, tx.id, TransactionUpdate(amount=None), actor)
    with pytest.raises(ValidationError):
        crud_transactions.amend_transaction(db, tenant.id, tx.id, TransactionUpdate(journal_entries=None), actor)


def test_rate_on_leg_already_in_account_currency_is_rejected(db, tenant, actor, accounts):
    request = sale(accounts["Cash"].id, accounts["Sales Revenue"].id, "100.00")
    request.journal_entries[0].exchange_rate = Decimal("1.25")

    with pytest.raises(ValidationError):
        crud_transactions.record_transaction(db, tenant.id, request, actor)
    assert _count(db, Transaction) == 0
