"""Saved report definitions and their execution against the ledger."""
import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import TypeAdapter
from sqlalchemy.orm import Session

from crud.balances import compute_account_activity, compute_account_balance
from crud.exchange_rates import resolve_rate
from crud.transactions import quantize_amount
from exceptions import ReferentialError, ValidationError
from models.account import Account, AccountType
from models.category import Category
from models.custom_report import CustomReport
from models.tenant import Tenant
from models.transaction import Transaction
from schemas.custom_reports import (
    AccountBalanceSummaryConfig,
    CustomReportCreate,
    CustomReportUpdate,
    IncomeExpenseStatementConfig,
    ReportConfiguration,
    ReportResult,
    ReportRow,
    SummaryByCategoryConfig,
    TransactionListConfig,
)
from utils import reject_null_columns
from utils.actor import ActorContext

logger = logging.getLogger(__name__)

configuration_adapter = TypeAdapter(ReportConfiguration)


def get_custom_report(db: Session, report_id: int, tenant_id: int, user_id: Optional[int] = None) -> Optional[CustomReport]:
    query = db.query(CustomReport).filter(CustomReport.id == report_id, CustomReport.tenant_id == tenant_id)
    if user_id is not None:
        query = query.filter((CustomReport.user_id == user_id) | (CustomReport.is_public == True))
    return query.first()


def get_custom_reports(db: Session, tenant_id: int, user_id: int) -> List[CustomReport]:
    return db.query(CustomReport).filter(
        CustomReport.tenant_id == tenant_id,
        (CustomReport.user_id == user_id) | (CustomReport.is_public == True)
    ).order_by(CustomReport.name).all()


def _check_name(db: Session, tenant_id: int, name: str, exclude_id: Optional[int] = None):
    query = db.query(CustomReport).filter(CustomReport.tenant_id == tenant_id, CustomReport.name == name)
    if exclude_id is not None:
        query = query.filter(CustomReport.id != exclude_id)
    if query.first():
        raise ValidationError(f"Report '{name}' already exists")


def create_custom_report(db: Session, report: CustomReportCreate, tenant_id: int, actor: ActorContext) -> CustomReport:
    _check_name(db, tenant_id, report.name)
    db_report = CustomReport(
        tenant_id=tenant_id,
        user_id=actor.user_id,
        name=report.name,
        description=report.description,
        report_type=report.configuration.report_type,
        configuration=report.configuration.model_dump(mode="json"),
        is_public=report.is_public,
        created_by=actor.user_id,
        updated_by=actor.user_id,
    )
    db.add(db_report)
    db.commit()
    db.refresh(db_report)
    return db_report


def update_custom_report(db: Session, report_id: int, report: CustomReportUpdate, tenant_id: int,
                         actor: ActorContext) -> Optional[CustomReport]:
    db_report = db.query(CustomReport).filter(
        CustomReport.id == report_id,
        CustomReport.tenant_id == tenant_id,
        CustomReport.user_id == actor.user_id
    ).first()
    if not db_report:
        return None

    update_data = report.model_dump(exclude_unset=True, exclude={"configuration"})
    reject_null_columns(CustomReport, update_data)
    if "configuration" in report.model_fields_set and report.configuration is None:
        raise ValidationError("Fields cannot be null: ['configuration']")
    if update_data.get("name") and update_data["name"] != db_report.name:
        _check_name(db, tenant_id, update_data["name"], exclude_id=report_id)
    for key, value in update_data.items():
        setattr(db_report, key, value)
    if report.configuration is not None:
        db_report.report_type = report.configuration.report_type
        db_report.configuration = report.configuration.model_dump(mode="json")
    db_report.updated_by = actor.user_id
    db.commit()
    db.refresh(db_report)
    return db_report


def delete_custom_report(db: Session, report_id: int, tenant_id: int, actor: ActorContext) -> bool:
    db_report = db.query(CustomReport).filter(
        CustomReport.id == report_id,
        CustomReport.tenant_id == tenant_id,
        CustomReport.user_id == actor.user_id
    ).first()
    if not db_report:
        return False
    db.delete(db_report)
    db.commit()
    return True


def _to_base(db: Session, tenant_id: int, amount: Decimal, currency_code: str, base_currency_code: str,
             rate_date: date) -> Decimal:
    rate = resolve_rate(db, tenant_id, currency_code, base_currency_code, rate_date)
    return quantize_amount(Decimal(amount) * rate)


def _transaction_list(db: Session, tenant_id: int, config: TransactionListConfig) -> List[ReportRow]:
    query = db.query(Transaction).filter(
        Transaction.tenant_id == tenant_id,
        Transaction.transaction_date >= config.start_date,
        Transaction.transaction_date <= config.end_date,
    )
    if config.transaction_types:
        query = query.filter(Transaction.type.in_(config.transaction_types))
    transactions = query.order_by(Transaction.transaction_date, Transaction.id).limit(config.limit).all()
    return [
        ReportRow(
            label=f"{t.transaction_date.isoformat()} {t.description}",
            amount=t.amount,
            details={"transaction_id": t.id, "type": t.type.value, "currency_code": t.currency_code},
        )
        for t in transactions
    ]


def _summary_by_category(db: Session, tenant_id: int, base_currency_code: str,
                         config: SummaryByCategoryConfig) -> List[ReportRow]:
    query = (
        db.query(Transaction, Category)
        .outerjoin(Category, Transaction.category_id == Category.id)
        .filter(
            Transaction.tenant_id == tenant_id,
            Transaction.transaction_date >= config.start_date,
            Transaction.transaction_date <= config.end_date,
        )
    )
    if config.category_type:
        query = query.filter(Category.type == config.category_type)

    totals = defaultdict(lambda: Decimal("0.00"))
    counts = defaultdict(int)
    for transaction, category in query.all():
        label = category.name if category else "Uncategorized"
        totals[label] += _to_base(db, tenant_id, transaction.amount, transaction.currency_code,
                                  base_currency_code, transaction.transaction_date)
        counts[label] += 1
    return [
        ReportRow(label=label, amount=totals[label], details={"transaction_count": counts[label]})
        for label in sorted(totals, key=lambda name: totals[name], reverse=True)
    ]


def _account_balance_summary(db: Session, tenant_id: int, config: AccountBalanceSummaryConfig) -> List[ReportRow]:
    query = db.query(Account).filter(Account.tenant_id == tenant_id, Account.is_active == True)
    if config.account_types:
        query = query.filter(Account.account_type.in_(config.account_types))
    rows = []
    for account in query.order_by(Account.account_type, Account.account_code, Account.name).all():
        balance = compute_account_balance(db, tenant_id, account.id, config.as_of)
        rows.append(ReportRow(
            label=account.name,
            amount=balance.balance,
            details={
                "account_id": account.id,
                "account_type": account.account_type.value,
                "currency_code": account.currency_code,
            },
        ))
    return rows


def _income_expense_statement(db: Session, tenant_id: int, base_currency_code: str,
                              config: IncomeExpenseStatementConfig):
    activity = compute_account_activity(
        db, tenant_id, config.start_date, config.end_date,
        account_types=[AccountType.REVENUE, AccountType.EXPENSE],
    )
    rows = []
    net_income = Decimal("0.00")
    for account, amount in activity:
        converted = _to_base(db, tenant_id, amount, account.currency_code, base_currency_code, config.end_date) \
            if amount else Decimal("0.00")
        net_income += converted if account.account_type == AccountType.REVENUE else -converted
        rows.append(ReportRow(
            label=account.name,
            amount=converted,
            details={"account_id": account.id, "account_type": account.account_type.value},
        ))
    return rows, net_income


def run_custom_report(db: Session, report_id: int, tenant_id: int, user_id: Optional[int] = None) -> ReportResult:
    """Execute a saved report. Amounts are in the tenant's base currency unless noted per row."""
    db_report = get_custom_report(db, report_id, tenant_id, user_id)
    if db_report is None:
        raise ReferentialError(f"Report {report_id} not found for tenant {tenant_id}")
    tenant = db.query(Tenant).filter(Tenant.id == tenant_id).first()
    config = configuration_adapter.validate_python(db_report.configuration)

    total = None
    if isinstance(config, TransactionListConfig):
        rows = _transaction_list(db, tenant_id, config)
    elif isinstance(config, SummaryByCategoryConfig):
        rows = _summary_by_category(db, tenant_id, tenant.base_currency_code, config)
        total = sum((row.amount for row in rows), Decimal("0.00"))
    elif isinstance(config, AccountBalanceSummaryConfig):
        rows = _account_balance_summary(db, tenant_id, config)
    else:
        rows, total = _income_expense_statement(db, tenant_id, tenant.base_currency_code, config)

    logger.info(f"Ran report {report_id} ({db_report.report_type}) for tenant {tenant_id}: {len(rows)} rows")
    return ReportResult(
        report_id=db_report.id,
        report_type=db_report.report_type,
        currency_code=tenant.base_currency_code,
        rows=rows,
        total=total,
    )
