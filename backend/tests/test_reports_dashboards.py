from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError as SchemaValidationError

from crud import categories as crud_categories
from crud import custom_reports as crud_reports
from crud import dashboards as crud_dashboards
from crud.transactions import record_transaction
from exceptions import ReferentialError
from models.category import CategoryType
from schemas.categories import CategoryCreate
from schemas.custom_reports import CustomReportCreate
from schemas.dashboards import DashboardCreate, DashboardUpdate, DashboardWidgetCreate
from tests.factories import TX_DATE, add_rate, make_user, sale

MARCH = {"start_date": "2026-03-01", "end_date": "2026-03-31"}


def _report(db, tenant, actor, configuration, name="March", is_public=False):
    return crud_reports.create_custom_report(db, CustomReportCreate(
        name=name, configuration=configuration, is_public=is_public
    ), tenant.id, actor)


def test_configuration_is_validated_per_report_type():
    with pytest.raises(SchemaValidationError):
        CustomReportCreate(name="Bad", configuration={"report_type": "PROFIT_FORECAST", **MARCH})
    with pytest.raises(SchemaValidationError):
        CustomReportCreate(name="Bad", configuration={"report_type": "INCOME_EXPENSE_STATEMENT",
                                                      "start_date": "2026-03-31", "end_date": "2026-03-01"})
    with pytest.raises(SchemaValidationError):
        CustomReportCreate(name="Bad", configuration={"report_type": "ACCOUNT_BALANCE_SUMMARY"})


def test_income_expense_statement(db, tenant, actor, accounts):
    record_transaction(db, tenant.id, sale(accounts["Cash"].id, accounts["Sales Revenue"].id, "100.00"), actor)
    record_transaction(db, tenant.id, sale(accounts["Operating Expenses"].id, accounts["Cash"].id, "40.00"), actor)
    record_transaction(db, tenant.id, sale(accounts["Cash"].id, accounts["Sales Revenue"].id, "999.00",
                                           transaction_date=date(2026, 4, 2)), actor)
    report = _report(db, tenant, actor, {"report_type": "INCOME_EXPENSE_STATEMENT", **MARCH})

    result = crud_reports.run_custom_report(db, report.id, tenant.id, actor.user_id)

    assert result.currency_code == "USD"
    assert result.total == Decimal("60.00")
    assert {row.label: row.amount for row in result.rows} == {
        "Sales Revenue": Decimal("100.00"),
        "Operating Expenses": Decimal("40.00"),
    }


def test_summary_by_category_converts_to_base_currency(db, tenant, actor, accounts, eur_account):
    travel = crud_categories.create_category(db, CategoryCreate(name="Travel", type=CategoryType.EXPENSE),
                                             tenant.id, actor)
    add_rate(db, "EUR", "USD", "1.10")
    record_transaction(db, tenant.id, sale(accounts["Operating Expenses"].id, accounts["Cash"].id, "100.00",
                                           category_id=travel.id), actor)
    record_transaction(db, tenant.id, sale(eur_account.id, accounts["Sales Revenue"].id, "50.00",
                                           currency_code="EUR", category_id=travel.id), actor)
    record_transaction(db, tenant.id, sale(accounts["Cash"].id, accounts["Sales Revenue"].id, "5.00"), actor)
    report = _report(db, tenant, actor, {"report_type": "SUMMARY_BY_CATEGORY", **MARCH})

    result = crud_reports.run_custom_report(db, report.id, tenant.id, actor.user_id)

    assert [(row.label, row.amount) for row in result.rows] == [
        ("Travel", Decimal("155.00")),
        ("Uncategorized", Decimal("5.00")),
    ]
    assert result.rows[0].details == {"transaction_count": 2}
    assert result.total == Decimal("160.00")


def test_account_balance_summary(db, tenant, actor, accounts):
    record_transaction(db, tenant.id, sale(accounts["Cash"].id, accounts["Sales Revenue"].id, "75.00"), actor)
    report = _report(db, tenant, actor, {"report_type": "ACCOUNT_BALANCE_SUMMARY", "as_of": "2026-03-31",
                                         "account_types": ["ASSET"]})

    result = crud_reports.run_custom_report(db, report.id, tenant.id, actor.user_id)

    balances = {row.label: row.amount for row in result.rows}
    assert balances == {"Cash": Decimal("75.00"), "Accounts Receivable": Decimal("0.00")}
    assert result.total is None


def test_private_report_is_hidden_from_other_users(db, tenant, actor):
    report = _report(db, tenant, actor, {"report_type": "TRANSACTION_LIST", **MARCH})
    colleague = make_user(db, email="colleague@example.com")

    with pytest.raises(ReferentialError):
        crud_reports.run_custom_report(db, report.id, tenant.id, colleague.id)
    assert crud_reports.get_custom_reports(db, tenant.id, colleague.id) == []

    shared = _report(db, tenant, actor, {"report_type": "TRANSACTION_LIST", **MARCH}, name="Shared", is_public=True)
    assert [r.id for r in crud_reports.get_custom_reports(db, tenant.id, colleague.id)] == [shared.id]


def test_transaction_list_respects_limit(db, tenant, actor, accounts):
    for amount in ("10.00", "20.00", "30.00"):
        record_transaction(db, tenant.id, sale(accounts["Cash"].id, accounts["Sales Revenue"].id, amount), actor)
    report = _report(db, tenant, actor, {"report_type": "TRANSACTION_LIST", "limit": 2, **MARCH})

    result = crud_reports.run_custom_report(db, report.id, tenant.id, actor.user_id)

    assert [row.amount for row in result.rows] == [Decimal("10.00"), Decimal("20.00")]
    assert result.rows[0].label == f"{TX_DATE.isoformat()} Invoice 1001"


def _widget(parameters, title="Cash"):
    return DashboardWidgetCreate(title=title, parameters=parameters)


def test_only_one_default_dashboard(db, tenant, actor):
    first = crud_dashboards.create_dashboard(db, DashboardCreate(name="Overview", is_default=True), tenant.id, actor)
    second = crud_dashboards.create_dashboard(db, DashboardCreate(name="Cash", is_default=True), tenant.id, actor)
    db.refresh(first)
    assert not first.is_default
    assert second.is_default

    crud_dashboards.update_dashboard(db, first.id, DashboardUpdate(is_default=True), tenant.id, actor)
    db.refresh(second)
    assert not second.is_default
    assert crud_dashboards.get_dashboards(db, tenant.id, actor.user_id)[0].id == first.id


def test_widgets_are_stored_with_their_type(db, tenant, actor, accounts):
    dashboard = crud_dashboards.create_dashboard(db, DashboardCreate(name="Overview", widgets=[
        _widget({"widget_type": "cash_balance_summary", "account_ids": [accounts["Cash"].id]}),
        _widget({"widget_type": "spending_by_category", "top_n": 3}, title="Spending"),
    ]), tenant.id, actor)

    assert [w.widget_type for w in dashboard.widgets] == ["cash_balance_summary", "spending_by_category"]
    assert dashboard.widgets[1].parameters == {"widget_type": "spending_by_category", "period_days": 30, "top_n": 3}


def test_report_link_widget_needs_existing_report(db, tenant, actor):
    dashboard = crud_dashboards.create_dashboard(db, DashboardCreate(name="Overview"), tenant.id, actor)
    with pytest.raises(ReferentialError):
        crud_dashboards.add_widget(db, dashboard.id, _widget({"widget_type": "custom_report_link", "report_id": 999}),
                                   tenant.id, actor)

    report = _report(db, tenant, actor, {"report_type": "TRANSACTION_LIST", **MARCH})
    widget = crud_dashboards.add_widget(
        db, dashboard.id, _widget({"widget_type": "custom_report_link", "report_id": report.id}), tenant.id, actor
    )
    assert widget.parameters["report_id"] == report.id


def test_unknown_widget_type_is_rejected():
    with pytest.raises(SchemaValidationError):
        _widget({"widget_type": "stock_ticker"})
