from pydantic import BaseModel, ConfigDict, Field
from typing import Annotated, List, Literal, Optional, Union
from datetime import datetime
from models.account import AccountType


class CashBalanceSummaryParams(BaseModel):
    widget_type: Literal["cash_balance_summary"]
    account_ids: List[int] = []


class SpendingByCategoryParams(BaseModel):
    widget_type: Literal["spending_by_category"]
    period_days: int = Field(30, gt=0, le=366)
    top_n: int = Field(5, gt=0, le=50)


class IncomeVsExpenseSummaryParams(BaseModel):
    widget_type: Literal["income_vs_expense_summary"]
    months: int = Field(6, gt=0, le=36)


class AccountBalanceListParams(BaseModel):
    widget_type: Literal["account_balance_list"]
    account_types: List[AccountType] = []


class CustomReportLinkParams(BaseModel):
    widget_type: Literal["custom_report_link"]
    report_id: int


WidgetParameters = Annotated[
    Union[
        CashBalanceSummaryParams,
        SpendingByCategoryParams,
        IncomeVsExpenseSummaryParams,
        AccountBalanceListParams,
        CustomReportLinkParams,
    ],
    Field(discriminator="widget_type"),
]


class WidgetProperties(BaseModel):
    width: int = Field(1, ge=1, le=12)
    height: int = Field(1, ge=1, le=12)
    color: Optional[str] = Field(None, pattern=r"^#[0-9a-fA-F]{6}$")


class DashboardWidgetBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    order_index: int = Field(0, ge=0)
    parameters: WidgetParameters
    properties: WidgetProperties = WidgetProperties()


class DashboardWidgetCreate(DashboardWidgetBase):
    pass


class DashboardWidget(DashboardWidgetBase):
    id: int
    dashboard_id: int
    widget_type: str

    model_config = ConfigDict(from_attributes=True)


class DashboardBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    is_default: bool = False


class DashboardCreate(DashboardBase):
    widgets: List[DashboardWidgetCreate] = []


class DashboardUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    is_default: Optional[bool] = None


class Dashboard(DashboardBase):
    id: int
    tenant_id: int
    user_id: int
    widgets: List[DashboardWidget] = []
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
