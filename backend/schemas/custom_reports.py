"""
Report definitions.

`configuration` is a tagged union keyed by `report_type`; each report kind
declares exactly the parameters it understands.
"""
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Annotated, List, Literal, Optional, Union, Dict, Any
from datetime import date, datetime
from decimal import Decimal
from models.account import AccountType
from models.category import CategoryType
from models.transaction import TransactionType


class _DateRange(BaseModel):
    start_date: date
    end_date: date

    @model_validator(mode='after')
    def check_date_range(self):
        if self.end_date < self.start_date:
            raise ValueError('end_date must be on or after start_date')
        return self


class TransactionListConfig(_DateRange):
    report_type: Literal["TRANSACTION_LIST"]
    transaction_types: List[TransactionType] = []
    limit: int = Field(100, gt=0, le=1000)


class SummaryByCategoryConfig(_DateRange):
    report_type: Literal["SUMMARY_BY_CATEGORY"]
    category_type: Optional[CategoryType] = None


class AccountBalanceSummaryConfig(BaseModel):
    report_type: Literal["ACCOUNT_BALANCE_SUMMARY"]
    as_of: date
    account_types: List[AccountType] = []


class IncomeExpenseStatementConfig(_DateRange):
    report_type: Literal["INCOME_EXPENSE_STATEMENT"]


ReportConfiguration = Annotated[
    Union[
        TransactionListConfig,
        SummaryByCategoryConfig,
        AccountBalanceSummaryConfig,
        IncomeExpenseStatementConfig,
    ],
    Field(discriminator="report_type"),
]


class CustomReportBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    configuration: ReportConfiguration
    is_public: bool = False


class CustomReportCreate(CustomReportBase):
    pass


class CustomReportUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    configuration: Optional[ReportConfiguration] = None
    is_public: Optional[bool] = None


class CustomReport(CustomReportBase):
    id: int
    tenant_id: int
    user_id: int
    report_type: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReportRow(BaseModel):
    label: str
    amount: Decimal
    details: Dict[str, Any] = {}


class ReportResult(BaseModel):
    report_id: int
    report_type: str
    currency_code: str
    rows: List[ReportRow]
    total: Optional[Decimal] = None
