from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional
from datetime import date
from decimal import Decimal
from models.recurring_transaction import RecurringType, FrequencyUnit


class RecurringTransactionBase(BaseModel):
    description: str = Field(..., min_length=1)
    type: RecurringType
    category_id: Optional[int] = None
    account_id: int
    counter_account_id: int
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    currency_code: str = Field(..., min_length=3, max_length=3)
    frequency_value: int = Field(1, gt=0)
    frequency_unit: FrequencyUnit
    start_date: date
    end_date: Optional[date] = None
    notes: Optional[str] = None

    @field_validator('currency_code')
    @classmethod
    def upper_code(cls, v):
        return v.upper()

    @model_validator(mode='after')
    def check_accounts_and_dates(self):
        if self.account_id == self.counter_account_id:
            raise ValueError('account_id and counter_account_id must differ')
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError('end_date must be on or after start_date')
        return self


class RecurringTransactionCreate(RecurringTransactionBase):
    pass


class RecurringTransactionUpdate(BaseModel):
    description: Optional[str] = Field(None, min_length=1)
    category_id: Optional[int] = None
    amount: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    frequency_value: Optional[int] = Field(None, gt=0)
    frequency_unit: Optional[FrequencyUnit] = None
    end_date: Optional[date] = None
    is_active: Optional[bool] = None
    notes: Optional[str] = None


class RecurringTransaction(RecurringTransactionBase):
    id: int
    tenant_id: int
    last_generated_date: Optional[date] = None
    next_due_date: Optional[date] = None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)
