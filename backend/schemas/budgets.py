from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal
from models.budget import BudgetType, FrequencyType


class BudgetLineItemBase(BaseModel):
    category_id: Optional[int] = None
    amount: Decimal = Field(..., ge=0, decimal_places=2)
    frequency_type: FrequencyType
    notes: Optional[str] = None


class BudgetLineItemCreate(BudgetLineItemBase):
    pass


class BudgetLineItem(BudgetLineItemBase):
    id: int
    budget_id: int

    model_config = ConfigDict(from_attributes=True)


class BudgetBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    start_date: date
    end_date: date
    budget_type: BudgetType
    description: Optional[str] = None
    is_active: bool = True

    @model_validator(mode='after')
    def check_date_range(self):
        if self.end_date < self.start_date:
            raise ValueError('end_date must be on or after start_date')
        return self


class BudgetCreate(BudgetBase):
    line_items: List[BudgetLineItemCreate] = []


class BudgetUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    budget_type: Optional[BudgetType] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None


class Budget(BudgetBase):
    id: int
    tenant_id: int
    line_items: List[BudgetLineItem] = []
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
