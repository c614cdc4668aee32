from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import date
from decimal import Decimal


class ExchangeRateBase(BaseModel):
    base_currency_code: str = Field(..., min_length=3, max_length=3)
    target_currency_code: str = Field(..., min_length=3, max_length=3)
    rate: Decimal = Field(..., gt=0, decimal_places=6)
    rate_date: date
    source: Optional[str] = None

    @field_validator('base_currency_code', 'target_currency_code')
    @classmethod
    def upper_code(cls, v):
        return v.upper()


class ExchangeRateCreate(ExchangeRateBase):
    # System-wide rates apply to every tenant that has no rate of its own.
    system_wide: bool = False


class ExchangeRate(ExchangeRateBase):
    id: int
    tenant_id: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class ResolvedRate(BaseModel):
    base_currency_code: str
    target_currency_code: str
    rate_date: date
    rate: Decimal
