from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional


class CurrencyBase(BaseModel):
    code: str = Field(..., min_length=3, max_length=3)
    name: str
    symbol: Optional[str] = None
    is_active: bool = True

    @field_validator('code')
    @classmethod
    def upper_code(cls, v):
        return v.upper()


class CurrencyCreate(CurrencyBase):
    pass


class Currency(CurrencyBase):
    model_config = ConfigDict(from_attributes=True)
