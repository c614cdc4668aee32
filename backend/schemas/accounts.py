from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import datetime
from models.account import AccountType


class AccountBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    account_code: Optional[str] = Field(None, max_length=50)
    account_type: AccountType
    description: Optional[str] = None
    currency_code: str
    is_active: bool = True

    @field_validator('currency_code')
    @classmethod
    def validate_currency_code(cls, v):
        v = v.strip().upper()
        if len(v) != 3:
            raise ValueError("currency_code must be a 3-letter ISO 4217 code")
        return v


class AccountCreate(AccountBase):
    pass


class AccountUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    account_code: Optional[str] = Field(None, max_length=50)
    account_type: Optional[AccountType] = None
    description: Optional[str] = None
    currency_code: Optional[str] = None
    is_active: Optional[bool] = None


class Account(AccountBase):
    id: int
    tenant_id: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
