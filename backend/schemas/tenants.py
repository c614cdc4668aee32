from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime


class TenantBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    industry: Optional[str] = None
    base_currency_code: str = Field(..., min_length=3, max_length=3)
    fiscal_year_end_month: int = Field(12, ge=1, le=12)


class TenantCreate(TenantBase):
    seed_default_accounts: bool = True


class TenantUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    industry: Optional[str] = None
    fiscal_year_end_month: Optional[int] = Field(None, ge=1, le=12)
    is_active: Optional[bool] = None


class Tenant(TenantBase):
    id: int
    is_active: bool
    created_at: datetime
    created_by: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)
