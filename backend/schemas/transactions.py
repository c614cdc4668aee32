from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal
from models.transaction import TransactionType
from models.journal_entry import EntryType


def _upper_currency(v):
    if v is None:
        return v
    v = v.strip().upper()
    if len(v) != 3 or not v.isalpha():
        raise ValueError("currency_code must be a 3-letter ISO 4217 code")
    return v


class JournalEntryBase(BaseModel):
    account_id: int
    entry_type: EntryType
    amount: Decimal = Field(..., ge=0, decimal_places=2)
    currency_code: str
    exchange_rate: Optional[Decimal] = Field(None, gt=0, decimal_places=6)
    memo: Optional[str] = None

    @field_validator('currency_code')
    @classmethod
    def validate_currency_code(cls, v):
        return _upper_currency(v)


class JournalEntryCreate(JournalEntryBase):
    pass


class JournalEntry(JournalEntryBase):
    id: int
    transaction_id: int
    converted_amount: Optional[Decimal] = None

    model_config = ConfigDict(from_attributes=True)


class TransactionBase(BaseModel):
    transaction_date: date
    description: str = Field(..., min_length=1)
    type: TransactionType
    category_id: Optional[int] = None
    tag_ids: Optional[List[int]] = None
    amount: Decimal = Field(..., ge=Decimal("0.01"), decimal_places=2)
    currency_code: str
    is_reconciled: bool = False
    reconciliation_date: Optional[date] = None
    notes: Optional[str] = None
    source_document_url: Optional[str] = None

    @field_validator('currency_code')
    @classmethod
    def validate_currency_code(cls, v):
        return _upper_currency(v)


class TransactionCreate(TransactionBase):
    # Leg count and balance are checked by the ledger engine so that failures
    # carry the ledger error kind.
    journal_entries: List[JournalEntryCreate]


class TransactionUpdate(BaseModel):
    transaction_date: Optional[date] = None
    description: Optional[str] = Field(None, min_length=1)
    type: Optional[TransactionType] = None
    category_id: Optional[int] = None
    tag_ids: Optional[List[int]] = None
    amount: Optional[Decimal] = Field(None, ge=Decimal("0.01"), decimal_places=2)
    currency_code: Optional[str] = None
    is_reconciled: Optional[bool] = None
    reconciliation_date: Optional[date] = None
    notes: Optional[str] = None
    source_document_url: Optional[str] = None
    # When supplied, replaces the whole leg set.
    journal_entries: Optional[List[JournalEntryCreate]] = None

    @field_validator('currency_code')
    @classmethod
    def validate_currency_code(cls, v):
        return _upper_currency(v)


class Transaction(TransactionBase):
    id: int
    tenant_id: int
    journal_entries: List[JournalEntry] = []
    created_at: datetime
    updated_at: Optional[datetime] = None
    created_by: Optional[int] = None
    updated_by: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class AccountBalance(BaseModel):
    account_id: int
    as_of: date
    currency_code: str
    normal_balance: EntryType
    balance: Decimal
