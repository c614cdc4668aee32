from sqlalchemy import Column, Integer, String, Text, Boolean, Enum, ForeignKey, UniqueConstraint
from database import Base
from models.audit_mixin import TimestampMixin
from models.journal_entry import EntryType
import enum


class AccountType(enum.Enum):
    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    REVENUE = "REVENUE"
    EXPENSE = "EXPENSE"

    @property
    def normal_balance(self) -> EntryType:
        """Side on which this account type's balance is positive."""
        if self in (AccountType.ASSET, AccountType.EXPENSE):
            return EntryType.DEBIT
        return EntryType.CREDIT


class Account(Base, TimestampMixin):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    account_code = Column(String(50), nullable=True)
    name = Column(String(255), nullable=False)
    account_type = Column(Enum(AccountType, name="account_type"), nullable=False)
    description = Column(Text, nullable=True)
    currency_code = Column(String(3), ForeignKey("currencies.code"), nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        UniqueConstraint('tenant_id', 'name', name='_tenant_account_name_uc'),
        UniqueConstraint('tenant_id', 'account_code', name='_tenant_account_code_uc'),
    )
