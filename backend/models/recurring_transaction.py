from sqlalchemy import Column, Integer, Text, String, Date, Numeric, Boolean, Enum, ForeignKey, CheckConstraint
from database import Base
from models.audit_mixin import TimestampMixin
import enum


class RecurringType(enum.Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    TRANSFER = "TRANSFER"


class FrequencyUnit(enum.Enum):
    DAY = "DAY"
    WEEK = "WEEK"
    MONTH = "MONTH"
    YEAR = "YEAR"


class RecurringTransaction(Base, TimestampMixin):
    __tablename__ = "recurring_transactions"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    description = Column(Text, nullable=False)
    type = Column(Enum(RecurringType, name="recurring_type"), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)  # the primary account involved
    counter_account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    amount = Column(Numeric(18, 2), CheckConstraint('amount > 0'), nullable=False)
    currency_code = Column(String(3), ForeignKey("currencies.code"), nullable=False)
    frequency_value = Column(Integer, CheckConstraint('frequency_value > 0'), nullable=False)
    frequency_unit = Column(Enum(FrequencyUnit, name="frequency_unit"), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)  # NULL = indefinite
    last_generated_date = Column(Date, nullable=True)
    next_due_date = Column(Date, nullable=True, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    notes = Column(Text, nullable=True)
