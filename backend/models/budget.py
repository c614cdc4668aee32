from sqlalchemy import Column, Integer, String, Text, Date, Numeric, Boolean, Enum, ForeignKey, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import AuditMixin, TimestampMixin
import enum


class BudgetType(enum.Enum):
    MONTHLY = "MONTHLY"
    ANNUAL = "ANNUAL"
    CUSTOM = "CUSTOM"


class FrequencyType(enum.Enum):
    MONTHLY = "MONTHLY"
    ANNUALLY = "ANNUALLY"
    ONCE = "ONCE"
    QUARTERLY = "QUARTERLY"


class Budget(Base, AuditMixin):
    __tablename__ = "budgets"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    budget_type = Column(Enum(BudgetType, name="budget_type"), nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    line_items = relationship("BudgetLineItem", back_populates="budget", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint('tenant_id', 'name', name='_tenant_budget_name_uc'),
        CheckConstraint('end_date >= start_date', name='check_budget_date_range'),
    )


class BudgetLineItem(Base, TimestampMixin):
    __tablename__ = "budget_line_items"

    id = Column(Integer, primary_key=True, index=True)
    budget_id = Column(Integer, ForeignKey("budgets.id"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)
    amount = Column(Numeric(18, 2), CheckConstraint('amount >= 0'), nullable=False)
    frequency_type = Column(Enum(FrequencyType, name="frequency_type"), nullable=False)
    notes = Column(Text, nullable=True)

    budget = relationship("Budget", back_populates="line_items")

    __table_args__ = (
        UniqueConstraint('budget_id', 'category_id', name='_budget_category_uc'),
    )
