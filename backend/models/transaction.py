from sqlalchemy import Column, Integer, String, Text, Date, Numeric, Boolean, Enum, JSON, ForeignKey
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin
import enum


class TransactionType(enum.Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    TRANSFER = "TRANSFER"
    JOURNAL_ENTRY = "JOURNAL_ENTRY"
    OPENING_BALANCE = "OPENING_BALANCE"
    ADJUSTMENT = "ADJUSTMENT"


class Transaction(Base, TimestampMixin):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    transaction_date = Column(Date, nullable=False, index=True)
    description = Column(Text, nullable=False)
    type = Column(Enum(TransactionType, name="transaction_type"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)
    tag_ids = Column(JSON, nullable=True)  # list of tag ids
    amount = Column(Numeric(18, 2), nullable=False)
    currency_code = Column(String(3), ForeignKey("currencies.code"), nullable=False)
    is_reconciled = Column(Boolean, default=False, nullable=False)
    reconciliation_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)
    source_document_url = Column(Text, nullable=True)

    # Relationships
    journal_entries = relationship(
        "JournalEntry",
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="JournalEntry.id",
    )
    category = relationship("Category")
