from sqlalchemy import Column, Integer, String, Text, Numeric, Enum, ForeignKey, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin
import enum


class EntryType(enum.Enum):
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


class JournalEntry(Base, TimestampMixin):
    """One debit or credit leg of a transaction.

    `amount` is in the leg's `currency_code`; `converted_amount` is the same
    amount in the account's currency after applying `exchange_rate`.
    """
    __tablename__ = "journal_entries"

    id = Column(Integer, primary_key=True, index=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    entry_type = Column(Enum(EntryType, name="entry_type"), nullable=False)
    amount = Column(Numeric(18, 2), CheckConstraint('amount >= 0'), nullable=False)
    currency_code = Column(String(3), ForeignKey("currencies.code"), nullable=False)
    exchange_rate = Column(Numeric(18, 6), nullable=True)
    converted_amount = Column(Numeric(18, 2), nullable=True)
    memo = Column(Text, nullable=True)

    # Relationships
    transaction = relationship("Transaction", back_populates="journal_entries")
    account = relationship("Account")

    __table_args__ = (
        UniqueConstraint('transaction_id', 'account_id', 'entry_type', name='_transaction_account_entry_type_uc'),
    )
