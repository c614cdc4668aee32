from sqlalchemy import Column, Integer, String, Date, Numeric, ForeignKey, CheckConstraint, UniqueConstraint, Index
from database import Base
from models.audit_mixin import TimestampMixin


class ExchangeRate(Base, TimestampMixin):
    """Stored rate: 1 unit of base currency = `rate` units of target currency."""
    __tablename__ = "exchange_rates"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=True, index=True)  # NULL = system-wide
    base_currency_code = Column(String(3), ForeignKey("currencies.code"), nullable=False)
    target_currency_code = Column(String(3), ForeignKey("currencies.code"), nullable=False)
    rate = Column(Numeric(18, 6), CheckConstraint('rate > 0'), nullable=False)
    rate_date = Column(Date, nullable=False)
    source = Column(String(100), nullable=True)  # e.g. 'API', 'Manual'

    __table_args__ = (
        UniqueConstraint('tenant_id', 'base_currency_code', 'target_currency_code', 'rate_date',
                         name='_tenant_rate_pair_date_uc'),
        Index('idx_exchange_rates_base_target_date', 'base_currency_code', 'target_currency_code', 'rate_date'),
    )
