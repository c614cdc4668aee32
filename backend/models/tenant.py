from sqlalchemy import Column, Integer, String, Boolean, CheckConstraint, ForeignKey
from database import Base
from models.audit_mixin import TimestampMixin


class Tenant(Base, TimestampMixin):
    __tablename__ = "tenants"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)
    industry = Column(String(100), nullable=True)
    base_currency_code = Column(String(3), ForeignKey("currencies.code"), nullable=False)
    fiscal_year_end_month = Column(Integer, nullable=False, default=12)
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        CheckConstraint(
            'fiscal_year_end_month >= 1 AND fiscal_year_end_month <= 12',
            name='check_fiscal_year_end_month'
        ),
    )
