from sqlalchemy import Column, String, Boolean
from database import Base
from models.audit_mixin import TimestampMixin


class Currency(Base, TimestampMixin):
    __tablename__ = "currencies"

    code = Column(String(3), primary_key=True)  # ISO 4217, e.g. USD
    name = Column(String(100), unique=True, nullable=False)
    symbol = Column(String(10), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
