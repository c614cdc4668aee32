from sqlalchemy import Column, Integer, String, Text, Boolean, JSON, ForeignKey, UniqueConstraint
from database import Base
from models.audit_mixin import TimestampMixin


class CustomReport(Base, TimestampMixin):
    """Saved report definition; `configuration` is validated by report_type in schemas.custom_reports."""
    __tablename__ = "custom_reports"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    report_type = Column(String(50), nullable=False)
    configuration = Column(JSON, nullable=False)
    is_public = Column(Boolean, default=False, nullable=False)

    __table_args__ = (
        UniqueConstraint('tenant_id', 'name', name='_tenant_report_name_uc'),
    )
