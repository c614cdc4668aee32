from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey, UniqueConstraint
from database import Base
from models.audit_mixin import TimestampMixin


class Tag(Base, TimestampMixin):
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        UniqueConstraint('tenant_id', 'name', name='_tenant_tag_name_uc'),
    )
