from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, Table
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin, now_local

role_permissions = Table(
    "role_permissions",
    Base.metadata,
    Column("role_id", Integer, ForeignKey("roles.id"), primary_key=True),
    Column("permission_id", Integer, ForeignKey("permissions.id"), primary_key=True, index=True),
    Column("created_at", DateTime(timezone=True), default=now_local, nullable=False),
    Column("created_by", Integer, nullable=True),
)


class Permission(Base, TimestampMixin):
    __tablename__ = "permissions"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)  # e.g. 'tx.create'
    description = Column(Text, nullable=True)


class Role(Base, TimestampMixin):
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    is_system_role = Column(Boolean, default=True, nullable=False)

    permissions = relationship("Permission", secondary=role_permissions)


class UserTenantRole(Base, TimestampMixin):
    __tablename__ = "user_tenant_roles"

    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), primary_key=True, index=True)
    role_id = Column(Integer, ForeignKey("roles.id"), primary_key=True, index=True)

    role = relationship("Role")
