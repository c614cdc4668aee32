import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from exceptions import ReferentialError, ValidationError
from models.rbac import Permission, Role, UserTenantRole
from models.users import User
from schemas.rbac import RoleCreate

logger = logging.getLogger(__name__)

DEFAULT_PERMISSIONS = {
    "tx.create": "Record transactions",
    "tx.view": "View transactions and balances",
    "tx.update": "Amend transactions",
    "tx.delete": "Delete transactions",
    "account.manage": "Create and modify accounts, categories and tags",
    "account.view": "View accounts, categories and tags",
    "report.manage": "Create and modify custom reports and dashboards",
    "budget.manage": "Create and modify budgets and recurring transactions",
    "admin.manage": "Manage tenant settings and role assignments",
}

ADMIN_ROLE = "ADMIN"
VIEWER_ROLE = "VIEWER"

DEFAULT_ROLES = {
    ADMIN_ROLE: ("Full access to the tenant", list(DEFAULT_PERMISSIONS)),
    VIEWER_ROLE: ("Read-only access", ["tx.view", "account.view"]),
}


def get_permission(db: Session, name: str) -> Optional[Permission]:
    return db.query(Permission).filter(Permission.name == name).first()


def get_permissions(db: Session) -> List[Permission]:
    return db.query(Permission).order_by(Permission.name).all()


def get_role_by_name(db: Session, name: str) -> Optional[Role]:
    return db.query(Role).filter(Role.name == name).first()


def get_roles(db: Session) -> List[Role]:
    return db.query(Role).order_by(Role.name).all()


def seed_defaults(db: Session):
    """Create the built-in permissions and roles. Safe to run on every startup."""
    for name, description in DEFAULT_PERMISSIONS.items():
        if get_permission(db, name) is None:
            db.add(Permission(name=name, description=description))
    db.flush()

    for role_name, (description, permission_names) in DEFAULT_ROLES.items():
        role = get_role_by_name(db, role_name)
        if role is None:
            role = Role(name=role_name, description=description, is_system_role=True)
            db.add(role)
        granted = {p.name for p in role.permissions}
        for permission_name in permission_names:
            if permission_name not in granted:
                role.permissions.append(get_permission(db, permission_name))
    db.commit()
    logger.info("Default roles and permissions are in place")


def create_role(db: Session, role: RoleCreate, user_id: Optional[int] = None) -> Role:
    if get_role_by_name(db, role.name):
        raise ValidationError(f"Role '{role.name}' already exists")

    db_role = Role(name=role.name, description=role.description, is_system_role=False,
                   created_by=user_id, updated_by=user_id)
    for permission_name in role.permission_names:
        permission = get_permission(db, permission_name)
        if permission is None:
            raise ReferentialError(f"Permission '{permission_name}' not found")
        db_role.permissions.append(permission)
    db.add(db_role)
    db.commit()
    db.refresh(db_role)
    return db_role


def assign_role(db: Session, user_id: int, tenant_id: int, role_name: str, assigned_by: Optional[int] = None,
                commit: bool = True) -> UserTenantRole:
    role = get_role_by_name(db, role_name)
    if role is None:
        raise ReferentialError(f"Role '{role_name}' not found")
    if db.query(User.id).filter(User.id == user_id).first() is None:
        raise ReferentialError(f"User {user_id} not found")

    existing = db.query(UserTenantRole).filter(
        UserTenantRole.user_id == user_id,
        UserTenantRole.tenant_id == tenant_id,
        UserTenantRole.role_id == role.id
    ).first()
    if existing:
        return existing

    assignment = UserTenantRole(user_id=user_id, tenant_id=tenant_id, role_id=role.id,
                                created_by=assigned_by, updated_by=assigned_by)
    db.add(assignment)
    if commit:
        db.commit()
        db.refresh(assignment)
    logger.info(f"Assigned role {role_name} to user {user_id} in tenant {tenant_id}")
    return assignment


def revoke_role(db: Session, user_id: int, tenant_id: int, role_name: str) -> bool:
    role = get_role_by_name(db, role_name)
    if role is None:
        return False
    deleted = db.query(UserTenantRole).filter(
        UserTenantRole.user_id == user_id,
        UserTenantRole.tenant_id == tenant_id,
        UserTenantRole.role_id == role.id
    ).delete()
    db.commit()
    return deleted > 0


def get_user_roles(db: Session, user_id: int, tenant_id: int) -> List[Role]:
    return (
        db.query(Role)
        .join(UserTenantRole, UserTenantRole.role_id == Role.id)
        .filter(UserTenantRole.user_id == user_id, UserTenantRole.tenant_id == tenant_id)
        .all()
    )


def user_has_permission(db: Session, user_id: int, tenant_id: int, permission_name: str) -> bool:
    return any(
        permission.name == permission_name
        for role in get_user_roles(db, user_id, tenant_id)
        for permission in role.permissions
    )
