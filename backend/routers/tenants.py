from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
import logging

from database import get_db
from models.rbac import UserTenantRole
from models.tenant import Tenant as TenantModel
from models.users import User
from schemas.tenants import Tenant, TenantCreate, TenantUpdate
from utils.actor import ActorContext
from utils.auth_utils import get_current_user
from crud import rbac as crud_rbac
from crud import tenants as crud_tenants

router = APIRouter(prefix="/tenants", tags=["Tenants"])
logger = logging.getLogger("tenants")


@router.post("/", response_model=Tenant, status_code=status.HTTP_201_CREATED)
def create_tenant(
    tenant: TenantCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Create a tenant. The creator becomes its ADMIN."""
    return crud_tenants.create_tenant(db, tenant, ActorContext(user_id=user.id))


@router.get("/", response_model=List[Tenant])
def read_tenants(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    """Tenants in which the caller holds any role."""
    return (
        db.query(TenantModel)
        .join(UserTenantRole, UserTenantRole.tenant_id == TenantModel.id)
        .filter(UserTenantRole.user_id == user.id)
        .distinct()
        .order_by(TenantModel.id)
        .all()
    )


@router.get("/{tenant_id}", response_model=Tenant)
def read_tenant(tenant_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    db_tenant = crud_tenants.get_tenant(db, tenant_id)
    if db_tenant is None or not crud_rbac.get_user_roles(db, user.id, tenant_id):
        raise HTTPException(status_code=404, detail="Tenant not found")
    return db_tenant


@router.patch("/{tenant_id}", response_model=Tenant)
def update_tenant(
    tenant_id: int,
    tenant: TenantUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if not crud_rbac.user_has_permission(db, user.id, tenant_id, "admin.manage"):
        raise HTTPException(status_code=403, detail=f"Missing permission 'admin.manage' for tenant {tenant_id}")
    updated = crud_tenants.update_tenant(db, tenant_id, tenant, ActorContext(user_id=user.id, tenant_id=tenant_id))
    if updated is None:
        raise HTTPException(status_code=404, detail="Tenant not found")
    logger.info(f"Tenant {tenant_id} updated by user {user.id}")
    return updated
