from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
import logging

from database import get_db
from schemas.rbac import Permission, Role, RoleAssignment, RoleCreate, UserTenantRole
from utils.actor import ActorContext
from utils.auth_utils import require_permission
from crud import rbac as crud_rbac

router = APIRouter(prefix="/roles", tags=["Roles"])
logger = logging.getLogger("roles")


@router.get("/", response_model=List[Role])
def read_roles(
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("admin.manage")),
):
    return crud_rbac.get_roles(db)


@router.get("/permissions", response_model=List[Permission])
def read_permissions(
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("admin.manage")),
):
    return crud_rbac.get_permissions(db)


@router.post("/", response_model=Role, status_code=status.HTTP_201_CREATED)
def create_role(
    role: RoleCreate,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("admin.manage")),
):
    return crud_rbac.create_role(db, role, actor.user_id)


@router.post("/assignments", response_model=UserTenantRole, status_code=status.HTTP_201_CREATED)
def assign_role(
    assignment: RoleAssignment,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("admin.manage")),
):
    """Grant a role to a user in the caller's tenant."""
    return crud_rbac.assign_role(db, assignment.user_id, actor.tenant_id, assignment.role_name,
                                 assigned_by=actor.user_id)


@router.delete("/assignments")
def revoke_role(
    assignment: RoleAssignment,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("admin.manage")),
):
    if not crud_rbac.revoke_role(db, assignment.user_id, actor.tenant_id, assignment.role_name):
        raise HTTPException(status_code=404, detail="Role assignment not found")
    logger.info(f"Role {assignment.role_name} revoked from user {assignment.user_id} in tenant {actor.tenant_id}")
    return {"message": "Role revoked successfully"}
