from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class PermissionCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None


class Permission(PermissionCreate):
    id: int

    model_config = ConfigDict(from_attributes=True)


class RoleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    permission_names: List[str] = []


class Role(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    is_system_role: bool
    permissions: List[Permission] = []

    model_config = ConfigDict(from_attributes=True)


class RoleAssignment(BaseModel):
    user_id: int
    role_name: str


class UserTenantRole(BaseModel):
    user_id: int
    tenant_id: int
    role_id: int

    model_config = ConfigDict(from_attributes=True)
