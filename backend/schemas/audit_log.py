from pydantic import BaseModel, ConfigDict
from typing import Optional, Dict, Any
from datetime import datetime


class AuditLogCreate(BaseModel):
    tenant_id: Optional[int] = None
    table_name: str
    record_id: int
    changed_by: Optional[int] = None
    action: str
    old_values: Optional[Dict[str, Any]] = None
    new_values: Optional[Dict[str, Any]] = None


class AuditLogEntry(AuditLogCreate):
    id: int
    changed_at: datetime

    model_config = ConfigDict(from_attributes=True)
