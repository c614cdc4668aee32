from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class TagCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None


class Tag(TagCreate):
    id: int
    tenant_id: int
    is_active: bool

    model_config = ConfigDict(from_attributes=True)
