from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from database import get_db
from schemas.tags import Tag, TagCreate
from utils.actor import ActorContext
from utils.auth_utils import require_permission
from crud import tags as crud_tags

router = APIRouter(prefix="/tags", tags=["Tags"])


@router.post("/", response_model=Tag, status_code=status.HTTP_201_CREATED)
def create_tag(
    tag: TagCreate,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("account.manage")),
):
    return crud_tags.create_tag(db, tag, actor.tenant_id, actor)


@router.get("/", response_model=List[Tag])
def read_tags(
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("account.view")),
):
    return crud_tags.get_tags(db, actor.tenant_id, include_inactive)


@router.delete("/{tag_id}")
def delete_tag(
    tag_id: int,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("account.manage")),
):
    if not crud_tags.delete_tag(db, tag_id, actor.tenant_id, actor):
        raise HTTPException(status_code=404, detail="Tag not found")
    return {"message": "Tag deleted successfully"}
