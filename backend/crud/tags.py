from typing import List, Optional

from sqlalchemy.orm import Session

from exceptions import ValidationError
from models.tag import Tag
from schemas.tags import TagCreate
from utils.actor import ActorContext


def get_tag(db: Session, tag_id: int, tenant_id: int) -> Optional[Tag]:
    return db.query(Tag).filter(Tag.id == tag_id, Tag.tenant_id == tenant_id).first()


def get_tags(db: Session, tenant_id: int, include_inactive: bool = False) -> List[Tag]:
    query = db.query(Tag).filter(Tag.tenant_id == tenant_id)
    if not include_inactive:
        query = query.filter(Tag.is_active == True)
    return query.order_by(Tag.name).all()


def create_tag(db: Session, tag: TagCreate, tenant_id: int, actor: ActorContext) -> Tag:
    existing = db.query(Tag).filter(Tag.tenant_id == tenant_id, Tag.name == tag.name).first()
    if existing and existing.is_active:
        raise ValidationError(f"Tag '{tag.name}' already exists")
    if existing:
        # Re-creating a deactivated tag brings it back.
        existing.is_active = True
        existing.description = tag.description
        existing.updated_by = actor.user_id
        db.commit()
        db.refresh(existing)
        return existing

    db_tag = Tag(**tag.model_dump(), tenant_id=tenant_id, created_by=actor.user_id, updated_by=actor.user_id)
    db.add(db_tag)
    db.commit()
    db.refresh(db_tag)
    return db_tag


def delete_tag(db: Session, tag_id: int, tenant_id: int, actor: ActorContext) -> bool:
    db_tag = get_tag(db, tag_id, tenant_id)
    if not db_tag or not db_tag.is_active:
        return False

    # Soft delete by setting is_active to False
    db_tag.is_active = False
    db_tag.updated_by = actor.user_id
    db.commit()
    return True
