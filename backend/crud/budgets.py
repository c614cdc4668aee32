import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from crud.audit_log import create_audit_log
from exceptions import ReferentialError, ValidationError
from models.audit_mixin import now_local
from models.budget import Budget, BudgetLineItem
from models.category import Category
from schemas.audit_log import AuditLogCreate
from schemas.budgets import BudgetCreate, BudgetLineItemCreate, BudgetUpdate
from utils import reject_null_columns, sqlalchemy_to_dict
from utils.actor import ActorContext

logger = logging.getLogger(__name__)


def get_budget(db: Session, budget_id: int, tenant_id: int) -> Optional[Budget]:
    return db.query(Budget).filter(Budget.id == budget_id, Budget.tenant_id == tenant_id).first()


def get_budgets(db: Session, tenant_id: int, skip: int = 0, limit: int = 100) -> List[Budget]:
    return db.query(Budget).filter(Budget.tenant_id == tenant_id).order_by(Budget.start_date.desc()).offset(skip).limit(limit).all()


def _check_name(db: Session, tenant_id: int, name: str, exclude_id: Optional[int] = None):
    # Soft-deleted budgets keep their row, so the unique constraint still sees them.
    query = db.query(Budget).filter(Budget.tenant_id == tenant_id, Budget.name == name).execution_options(include_deleted=True)
    if exclude_id is not None:
        query = query.filter(Budget.id != exclude_id)
    if query.first():
        raise ValidationError(f"Budget '{name}' already exists")


def _check_line_items(db: Session, tenant_id: int, line_items: List[BudgetLineItemCreate]):
    seen = set()
    for item in line_items:
        if item.category_id in seen:
            raise ValidationError(f"Category {item.category_id} appears more than once in the budget")
        seen.add(item.category_id)
        if item.category_id is not None:
            found = db.query(Category.id).filter(Category.id == item.category_id, Category.tenant_id == tenant_id).first()
            if found is None:
                raise ReferentialError(f"Category {item.category_id} not found for tenant {tenant_id}")


def create_budget(db: Session, budget: BudgetCreate, tenant_id: int, actor: ActorContext) -> Budget:
    _check_name(db, tenant_id, budget.name)
    _check_line_items(db, tenant_id, budget.line_items)

    db_budget = Budget(**budget.model_dump(exclude={"line_items"}), tenant_id=tenant_id,
                       created_by=actor.user_id, updated_by=actor.user_id)
    db_budget.line_items = [
        BudgetLineItem(**item.model_dump(), created_by=actor.user_id, updated_by=actor.user_id)
        for item in budget.line_items
    ]
    db.add(db_budget)
    db.commit()
    db.refresh(db_budget)
    logger.info(f"Budget '{db_budget.name}' created for tenant {tenant_id} by user {actor.user_id}")
    return db_budget


def update_budget(db: Session, budget_id: int, budget: BudgetUpdate, tenant_id: int,
                  actor: ActorContext) -> Optional[Budget]:
    db_budget = get_budget(db, budget_id, tenant_id)
    if not db_budget:
        return None

    update_data = budget.model_dump(exclude_unset=True)
    reject_null_columns(Budget, update_data)
    if update_data.get("name") and update_data["name"] != db_budget.name:
        _check_name(db, tenant_id, update_data["name"], exclude_id=budget_id)
    start_date = update_data.get("start_date", db_budget.start_date)
    end_date = update_data.get("end_date", db_budget.end_date)
    if end_date < start_date:
        raise ValidationError("end_date must be on or after start_date")

    for key, value in update_data.items():
        setattr(db_budget, key, value)
    db_budget.updated_by = actor.user_id
    db.commit()
    db.refresh(db_budget)
    return db_budget


def add_line_item(db: Session, budget_id: int, item: BudgetLineItemCreate, tenant_id: int,
                  actor: ActorContext) -> BudgetLineItem:
    db_budget = get_budget(db, budget_id, tenant_id)
    if not db_budget:
        raise ReferentialError(f"Budget {budget_id} not found for tenant {tenant_id}")
    _check_line_items(db, tenant_id, [item])
    if any(existing.category_id == item.category_id for existing in db_budget.line_items):
        raise ValidationError(f"Budget {budget_id} already has a line item for category {item.category_id}")

    db_item = BudgetLineItem(**item.model_dump(), budget_id=budget_id,
                             created_by=actor.user_id, updated_by=actor.user_id)
    db.add(db_item)
    db.commit()
    db.refresh(db_item)
    return db_item


def delete_line_item(db: Session, budget_id: int, item_id: int, tenant_id: int) -> bool:
    db_budget = get_budget(db, budget_id, tenant_id)
    if not db_budget:
        return False
    db_item = db.query(BudgetLineItem).filter(BudgetLineItem.id == item_id, BudgetLineItem.budget_id == budget_id).first()
    if not db_item:
        return False
    db.delete(db_item)
    db.commit()
    return True


def delete_budget(db: Session, budget_id: int, tenant_id: int, actor: ActorContext) -> bool:
    db_budget = get_budget(db, budget_id, tenant_id)
    if not db_budget:
        return False

    old_values = sqlalchemy_to_dict(db_budget)
    db_budget.deleted_at = now_local()
    db_budget.deleted_by = actor.user_id
    db_budget.is_active = False
    db.flush()
    create_audit_log(db=db, log_entry=AuditLogCreate(
        tenant_id=tenant_id,
        table_name='budgets',
        record_id=budget_id,
        changed_by=actor.user_id,
        action='DELETE',
        old_values=old_values,
        new_values=sqlalchemy_to_dict(db_budget),
    ))
    db.commit()
    return True
