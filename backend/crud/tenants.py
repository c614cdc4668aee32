import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from crud.audit_log import create_audit_log
from crud.currencies import get_currency
from crud.rbac import ADMIN_ROLE, assign_role
from exceptions import ReferentialError, ValidationError
from models.account import Account, AccountType
from models.tenant import Tenant
from schemas.audit_log import AuditLogCreate
from schemas.tenants import TenantCreate, TenantUpdate
from utils import reject_null_columns, sqlalchemy_to_dict
from utils.actor import ActorContext

logger = logging.getLogger(__name__)

DEFAULT_ACCOUNTS = [
    {"account_code": "1000", "name": "Cash", "account_type": AccountType.ASSET},
    {"account_code": "1100", "name": "Accounts Receivable", "account_type": AccountType.ASSET},
    {"account_code": "2000", "name": "Accounts Payable", "account_type": AccountType.LIABILITY},
    {"account_code": "3000", "name": "Owner's Equity", "account_type": AccountType.EQUITY},
    {"account_code": "3900", "name": "Opening Balance Equity", "account_type": AccountType.EQUITY},
    {"account_code": "4000", "name": "Sales Revenue", "account_type": AccountType.REVENUE},
    {"account_code": "6000", "name": "Operating Expenses", "account_type": AccountType.EXPENSE},
]


def get_tenant(db: Session, tenant_id: int) -> Optional[Tenant]:
    return db.query(Tenant).filter(Tenant.id == tenant_id).first()


def get_tenants(db: Session, skip: int = 0, limit: int = 100) -> List[Tenant]:
    return db.query(Tenant).order_by(Tenant.id).offset(skip).limit(limit).all()


def initialize_default_accounts(db: Session, tenant: Tenant, actor: ActorContext):
    """Add the default chart of accounts for a new tenant in its base currency."""
    for account_data in DEFAULT_ACCOUNTS:
        existing = db.query(Account).filter(
            Account.tenant_id == tenant.id,
            Account.account_code == account_data["account_code"]
        ).first()
        if not existing:
            db.add(Account(
                **account_data,
                tenant_id=tenant.id,
                currency_code=tenant.base_currency_code,
                created_by=actor.user_id,
                updated_by=actor.user_id,
            ))


def create_tenant(db: Session, tenant: TenantCreate, actor: ActorContext) -> Tenant:
    base_currency_code = tenant.base_currency_code.upper()
    currency = get_currency(db, base_currency_code)
    if currency is None or not currency.is_active:
        raise ReferentialError(f"Currency {base_currency_code} not found or inactive")
    if db.query(Tenant).filter(Tenant.name == tenant.name).first():
        raise ValidationError(f"Tenant '{tenant.name}' already exists")

    db_tenant = Tenant(
        **tenant.model_dump(exclude={"seed_default_accounts", "base_currency_code"}),
        base_currency_code=base_currency_code,
        created_by=actor.user_id,
        updated_by=actor.user_id,
    )
    db.add(db_tenant)
    db.flush()

    if tenant.seed_default_accounts:
        initialize_default_accounts(db, db_tenant, actor)
    if actor.user_id is not None:
        assign_role(db, actor.user_id, db_tenant.id, ADMIN_ROLE, assigned_by=actor.user_id, commit=False)

    db.commit()
    db.refresh(db_tenant)
    logger.info(f"Tenant '{db_tenant.name}' ({db_tenant.id}) created by user {actor.user_id}")
    return db_tenant


def update_tenant(db: Session, tenant_id: int, tenant: TenantUpdate, actor: ActorContext) -> Optional[Tenant]:
    db_tenant = get_tenant(db, tenant_id)
    if not db_tenant:
        return None

    update_data = tenant.model_dump(exclude_unset=True)
    reject_null_columns(Tenant, update_data)
    if "name" in update_data and update_data["name"] != db_tenant.name:
        if db.query(Tenant).filter(Tenant.name == update_data["name"]).first():
            raise ValidationError(f"Tenant '{update_data['name']}' already exists")

    old_values = sqlalchemy_to_dict(db_tenant)
    for key, value in update_data.items():
        setattr(db_tenant, key, value)
    db_tenant.updated_by = actor.user_id
    db.flush()
    create_audit_log(db=db, log_entry=AuditLogCreate(
        tenant_id=tenant_id,
        table_name='tenants',
        record_id=tenant_id,
        changed_by=actor.user_id,
        action='UPDATE',
        old_values=old_values,
        new_values=sqlalchemy_to_dict(db_tenant),
    ))
    db.commit()
    db.refresh(db_tenant)
    return db_tenant
