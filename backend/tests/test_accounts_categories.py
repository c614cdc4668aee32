from decimal import Decimal

import pytest

from crud import accounts as crud_accounts
from crud import categories as crud_categories
from crud import tags as crud_tags
from crud.transactions import record_transaction
from exceptions import ReferentialError, ValidationError
from models.account import AccountType
from models.category import CategoryType
from schemas.accounts import AccountCreate, AccountUpdate
from schemas.categories import CategoryCreate, CategoryUpdate
from schemas.tags import TagCreate
from tests.factories import make_tenant, make_user, sale
from utils.actor import ActorContext


def test_create_account_checks_currency_and_uniqueness(db, tenant, actor):
    account = crud_accounts.create_account(db, AccountCreate(
        name="Petty Cash", account_code="1001", account_type=AccountType.ASSET, currency_code="usd"
    ), tenant.id, actor)
    assert account.currency_code == "USD"

    with pytest.raises(ValidationError):
        crud_accounts.create_account(db, AccountCreate(
            name="Petty Cash", account_type=AccountType.ASSET, currency_code="USD"
        ), tenant.id, actor)
    with pytest.raises(ReferentialError):
        crud_accounts.create_account(db, AccountCreate(
            name="Yen Float", account_type=AccountType.ASSET, currency_code="JPY"
        ), tenant.id, actor)


def test_unused_account_can_change_type(db, tenant, actor, accounts):
    updated = crud_accounts.update_account(db, accounts["Owner's Equity"].id,
                                           AccountUpdate(account_type=AccountType.LIABILITY), tenant.id, actor)
    assert updated.account_type == AccountType.LIABILITY


def test_account_with_entries_keeps_its_meaning(db, tenant, actor, accounts):
    cash = accounts["Cash"]
    record_transaction(db, tenant.id, sale(cash.id, accounts["Sales Revenue"].id), actor)

    for change in (AccountUpdate(account_type=AccountType.EXPENSE),
                   AccountUpdate(currency_code="EUR"),
                   AccountUpdate(is_active=False)):
        with pytest.raises(ValidationError):
            crud_accounts.update_account(db, cash.id, change, tenant.id, actor)

    renamed = crud_accounts.update_account(db, cash.id, AccountUpdate(name="Main Cash"), tenant.id, actor)
    assert renamed.name == "Main Cash"


def test_deactivated_account_leaves_default_listing(db, tenant, actor, accounts):
    assert crud_accounts.deactivate_account(db, accounts["Accounts Payable"].id, tenant.id, actor)
    names = {a.name for a in crud_accounts.get_accounts(db, tenant.id)}
    assert "Accounts Payable" not in names
    assert len(crud_accounts.get_accounts(db, tenant.id, include_inactive=True)) == 7


def test_account_lookup_is_tenant_scoped(db, tenant, accounts):
    other = make_tenant(db, make_user(db, email="other@example.com"), name="Other Co")
    assert crud_accounts.get_account(db, accounts["Cash"].id, other.id) is None


def _category(db, tenant, actor, name, parent_id=None):
    return crud_categories.create_category(db, CategoryCreate(
        name=name, type=CategoryType.EXPENSE, parent_category_id=parent_id
    ), tenant.id, actor)


def test_category_hierarchy_rejects_cycles(db, tenant, actor):
    travel = _category(db, tenant, actor, "Travel")
    flights = _category(db, tenant, actor, "Flights", travel.id)
    upgrades = _category(db, tenant, actor, "Upgrades", flights.id)

    with pytest.raises(ValidationError):
        crud_categories.update_category(db, travel.id, CategoryUpdate(parent_category_id=upgrades.id), tenant.id, actor)
    with pytest.raises(ValidationError):
        crud_categories.update_category(db, travel.id, CategoryUpdate(parent_category_id=travel.id), tenant.id, actor)

    moved = crud_categories.update_category(db, upgrades.id, CategoryUpdate(parent_category_id=travel.id), tenant.id, actor)
    assert moved.parent_category_id == travel.id


def test_category_parent_must_belong_to_tenant(db, tenant, actor):
    owner = make_user(db, email="other@example.com")
    other = make_tenant(db, owner, name="Other Co")
    foreign = _category(db, other, ActorContext(user_id=owner.id, tenant_id=other.id), "Travel")

    with pytest.raises(ReferentialError):
        _category(db, tenant, actor, "Flights", foreign.id)


def test_duplicate_category_name(db, tenant, actor):
    _category(db, tenant, actor, "Travel")
    with pytest.raises(ValidationError):
        _category(db, tenant, actor, "Travel")


def test_deleted_tag_is_reactivated_on_create(db, tenant, actor):
    tag = crud_tags.create_tag(db, TagCreate(name="q1-close"), tenant.id, actor)
    assert crud_tags.delete_tag(db, tag.id, tenant.id, actor)
    assert crud_tags.get_tags(db, tenant.id) == []

    again = crud_tags.create_tag(db, TagCreate(name="q1-close"), tenant.id, actor)
    assert again.id == tag.id
    assert again.is_active


def test_updates_reject_null_for_required_fields(db, tenant, actor, accounts):
    cash = accounts["Cash"]
    category = crud_categories.create_category(
        db, CategoryCreate(name="Utilities", type=CategoryType.EXPENSE), tenant.id, actor
    )

    with pytest.raises(ValidationError):
        crud_accounts.update_account(db, cash.id, AccountUpdate(name=None), tenant.id, actor)
    with pytest.raises(ValidationError):
        crud_categories.update_category(db, category.id, CategoryUpdate(type=None), tenant.id, actor)

    db.expire_all()
    assert crud_accounts.get_account(db, cash.id, tenant.id).name == "Cash"
    updated = crud_categories.update_category(db, category.id, CategoryUpdate(description=None), tenant.id, actor)
    assert updated.type == CategoryType.EXPENSE
