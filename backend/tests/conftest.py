import os
import tempfile

# Point the app at an in-memory database before anything imports `database`.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "forge-ledger-test-logs"))
os.environ["ENABLE_SCHEDULER"] = "false"

import pytest
from fastapi.testclient import TestClient

import models  # noqa: F401
from database import Base, SessionLocal, engine
from crud import rbac as crud_rbac
from models.account import Account, AccountType
from models.currency import Currency
from utils.actor import ActorContext
from utils.auth_utils import create_access_token
from tests.factories import make_tenant, make_user


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    crud_rbac.seed_defaults(session)
    for code, name, symbol in (("USD", "US Dollar", "$"), ("EUR", "Euro", "€"), ("GBP", "Pound Sterling", "£")):
        session.add(Currency(code=code, name=name, symbol=symbol))
    session.commit()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def user(db):
    return make_user(db)


@pytest.fixture
def tenant(db, user):
    return make_tenant(db, user)


@pytest.fixture
def actor(user, tenant):
    return ActorContext(user_id=user.id, tenant_id=tenant.id)


@pytest.fixture
def accounts(db, tenant):
    """Seeded default accounts of the tenant, keyed by name."""
    return {a.name: a for a in db.query(Account).filter(Account.tenant_id == tenant.id).all()}


@pytest.fixture
def eur_account(db, tenant, user):
    account = Account(tenant_id=tenant.id, account_code="1010", name="Cash EUR",
                      account_type=AccountType.ASSET, currency_code="EUR", created_by=user.id)
    db.add(account)
    db.commit()
    db.refresh(account)
    return account


@pytest.fixture
def client(db):
    from main import app
    return TestClient(app)


@pytest.fixture
def auth_headers(user, tenant):
    token = create_access_token(user.id, user.email)
    return {"Authorization": f"Bearer {token}", "X-Tenant-ID": str(tenant.id)}
