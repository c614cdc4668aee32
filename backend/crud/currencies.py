from typing import List, Optional

from sqlalchemy.orm import Session

from exceptions import ValidationError
from models.currency import Currency
from schemas.currencies import CurrencyCreate
from utils.actor import ActorContext


def get_currency(db: Session, code: str) -> Optional[Currency]:
    return db.query(Currency).filter(Currency.code == code.upper()).first()


def get_currencies(db: Session, active_only: bool = False) -> List[Currency]:
    query = db.query(Currency)
    if active_only:
        query = query.filter(Currency.is_active == True)
    return query.order_by(Currency.code).all()


def create_currency(db: Session, currency: CurrencyCreate, actor: ActorContext) -> Currency:
    if get_currency(db, currency.code):
        raise ValidationError(f"Currency {currency.code} already exists")
    db_currency = Currency(**currency.model_dump(), created_by=actor.user_id, updated_by=actor.user_id)
    db.add(db_currency)
    db.commit()
    db.refresh(db_currency)
    return db_currency
