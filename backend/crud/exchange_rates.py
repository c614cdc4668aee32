import logging
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy.orm import Session

from exceptions import MissingExchangeRateError, ValidationError
from models.exchange_rate import ExchangeRate
from schemas.exchange_rates import ExchangeRateCreate
from utils.actor import ActorContext

logger = logging.getLogger(__name__)

RATE_PLACES = Decimal("0.000001")


def find_rate(db: Session, tenant_id: int, base_currency_code: str, target_currency_code: str, rate_date: date) -> Optional[ExchangeRate]:
    """Stored rate for the exact date. A tenant's own rate beats a system-wide one."""
    return (
        db.query(ExchangeRate)
        .filter(
            ExchangeRate.base_currency_code == base_currency_code,
            ExchangeRate.target_currency_code == target_currency_code,
            ExchangeRate.rate_date == rate_date,
            (ExchangeRate.tenant_id == tenant_id) | (ExchangeRate.tenant_id.is_(None)),
        )
        .order_by(ExchangeRate.tenant_id.is_(None))
        .first()
    )


def resolve_rate(db: Session, tenant_id: int, base_currency_code: str, target_currency_code: str, rate_date: date) -> Decimal:
    """
    Rate converting one unit of base into target on rate_date.

    Falls back to the inverse of the opposite pair. Raises
    MissingExchangeRateError when neither is stored.
    """
    if base_currency_code == target_currency_code:
        return Decimal("1")

    direct = find_rate(db, tenant_id, base_currency_code, target_currency_code, rate_date)
    if direct is not None:
        return Decimal(direct.rate)

    inverse = find_rate(db, tenant_id, target_currency_code, base_currency_code, rate_date)
    if inverse is not None:
        return (Decimal("1") / Decimal(inverse.rate)).quantize(RATE_PLACES, rounding=ROUND_HALF_UP)

    logger.warning(
        f"No exchange rate {base_currency_code}->{target_currency_code} on {rate_date} for tenant {tenant_id}"
    )
    raise MissingExchangeRateError(base_currency_code, target_currency_code, rate_date)


def get_exchange_rate(db: Session, rate_id: int, tenant_id: int):
    return db.query(ExchangeRate).filter(
        ExchangeRate.id == rate_id,
        (ExchangeRate.tenant_id == tenant_id) | (ExchangeRate.tenant_id.is_(None)),
    ).first()


def get_exchange_rates(db: Session, tenant_id: int, base_currency_code: Optional[str] = None,
                       target_currency_code: Optional[str] = None, start_date: Optional[date] = None,
                       end_date: Optional[date] = None, skip: int = 0, limit: int = 100):
    query = db.query(ExchangeRate).filter(
        (ExchangeRate.tenant_id == tenant_id) | (ExchangeRate.tenant_id.is_(None))
    )
    if base_currency_code:
        query = query.filter(ExchangeRate.base_currency_code == base_currency_code.upper())
    if target_currency_code:
        query = query.filter(ExchangeRate.target_currency_code == target_currency_code.upper())
    if start_date:
        query = query.filter(ExchangeRate.rate_date >= start_date)
    if end_date:
        query = query.filter(ExchangeRate.rate_date <= end_date)
    return query.order_by(ExchangeRate.rate_date.desc(), ExchangeRate.id).offset(skip).limit(limit).all()


def create_exchange_rate(db: Session, rate: ExchangeRateCreate, tenant_id: int, actor: ActorContext):
    if rate.base_currency_code == rate.target_currency_code:
        raise ValidationError("Base and target currency must differ")

    owner_id = None if rate.system_wide else tenant_id
    existing = db.query(ExchangeRate).filter(
        ExchangeRate.base_currency_code == rate.base_currency_code,
        ExchangeRate.target_currency_code == rate.target_currency_code,
        ExchangeRate.rate_date == rate.rate_date,
        ExchangeRate.tenant_id.is_(None) if owner_id is None else ExchangeRate.tenant_id == owner_id,
    ).first()
    if existing:
        raise ValidationError(
            f"A {rate.base_currency_code}->{rate.target_currency_code} rate already exists for {rate.rate_date}"
        )

    db_rate = ExchangeRate(
        **rate.model_dump(exclude={"system_wide"}),
        tenant_id=owner_id,
        created_by=actor.user_id,
        updated_by=actor.user_id,
    )
    db.add(db_rate)
    db.commit()
    db.refresh(db_rate)
    return db_rate


def delete_exchange_rate(db: Session, rate_id: int, tenant_id: int) -> bool:
    # System-wide rates are not deletable through a tenant.
    db_rate = db.query(ExchangeRate).filter(ExchangeRate.id == rate_id, ExchangeRate.tenant_id == tenant_id).first()
    if not db_rate:
        return False
    db.delete(db_rate)
    db.commit()
    return True
