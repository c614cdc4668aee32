from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from database import get_db
from schemas.exchange_rates import ExchangeRate, ExchangeRateCreate, ResolvedRate
from utils.actor import ActorContext
from utils.auth_utils import require_permission
from crud import exchange_rates as crud_exchange_rates

router = APIRouter(prefix="/exchange-rates", tags=["Exchange Rates"])


@router.post("/", response_model=ExchangeRate, status_code=status.HTTP_201_CREATED)
def create_exchange_rate(
    rate: ExchangeRateCreate,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("account.manage")),
):
    return crud_exchange_rates.create_exchange_rate(db, rate, actor.tenant_id, actor)


@router.get("/", response_model=List[ExchangeRate])
def read_exchange_rates(
    base_currency_code: Optional[str] = None,
    target_currency_code: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("account.view")),
):
    return crud_exchange_rates.get_exchange_rates(
        db, actor.tenant_id, base_currency_code, target_currency_code, start_date, end_date, skip, limit
    )


@router.get("/resolve", response_model=ResolvedRate)
def resolve_exchange_rate(
    base_currency_code: str = Query(..., min_length=3, max_length=3),
    target_currency_code: str = Query(..., min_length=3, max_length=3),
    rate_date: date = Query(...),
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("account.view")),
):
    """The rate the ledger would apply for this pair and date."""
    base, target = base_currency_code.upper(), target_currency_code.upper()
    rate = crud_exchange_rates.resolve_rate(db, actor.tenant_id, base, target, rate_date)
    return ResolvedRate(base_currency_code=base, target_currency_code=target, rate_date=rate_date, rate=rate)


@router.delete("/{rate_id}")
def delete_exchange_rate(
    rate_id: int,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(require_permission("account.manage")),
):
    if not crud_exchange_rates.delete_exchange_rate(db, rate_id, actor.tenant_id):
        raise HTTPException(status_code=404, detail="Exchange rate not found")
    return {"message": "Exchange rate deleted successfully"}
