from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from database import get_db
from models.users import User
from schemas.currencies import Currency, CurrencyCreate
from utils.actor import ActorContext
from utils.auth_utils import get_current_user
from crud import currencies as crud_currencies

router = APIRouter(prefix="/currencies", tags=["Currencies"])


@router.post("/", response_model=Currency, status_code=status.HTTP_201_CREATED)
def create_currency(
    currency: CurrencyCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return crud_currencies.create_currency(db, currency, ActorContext(user_id=user.id))


@router.get("/", response_model=List[Currency])
def read_currencies(active_only: bool = False, db: Session = Depends(get_db)):
    return crud_currencies.get_currencies(db, active_only)
