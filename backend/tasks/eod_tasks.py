import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from database import SessionLocal
from crud import recurring_transactions as crud_recurring
from models.audit_mixin import now_local

logger = logging.getLogger(__name__)


def generate_recurring_transactions(db: Session, as_of: date) -> int:
    """Post every recurring occurrence due on or before as_of, across all tenants."""
    logger.info(f"Generating recurring transactions due on or before {as_of}.")
    return crud_recurring.generate_due_transactions(db, as_of)


def run_eod_tasks(as_of: Optional[date] = None):
    """
    End-of-day job run by the scheduler.

    Opens its own session; a failure is logged and does not stop the scheduler.
    """
    as_of = as_of or now_local().date()
    logger.info(f"Running EOD tasks for {as_of}")
    db: Session = SessionLocal()
    try:
        generated = generate_recurring_transactions(db, as_of)
        logger.info(f"EOD tasks finished for {as_of}: {generated} recurring transactions posted")
    except Exception as e:
        db.rollback()
        logger.error(f"EOD tasks failed for {as_of}: {e}", exc_info=True)
    finally:
        db.close()
