from sqlalchemy import Column, DateTime, Integer
from datetime import datetime
import os
import pytz

APP_TIMEZONE = os.getenv("APP_TIMEZONE", "UTC")


def now_local() -> datetime:
    return datetime.now(pytz.timezone(APP_TIMEZONE))


class TimestampMixin:
    """Mixin that provides created/updated timestamps and the acting user.

    This is the minimal mixin used for most models. `created_by`/`updated_by`
    hold the id of the user that performed the write; they are filled from the
    ActorContext handed to every mutating call, never from global state.
    """
    # DateTime(timezone=True) ensures the timezone info is persisted in the database.
    created_at = Column(DateTime(timezone=True), default=now_local, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_local, onupdate=now_local, nullable=False)
    created_by = Column(Integer, nullable=True)
    updated_by = Column(Integer, nullable=True)


class SoftDeleteMixin:
    """Mixin for soft-delete columns (deleted_at, deleted_by).

    Apply this only to models where soft-delete is needed (budgets).
    Ledger rows are hard deleted together with their transaction.
    """
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    deleted_by = Column(Integer, nullable=True)


class AuditMixin(TimestampMixin, SoftDeleteMixin):
    """Timestamps + soft-delete."""
    pass
