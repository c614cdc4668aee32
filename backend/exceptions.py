"""
Ledger error taxonomy.

Every error raised by the ledger engine derives from LedgerError. None of them
are retried; the caller corrects the input and resubmits.
"""
from datetime import date
from decimal import Decimal
from typing import Optional


class LedgerError(Exception):
    """Base class for ledger failures surfaced to callers."""

    kind = "ledger_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class ValidationError(LedgerError):
    """Malformed input, e.g. fewer than two legs or a duplicate leg."""

    kind = "validation_error"


class ImbalancedEntryError(LedgerError):
    kind = "imbalanced_entry"

    def __init__(self, total_debit: Decimal, total_credit: Decimal, currency_code: str):
        self.total_debit = total_debit
        self.total_credit = total_credit
        self.currency_code = currency_code
        super().__init__(
            f"Debits ({total_debit} {currency_code}) do not equal credits "
            f"({total_credit} {currency_code})"
        )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update(
            total_debit=str(self.total_debit),
            total_credit=str(self.total_credit),
            currency_code=self.currency_code,
        )
        return data


class MissingExchangeRateError(LedgerError):
    """No supplied or stored rate converts base into target on rate_date."""

    kind = "missing_exchange_rate"

    def __init__(self, base_currency_code: str, target_currency_code: str, rate_date: date):
        self.base_currency_code = base_currency_code
        self.target_currency_code = target_currency_code
        self.rate_date = rate_date
        super().__init__(
            f"No exchange rate from {base_currency_code} to {target_currency_code} "
            f"on {rate_date.isoformat()}; supply exchange_rate or record a rate for that date"
        )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update(
            base_currency_code=self.base_currency_code,
            target_currency_code=self.target_currency_code,
            rate_date=self.rate_date.isoformat(),
        )
        return data


class ReferentialError(LedgerError):
    """Unknown id, or an account/transaction belonging to another tenant."""

    kind = "referential_error"


class StorageError(LedgerError):
    kind = "storage_error"

    def __init__(self, message: str, original: Optional[Exception] = None):
        super().__init__(message)
        self.original = original
