"""Domain models for service jobs and pricing outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional


class ServiceTier(str, Enum):
    NORMAL = "normal"
    PREMIUM = "premium"

    @classmethod
    def from_notes(cls, notes: object, premium_keyword: str) -> "ServiceTier":
        """Premium only when the whole notes cell is the keyword (case and padding ignored)."""
        if notes is None:
            return cls.NORMAL
        if str(notes).strip().upper() == premium_keyword.strip().upper():
            return cls.PREMIUM
        return cls.NORMAL


@dataclass(frozen=True, slots=True)
class Job:
    """A single service call as read from the job sheet."""

    job_id: str
    location: str
    tier: ServiceTier
    technician: str
    service_date: date
    notes: str = ""
    raw: dict = field(default_factory=dict, compare=False, hash=False)


class PricingError(str, Enum):
    LOCATION_NOT_IN_TABLE = "City not in fixed rate table"
    OUT_OF_RANGE = "Outside rate table"
    CONFIGURATION = "ERROR"


@dataclass(frozen=True, slots=True)
class PriceQuote:
    """Either a price or the reason no price could be given."""

    amount: Optional[float] = None
    error: Optional[PricingError] = None
    message: Optional[str] = None

    @classmethod
    def of(cls, amount: float) -> "PriceQuote":
        return cls(amount=float(amount))

    @classmethod
    def failed(cls, error: PricingError, message: str | None = None) -> "PriceQuote":
        return cls(error=error, message=message)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def display(self) -> float | str:
        """Value written back to the sheet: the number, or the textual tag."""
        if self.error is None:
            return self.amount
        if self.error is PricingError.CONFIGURATION:
            return f"ERROR: {self.message}" if self.message else "ERROR"
        return self.error.value
