"""Pricing domain models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import List, Optional

from ...models.domain import Job, PriceQuote


RATIO_PRECISION = 9


class JobRole(str, Enum):
    SOLE = "sole"
    ANCHOR = "anchor"
    SATELLITE_ON_ROUTE = "satellite_on_route"
    SATELLITE_INDEPENDENT = "satellite_independent"
    UNCLASSIFIED = "unclassified"


@dataclass(frozen=True, slots=True)
class DetourPolicy:
    """Detour ratios in [lower_bound, upper_bound) count as on the way."""

    lower_bound: float = -0.05
    upper_bound: float = 0.25

    def __post_init__(self) -> None:
        if self.lower_bound >= self.upper_bound:
            raise ValueError("Detour lower bound must be below the upper bound.")

    def is_on_route(self, ratio: float) -> bool:
        # Rounded so float noise cannot move a ratio across a boundary.
        ratio = round(ratio, RATIO_PRECISION)
        return self.lower_bound <= ratio < self.upper_bound


@dataclass(slots=True)
class JobPricing:
    job: Job
    role: JobRole
    quote: PriceQuote
    distance_from_base_m: Optional[float] = None
    distance_to_anchor_m: Optional[float] = None
    detour_ratio: Optional[float] = None
    note: Optional[str] = None


@dataclass(slots=True)
class DayPlanPricing:
    technician: str
    service_date: date
    base_location: str
    anchor_job_id: Optional[str]
    jobs: List[JobPricing]
