"""Pricing request/response schemas."""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_validator


def _calendar_day(value):
    """Dates may arrive with a time of day; only the calendar day matters."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00")).date()
        except ValueError:
            return value
    return value


def _strip_text(value):
    return value.strip() if isinstance(value, str) else value


class JobInput(BaseModel):
    job_id: str = Field(..., description="Opaque key used to write the result back (e.g. sheet row).")
    location: str
    technician: str
    service_date: date
    notes: Optional[str] = Field(default=None, description="Notes cell; the premium keyword selects premium pricing.")

    @field_validator("service_date", mode="before")
    @classmethod
    def _drop_time_of_day(cls, value):
        return _calendar_day(value)

    @field_validator("job_id", mode="before")
    @classmethod
    def _job_id_as_text(cls, value):
        # Sheet row numbers arrive as integers.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return _strip_text(value)

    @field_validator("technician", "location", mode="before")
    @classmethod
    def _strip(cls, value):
        return _strip_text(value)


class DayPricingRequest(BaseModel):
    technician: str
    service_date: date
    jobs: List[JobInput] = Field(..., description="Full job feed; only the target technician/date is priced.")
    base_location: Optional[str] = None
    persist: bool = False

    @field_validator("technician", mode="before")
    @classmethod
    def _strip(cls, value):
        return _strip_text(value)

    @field_validator("service_date", mode="before")
    @classmethod
    def _drop_time_of_day(cls, value):
        return _calendar_day(value)


class FeedPricingRequest(BaseModel):
    jobs: List[JobInput]
    base_location: Optional[str] = None
    persist: bool = False


class JobPricingModel(BaseModel):
    job_id: str
    location: str
    technician: str
    service_date: date
    tier: str
    role: str
    value: Union[float, str]
    priced: bool
    distance_from_base_m: Optional[float] = None
    distance_to_anchor_m: Optional[float] = None
    detour_ratio: Optional[float] = None
    note: Optional[str] = None


class DayPricingResponse(BaseModel):
    technician: str
    service_date: date
    base_location: str
    anchor_job_id: Optional[str]
    jobs: List[JobPricingModel]
    metadata: dict = Field(default_factory=dict)


class FeedPricingResponse(BaseModel):
    plans: List[DayPricingResponse]
    metadata: dict = Field(default_factory=dict)


class RateTableResponse(BaseModel):
    reference_distances_km: dict
    thresholds_km: List[float]
    normal: dict
    premium: dict
