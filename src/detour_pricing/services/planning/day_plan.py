"""Group a technician's jobs for one calendar day."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Sequence

from ...models.domain import Job

logger = logging.getLogger(__name__)


class EmptyPlanError(ValueError):
    """No jobs matched the requested technician and date."""


@dataclass(frozen=True, slots=True)
class DayPlan:
    technician: str
    service_date: date
    jobs: tuple[Job, ...]

    def __post_init__(self) -> None:
        if not self.jobs:
            raise EmptyPlanError(f"No jobs found for technician '{self.technician}' on {self.service_date}.")
        for job in self.jobs:
            if job.technician != self.technician or as_calendar_day(job.service_date) != self.service_date:
                raise ValueError(
                    f"Job '{job.job_id}' belongs to ({job.technician}, {job.service_date}), "
                    f"not ({self.technician}, {self.service_date})."
                )

    def __len__(self) -> int:
        return len(self.jobs)


def as_calendar_day(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def build_day_plan(jobs: Iterable[Job], technician: str, service_date: date | datetime) -> DayPlan:
    """Jobs for exactly this technician on the same calendar day, in input order."""
    target_day = as_calendar_day(service_date)
    selected = tuple(
        job for job in jobs if job.technician == technician and as_calendar_day(job.service_date) == target_day
    )
    logger.info(f"{len(selected)} job(s) found for '{technician}' on {target_day}.")
    return DayPlan(technician=technician, service_date=target_day, jobs=selected)


def group_day_plans(jobs: Sequence[Job]) -> list[DayPlan]:
    """Partition a whole feed into day plans, ordered by first appearance."""
    groups: dict[tuple[str, date], list[Job]] = {}
    for job in jobs:
        if not job.technician or job.service_date is None:
            logger.debug(f"Skipping job '{job.job_id}' without technician or date.")
            continue
        groups.setdefault((job.technician, as_calendar_day(job.service_date)), []).append(job)
    return [
        DayPlan(technician=technician, service_date=day, jobs=tuple(members))
        for (technician, day), members in groups.items()
    ]
