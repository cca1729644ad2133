"""Anchor selection and detour classification for a technician's day."""

from __future__ import annotations

import logging

from ...config import settings
from ...models.domain import Job, PriceQuote
from ..distance.provider import DistanceProvider, DistanceResult
from ..planning.day_plan import DayPlan, EmptyPlanError
from .models import DayPlanPricing, DetourPolicy, JobPricing, JobRole
from .rate_table import RateTable

logger = logging.getLogger(__name__)


def select_anchor(distances: list[DistanceResult]) -> int:
    """Index of the furthest job; the first one wins a tie.

    Unavailable distances rank as very far so that a job we cannot measure
    is never priced as a detour.
    """
    anchor_index = 0
    for index, result in enumerate(distances):
        if result.effective_meters > distances[anchor_index].effective_meters:
            anchor_index = index
    return anchor_index


def detour_ratio(base_to_job_m: float, job_to_anchor_m: float, base_to_anchor_m: float) -> float:
    """Relative lengthening of base -> job -> anchor compared with base -> anchor."""
    return ((base_to_job_m + job_to_anchor_m) / base_to_anchor_m) - 1


class RouteClassifier:
    def __init__(
        self,
        distance_provider: DistanceProvider | None,
        rate_table: RateTable,
        base_location: str | None = None,
        policy: DetourPolicy | None = None,
    ) -> None:
        self.distance_provider = distance_provider
        self.rate_table = rate_table
        self.base_location = base_location or settings.base_location
        self.policy = policy or DetourPolicy(
            lower_bound=settings.detour_lower_bound,
            upper_bound=settings.detour_upper_bound,
        )

    def classify(self, plan: DayPlan) -> DayPlanPricing:
        jobs = list(plan.jobs)
        if not jobs:
            raise EmptyPlanError(f"No jobs found for technician '{plan.technician}' on {plan.service_date}.")

        if len(jobs) == 1:
            job = jobs[0]
            logger.info(f"Single job in {job.location}; pricing at full value.")
            return DayPlanPricing(
                technician=plan.technician,
                service_date=plan.service_date,
                base_location=self.base_location,
                anchor_job_id=None,
                jobs=[JobPricing(job=job, role=JobRole.SOLE, quote=self._full_value(job))],
            )

        from_base = self.distance_provider.distances_from(self.base_location, [job.location for job in jobs])
        anchor_index = select_anchor(from_base)
        anchor = jobs[anchor_index]
        anchor_distance = from_base[anchor_index]
        logger.info(
            f"Furthest location is {anchor.location} ({anchor_distance.effective_meters}m) "
            f"for '{plan.technician}' on {plan.service_date}."
        )

        results: list[JobPricing] = []
        for index, job in enumerate(jobs):
            if index == anchor_index:
                quote = self._full_value(job)
                logger.info(f"- {job.location} (furthest destination) gets full value: {quote.display}")
                results.append(
                    JobPricing(
                        job=job,
                        role=JobRole.ANCHOR,
                        quote=quote,
                        distance_from_base_m=anchor_distance.meters,
                    )
                )
                continue
            results.append(self._classify_satellite(job, from_base[index], anchor, anchor_distance))

        return DayPlanPricing(
            technician=plan.technician,
            service_date=plan.service_date,
            base_location=self.base_location,
            anchor_job_id=anchor.job_id,
            jobs=results,
        )

    def _classify_satellite(
        self,
        job: Job,
        from_base: DistanceResult,
        anchor: Job,
        anchor_from_base: DistanceResult,
    ) -> JobPricing:
        if (
            not anchor_from_base.available
            or anchor_from_base.meters == 0
            or anchor_from_base.meters >= settings.unavailable_distance_meters
        ):
            logger.error(
                f"Distance to furthest location ({anchor.location}) is zero or unavailable. "
                f"Calculating full value for {job.location}."
            )
            return JobPricing(
                job=job,
                role=JobRole.SATELLITE_INDEPENDENT,
                quote=self._full_value(job),
                distance_from_base_m=from_base.meters,
                note="anchor distance unusable",
            )

        to_anchor = self.distance_provider.distance(job.location, anchor.location)
        if not from_base.available or not to_anchor.available:
            logger.warning(f"Route via {job.location} could not be measured; calculating full value.")
            return JobPricing(
                job=job,
                role=JobRole.SATELLITE_INDEPENDENT,
                quote=self._full_value(job),
                distance_from_base_m=from_base.meters,
                distance_to_anchor_m=to_anchor.meters,
                note="detour distance unavailable",
            )

        ratio = detour_ratio(from_base.meters, to_anchor.meters, anchor_from_base.meters)
        logger.info(f"Analyzing {job.location} - Detour: {ratio * 100:.2f}%")
        if self.policy.is_on_route(ratio):
            role = JobRole.SATELLITE_ON_ROUTE
            quote = PriceQuote.of(self.rate_table.minimum_value(job.tier))
        else:
            role = JobRole.SATELLITE_INDEPENDENT
            quote = self._full_value(job)
        return JobPricing(
            job=job,
            role=role,
            quote=quote,
            distance_from_base_m=from_base.meters,
            distance_to_anchor_m=to_anchor.meters,
            detour_ratio=ratio,
        )

    def _full_value(self, job: Job) -> PriceQuote:
        return self.rate_table.full_service_value(job.location, job.tier)
