"""Pricing orchestration service."""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Sequence

from ...config import settings
from ...data.jobs_repository import load_jobs
from ...models.domain import Job, PriceQuote, PricingError, ServiceTier
from ...persistence.filesystem import FileStorage
from ...schemas.pricing import (
    DayPricingRequest,
    DayPricingResponse,
    FeedPricingRequest,
    FeedPricingResponse,
    JobInput,
    JobPricingModel,
)
from ..distance.provider import DistanceProvider
from ..outputs.pricing_formatter import job_pricing_to_dict, pricing_results_to_csv, pricing_results_to_json
from ..planning.day_plan import DayPlan, build_day_plan, group_day_plans
from .classifier import RouteClassifier
from .models import DayPlanPricing, JobPricing, JobRole
from .rate_table import RateTable

logger = logging.getLogger(__name__)


def jobs_from_inputs(inputs: Sequence[JobInput]) -> list[Job]:
    return [
        Job(
            job_id=item.job_id,
            location=item.location,
            tier=ServiceTier.from_notes(item.notes, settings.premium_keyword),
            technician=item.technician,
            service_date=item.service_date,
            notes=item.notes or "",
        )
        for item in inputs
    ]


def _configuration_failure(plan: DayPlan, base_location: str, message: str) -> DayPlanPricing:
    """Every job in the plan carries the error tag so the operator sees why nothing was priced."""
    quote = PriceQuote.failed(PricingError.CONFIGURATION, message)
    return DayPlanPricing(
        technician=plan.technician,
        service_date=plan.service_date,
        base_location=base_location,
        anchor_job_id=None,
        jobs=[JobPricing(job=job, role=JobRole.UNCLASSIFIED, quote=quote, note=message) for job in plan.jobs],
    )


class PricingService:
    """Builds day plans and runs the classifier with settings-backed collaborators."""

    def __init__(
        self,
        rate_table: RateTable | None = None,
        distance_provider: DistanceProvider | None = None,
        base_location: str | None = None,
    ) -> None:
        self.rate_table = rate_table or RateTable.from_settings()
        self._distance_provider = distance_provider
        self.base_location = base_location or settings.base_location

    def _provider(self) -> DistanceProvider:
        if self._distance_provider is None:
            self._distance_provider = DistanceProvider.from_settings()
        return self._distance_provider

    def price_plan(self, plan: DayPlan) -> DayPlanPricing:
        if len(plan) >= 2:
            try:
                provider = self._provider()
            except ValueError as exc:
                logger.error(f"Distance provider unavailable: {exc}")
                return _configuration_failure(plan, self.base_location, str(exc))
        else:
            provider = self._distance_provider
        classifier = RouteClassifier(
            distance_provider=provider,
            rate_table=self.rate_table,
            base_location=self.base_location,
        )
        return classifier.classify(plan)

    def price_day(self, jobs: Sequence[Job], technician: str, service_date: date) -> DayPlanPricing:
        plan = build_day_plan(jobs, technician, service_date)
        return self.price_plan(plan)

    def price_feed(self, jobs: Sequence[Job]) -> list[DayPlanPricing]:
        plans = group_day_plans(jobs)
        logger.info(f"Pricing {len(plans)} day plan(s) from {len(jobs)} job(s).")
        return [self.price_plan(plan) for plan in plans]


def persist_results(results: Sequence[DayPlanPricing], prefix: str = "pricing") -> str:
    storage = FileStorage()
    run_dir = storage.make_run_directory(prefix=prefix)
    storage.write_json(run_dir / "summary.json", pricing_results_to_json(results))
    storage.write_csv(run_dir / "pricing.csv", pricing_results_to_csv(results))
    logger.info(f"Pricing outputs written to {run_dir}")
    return str(run_dir)


def _to_response(result: DayPlanPricing) -> DayPricingResponse:
    return DayPricingResponse(
        technician=result.technician,
        service_date=result.service_date,
        base_location=result.base_location,
        anchor_job_id=result.anchor_job_id,
        jobs=[JobPricingModel(**job_pricing_to_dict(job)) for job in result.jobs],
        metadata={
            "job_count": len(result.jobs),
            "on_route_count": sum(1 for job in result.jobs if job.role is JobRole.SATELLITE_ON_ROUTE),
        },
    )


def price_day_request(payload: DayPricingRequest) -> DayPricingResponse:
    service = PricingService(base_location=payload.base_location)
    result = service.price_day(jobs_from_inputs(payload.jobs), payload.technician, payload.service_date)
    response = _to_response(result)
    if payload.persist:
        response.metadata["output_dir"] = persist_results([result], prefix=f"pricing_{payload.service_date}")
    return response


def price_feed_request(payload: FeedPricingRequest) -> FeedPricingResponse:
    service = PricingService(base_location=payload.base_location)
    results = service.price_feed(jobs_from_inputs(payload.jobs))
    response = FeedPricingResponse(
        plans=[_to_response(result) for result in results],
        metadata={"plan_count": len(results), "job_count": sum(len(result.jobs) for result in results)},
    )
    if payload.persist:
        response.metadata["output_dir"] = persist_results(results)
    return response


def price_jobs_file(source: Path | None = None, persist: bool = True) -> FeedPricingResponse:
    """Price the whole job sheet export configured in settings."""
    jobs = load_jobs(source)
    results = PricingService().price_feed(jobs)
    response = FeedPricingResponse(
        plans=[_to_response(result) for result in results],
        metadata={
            "source": str(source or settings.jobs_file),
            "plan_count": len(results),
            "job_count": len(jobs),
        },
    )
    if persist:
        response.metadata["output_dir"] = persist_results(results, prefix="pricing_file")
    return response
