"""Serializers for pricing outputs."""

from __future__ import annotations

import csv
import io
from typing import Sequence

from ..pricing.models import DayPlanPricing, JobPricing


def job_pricing_to_dict(pricing: JobPricing) -> dict:
    job = pricing.job
    return {
        "job_id": job.job_id,
        "location": job.location,
        "technician": job.technician,
        "service_date": job.service_date.isoformat(),
        "tier": job.tier.value,
        "role": pricing.role.value,
        "value": pricing.quote.display,
        "priced": pricing.quote.ok,
        "distance_from_base_m": pricing.distance_from_base_m,
        "distance_to_anchor_m": pricing.distance_to_anchor_m,
        "detour_ratio": pricing.detour_ratio,
        "note": pricing.note,
    }


def pricing_results_to_json(results: Sequence[DayPlanPricing]) -> dict:
    return {
        "plans": [
            {
                "technician": result.technician,
                "service_date": result.service_date.isoformat(),
                "base_location": result.base_location,
                "anchor_job_id": result.anchor_job_id,
                "jobs": [job_pricing_to_dict(job) for job in result.jobs],
            }
            for result in results
        ],
    }


def pricing_results_to_csv(results: Sequence[DayPlanPricing]) -> str:
    buffer = io.StringIO()
    fieldnames = [
        "job_id",
        "technician",
        "service_date",
        "location",
        "tier",
        "role",
        "value",
        "distance_from_base_m",
        "distance_to_anchor_m",
        "detour_ratio",
    ]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames, extrasaction="ignore")
    writer.writeheader()
    for result in results:
        for job in result.jobs:
            writer.writerow(job_pricing_to_dict(job))
    return buffer.getvalue()
