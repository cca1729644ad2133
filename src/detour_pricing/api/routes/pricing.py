"""Pricing endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query, status

from ...schemas.pricing import (
    DayPricingRequest,
    DayPricingResponse,
    FeedPricingRequest,
    FeedPricingResponse,
    RateTableResponse,
)
from ...services.pricing.rate_table import RateTable
from ...services.pricing.service import price_day_request, price_feed_request, price_jobs_file

router = APIRouter(prefix="/pricing", tags=["pricing"])

logger = logging.getLogger(__name__)


@router.post("/day", response_model=DayPricingResponse, status_code=status.HTTP_200_OK)
def price_day(payload: DayPricingRequest) -> DayPricingResponse:
    """Price every job of one technician on one calendar day."""
    try:
        return price_day_request(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(f"Error pricing day for '{payload.technician}': {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to price jobs: {str(exc)}",
        ) from exc


@router.post("/feed", response_model=FeedPricingResponse, status_code=status.HTTP_200_OK)
def price_feed(payload: FeedPricingRequest) -> FeedPricingResponse:
    """Price every technician/day found in the feed."""
    try:
        return price_feed_request(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(f"Error pricing job feed: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to price jobs: {str(exc)}",
        ) from exc


@router.get("/rates", response_model=RateTableResponse, status_code=status.HTTP_200_OK)
def get_rates() -> RateTableResponse:
    try:
        config = RateTable.from_settings().config
    except (FileNotFoundError, ValueError) as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    return RateTableResponse(
        reference_distances_km=config.reference_distances_km,
        thresholds_km=config.thresholds_km,
        normal=config.normal.model_dump(),
        premium=config.premium.model_dump(),
    )


@router.post("/file", response_model=FeedPricingResponse, status_code=status.HTTP_200_OK)
def price_file(persist: bool = Query(default=True, description="Write summary.json and pricing.csv.")) -> FeedPricingResponse:
    """Price the configured job sheet export (CSV or XLSX)."""
    try:
        return price_jobs_file(persist=persist)
    except FileNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(f"Error pricing job file: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to price job file: {str(exc)}",
        ) from exc
