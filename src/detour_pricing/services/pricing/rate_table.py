"""Fixed-rate lookups: location to reference distance, distance to price."""

from __future__ import annotations

import bisect
import json
import logging
from pathlib import Path

from ...config import settings
from ...models.domain import PriceQuote, PricingError, ServiceTier
from ...schemas.rates import DEFAULT_RATE_TABLE, RateTableConfig

logger = logging.getLogger(__name__)


def normalize_location(location: str) -> str:
    return str(location).strip().casefold()


class RateTable:
    def __init__(self, config: RateTableConfig) -> None:
        self.config = config
        self._distances = {
            normalize_location(name): float(km) for name, km in config.reference_distances_km.items()
        }
        self._thresholds = [float(km) for km in config.thresholds_km]
        self._tiers = {
            ServiceTier.NORMAL: config.normal,
            ServiceTier.PREMIUM: config.premium,
        }

    @classmethod
    def from_file(cls, path: Path) -> "RateTable":
        if not path.exists():
            raise FileNotFoundError(f"Rate table file not found: {path}")
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        return cls(RateTableConfig.model_validate(payload))

    @classmethod
    def from_settings(cls) -> "RateTable":
        if settings.rate_table_file:
            logger.info(f"Loading rate table from {settings.rate_table_file}")
            return cls.from_file(settings.rate_table_file)
        return cls(DEFAULT_RATE_TABLE)

    def reference_distance(self, location: str) -> float | None:
        """Reference km for the location, or None when it has no fixed-rate entry."""
        return self._distances.get(normalize_location(location))

    def price(self, distance_km: float, tier: ServiceTier) -> float | None:
        """Price of the first threshold covering the distance; None past the last threshold."""
        index = bisect.bisect_left(self._thresholds, distance_km)
        if index >= len(self._thresholds):
            return None
        return float(self._tiers[tier].prices[index])

    def minimum_value(self, tier: ServiceTier) -> float:
        return float(self._tiers[tier].minimum_value)

    def full_service_value(self, location: str, tier: ServiceTier) -> PriceQuote:
        distance_km = self.reference_distance(location)
        if distance_km is None:
            logger.warning(f"Location '{location}' not found in fixed rate table.")
            return PriceQuote.failed(PricingError.LOCATION_NOT_IN_TABLE)
        amount = self.price(distance_km, tier)
        if amount is None:
            logger.warning(f"Location '{location}' ({distance_km} km) is outside the rate table.")
            return PriceQuote.failed(PricingError.OUT_OF_RANGE)
        return PriceQuote.of(amount)
