"""Rate table configuration schema."""

from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, Field, field_validator, model_validator


class TierRates(BaseModel):
    prices: List[float] = Field(..., min_length=1, description="One price per threshold, in threshold order.")
    minimum_value: float = Field(..., ge=0, description="Flat price for stops that are on the way.")

    @field_validator("prices")
    @classmethod
    def _non_decreasing(cls, value: List[float]) -> List[float]:
        for previous, current in zip(value, value[1:]):
            if current < previous:
                raise ValueError("Prices must not decrease as distance grows.")
        return value


class RateTableConfig(BaseModel):
    """Fixed-rate distances and tiered prices, loaded once per run."""

    reference_distances_km: Dict[str, float] = Field(
        ..., description="Reference distance from the base, keyed by location name."
    )
    thresholds_km: List[float] = Field(..., min_length=1, description="Upper bounds shared by every tier.")
    normal: TierRates
    premium: TierRates

    @field_validator("reference_distances_km")
    @classmethod
    def _non_negative_distances(cls, value: Dict[str, float]) -> Dict[str, float]:
        negative = sorted(name for name, km in value.items() if km < 0)
        if negative:
            raise ValueError(f"Reference distances must be >= 0: {', '.join(negative)}")
        return value

    @field_validator("thresholds_km")
    @classmethod
    def _strictly_increasing(cls, value: List[float]) -> List[float]:
        if value[0] <= 0:
            raise ValueError("Thresholds must be positive.")
        for previous, current in zip(value, value[1:]):
            if current <= previous:
                raise ValueError("Thresholds must be strictly increasing.")
        return value

    @model_validator(mode="after")
    def _check_tiers(self) -> "RateTableConfig":
        expected = len(self.thresholds_km)
        for name, tier in (("normal", self.normal), ("premium", self.premium)):
            if len(tier.prices) != expected:
                raise ValueError(f"Tier '{name}' has {len(tier.prices)} prices for {expected} thresholds.")
        for threshold, normal_price, premium_price in zip(
            self.thresholds_km, self.normal.prices, self.premium.prices
        ):
            if premium_price < normal_price:
                raise ValueError(f"Premium price below normal price at {threshold} km.")
        if self.premium.minimum_value <= self.normal.minimum_value:
            raise ValueError("Premium minimum value must be greater than the normal minimum value.")
        return self


DEFAULT_RATE_TABLE = RateTableConfig(
    reference_distances_km={
        "TORONTO": 1,
        "MISSISSAUGA": 30,
        "BRAMPTON": 45,
        "HAMILTON": 70,
        "OSHAWA": 60,
        "SCARBOROUGH": 20,
        "MARKHAM": 35,
    },
    thresholds_km=[50, 100, 150, 200, 250, 300, 350, 400],
    normal=TierRates(prices=[140, 260, 270, 364, 374, 384, 540, 550], minimum_value=140),
    premium=TierRates(prices=[290, 384, 395, 560, 572, 580, 590, 600], minimum_value=290),
)
