import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from detour_pricing.models.domain import PricingError, ServiceTier
from detour_pricing.schemas.rates import DEFAULT_RATE_TABLE, RateTableConfig, TierRates
from detour_pricing.services.pricing.rate_table import RateTable


@pytest.fixture
def rate_table() -> RateTable:
    return RateTable(DEFAULT_RATE_TABLE)


def test_reference_distance_normalizes_location(rate_table: RateTable):
    assert rate_table.reference_distance("Hamilton") == 70
    assert rate_table.reference_distance("  hamilton ") == 70
    assert rate_table.reference_distance("HAMILTON") == 70


def test_reference_distance_not_found_is_distinct_from_zero():
    config = DEFAULT_RATE_TABLE.model_copy(
        update={"reference_distances_km": {"Base Town": 0, "Hamilton": 70}}
    )
    table = RateTable(config)

    assert table.reference_distance("Base Town") == 0
    assert table.reference_distance("Atlantis") is None


@pytest.mark.parametrize(
    "distance_km, expected",
    [(0, 140), (50, 140), (50.1, 260), (70, 260), (100, 260), (101, 270), (400, 550)],
)
def test_price_uses_first_covering_threshold(rate_table: RateTable, distance_km, expected):
    assert rate_table.price(distance_km, ServiceTier.NORMAL) == expected


def test_price_out_of_range(rate_table: RateTable):
    assert rate_table.price(400.5, ServiceTier.NORMAL) is None
    assert rate_table.price(1000, ServiceTier.PREMIUM) is None


def test_price_monotonic_and_premium_not_cheaper(rate_table: RateTable):
    previous = {ServiceTier.NORMAL: 0.0, ServiceTier.PREMIUM: 0.0}
    for km in range(0, 401, 5):
        normal = rate_table.price(km, ServiceTier.NORMAL)
        premium = rate_table.price(km, ServiceTier.PREMIUM)
        assert normal >= previous[ServiceTier.NORMAL]
        assert premium >= previous[ServiceTier.PREMIUM]
        assert premium >= normal
        previous = {ServiceTier.NORMAL: normal, ServiceTier.PREMIUM: premium}


def test_full_service_value(rate_table: RateTable):
    assert rate_table.full_service_value("Hamilton", ServiceTier.NORMAL).amount == 260
    assert rate_table.full_service_value("Hamilton", ServiceTier.PREMIUM).amount == 384
    assert rate_table.full_service_value("toronto", ServiceTier.NORMAL).amount == 140


def test_full_service_value_reports_missing_location(rate_table: RateTable):
    quote = rate_table.full_service_value("Sudbury", ServiceTier.NORMAL)

    assert not quote.ok
    assert quote.error is PricingError.LOCATION_NOT_IN_TABLE
    assert quote.display == "City not in fixed rate table"


def test_full_service_value_reports_out_of_range():
    config = DEFAULT_RATE_TABLE.model_copy(update={"reference_distances_km": {"Ottawa": 450}})
    quote = RateTable(config).full_service_value("Ottawa", ServiceTier.PREMIUM)

    assert quote.error is PricingError.OUT_OF_RANGE
    assert quote.display == "Outside rate table"


def test_minimum_values(rate_table: RateTable):
    assert rate_table.minimum_value(ServiceTier.NORMAL) == 140
    assert rate_table.minimum_value(ServiceTier.PREMIUM) == 290


def test_config_rejects_unordered_thresholds():
    with pytest.raises(ValidationError):
        RateTableConfig(
            reference_distances_km={"A": 10},
            thresholds_km=[100, 50],
            normal=TierRates(prices=[1, 2], minimum_value=1),
            premium=TierRates(prices=[3, 4], minimum_value=2),
        )


def test_config_rejects_premium_below_normal():
    with pytest.raises(ValidationError):
        RateTableConfig(
            reference_distances_km={"A": 10},
            thresholds_km=[50, 100],
            normal=TierRates(prices=[100, 200], minimum_value=100),
            premium=TierRates(prices=[150, 180], minimum_value=150),
        )


def test_config_rejects_price_count_mismatch():
    with pytest.raises(ValidationError):
        RateTableConfig(
            reference_distances_km={"A": 10},
            thresholds_km=[50, 100, 150],
            normal=TierRates(prices=[100, 200], minimum_value=100),
            premium=TierRates(prices=[150, 250], minimum_value=150),
        )


def test_rate_table_from_file(tmp_path: Path):
    path = tmp_path / "rates.json"
    path.write_text(
        json.dumps(
            {
                "reference_distances_km": {"Kingston": 260},
                "thresholds_km": [100, 300],
                "normal": {"prices": [100, 300], "minimum_value": 90},
                "premium": {"prices": [200, 400], "minimum_value": 180},
            }
        ),
        encoding="utf-8",
    )

    table = RateTable.from_file(path)

    assert table.full_service_value("kingston", ServiceTier.NORMAL).amount == 300
    assert table.minimum_value(ServiceTier.PREMIUM) == 180


def test_rate_table_from_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        RateTable.from_file(tmp_path / "missing.json")
