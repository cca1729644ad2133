"""Domain models."""

from .domain import Job, PriceQuote, PricingError, ServiceTier

__all__ = ["Job", "PriceQuote", "PricingError", "ServiceTier"]
