"""Route group exports."""

from . import health, pricing

__all__ = ["health", "pricing"]
