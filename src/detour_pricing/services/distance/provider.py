"""Cached distance lookups with failures reported as values."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Protocol, Sequence

from ...config import settings
from .cache import DistanceCache, JsonFileDistanceCache, MemoryDistanceCache, make_cache_key
from .routes_client import RoutesClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DistanceResult:
    meters: float | None
    reason: str | None = None

    @classmethod
    def unavailable(cls, reason: str) -> "DistanceResult":
        return cls(meters=None, reason=reason)

    @property
    def available(self) -> bool:
        return self.meters is not None

    @property
    def effective_meters(self) -> float:
        """Meters, with unavailable lookups treated as very far away."""
        if self.meters is None:
            return settings.unavailable_distance_meters
        return self.meters


class DistanceBackend(Protocol):
    def compute_distance(self, origin: str, destination: str) -> float: ...


class DistanceProvider:
    def __init__(
        self,
        backend: DistanceBackend,
        cache: DistanceCache | None = None,
        ttl_seconds: int | None = None,
        max_parallel_requests: int | None = None,
    ) -> None:
        self.backend = backend
        self.cache = cache if cache is not None else MemoryDistanceCache()
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.distance_cache_ttl_seconds
        self.max_parallel_requests = max_parallel_requests or settings.max_parallel_requests

    @classmethod
    def from_settings(cls, cache: DistanceCache | None = None) -> "DistanceProvider":
        if cache is None:
            cache = default_cache()
        return cls(RoutesClient(), cache=cache)

    def distance(self, origin: str, destination: str) -> DistanceResult:
        origin = (origin or "").strip()
        destination = (destination or "").strip()
        if not origin or not destination:
            logger.error(f"Origin or destination is empty. Origin: '{origin}', Destination: '{destination}'")
            return DistanceResult.unavailable("empty origin or destination")

        key = make_cache_key(origin, destination)
        cached = self.cache.get(key)
        if cached is not None:
            try:
                meters = float(cached)
            except ValueError:
                logger.warning(f"Discarding malformed cache entry {key}={cached!r}")
            else:
                logger.debug(f"Distance for '{origin}' -> '{destination}' from cache: {meters}m")
                return DistanceResult(meters=meters)

        logger.info(f"Requesting distance: origin='{origin}', destination='{destination}'")
        try:
            meters = self.backend.compute_distance(origin, destination)
        except Exception as exc:
            logger.warning(f"Distance lookup failed for '{origin}' -> '{destination}': {exc}")
            return DistanceResult.unavailable(str(exc) or type(exc).__name__)

        self.cache.put(key, str(meters), self.ttl_seconds)
        logger.info(f"Distance for '{origin}' -> '{destination}': {meters}m")
        return DistanceResult(meters=meters)

    def distances_from(self, origin: str, destinations: Sequence[str]) -> list[DistanceResult]:
        """Look up origin -> each destination; results follow the input order."""
        if not destinations:
            return []
        if len(destinations) == 1 or self.max_parallel_requests <= 1:
            return [self.distance(origin, destination) for destination in destinations]
        workers = min(self.max_parallel_requests, len(destinations))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(lambda destination: self.distance(origin, destination), destinations))


_shared_memory_cache = MemoryDistanceCache()


def default_cache() -> DistanceCache:
    if settings.distance_cache_file:
        return JsonFileDistanceCache(settings.distance_cache_file)
    return _shared_memory_cache
