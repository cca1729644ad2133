"""HTTP client for the Google Routes computeRoutes endpoint."""

from __future__ import annotations

import logging
import time

import httpx

from ...config import settings

FIELD_MASK = "routes.distanceMeters"

logger = logging.getLogger(__name__)


class RoutesClient:
    def __init__(
        self,
        api_key: str | None = None,
        url: str | None = None,
        travel_mode: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.routes_api_key
        if not self.api_key or not self.api_key.strip():
            raise ValueError("API key not configured.")
        self.url = url or settings.routes_api_url
        self.travel_mode = travel_mode or settings.routes_travel_mode
        self.timeout = timeout if timeout is not None else settings.routes_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.routes_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.routes_backoff_seconds
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        # One client per call so lookups can run from worker threads.
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 5.0)),
            transport=self._transport,
        )

    def compute_distance(self, origin: str, destination: str) -> float:
        """Driving distance in meters between two free-text addresses.

        Raises httpx.HTTPError on transport or status failures and ValueError
        when the response carries no usable route.
        """
        payload = {
            "origin": {"address": origin},
            "destination": {"address": destination},
            "travelMode": self.travel_mode,
        }
        headers = {
            "Content-Type": "application/json",
            "X-Goog-Api-Key": self.api_key,
            "X-Goog-FieldMask": FIELD_MASK,
        }

        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.post(self.url, json=payload, headers=headers)
                    logger.debug(
                        f"Routes API responded for '{origin}' -> '{destination}' with "
                        f"{response.status_code}: {response.text[:500]}"
                    )
                    response.raise_for_status()
                    return _extract_distance(response.json())
                except (httpx.TimeoutException, httpx.NetworkError) as exc:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"Routes API transport error, retrying in {wait_time:.1f}s: {exc}")
                    time.sleep(wait_time)
                except httpx.HTTPStatusError:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise
                    time.sleep(self.backoff_seconds * attempt)
        finally:
            client.close()


def _extract_distance(data: object) -> float:
    if not isinstance(data, dict):
        raise ValueError("Routes API response is not a JSON object.")
    routes = data.get("routes") or []
    if not routes or not isinstance(routes[0], dict) or routes[0].get("distanceMeters") is None:
        raise ValueError("Routes API returned no valid route.")
    meters = float(routes[0]["distanceMeters"])
    # Whole meters stay integers so cached text reads "68500", not "68500.0".
    return int(meters) if meters.is_integer() else meters
