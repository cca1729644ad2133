#!/usr/bin/env python3
"""Verify the routing-service credential and a live distance lookup."""

import sys

from detour_pricing.config import settings
from detour_pricing.services.distance.provider import DistanceProvider
from detour_pricing.services.distance.cache import MemoryDistanceCache
from detour_pricing.services.distance.routes_client import RoutesClient


def main(destination: str = "Hamilton") -> int:
    print("=" * 60)
    print("Routes API Connection Test")
    print("=" * 60)
    print()

    print("1. Checking configuration...")
    if not settings.routes_api_key:
        print("   [ERROR] Routes API key is not configured")
        print("   Please set DP_ROUTES_API_KEY in your .env file")
        return 1
    print(f"   [OK] Endpoint: {settings.routes_api_url}")
    print(f"   [OK] Base location: {settings.base_location}")
    print()

    print(f"2. Requesting distance {settings.base_location} -> {destination}...")
    try:
        meters = RoutesClient().compute_distance(settings.base_location, destination)
    except Exception as e:
        print(f"   [ERROR] Lookup failed: {e}")
        return 1
    print(f"   [OK] Distance: {meters:.0f} meters")
    print()

    print("3. Checking the cache returns the same distance...")
    provider = DistanceProvider(RoutesClient(), cache=MemoryDistanceCache())
    first = provider.distance(settings.base_location, destination)
    second = provider.distance(settings.base_location, destination)
    if not first.available or first.meters != second.meters:
        print(f"   [ERROR] Unexpected results: {first} / {second}")
        return 1
    print(f"   [OK] Cached distance: {second.meters:.0f} meters")
    print()

    print("=" * 60)
    print("[SUCCESS] Routes API is connected and working!")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main(*sys.argv[1:2]))
