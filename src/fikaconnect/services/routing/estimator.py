"""Route distance and ETA estimation for quotes."""

from __future__ import annotations

import logging
import math
from functools import lru_cache
from typing import Protocol

import httpx

from ...config import settings
from ...models.domain import Location, RouteEstimate
from ..geospatial import haversine_km
from .osrm_client import OSRMClient

MINUTES_PER_KM = 1.5
# Collection points are close together; the store tier always uses this route.
STORE_ROUTE = RouteEstimate(distance_km=8.0, eta_minutes=15, source="collection_points")


class RouteEstimator(Protocol):
    def estimate_route(self, pickup: Location, delivery: Location) -> RouteEstimate:
        ...


def _eta_for(distance_km: float) -> int:
    return math.ceil(distance_km * MINUTES_PER_KM)


class HaversineRouteEstimator:
    """Straight-line estimate used when no routing service is available."""

    def estimate_route(self, pickup: Location, delivery: Location) -> RouteEstimate:
        distance = round(
            haversine_km(pickup.latitude, pickup.longitude, delivery.latitude, delivery.longitude), 2
        )
        return RouteEstimate(distance_km=distance, eta_minutes=_eta_for(distance), source="haversine")


class OSRMRouteEstimator:
    """Road distance from OSRM, degrading to the haversine estimate on failure."""

    def __init__(self, client: OSRMClient | None = None) -> None:
        self.client = client or OSRMClient()
        self.fallback = HaversineRouteEstimator()

    def estimate_route(self, pickup: Location, delivery: Location) -> RouteEstimate:
        try:
            route = self.client.route(pickup, delivery)
        except (httpx.HTTPError, ConnectionError, ValueError, OSError) as e:
            logging.warning(f"OSRM route request failed: {e}. Using haversine fallback.")
            return self.fallback.estimate_route(pickup, delivery)
        except Exception as e:
            logging.error(f"Unexpected error getting OSRM route: {e}. Using haversine fallback.")
            return self.fallback.estimate_route(pickup, delivery)

        distance = round(float(route.get("distance", 0.0)) / 1000.0, 2)
        duration_min = math.ceil(float(route.get("duration", 0.0)) / 60.0)
        return RouteEstimate(distance_km=distance, eta_minutes=duration_min, source="osrm")


@lru_cache()
def get_route_estimator() -> RouteEstimator:
    if settings.osrm_base_url:
        return OSRMRouteEstimator()
    logging.info("OSRM not configured - using haversine route estimates")
    return HaversineRouteEstimator()
