"""Catalogue of collection points served by store-to-store delivery."""

from __future__ import annotations

from typing import Optional

from ..models.domain import CollectionPoint

COLLECTION_POINTS: tuple[CollectionPoint, ...] = (
    CollectionPoint(id="nakasero", name="Nakasero Market", address="Kampala Central"),
    CollectionPoint(id="owino", name="Owino Market", address="St. Balikuddembe Market, Kampala"),
    CollectionPoint(id="kikuubo", name="Kikuubo Market", address="Kikuubo, Kampala"),
    CollectionPoint(id="wandegeya", name="Wandegeya Market", address="Wandegeya, Kampala"),
    CollectionPoint(id="nakawa", name="Nakawa Market", address="Nakawa, Kampala"),
)


def list_collection_points() -> list[CollectionPoint]:
    return list(COLLECTION_POINTS)


def get_collection_point(point_id: str) -> Optional[CollectionPoint]:
    for point in COLLECTION_POINTS:
        if point.id == point_id:
            return point
    return None
