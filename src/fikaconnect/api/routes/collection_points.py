"""Collection point endpoints for store-to-store delivery."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, status

from ...data.collection_points import list_collection_points

router = APIRouter(prefix="/collection-points", tags=["collection-points"])


@router.get("", status_code=status.HTTP_200_OK)
def collection_points() -> list[dict]:
    return [asdict(point) for point in list_collection_points()]
