from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from ..db.camera_store import CameraStore

"""Camera lookup: proximity search and the per-user "my cameras" listing."""

EARTH_RADIUS_KM = 6371.0

# Optional equality filters accepted by list_user_cameras
USER_FILTER_FIELDS = ("city", "organization", "workingCondition", "deviceType", "dateChecked")


@dataclass(frozen=True)
class NearbyCamera:
    id: str
    latitude: float
    longitude: float
    distance_km: float
    deviceName: str
    address: str
    ownerName: str


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometres."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def _to_float(value: Any) -> float | None:
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(f) else f


def find_nearby(store: CameraStore, latitude: float, longitude: float, radius_km: float) -> list[NearbyCamera]:
    """Cameras within radius_km of the point, nearest first.

    Documents whose coordinates do not parse as numbers are skipped.
    """
    if radius_km < 0:
        raise ValueError(f"radius must be non-negative, got {radius_km}")
    found: list[NearbyCamera] = []
    for doc in store.all():
        lat = _to_float(doc.get("latitude"))
        lon = _to_float(doc.get("longitude"))
        if lat is None or lon is None:
            continue
        distance = haversine_km(latitude, longitude, lat, lon)
        if distance <= radius_km:
            found.append(
                NearbyCamera(
                    id=str(doc.get("id", "")),
                    latitude=lat,
                    longitude=lon,
                    distance_km=distance,
                    deviceName=doc.get("deviceName") or "Unknown Device",
                    address=doc.get("address") or "No Address Available",
                    ownerName=doc.get("ownerName") or "Unknown Owner",
                )
            )
    found.sort(key=lambda c: c.distance_km)
    return found


def list_user_cameras(store: CameraStore, username: str, **filters: str | None) -> list[dict[str, Any]]:
    """Cameras registered by ``username``, narrowed by optional equality filters.

    Blank / None filter values are ignored.
    """
    unknown = sorted(set(filters) - set(USER_FILTER_FIELDS))
    if unknown:
        raise ValueError(f"unsupported filters: {unknown}")
    equals = {"username": username}
    equals.update({k: v for k, v in filters.items() if v})
    return store.find(**equals)
