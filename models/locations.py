"""Weather stations the dashboard knows about."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True, slots=True)
class Location:
    id: str
    name: str
    device_id: str
    lat: float
    lon: float
    description: str


LOCATIONS: Tuple[Location, ...] = (
    Location(
        id="kaiserplatz",
        name="Kaiserplatz",
        device_id="c055eef5-b6dc-406e-ad5a-65dec60db90e",
        lat=49.010414,
        lon=8.388769,
        description="Leuchtstellennummer 56099 - Zentrum Karlsruhe",
    ),
    Location(
        id="albtalbahnhof",
        name="Albtalbahnhof",
        device_id="7ceb0590-e2f0-4f9e-a3dc-5257a4729f57",
        lat=48.992736,
        lon=8.395454,
        description="Leuchtstellennummer 17968 - Südstadt Karlsruhe",
    ),
)


def get_default_location() -> Location:
    return LOCATIONS[0]


def get_location(location_id: str) -> Location:
    for location in LOCATIONS:
        if location.id == location_id:
            return location
    raise KeyError(f"Location {location_id!r} not found.")


def find_location_by_device(device_id: str) -> Optional[Location]:
    for location in LOCATIONS:
        if location.device_id == device_id:
            return location
    return None
