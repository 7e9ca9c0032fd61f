"""Static directory of popular NOAA tide prediction stations."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from .models import Station

DEFAULT_STATION_ID = "9414523"

STATIONS: tuple[Station, ...] = (
    Station("9414523", "Redwood City, CA", "San Francisco Bay"),
    Station("9414290", "San Francisco, CA", "San Francisco Bay"),
    Station("9414750", "Alameda, CA", "San Francisco Bay"),
    Station("9410170", "San Diego, CA", "Southern California"),
    Station("9410660", "Los Angeles, CA", "Southern California"),
    Station("9411340", "Santa Barbara, CA", "Central California"),
    Station("9413450", "Monterey, CA", "Central California"),
    Station("9447130", "Seattle, WA", "Pacific Northwest"),
    Station("9432780", "Charleston, OR", "Pacific Northwest"),
    Station("8443970", "Boston, MA", "New England"),
    Station("8461490", "New London, CT", "New England"),
    Station("8518750", "The Battery, NY", "New York"),
    Station("8723214", "Virginia Key, FL", "Florida"),
    Station("8467150", "Bridgeport, CT", "New England"),
    Station("8574680", "Baltimore, MD", "Mid-Atlantic"),
    Station("8638610", "Sewells Point, VA", "Mid-Atlantic"),
    Station("8771450", "Galveston Bay, TX", "Gulf Coast"),
    Station("8726520", "St. Petersburg, FL", "Gulf Coast"),
)


def list_stations() -> List[Station]:
    return list(STATIONS)


def find_station(station_id: str) -> Optional[Station]:
    """Look up a directory entry; custom station ids simply return ``None``."""
    for station in STATIONS:
        if station.id == station_id:
            return station
    return None


def group_by_region(stations: Iterable[Station]) -> Dict[str, List[Station]]:
    """Group stations by region, keeping the order regions first appear in."""
    grouped: Dict[str, List[Station]] = {}
    for station in stations:
        grouped.setdefault(station.region, []).append(station)
    return grouped


def station_label(station_id: str) -> str:
    station = find_station(station_id)
    return station.label if station else f"Station {station_id}"
