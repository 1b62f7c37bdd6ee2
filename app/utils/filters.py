from __future__ import annotations

from typing import Any, Dict, Iterable, List

from app.models.schemas import Location
from app.utils.categories import POPULATED_PLACE_CATEGORIES


def is_populated_place(feature: Dict[str, Any]) -> bool:
    categories = (feature.get("properties") or {}).get("categories") or []
    return any(c in categories for c in POPULATED_PLACE_CATEGORIES)


def filter_populated_places(features: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [f for f in features if is_populated_place(f)]


def dedupe_locations(locations: Iterable[Location]) -> List[Location]:
    """Keep the first occurrence of each id, preserving order."""
    seen = set()
    unique: List[Location] = []
    for loc in locations:
        if loc.id in seen:
            continue
        seen.add(loc.id)
        unique.append(loc)
    return unique


def exclude_center(locations: Iterable[Location], center: Location) -> List[Location]:
    # A city never appears in its own nearby list
    return [loc for loc in locations if loc.id != center.id]
