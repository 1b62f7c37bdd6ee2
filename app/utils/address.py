from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

from app.models.schemas import Location
from app.utils.filters import dedupe_locations

# JavaScript's \W is ASCII-only; accented letters become separators too
_NON_WORD = re.compile(r"[\W_]+", re.ASCII)


def _clean(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _structured_label(props: Dict[str, Any]) -> str:
    """
    Compose "12 Rue de Rivoli, 75001 Paris, Île-de-France, France".

    Only used when the feature carries a street or a city; a bare
    country or state is left to the provider's own formatting.
    """
    street = _clean(props.get("street"))
    city = _clean(props.get("city"))
    if not street and not city:
        return ""

    segments = []
    if street:
        housenumber = _clean(props.get("housenumber"))
        segments.append(f"{housenumber} {street}".strip())
    locality = f"{_clean(props.get('postcode'))} {city}".strip()
    if locality:
        segments.append(locality)
    for key in ("state", "country"):
        part = _clean(props.get(key))
        if part and part not in segments:
            segments.append(part)
    return ", ".join(segments)


def format_location_address(feature: Dict[str, Any]) -> str:
    """Label for a provider feature, or "" when nothing usable is present."""
    props = feature.get("properties") or {}
    return (
        _structured_label(props)
        or _clean(props.get("formatted"))
        or _clean(props.get("name"))
    )


def _format_coordinate(value: float) -> str:
    """
    Render a coordinate the way JavaScript's Number#toString does, so ids
    built here equal the ones the browser builds: 2.0 -> "2",
    1e-05 -> "0.00001", 1e-07 -> "1e-7".
    """
    value = float(value)
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    text = repr(value)
    if "e" not in text:
        return text

    mantissa, _, exp_text = text.partition("e")
    exponent = int(exp_text)
    sign = "-" if mantissa.startswith("-") else ""
    digits = mantissa.lstrip("-").replace(".", "")
    if -7 < exponent < 0:
        return f"{sign}0.{'0' * (-exponent - 1)}{digits}"
    return f"{mantissa}e{exponent:+d}"


def location_id(lat: float, lng: float) -> str:
    return f"{_format_coordinate(lat)}-{_format_coordinate(lng)}"


def _coordinates(feature: Dict[str, Any]) -> Optional[Tuple[float, float]]:
    props = feature.get("properties") or {}
    lat, lng = props.get("lat"), props.get("lon")
    if lat is None or lng is None:
        coords = (feature.get("geometry") or {}).get("coordinates") or []
        if len(coords) >= 2:
            lng, lat = coords[0], coords[1]
    try:
        return float(lat), float(lng)
    except (TypeError, ValueError):
        return None


def normalize_feature(feature: Dict[str, Any]) -> Optional[Location]:
    """Canonical Location for one feature, or None if it has no label or coordinates."""
    label = format_location_address(feature)
    coords = _coordinates(feature)
    if not label or coords is None:
        return None
    lat, lng = coords
    return Location(id=location_id(lat, lng), label=label, lat=lat, lng=lng)


def normalize_features(features: Iterable[Dict[str, Any]]) -> List[Location]:
    """
    Normalize a provider page, silently dropping unusable features.

    Features that geocode to the same coordinates collapse to one candidate.
    """
    locations = (normalize_feature(f) for f in features)
    return dedupe_locations(loc for loc in locations if loc is not None)


def slugify_subdomain(name: str) -> str:
    """Lower-case, trim, and collapse each run of non-word characters to "-"."""
    return _NON_WORD.sub("-", name.lower().strip())
