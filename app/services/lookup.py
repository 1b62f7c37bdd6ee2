"""
Location lookups exposed to the site form.

Both operations require a caller identity but return the same results
for every caller.
"""
from __future__ import annotations

from typing import List, Optional, Union

from app.config import settings
from app.errors import ConfigError, Unauthenticated
from app.logging_config import logger
from app.models.schemas import Location
from app.services.geoapify_client import GeoapifyClient
from app.utils.categories import coerce_radius_km


def require_user(user_id: Optional[str]) -> str:
    if not user_id:
        raise Unauthenticated("Not authenticated")
    return user_id


def get_geoapify_client() -> GeoapifyClient:
    if not settings.GEOAPIFY_API_KEY:
        raise ConfigError(
            "Missing GEOAPIFY_API_KEY. Don't forget to add that to your .env file."
        )
    return GeoapifyClient(
        api_key=settings.GEOAPIFY_API_KEY,
        base_url=settings.GEOAPIFY_BASE_URL,
        timeout=settings.LOOKUP_TIMEOUT_SECONDS,
        radius_limit=settings.RADIUS_RESULT_LIMIT,
    )


async def autocomplete_search(query: str, user_id: Optional[str]) -> List[Location]:
    """Address/place candidates for free text. Raises ProviderError on failure."""
    require_user(user_id)
    async with get_geoapify_client() as client:
        results = await client.autocomplete(query)
    logger.debug("autocomplete lookup", query=query, count=len(results))
    return results


async def fetch_cities_in_radius(
    lat: float,
    lng: float,
    radius_km: Union[int, float, str],
    user_id: Optional[str],
) -> List[Location]:
    """Populated places within ``radius_km`` of ``(lat, lng)``."""
    require_user(user_id)
    async with get_geoapify_client() as client:
        radius = coerce_radius_km(radius_km)
        results = await client.places_in_radius(lat, lng, radius)
    logger.debug("radius lookup", lat=lat, lng=lng, radius_km=radius, count=len(results))
    return results
