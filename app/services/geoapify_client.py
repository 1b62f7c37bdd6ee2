from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from app.errors import ProviderError
from app.models.schemas import Location
from app.utils.address import normalize_features
from app.utils.categories import POPULATED_PLACE_CATEGORIES, radius_filter
from app.utils.filters import filter_populated_places

GEOAPIFY_BASE = "https://api.geoapify.com"


class GeoapifyClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = GEOAPIFY_BASE,
        timeout: float = 10.0,
        radius_limit: int = 100,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.radius_limit = radius_limit
        self._client = httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "GeoapifyClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/{path}"
        query = {**params, "apiKey": self.api_key}
        try:
            resp = await self._client.get(url, params=query)
        except httpx.HTTPError as exc:
            raise ProviderError(f"Geoapify request failed: {exc}") from exc
        if resp.status_code >= 400:
            try:
                detail = resp.json()
            except ValueError:
                detail = {"text": resp.text}
            raise ProviderError(f"Geoapify error {resp.status_code}: {detail}")
        try:
            data = resp.json()
        except ValueError as exc:
            raise ProviderError("Geoapify returned a malformed body") from exc
        if not isinstance(data, dict):
            raise ProviderError("Geoapify returned a malformed body")
        return data

    @staticmethod
    def _features(data: Dict[str, Any]) -> List[Dict[str, Any]]:
        features = data.get("features")
        if not isinstance(features, list):
            raise ProviderError("Geoapify response has no feature list")
        return [f for f in features if isinstance(f, dict)]

    async def autocomplete(self, text: str) -> List[Location]:
        """Free-text address/place autocomplete, one provider page of candidates."""
        data = await self._get("v1/geocode/autocomplete", {"text": text})
        return normalize_features(self._features(data))

    async def places_in_radius(
        self,
        lat: float,
        lng: float,
        radius_km: float,
        limit: Optional[int] = None,
    ) -> List[Location]:
        """Cities, towns and villages within ``radius_km`` of a point."""
        limit = limit or self.radius_limit
        data = await self._get(
            "v2/places",
            {
                "categories": ",".join(POPULATED_PLACE_CATEGORIES),
                "filter": radius_filter(lat, lng, radius_km),
                "limit": limit,
            },
        )
        places = filter_populated_places(self._features(data))
        return normalize_features(places)[:limit]

    async def aclose(self) -> None:
        await self._client.aclose()
