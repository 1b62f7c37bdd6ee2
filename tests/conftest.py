from typing import Any, Dict, List, Optional

import httpx
import pytest

from app.config import settings
from app.models.schemas import Location


def make_feature(lat: float, lon: float, categories: Optional[List[str]] = None, **props: Any) -> Dict[str, Any]:
    properties = {"lat": lat, "lon": lon, **props}
    if categories is not None:
        properties["categories"] = categories
    return {
        "type": "Feature",
        "properties": properties,
        "geometry": {"type": "Point", "coordinates": [lon, lat]},
    }


PARIS = Location(id="48.85-2.35", label="Paris", lat=48.85, lng=2.35)
VERSAILLES = Location(id="48.8-2.13", label="Versailles", lat=48.8, lng=2.13)
BOULOGNE = Location(id="48.83-2.24", label="Boulogne-Billancourt", lat=48.83, lng=2.24)
LYON = Location(id="45.76-4.83", label="Lyon", lat=45.76, lng=4.83)


@pytest.fixture
def geoapify_key(monkeypatch: pytest.MonkeyPatch) -> str:
    monkeypatch.setattr(settings, "GEOAPIFY_API_KEY", "test-key")
    monkeypatch.setattr(settings, "GEOAPIFY_BASE_URL", "https://geo.test")
    return "test-key"


@pytest.fixture
def basic_auth(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "APP_USERNAME", "owner")
    monkeypatch.setattr(settings, "APP_PASSWORD", "s3cret")
    return ("owner", "s3cret")


@pytest.fixture
def mock_http(monkeypatch: pytest.MonkeyPatch):
    """Route every httpx.AsyncClient created from now on through ``handler``."""
    real_client = httpx.AsyncClient

    def install(handler):
        def client_factory(*args, **kwargs):
            kwargs["transport"] = httpx.MockTransport(handler)
            return real_client(*args, **kwargs)

        monkeypatch.setattr(httpx, "AsyncClient", client_factory)

    return install
