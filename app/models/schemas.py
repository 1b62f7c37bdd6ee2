from __future__ import annotations

from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.utils.categories import RADIUS_OPTIONS_KM


class Location(BaseModel):
    """A geocoded place. Identity is the coordinate-derived ``id``."""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    lat: float
    lng: float

    @property
    def is_empty(self) -> bool:
        return self.id == ""

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Location):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


# Value of a single-location field before anything is selected
EMPTY_LOCATION = Location(id="", label="", lat=0, lng=0)


class RadiusQuery(BaseModel):
    center: Location
    radiusKm: int = Field(default=0, description="0 disables the nearby lookup")

    @field_validator("radiusKm")
    @classmethod
    def radius_in_options(cls, v: int) -> int:
        if v not in RADIUS_OPTIONS_KM:
            raise ValueError(f"radius must be one of {list(RADIUS_OPTIONS_KM)}")
        return v

    @property
    def enabled(self) -> bool:
        return self.radiusKm != 0 and not self.center.is_empty


class AutocompleteRequest(BaseModel):
    query: str


class RadiusRequest(BaseModel):
    lat: float
    lng: float
    # Numeric strings are accepted and coerced by the lookup service
    radius: Union[float, str]


class GenerateServicesRequest(BaseModel):
    services: List[str] = Field(default_factory=list)


class JobHandle(BaseModel):
    message_id: str


class SiteCreate(BaseModel):
    """Payload submitted when the site form is saved."""

    name: str = Field(min_length=1, max_length=64)
    subdomain: str = Field(min_length=1, max_length=64, pattern=r"^[a-z0-9-]+$")
    description: Optional[str] = Field(default=None, max_length=500)
    mainActivityCity: Location
    radius: int = 0
    secondaryActivityCities: List[Location] = Field(default_factory=list)
    services: List[str] = Field(default_factory=list)

    @field_validator("mainActivityCity")
    @classmethod
    def main_city_selected(cls, v: Location) -> Location:
        if v.is_empty:
            raise ValueError("a main activity city must be selected")
        return v

    @field_validator("radius")
    @classmethod
    def radius_in_options(cls, v: int) -> int:
        if v not in RADIUS_OPTIONS_KM:
            raise ValueError(f"radius must be one of {list(RADIUS_OPTIONS_KM)}")
        return v


class SiteAccepted(BaseModel):
    subdomain: str
    secondaryActivityCityCount: int
    userId: str
