"""
Site form state and the reducer that is its only mutation path.

Fields are addressed through typed descriptors rather than free strings:
a SingleLocationField holds one Location (or EMPTY_LOCATION), a
LocationSetField an ordered, id-unique tuple of Locations and a
TagSetField an ordered tuple of distinct strings. Every change is an
action passed to ``reduce``, which returns the next state and, when an
entry was rejected, the notice to show.
"""
from __future__ import annotations

from typing import Callable, Dict, Literal, NamedTuple, Optional, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict

from app.errors import InvalidArgument
from app.models.schemas import EMPTY_LOCATION, Location, SiteCreate
from app.state.notices import Notice, NoticeKind
from app.utils.address import slugify_subdomain
from app.utils.categories import RADIUS_OPTIONS_KM

DUPLICATE_CITY_MESSAGE = "Cette ville est déjà présente"
DUPLICATE_SERVICE_MESSAGE = "Service déjà présent"
EMPTY_SERVICE_MESSAGE = "Veuillez entrer un service"


class TextField(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["text"] = "text"
    name: str


class RadiusField(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["radius"] = "radius"
    name: str


class SingleLocationField(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["single_location"] = "single_location"
    name: str


class LocationSetField(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["location_set"] = "location_set"
    name: str


class TagSetField(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["tag_set"] = "tag_set"
    name: str


CollectionField = Union[LocationSetField, TagSetField]
FormField = Union[TextField, RadiusField, SingleLocationField, LocationSetField, TagSetField]

NAME = TextField(name="name")
SUBDOMAIN = TextField(name="subdomain")
DESCRIPTION = TextField(name="description")
MAIN_ACTIVITY_CITY = SingleLocationField(name="mainActivityCity")
RADIUS = RadiusField(name="radius")
SECONDARY_ACTIVITY_CITIES = LocationSetField(name="secondaryActivityCities")
SERVICES = TagSetField(name="services")


class SiteFormState(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = ""
    subdomain: str = ""
    # Set once the user types into the subdomain; stops it following the name
    subdomainEdited: bool = False
    description: str = ""
    mainActivityCity: Location = EMPTY_LOCATION
    radius: int = 0
    secondaryActivityCities: Tuple[Location, ...] = ()
    services: Tuple[str, ...] = ()

    def value_of(self, field: FormField):
        return getattr(self, field.name)

    def to_site_create(self) -> SiteCreate:
        """Serialize for the create request; raises pydantic.ValidationError."""
        return SiteCreate(
            name=self.name,
            subdomain=self.subdomain,
            description=self.description or None,
            mainActivityCity=self.mainActivityCity,
            radius=self.radius,
            secondaryActivityCities=list(self.secondaryActivityCities),
            services=list(self.services),
        )


# Actions

class SetField(BaseModel):
    model_config = ConfigDict(frozen=True)
    field: FormField
    value: Union[Location, int, str]


class SelectInto(BaseModel):
    model_config = ConfigDict(frozen=True)
    field: CollectionField
    item: Union[Location, str]


class RemoveFrom(BaseModel):
    """Remove by Location id, or by the tag itself for a TagSetField."""

    model_config = ConfigDict(frozen=True)
    field: CollectionField
    id: str


class Replace(BaseModel):
    model_config = ConfigDict(frozen=True)
    field: LocationSetField
    locations: Tuple[Location, ...] = ()


class Clear(BaseModel):
    model_config = ConfigDict(frozen=True)
    field: FormField


Action = Union[SetField, SelectInto, RemoveFrom, Replace, Clear]


class Reduction(NamedTuple):
    state: SiteFormState
    notice: Optional[Notice] = None


# Collection semantics

def select_single(current: Location, location: Location) -> Location:
    return location


def _key(item: Union[Location, str]) -> str:
    return item.id if isinstance(item, Location) else item


def select_into_collection(items: Tuple, item: Union[Location, str]) -> Tuple[Tuple, bool]:
    """Append ``item`` unless its key is present. Returns (items, was_duplicate)."""
    key = _key(item)
    if any(_key(existing) == key for existing in items):
        return items, True
    return items + (item,), False


def remove_from_collection(items: Tuple, key: str) -> Tuple:
    return tuple(item for item in items if _key(item) != key)


def empty_value(field: FormField):
    if isinstance(field, SingleLocationField):
        return EMPTY_LOCATION
    if isinstance(field, (LocationSetField, TagSetField)):
        return ()
    if isinstance(field, RadiusField):
        return 0
    return ""


# Reducer

def _check_value(field: FormField, value) -> None:
    if isinstance(field, SingleLocationField):
        if not isinstance(value, Location):
            raise TypeError(f"{field.name} takes a Location")
    elif isinstance(field, RadiusField):
        if isinstance(value, bool) or not isinstance(value, int) or value not in RADIUS_OPTIONS_KM:
            raise InvalidArgument(f"radius must be one of {list(RADIUS_OPTIONS_KM)}")
    elif isinstance(field, TextField):
        if not isinstance(value, str):
            raise TypeError(f"{field.name} takes a string")
    else:
        raise TypeError(f"{field.name} is a collection; use SelectInto or Replace")


def _set_field(state: SiteFormState, action: SetField) -> Reduction:
    field, value = action.field, action.value
    _check_value(field, value)
    if isinstance(field, SingleLocationField):
        value = select_single(state.value_of(field), value)

    update = {field.name: value}
    if field == NAME and not state.subdomainEdited:
        update[SUBDOMAIN.name] = slugify_subdomain(value)
    elif field == SUBDOMAIN:
        update["subdomainEdited"] = value != ""
    return Reduction(state.model_copy(update=update))


def _select_into(state: SiteFormState, action: SelectInto) -> Reduction:
    field, item = action.field, action.item
    if isinstance(field, TagSetField):
        if not isinstance(item, str):
            raise TypeError(f"{field.name} takes strings")
        item = item.strip()
        if not item:
            return Reduction(state, Notice(kind=NoticeKind.INVALID_INPUT, message=EMPTY_SERVICE_MESSAGE))
        duplicate_message = DUPLICATE_SERVICE_MESSAGE
    else:
        if not isinstance(item, Location):
            raise TypeError(f"{field.name} takes Locations")
        duplicate_message = DUPLICATE_CITY_MESSAGE

    items, duplicate = select_into_collection(state.value_of(field), item)
    if duplicate:
        return Reduction(state, Notice(kind=NoticeKind.DUPLICATE_SELECTION, message=duplicate_message))
    return Reduction(state.model_copy(update={field.name: items}))


def _remove_from(state: SiteFormState, action: RemoveFrom) -> Reduction:
    current = state.value_of(action.field)
    items = remove_from_collection(current, action.id)
    if len(items) == len(current):
        return Reduction(state)
    return Reduction(state.model_copy(update={action.field.name: items}))


def _replace(state: SiteFormState, action: Replace) -> Reduction:
    items: Tuple[Location, ...] = ()
    for location in action.locations:
        items, _ = select_into_collection(items, location)
    return Reduction(state.model_copy(update={action.field.name: items}))


def _clear(state: SiteFormState, action: Clear) -> Reduction:
    update = {action.field.name: empty_value(action.field)}
    if action.field == SUBDOMAIN:
        update["subdomainEdited"] = False
    return Reduction(state.model_copy(update=update))


_HANDLERS: Dict[Type[BaseModel], Callable[[SiteFormState, Action], Reduction]] = {
    SetField: _set_field,
    SelectInto: _select_into,
    RemoveFrom: _remove_from,
    Replace: _replace,
    Clear: _clear,
}


def reduce(state: SiteFormState, action: Action) -> Reduction:
    try:
        handler = _HANDLERS[type(action)]
    except KeyError:
        raise TypeError(f"unknown action {type(action).__name__}") from None
    return handler(state, action)
