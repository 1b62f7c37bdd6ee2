"""
Wiring between the form state, its automatic updaters and the search inputs.
"""
from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple, Type, Union

from app.models.schemas import Location, RadiusQuery, SiteCreate
from app.services.lookup import autocomplete_search, fetch_cities_in_radius
from app.state.nearby import NearbyCitiesController, RadiusLookupFn
from app.state.notices import NoticeBoard
from app.state.search_session import LookupFn, SearchSession
from app.state.selection import (
    MAIN_ACTIVITY_CITY,
    RADIUS,
    SECONDARY_ACTIVITY_CITIES,
    Action,
    Clear,
    LocationSetField,
    Replace,
    SelectInto,
    SetField,
    SingleLocationField,
    SiteFormState,
    reduce,
)


def free_lookup_for(user_id: Optional[str]) -> LookupFn:
    async def lookup(query: str) -> List[Location]:
        return await autocomplete_search(query, user_id)

    return lookup


def radius_lookup_for(user_id: Optional[str]) -> RadiusLookupFn:
    async def lookup(lat: float, lng: float, radius_km: int) -> List[Location]:
        return await fetch_cities_in_radius(lat, lng, radius_km, user_id)

    return lookup


class SiteFormStore:
    """
    Owns the form state. Also drives the nearby-cities refresh, starting
    from the initial state, so a saved site reopened with a center and
    radius gets its nearby cities without any edit.
    """

    def __init__(
        self,
        radius_lookup: RadiusLookupFn,
        state: Optional[SiteFormState] = None,
        free_lookup: Optional[LookupFn] = None,
    ) -> None:
        self.state = state or SiteFormState()
        self.free_lookup = free_lookup
        self.notices = NoticeBoard()
        self.nearby = NearbyCitiesController(radius_lookup, self._apply_nearby, self.notices)
        self._sync_nearby()

    @classmethod
    def for_user(cls, user_id: Optional[str], state: Optional[SiteFormState] = None) -> "SiteFormStore":
        """Store whose lookups go to the geocoding service on behalf of ``user_id``."""
        return cls(radius_lookup_for(user_id), state, free_lookup=free_lookup_for(user_id))

    @property
    def loading(self) -> bool:
        return self.nearby.loading

    def dispatch(self, action: Action) -> SiteFormState:
        reduction = reduce(self.state, action)
        self.state = reduction.state
        if reduction.notice is not None:
            self.notices.post(reduction.notice.kind, reduction.notice.message)
        if action.field in (MAIN_ACTIVITY_CITY, RADIUS):
            self._sync_nearby()
        return self.state

    def search_bar(self, field: "LocationField", **session_options) -> "SearchBar":
        if self.free_lookup is None:
            raise TypeError("this store has no free-text lookup; build it with for_user()")
        return SearchBar(self, field, self.free_lookup, **session_options)

    def _sync_nearby(self) -> None:
        self.nearby.sync(
            RadiusQuery(center=self.state.mainActivityCity, radiusKm=self.state.radius)
        )

    def _apply_nearby(self, locations: Tuple[Location, ...]) -> None:
        self.state = reduce(self.state, Replace(field=SECONDARY_ACTIVITY_CITIES, locations=locations)).state

    async def settle(self) -> None:
        await self.nearby.settle()

    def submit(self) -> SiteCreate:
        return self.state.to_site_create()


LocationField = Union[SingleLocationField, LocationSetField]

_SELECT_ACTION: Dict[Type, Callable[[LocationField, Location], Action]] = {
    SingleLocationField: lambda field, loc: SetField(field=field, value=loc),
    LocationSetField: lambda field, loc: SelectInto(field=field, item=loc),
}


class SearchBar:
    """A search input bound to one location field of the form."""

    def __init__(self, store: SiteFormStore, field: LocationField, lookup: LookupFn, **session_options) -> None:
        self.store = store
        self.field = field
        session_options.setdefault("track_commit", isinstance(field, SingleLocationField))
        self.session = SearchSession(lookup, **session_options)

    def type(self, text: str) -> None:
        self.session.update_query(text)

    def choose(self, candidate: Location) -> SiteFormState:
        self.session.accept(candidate)
        state = self.store.dispatch(_SELECT_ACTION[type(self.field)](self.field, candidate))
        if isinstance(self.field, LocationSetField):
            # Ready for the next city
            self.session.reset()
        return state

    def clear(self) -> SiteFormState:
        self.session.reset()
        return self.store.dispatch(Clear(field=self.field))

    def close(self) -> None:
        self.session.close()

    async def settle(self) -> None:
        await self.session.settle()
