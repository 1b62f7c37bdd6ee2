import asyncio

import pytest

from app.errors import ProviderError
from app.state.form import SearchBar, SiteFormStore
from app.state.notices import NoticeKind
from app.state.selection import (
    MAIN_ACTIVITY_CITY,
    RADIUS,
    SECONDARY_ACTIVITY_CITIES,
    SetField,
    SiteFormState,
)
from conftest import BOULOGNE, LYON, PARIS, VERSAILLES


class FakeRadiusLookup:
    def __init__(self, results):
        self.calls = []
        self.results = results

    async def __call__(self, lat, lng, radius_km):
        self.calls.append((lat, lng, radius_km))
        return list(self.results)


def _ids(locations):
    return [loc.id for loc in locations]


@pytest.mark.asyncio
async def test_center_and_radius_populate_nearby_cities_then_radius_zero_clears():
    lookup = FakeRadiusLookup([PARIS, VERSAILLES, BOULOGNE])
    store = SiteFormStore(lookup)

    store.dispatch(SetField(field=MAIN_ACTIVITY_CITY, value=PARIS))
    store.dispatch(SetField(field=RADIUS, value=10))
    assert store.loading
    await store.settle()

    assert not store.loading
    assert lookup.calls == [(48.85, 2.35, 10)]
    assert _ids(store.state.secondaryActivityCities) == [VERSAILLES.id, BOULOGNE.id]
    assert PARIS.id not in _ids(store.state.secondaryActivityCities)

    store.dispatch(SetField(field=RADIUS, value=0))
    assert store.state.secondaryActivityCities == ()
    assert not store.loading
    await store.settle()
    assert len(lookup.calls) == 1


@pytest.mark.asyncio
async def test_unchanged_center_and_radius_do_not_refetch():
    lookup = FakeRadiusLookup([VERSAILLES])
    store = SiteFormStore(lookup)
    store.dispatch(SetField(field=MAIN_ACTIVITY_CITY, value=PARIS))
    store.dispatch(SetField(field=RADIUS, value=10))
    await store.settle()

    store.dispatch(SetField(field=RADIUS, value=10))
    store.dispatch(SetField(field=MAIN_ACTIVITY_CITY, value=PARIS.model_copy(update={"label": "Paris, FR"})))
    await store.settle()
    assert len(lookup.calls) == 1


@pytest.mark.asyncio
async def test_radius_without_center_clears_without_lookup():
    lookup = FakeRadiusLookup([VERSAILLES])
    store = SiteFormStore(lookup)
    store.dispatch(SetField(field=RADIUS, value=25))
    await store.settle()

    assert lookup.calls == []
    assert store.state.secondaryActivityCities == ()


@pytest.mark.asyncio
async def test_failed_refresh_keeps_last_known_cities_and_releases_loading():
    results = [VERSAILLES]
    fail = False

    async def lookup(lat, lng, radius_km):
        if fail:
            raise ProviderError("Geoapify error 503")
        return list(results)

    store = SiteFormStore(lookup)
    store.dispatch(SetField(field=MAIN_ACTIVITY_CITY, value=PARIS))
    store.dispatch(SetField(field=RADIUS, value=5))
    await store.settle()
    assert _ids(store.state.secondaryActivityCities) == [VERSAILLES.id]

    fail = True
    store.dispatch(SetField(field=RADIUS, value=15))
    assert store.loading
    await store.settle()

    assert not store.loading
    assert _ids(store.state.secondaryActivityCities) == [VERSAILLES.id]
    notices = store.notices.drain()
    assert [n.kind for n in notices] == [NoticeKind.LOOKUP_FAILED]


@pytest.mark.asyncio
async def test_newer_refresh_supersedes_slower_one():
    release_first = asyncio.Event()

    async def lookup(lat, lng, radius_km):
        if radius_km == 10:
            await release_first.wait()
            return [VERSAILLES]
        return [BOULOGNE, LYON]

    store = SiteFormStore(lookup)
    store.dispatch(SetField(field=MAIN_ACTIVITY_CITY, value=PARIS))
    store.dispatch(SetField(field=RADIUS, value=10))
    await asyncio.sleep(0)
    store.dispatch(SetField(field=RADIUS, value=20))
    await store.settle()
    assert _ids(store.state.secondaryActivityCities) == [BOULOGNE.id, LYON.id]

    release_first.set()
    await asyncio.sleep(0.01)
    assert _ids(store.state.secondaryActivityCities) == [BOULOGNE.id, LYON.id]
    assert not store.loading


@pytest.mark.asyncio
async def test_search_bar_for_city_list_reports_duplicates_and_resets_query():
    store = SiteFormStore(FakeRadiusLookup([]))

    async def lookup(query):
        return [VERSAILLES]

    bar = SearchBar(store, SECONDARY_ACTIVITY_CITIES, lookup, debounce_seconds=0.01)
    bar.type("Versa")
    await bar.settle()
    assert bar.session.candidates == [VERSAILLES]

    bar.choose(VERSAILLES)
    assert bar.session.query == ""
    bar.choose(VERSAILLES)

    assert _ids(store.state.secondaryActivityCities) == [VERSAILLES.id]
    assert [n.kind for n in store.notices.drain()] == [NoticeKind.DUPLICATE_SELECTION]


@pytest.mark.asyncio
async def test_search_bar_for_main_city_sets_field_and_clear_empties_it():
    lookup = FakeRadiusLookup([VERSAILLES])
    store = SiteFormStore(lookup)
    store.dispatch(SetField(field=RADIUS, value=10))

    async def search(query):
        return [PARIS]

    bar = SearchBar(store, MAIN_ACTIVITY_CITY, search, debounce_seconds=0.01)
    bar.choose(PARIS)
    assert bar.session.query == "Paris"
    assert bar.session.committed
    assert store.state.mainActivityCity.id == PARIS.id
    await store.settle()
    assert _ids(store.state.secondaryActivityCities) == [VERSAILLES.id]

    bar.clear()
    assert store.state.mainActivityCity.is_empty
    assert store.state.secondaryActivityCities == ()
    assert len(lookup.calls) == 1


@pytest.mark.asyncio
async def test_unexpected_lookup_crash_posts_notice_and_releases_loading():
    async def lookup(lat, lng, radius_km):
        raise RuntimeError("socket closed")

    store = SiteFormStore(lookup)
    store.dispatch(SetField(field=MAIN_ACTIVITY_CITY, value=PARIS))
    store.dispatch(SetField(field=RADIUS, value=10))
    await store.settle()

    assert not store.loading
    assert store.state.secondaryActivityCities == ()
    assert [n.kind for n in store.notices.drain()] == [NoticeKind.LOOKUP_FAILED]


@pytest.mark.asyncio
async def test_saved_center_and_radius_fetch_nearby_cities_on_open():
    lookup = FakeRadiusLookup([PARIS, VERSAILLES])
    store = SiteFormStore(lookup, SiteFormState(mainActivityCity=PARIS, radius=10))
    assert store.loading
    await store.settle()

    assert lookup.calls == [(48.85, 2.35, 10)]
    assert _ids(store.state.secondaryActivityCities) == [VERSAILLES.id]
