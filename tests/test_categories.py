import math

import pytest

from app.errors import InvalidArgument
from app.utils.categories import RADIUS_OPTIONS_KM, coerce_radius_km, radius_filter
from app.utils.filters import exclude_center, filter_populated_places
from conftest import BOULOGNE, PARIS, make_feature


def test_radius_options_step_by_five_up_to_fifty():
    assert RADIUS_OPTIONS_KM == (0, 5, 10, 15, 20, 25, 30, 35, 40, 45, 50)


@pytest.mark.parametrize("raw, expected", [(10, 10.0), (2.5, 2.5), ("15", 15.0), (" 20.5 ", 20.5)])
def test_coerce_radius_accepts_numbers_and_numeric_strings(raw, expected):
    assert coerce_radius_km(raw) == expected


@pytest.mark.parametrize("raw", [None, "ten", "", math.nan, math.inf, -5, True, [10]])
def test_coerce_radius_rejects_malformed_values(raw):
    with pytest.raises(InvalidArgument):
        coerce_radius_km(raw)


def test_radius_filter_uses_meters_lng_first():
    assert radius_filter(48.85, 2.35, 10) == "circle:2.35,48.85,10000"
    assert radius_filter(48.85, 2.35, 2.5) == "circle:2.35,48.85,2500"


def test_filter_populated_places_keeps_cities_towns_villages():
    features = [
        make_feature(1.0, 1.0, categories=["populated_place", "populated_place.city"], name="City"),
        make_feature(2.0, 2.0, categories=["populated_place.village"], name="Village"),
        make_feature(3.0, 3.0, categories=["populated_place.hamlet"], name="Hamlet"),
        make_feature(4.0, 4.0, name="No categories"),
    ]
    kept = filter_populated_places(features)
    assert [f["properties"]["name"] for f in kept] == ["City", "Village"]


def test_exclude_center_drops_only_the_center():
    assert exclude_center([PARIS, BOULOGNE], PARIS) == [BOULOGNE]
