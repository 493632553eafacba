import math

import pytest

from mapchat.db.catalog import Catalog, get_catalog, reset_catalog
from mapchat.models.property import Amenity, Property

BASE_LAT = 32.78
BASE_LON = -96.80
KM_PER_DEGREE = 6371.0 * math.pi / 180


def lat_offset(km: float) -> float:
    """Latitude ``km`` kilometers due north (negative: south) of the base point."""
    return BASE_LAT + km / KM_PER_DEGREE


@pytest.fixture
def make_property():
    def factory(pid: str, north_km: float = 0.0, type: str = "warehouse", **overrides) -> Property:
        fields = dict(
            id=pid,
            name=f"Property {pid}",
            address=f"{pid} Test Blvd",
            city="Dallas",
            state="TX",
            zip="75207",
            longitude=BASE_LON,
            latitude=lat_offset(north_km),
            square_feet=100000,
            price_per_sqft=6.0,
            type=type,
            year_built=2000,
            available=True,
        )
        fields.update(overrides)
        return Property(**fields)

    return factory


@pytest.fixture
def make_amenity():
    def factory(aid: str, type: str, north_km: float = 0.0, **overrides) -> Amenity:
        fields = dict(
            id=aid,
            name=f"{type.title()} {aid}",
            type=type,
            longitude=BASE_LON,
            latitude=lat_offset(north_km),
            address=f"{aid} Amenity St, Dallas, TX",
        )
        fields.update(overrides)
        return Amenity(**fields)

    return factory


@pytest.fixture
def dallas_catalog() -> Catalog:
    reset_catalog()
    return get_catalog()
