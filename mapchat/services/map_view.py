"""Helpers the map collaborator uses to turn a display update into pins and bounds."""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from ..db.catalog import Catalog
from ..models.chat import AmenityFilter, DisplayUpdate
from ..models.property import Amenity, AmenityType, Property


def amenity_types_of(amenity_filter: AmenityFilter) -> List[AmenityType]:
    if amenity_filter is None:
        return []
    if isinstance(amenity_filter, AmenityType):
        return [amenity_filter]
    types: List[AmenityType] = []
    for clause in amenity_filter:
        if clause.type not in types:
            types.append(clause.type)
    return types


def resolve_amenities(catalog: Catalog, amenity_filter: AmenityFilter) -> List[Amenity]:
    """All amenities of the named type(s), or every amenity when there is no overlay.

    Distance thresholds inside clauses do not narrow the pins: every amenity of a
    named type is returned, not only the instances that satisfied a clause.
    """

    types = amenity_types_of(amenity_filter)
    if not types:
        return list(catalog.amenities)
    return [amenity for amenity in catalog.amenities if amenity.type in types]


def build_display(catalog: Catalog, properties: Sequence[Property], amenity_filter: AmenityFilter = None) -> DisplayUpdate:
    return DisplayUpdate(
        properties=list(properties),
        amenities=resolve_amenities(catalog, amenity_filter),
        amenity_filter=amenity_filter,
        total=len(catalog.properties),
    )


def map_bounds(properties: Sequence[Property]) -> Optional[Tuple[float, float, float, float]]:
    """(min lon, min lat, max lon, max lat) around the given properties."""

    if not properties:
        return None
    lons = [prop.longitude for prop in properties]
    lats = [prop.latitude for prop in properties]
    return (min(lons), min(lats), max(lons), max(lats))


def results_caption(display: DisplayUpdate) -> Optional[str]:
    if len(display.properties) == display.total:
        return None
    return f"Showing {len(display.properties)} of {display.total} properties"
