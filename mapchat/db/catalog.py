"""Read-only catalog of properties and amenities backed by the packaged CSV fixtures."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from ..models.property import Amenity, AmenityType, Property, PropertyType
from ..utils.io import load_csv
from ..utils.logging import get_logger
from .mappers import map_amenity_row, map_property_row

LOGGER = get_logger("db.catalog")

PROPERTIES_CSV = "properties.csv"
AMENITIES_CSV = "amenities.csv"


class PropertyNotFound(KeyError):
    """Raised when a property id is not part of the catalog."""


class Catalog:
    """Immutable collections of properties and amenities, in fixture order."""

    def __init__(self, properties: Iterable[Property], amenities: Iterable[Amenity]) -> None:
        self._properties = tuple(properties)
        self._amenities = tuple(amenities)
        self._by_id: Dict[str, Property] = {}
        for prop in self._properties:
            if prop.id in self._by_id:
                raise ValueError(f"Duplicate property id: {prop.id}")
            self._by_id[prop.id] = prop
        amenity_ids = [amenity.id for amenity in self._amenities]
        if len(set(amenity_ids)) != len(amenity_ids):
            raise ValueError("Duplicate amenity id in catalog")

    @classmethod
    def from_csv(cls, properties_csv: str = PROPERTIES_CSV, amenities_csv: str = AMENITIES_CSV) -> "Catalog":
        prop_df = load_csv(properties_csv)
        amenity_df = load_csv(amenities_csv)
        properties = [Property(**map_property_row(row)) for row in prop_df.to_dict("records")]
        amenities = [Amenity(**map_amenity_row(row)) for row in amenity_df.to_dict("records")]
        LOGGER.info("catalog_loaded properties=%d amenities=%d", len(properties), len(amenities))
        return cls(properties, amenities)

    @property
    def properties(self) -> Sequence[Property]:
        return self._properties

    @property
    def amenities(self) -> Sequence[Amenity]:
        return self._amenities

    def get_property(self, property_id: str) -> Property:
        try:
            return self._by_id[str(property_id)]
        except KeyError:
            raise PropertyNotFound(property_id) from None

    def amenities_of_type(self, amenity_type: AmenityType) -> List[Amenity]:
        return [amenity for amenity in self._amenities if amenity.type == amenity_type]

    def property_types(self) -> List[PropertyType]:
        seen: List[PropertyType] = []
        for prop in self._properties:
            if prop.type not in seen:
                seen.append(prop.type)
        return seen

    def filter_properties(self, property_type: Optional[PropertyType] = None, limit: Optional[int] = None) -> List[Property]:
        items = [prop for prop in self._properties if property_type is None or prop.type == property_type]
        if limit is not None:
            items = items[:limit]
        return items


_catalog_singleton: Catalog | None = None


def get_catalog() -> Catalog:
    global _catalog_singleton
    if _catalog_singleton is None:
        _catalog_singleton = Catalog.from_csv()
    return _catalog_singleton


def reset_catalog() -> None:
    global _catalog_singleton
    _catalog_singleton = None
