"""Tagged intent variants produced by the query interpreter."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Optional, Tuple

from ..models.chat import AmenityClause, Operator
from ..models.property import AmenityType, PropertyType
from ..utils.geo import km_to_miles, miles_to_km

MILES = "miles"
KILOMETERS = "km"


def number_text(value: float) -> str:
    """Plain decimal text, at most two places, never scientific notation."""
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


@dataclass(frozen=True)
class DistanceClause:
    """One (amenity type, distance, operator) triple, keeping the user's number and unit.

    ``spoken`` is the number exactly as typed; narration repeats it verbatim.
    """

    amenity_type: AmenityType
    distance: float
    unit: str
    operator: Operator
    spoken: Optional[str] = field(default=None, compare=False)

    @property
    def distance_km(self) -> float:
        if self.unit == MILES:
            return miles_to_km(self.distance)
        return self.distance

    def from_km(self, km: float) -> float:
        """Convert a kilometer value into this clause's unit."""
        if self.unit == MILES:
            return km_to_miles(km)
        return km

    def distance_text(self, value: Optional[float] = None) -> str:
        if value is None:
            value = self.distance
            shown = self.spoken or number_text(value)
        else:
            shown = number_text(value)
        if self.unit == MILES:
            return f"{shown} {'mile' if value == 1 else 'miles'}"
        return f"{shown} km"

    def describe(self) -> str:
        verb = "within" if self.operator == Operator.WITHIN else "at least"
        return f"{verb} {self.distance_text()} of {self.amenity_type.label}"

    def satisfied_by(self, km: float) -> bool:
        if self.operator == Operator.WITHIN:
            return km <= self.distance_km
        return km >= self.distance_km

    def as_filter(self) -> AmenityClause:
        return AmenityClause(type=self.amenity_type, distance_km=self.distance_km, operator=self.operator)


@dataclass(frozen=True)
class Intent:
    kind: ClassVar[str] = "intent"


@dataclass(frozen=True)
class AmenityAndFilter(Intent):
    kind: ClassVar[str] = "amenity_and_filter"
    clauses: Tuple[DistanceClause, ...]


@dataclass(frozen=True)
class AmenityOrFilter(Intent):
    kind: ClassVar[str] = "amenity_or_filter"
    clauses: Tuple[DistanceClause, ...]


@dataclass(frozen=True)
class AmenityDistanceFilter(Intent):
    kind: ClassVar[str] = "amenity_filter"
    clause: DistanceClause

    @property
    def clauses(self) -> Tuple[DistanceClause, ...]:
        return (self.clause,)


@dataclass(frozen=True)
class ProximityLookup(Intent):
    kind: ClassVar[str] = "proximity_lookup"
    amenity_type: AmenityType


@dataclass(frozen=True)
class NearestPropertiesLookup(Intent):
    kind: ClassVar[str] = "nearest_properties"
    amenity_type: AmenityType


@dataclass(frozen=True)
class Reset(Intent):
    kind: ClassVar[str] = "reset"


@dataclass(frozen=True)
class TypeList(Intent):
    kind: ClassVar[str] = "type_list"


@dataclass(frozen=True)
class TypeFilter(Intent):
    kind: ClassVar[str] = "type_filter"
    property_type: PropertyType


@dataclass(frozen=True)
class SizeFaq(Intent):
    kind: ClassVar[str] = "size_faq"


@dataclass(frozen=True)
class PriceFaq(Intent):
    kind: ClassVar[str] = "price_faq"


@dataclass(frozen=True)
class AreaLookup(Intent):
    kind: ClassVar[str] = "area_lookup"
    area: str


@dataclass(frozen=True)
class Fallback(Intent):
    kind: ClassVar[str] = "fallback"
