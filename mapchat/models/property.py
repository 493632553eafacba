"""Pydantic models representing the static property and amenity catalog."""

from __future__ import annotations

from enum import Enum
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field


class PropertyType(str, Enum):
    WAREHOUSE = "warehouse"
    MANUFACTURING = "manufacturing"
    DISTRIBUTION = "distribution"
    FLEX = "flex"
    OFFICE = "office"


class AmenityType(str, Enum):
    FEDEX = "fedex"
    UPS = "ups"
    STARBUCKS = "starbucks"

    @property
    def label(self) -> str:
        return AMENITY_LABELS[self]


AMENITY_LABELS = {
    AmenityType.FEDEX: "FedEx",
    AmenityType.UPS: "UPS",
    AmenityType.STARBUCKS: "Starbucks",
}


class Property(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    address: str
    city: str
    state: str
    zip: str
    longitude: float = Field(..., ge=-180, le=180)
    latitude: float = Field(..., ge=-90, le=90)
    square_feet: int = Field(..., gt=0)
    price_per_sqft: float = Field(..., gt=0)
    type: PropertyType
    year_built: int
    available: bool
    image: str = ""
    description: str = ""

    @property
    def coordinates(self) -> Tuple[float, float]:
        return (self.longitude, self.latitude)


class Amenity(BaseModel):
    """A third-party point of interest used as a proximity reference."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    type: AmenityType
    longitude: float = Field(..., ge=-180, le=180)
    latitude: float = Field(..., ge=-90, le=90)
    address: str

    @property
    def coordinates(self) -> Tuple[float, float]:
        return (self.longitude, self.latitude)
