"""Pydantic schemas for chat turns and the map display contract."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field

from .property import Amenity, AmenityType, Property


class Operator(str, Enum):
    WITHIN = "within"
    AT_LEAST = "at-least"


class ChatMessage(BaseModel):
    id: str
    sender: Literal["user", "system"]
    text: str
    timestamp: datetime
    property: Optional[Property] = None


class AmenityClause(BaseModel):
    type: AmenityType
    distance_km: Optional[float] = None
    operator: Optional[Operator] = None


# None clears the overlay, a single type shows that brand, clauses show every named type.
AmenityFilter = Union[None, AmenityType, List[AmenityClause]]


class DisplayUpdate(BaseModel):
    """Payload handed to the map whenever a turn changes the displayed set."""

    properties: List[Property]
    amenities: List[Amenity]
    amenity_filter: AmenityFilter = None
    total: int


class TurnResult(BaseModel):
    intent: str
    messages: List[ChatMessage] = Field(default_factory=list)
    display: Optional[DisplayUpdate] = None
    selected_property: Optional[Property] = None


class TurnRequest(BaseModel):
    text: str


class SelectRequest(BaseModel):
    property_id: str


class SessionResponse(BaseModel):
    session_id: str
    transcript: List[ChatMessage]
    selected_property: Optional[Property] = None


class PropertyListResponse(BaseModel):
    items: List[Property]
    total: int


class AmenityListResponse(BaseModel):
    items: List[Amenity]
    total: int
