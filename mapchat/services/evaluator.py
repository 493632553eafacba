"""Evaluate interpreted intents against the catalog and narrate the outcome."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Type

import numpy as np

from ..db.catalog import Catalog
from ..models.chat import DisplayUpdate
from ..models.property import Amenity, AmenityType, Property
from ..utils.geo import haversine_km_many, km_to_miles
from ..utils.logging import get_logger
from .intents import (
    AmenityAndFilter,
    AmenityDistanceFilter,
    AmenityOrFilter,
    AreaLookup,
    DistanceClause,
    Fallback,
    Intent,
    NearestPropertiesLookup,
    PriceFaq,
    ProximityLookup,
    Reset,
    SizeFaq,
    TypeFilter,
    TypeList,
)
from .map_view import build_display

LOGGER = get_logger("services.evaluator")

LOOKUP_LIMIT = 3

SIZE_REPLY = "Properties range from 65,000 to 327,000 square feet. What size range are you looking for?"
PRICE_REPLY = "Rental rates range from $4.65 to $9.50 per square foot. What's your budget range?"
FALLBACK_REPLY = (
    "I can help you find industrial properties in Dallas. Tell me what you're looking for in terms of "
    "property type, size, location, or price range. You can also ask for properties within a distance "
    "of FedEx, UPS or Starbucks."
)


@dataclass(frozen=True)
class Narration:
    text: str
    property: Optional[Property] = None


@dataclass
class Evaluation:
    """Outcome of one intent: reply lines, an optional map update and an optional spotlight."""

    narration: List[Narration] = field(default_factory=list)
    display: Optional[DisplayUpdate] = None
    spotlight: Optional[Property] = None


@dataclass(frozen=True)
class RankedProperty:
    property: Property
    score_km: float
    hits: Tuple[Tuple[DistanceClause, Amenity, float], ...]


def spotlight_text(prop: Property) -> str:
    return f"Here's information about {prop.name}:"


def _plural(count: int, singular: str = "property", plural: str = "properties") -> str:
    return singular if count == 1 else plural


def _miles_text(km: float) -> str:
    return f"{km_to_miles(km):.1f} miles"


class FilterEvaluator:
    """Pure evaluation of intents; holds only the catalog and a random source."""

    def __init__(self, catalog: Catalog, rng: Optional[random.Random] = None) -> None:
        self.catalog = catalog
        self.rng = rng or random.Random()
        self._handlers: Dict[Type[Intent], Callable[..., Evaluation]] = {
            AmenityAndFilter: self._amenity_and_filter,
            AmenityOrFilter: self._amenity_or_filter,
            AmenityDistanceFilter: self._amenity_distance_filter,
            ProximityLookup: self._proximity_lookup,
            NearestPropertiesLookup: self._nearest_properties,
            Reset: self._reset,
            TypeList: self._type_list,
            TypeFilter: self._type_filter,
            SizeFaq: lambda intent, selected: Evaluation([Narration(SIZE_REPLY)]),
            PriceFaq: lambda intent, selected: Evaluation([Narration(PRICE_REPLY)]),
            AreaLookup: self._area_lookup,
            Fallback: lambda intent, selected: Evaluation([Narration(FALLBACK_REPLY)]),
        }

    def evaluate(self, intent: Intent, selected: Optional[Property] = None) -> Evaluation:
        handler = self._handlers.get(type(intent))
        if handler is None:
            raise TypeError(f"Unsupported intent: {intent!r}")
        evaluation = handler(intent, selected)
        LOGGER.debug(
            "intent_evaluated kind=%s narration=%d display=%s",
            intent.kind,
            len(evaluation.narration),
            None if evaluation.display is None else len(evaluation.display.properties),
        )
        return evaluation

    # ------------------------------------------------------------------
    # Distance primitives
    def distances_to_type(self, prop: Property, amenity_type: AmenityType) -> List[Tuple[Amenity, float]]:
        amenities = self.catalog.amenities_of_type(amenity_type)
        if not amenities:
            return []
        km = haversine_km_many(
            prop.latitude,
            prop.longitude,
            [amenity.latitude for amenity in amenities],
            [amenity.longitude for amenity in amenities],
        )
        return [(amenity, float(value)) for amenity, value in zip(amenities, km)]

    def nearest_amenity(self, prop: Property, amenity_type: AmenityType) -> Optional[Tuple[Amenity, float]]:
        """Closest amenity of a type; the first minimum in catalog order wins ties."""

        pairs = self.distances_to_type(prop, amenity_type)
        if not pairs:
            return None
        idx = int(np.argmin([km for _, km in pairs]))
        return pairs[idx]

    # ------------------------------------------------------------------
    # Amenity distance filters
    def _amenity_distance_filter(self, intent: AmenityDistanceFilter, selected: Optional[Property]) -> Evaluation:
        ranked = self._rank(intent.clauses, require_all=True, score=lambda kms: kms[0])
        return self._narrate_filter(intent.clauses, ranked, intent.clause.describe())

    def _amenity_and_filter(self, intent: AmenityAndFilter, selected: Optional[Property]) -> Evaluation:
        ranked = self._rank(
            intent.clauses,
            require_all=True,
            score=lambda kms: float(np.mean(kms)),
        )
        description = " and ".join(clause.describe() for clause in intent.clauses)
        return self._narrate_filter(intent.clauses, ranked, description)

    def _amenity_or_filter(self, intent: AmenityOrFilter, selected: Optional[Property]) -> Evaluation:
        ranked = self._rank(intent.clauses, require_all=False, score=min)
        first, second = intent.clauses[0], intent.clauses[1]
        if (first.distance, first.unit, first.operator) == (second.distance, second.unit, second.operator):
            description = f"{first.describe()} or {second.amenity_type.label}"
        else:
            description = f"{first.describe()} or {second.describe()}"
        return self._narrate_filter(intent.clauses, ranked, description)

    def _rank(
        self,
        clauses: Sequence[DistanceClause],
        require_all: bool,
        score: Callable[[List[float]], float],
    ) -> List[RankedProperty]:
        """Keep properties whose nearest amenities satisfy the clauses, best score first.

        ``score`` receives the nearest distances (km) of the satisfied clauses only.
        """

        ranked: List[RankedProperty] = []
        for prop in self.catalog.properties:
            nearest = [self.nearest_amenity(prop, clause.amenity_type) for clause in clauses]
            satisfied = [
                pair is not None and clause.satisfied_by(pair[1]) for clause, pair in zip(clauses, nearest)
            ]
            keep = all(satisfied) if require_all else any(satisfied)
            if not keep:
                continue
            hits = [(clause, pair[0], pair[1]) for clause, pair, ok in zip(clauses, nearest, satisfied) if ok]
            ranked.append(RankedProperty(property=prop, score_km=score([km for _, _, km in hits]), hits=tuple(hits)))
        # stable: equal scores keep catalog order
        ranked.sort(key=lambda item: item.score_km)
        return ranked

    def _narrate_filter(
        self,
        clauses: Sequence[DistanceClause],
        ranked: List[RankedProperty],
        description: str,
    ) -> Evaluation:
        amenity_filter = [clause.as_filter() for clause in clauses]
        display = build_display(self.catalog, [item.property for item in ranked], amenity_filter)
        count = len(ranked)
        if count == 0:
            return Evaluation(
                narration=[Narration(f"I couldn't find any properties {description}.")],
                display=display,
            )

        top = ranked[0]
        parts = []
        for clause, amenity, km in top.hits:
            parts.append(
                f"the nearest {amenity.type.label} is {amenity.name} at {amenity.address}, "
                f"{clause.distance_text(round(clause.from_km(km), 2))} away"
            )
        follow_up = f"{top.property.name} is the best match: " + " and ".join(parts) + "."
        if count > 1:
            remaining = count - 1
            follow_up += f" There {'is' if remaining == 1 else 'are'} {remaining} more matching {_plural(remaining)} on the map."
        return Evaluation(
            narration=[
                Narration(f"I found {count} {_plural(count)} {description}."),
                Narration(follow_up, property=top.property),
            ],
            display=display,
            spotlight=top.property,
        )

    # ------------------------------------------------------------------
    # Lookups
    def _proximity_lookup(self, intent: ProximityLookup, selected: Optional[Property]) -> Evaluation:
        label = intent.amenity_type.label
        if selected is None:
            return Evaluation(
                [Narration(f"Please select a property on the map first, then I can look for nearby {label} locations.")]
            )
        pairs = self.distances_to_type(selected, intent.amenity_type)
        if not pairs:
            return Evaluation([Narration(f"I couldn't find any {label} locations near {selected.name}.")])
        closest = sorted(pairs, key=lambda pair: pair[1])[:LOOKUP_LIMIT]
        lines = [f"Here are the closest {label} locations to {selected.name}:"]
        for idx, (amenity, km) in enumerate(closest, start=1):
            lines.append(f"{idx}. {amenity.name} - {_miles_text(km)} ({amenity.address})")
        display = build_display(self.catalog, [selected], intent.amenity_type)
        return Evaluation([Narration("\n".join(lines))], display=display)

    def _nearest_properties(self, intent: NearestPropertiesLookup, selected: Optional[Property]) -> Evaluation:
        label = intent.amenity_type.label
        scored = []
        for prop in self.catalog.properties:
            nearest = self.nearest_amenity(prop, intent.amenity_type)
            if nearest is not None:
                scored.append((prop, nearest))
        if not scored:
            return Evaluation([Narration(f"I couldn't find any properties near a {label} location.")])
        scored.sort(key=lambda item: item[1][1])
        closest = scored[:LOOKUP_LIMIT]
        top, (amenity, km) = closest[0]
        text = (
            f"The property closest to a {label} location is {top.name} at {top.address}, "
            f"{_miles_text(km)} from {amenity.name}."
        )
        if len(closest) > 1:
            text += f" I've put the {len(closest)} closest properties on the map."
        display = build_display(self.catalog, [prop for prop, _ in closest], intent.amenity_type)
        return Evaluation([Narration(text, property=top)], display=display, spotlight=top)

    # ------------------------------------------------------------------
    # Catalog browsing
    def _reset(self, intent: Reset, selected: Optional[Property]) -> Evaluation:
        count = len(self.catalog.properties)
        display = build_display(self.catalog, self.catalog.properties, None)
        return Evaluation([Narration(f"Showing all {count} {_plural(count)}.")], display=display)

    def _type_list(self, intent: TypeList, selected: Optional[Property]) -> Evaluation:
        types = self.catalog.property_types()
        if not types:
            return Evaluation([Narration("I couldn't find any properties in the catalog.")])
        labels = ", ".join(property_type.value for property_type in types)
        return Evaluation([Narration(f"We have several types of industrial properties: {labels}.")])

    def _type_filter(self, intent: TypeFilter, selected: Optional[Property]) -> Evaluation:
        label = intent.property_type.value
        matches = self.catalog.filter_properties(intent.property_type)
        display = build_display(self.catalog, matches, None)
        if not matches:
            return Evaluation([Narration(f"I couldn't find any {label} properties.")], display=display)
        first = matches[0]
        return Evaluation(
            narration=[
                Narration(f"I found {len(matches)} {label} {_plural(len(matches))}. Here's one example:"),
                Narration(spotlight_text(first), property=first),
            ],
            display=display,
            spotlight=first,
        )

    def _area_lookup(self, intent: AreaLookup, selected: Optional[Property]) -> Evaluation:
        # Properties carry no area attribute; a random pick stands in until they do.
        if not self.catalog.properties:
            return Evaluation([Narration(f"I couldn't find any properties in {intent.area} Dallas.")])
        choice = self.rng.choice(list(self.catalog.properties))
        return Evaluation(
            narration=[
                Narration(f"Looking for properties in {intent.area} Dallas. Let me find some options for you."),
                Narration(spotlight_text(choice), property=choice),
            ],
            spotlight=choice,
        )


def compute_filter_result(catalog: Catalog, intent: Intent, selected: Optional[Property] = None) -> Evaluation:
    return FilterEvaluator(catalog).evaluate(intent, selected)


__all__ = ["Narration", "Evaluation", "FilterEvaluator", "compute_filter_result", "spotlight_text"]
