"""Rule-based interpreter turning free-text chat input into a single intent.

Matching is deliberately simple: the text is lowercased, keyword cues are plain
substring checks, and distance clauses come from one constrained grammar:

    (within|at least) <number>[.<number>] (mile|miles|km|kilometer|kilometers)
    (of|from|to) (fedex|ups|starbucks)

Every clause carries its own operator capture, so "within 1 mile of fedex and at
least 2 miles of starbucks" yields two independent clauses. Matchers run in a
fixed priority order and the first one that recognises the utterance wins.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from ..models.chat import Operator
from ..models.property import AmenityType, PropertyType
from ..utils.logging import get_logger
from .intents import (
    KILOMETERS,
    MILES,
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

LOGGER = get_logger("services.interpreter")

AMENITY_PATTERN = r"fedex|ups|starbucks"

CLAUSE_RE = re.compile(
    r"(?P<operator>within|at\s+least)\s+"
    r"(?P<distance>\d+(?:\.\d+)?)\s*"
    r"(?P<unit>miles?|km|kilometers?)\s+"
    r"(?:of|from|to)\s+"
    rf"(?P<amenity>{AMENITY_PATTERN})\b"
)
# "within 2 miles of fedex or ups" / "... of fedex and ups"
SHARED_TAIL_RE = re.compile(rf"\s*(?P<joiner>and|&|or)\s+(?P<amenity>{AMENITY_PATTERN})\b")
AND_JOINER_RE = re.compile(r"\band\b|&")
OR_JOINER_RE = re.compile(r"\bor\b")

PROXIMITY_CUES = ("nearby", "close", "near")
AMENITY_CUES: Tuple[Tuple[str, AmenityType], ...] = (
    ("fedex", AmenityType.FEDEX),
    ("ups", AmenityType.UPS),
    ("starbucks", AmenityType.STARBUCKS),
    ("shipping", AmenityType.FEDEX),
    ("parcel", AmenityType.UPS),
    ("coffee", AmenityType.STARBUCKS),
)
INTERROGATIVE_CUES = ("which", "what", "where", "property")
RESET_CUES = ("all", "reset")
RESET_TARGET_CUES = ("properties", "show")
TYPE_LIST_CUES = ("type", "types")
PROPERTY_TYPE_VOCABULARY: Tuple[PropertyType, ...] = (
    PropertyType.WAREHOUSE,
    PropertyType.MANUFACTURING,
    PropertyType.DISTRIBUTION,
    PropertyType.FLEX,
    PropertyType.OFFICE,
)
SIZE_CUES = ("size", "square", "sq ft", "sqft")
PRICE_CUES = ("price", "cost", "rate", "rent")
AREA_VOCABULARY = ("north", "south", "east", "west", "downtown", "central")


@dataclass(frozen=True)
class ClauseMatch:
    clause: DistanceClause
    start: int
    end: int


@dataclass(frozen=True)
class Utterance:
    """Normalised user input: lowercased text plus the distance clauses found in it."""

    raw: str
    text: str
    clauses: Tuple[ClauseMatch, ...]

    def contains(self, cues: Sequence[str]) -> bool:
        return any(cue in self.text for cue in cues)

    def first_cue(self, cues: Sequence[str]) -> Optional[str]:
        for cue in cues:
            if cue in self.text:
                return cue
        return None


def _parse_unit(token: str) -> str:
    return MILES if token.startswith("mile") else KILOMETERS


def _parse_operator(token: str) -> Operator:
    return Operator.WITHIN if token == "within" else Operator.AT_LEAST


def _parse_clause(match: re.Match) -> Optional[DistanceClause]:
    try:
        distance = float(match.group("distance"))
    except ValueError:
        return None
    return DistanceClause(
        amenity_type=AmenityType(match.group("amenity")),
        distance=distance,
        unit=_parse_unit(match.group("unit")),
        operator=_parse_operator(match.group("operator")),
        spoken=match.group("distance"),
    )


def tokenize(raw: str) -> Utterance:
    text = " ".join(raw.lower().split())
    clauses: List[ClauseMatch] = []
    for match in CLAUSE_RE.finditer(text):
        clause = _parse_clause(match)
        if clause is not None:
            clauses.append(ClauseMatch(clause=clause, start=match.start(), end=match.end()))
    return Utterance(raw=raw, text=text, clauses=tuple(clauses))


def _with_amenity(clause: DistanceClause, amenity: str) -> DistanceClause:
    return DistanceClause(
        amenity_type=AmenityType(amenity),
        distance=clause.distance,
        unit=clause.unit,
        operator=clause.operator,
        spoken=clause.spoken,
    )


def _joined_pair(utterance: Utterance, joiner: re.Pattern) -> Optional[Tuple[DistanceClause, DistanceClause]]:
    """Two full clauses with ``joiner`` in the text between them."""
    for first, second in zip(utterance.clauses, utterance.clauses[1:]):
        between = utterance.text[first.end:second.start]
        if joiner.search(between):
            return first.clause, second.clause
    return None


def _shared_pair(utterance: Utterance, joiners: Sequence[str]) -> Optional[Tuple[DistanceClause, DistanceClause]]:
    """One clause whose distance applies to a second amenity: "... of fedex or ups"."""
    for found in utterance.clauses:
        tail = SHARED_TAIL_RE.match(utterance.text, found.end)
        if tail and tail.group("joiner") in joiners:
            return found.clause, _with_amenity(found.clause, tail.group("amenity"))
    return None


def match_and_filter(utterance: Utterance) -> Optional[Intent]:
    pair = _joined_pair(utterance, AND_JOINER_RE) or _shared_pair(utterance, ("and", "&"))
    if pair:
        return AmenityAndFilter(clauses=pair)
    return None


def match_or_filter(utterance: Utterance) -> Optional[Intent]:
    pair = _joined_pair(utterance, OR_JOINER_RE) or _shared_pair(utterance, ("or",))
    if pair:
        return AmenityOrFilter(clauses=pair)
    return None


def match_distance_filter(utterance: Utterance) -> Optional[Intent]:
    if utterance.clauses:
        return AmenityDistanceFilter(clause=utterance.clauses[0].clause)
    return None


def _amenity_cue(utterance: Utterance) -> Optional[AmenityType]:
    for cue, amenity_type in AMENITY_CUES:
        if cue in utterance.text:
            return amenity_type
    return None


def match_proximity(utterance: Utterance) -> Optional[Intent]:
    if not utterance.contains(PROXIMITY_CUES):
        return None
    amenity_type = _amenity_cue(utterance)
    if amenity_type is None:
        return None
    return ProximityLookup(amenity_type=amenity_type)


def match_nearest_properties(utterance: Utterance) -> Optional[Intent]:
    if not utterance.contains(INTERROGATIVE_CUES):
        return None
    for amenity_type in AmenityType:
        if amenity_type.value in utterance.text:
            return NearestPropertiesLookup(amenity_type=amenity_type)
    return None


def match_reset(utterance: Utterance) -> Optional[Intent]:
    if "reset" in utterance.text:
        return Reset()
    if utterance.contains(RESET_CUES) and utterance.contains(RESET_TARGET_CUES):
        return Reset()
    return None


def match_type_list(utterance: Utterance) -> Optional[Intent]:
    if utterance.contains(TYPE_LIST_CUES):
        return TypeList()
    return None


def match_type_filter(utterance: Utterance) -> Optional[Intent]:
    for property_type in PROPERTY_TYPE_VOCABULARY:
        if property_type.value in utterance.text:
            return TypeFilter(property_type=property_type)
    return None


def match_size_faq(utterance: Utterance) -> Optional[Intent]:
    if utterance.contains(SIZE_CUES):
        return SizeFaq()
    return None


def match_price_faq(utterance: Utterance) -> Optional[Intent]:
    if utterance.contains(PRICE_CUES):
        return PriceFaq()
    return None


def match_area(utterance: Utterance) -> Optional[Intent]:
    area = utterance.first_cue(AREA_VOCABULARY)
    if area:
        return AreaLookup(area=area)
    return None


Matcher = Callable[[Utterance], Optional[Intent]]

MATCHERS: Tuple[Matcher, ...] = (
    match_and_filter,
    match_or_filter,
    match_distance_filter,
    match_proximity,
    match_nearest_properties,
    match_reset,
    match_type_list,
    match_type_filter,
    match_size_faq,
    match_price_faq,
    match_area,
)


def interpret(raw: str) -> Intent:
    """Classify ``raw`` into exactly one intent; never raises on free text."""

    utterance = tokenize(raw)
    for matcher in MATCHERS:
        intent = matcher(utterance)
        if intent is not None:
            LOGGER.debug("intent_classified kind=%s clauses=%d", intent.kind, len(utterance.clauses))
            return intent
    LOGGER.debug("intent_classified kind=fallback")
    return Fallback()


__all__ = ["ClauseMatch", "Utterance", "tokenize", "interpret", "MATCHERS"]
