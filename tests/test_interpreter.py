import pytest

from mapchat.models.chat import Operator
from mapchat.models.property import AmenityType, PropertyType
from mapchat.services.intents import (
    KILOMETERS,
    MILES,
    AmenityAndFilter,
    AmenityDistanceFilter,
    AmenityOrFilter,
    AreaLookup,
    Fallback,
    NearestPropertiesLookup,
    PriceFaq,
    ProximityLookup,
    Reset,
    SizeFaq,
    TypeFilter,
    TypeList,
    number_text,
)
from mapchat.services.interpreter import interpret, tokenize


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Show me properties within 5 miles of FedEx", AmenityDistanceFilter),
        ("within 1 mile of fedex & at least 2 miles of starbucks", AmenityAndFilter),
        ("within 2 miles of fedex and ups", AmenityAndFilter),
        ("within 2 miles of fedex or ups", AmenityOrFilter),
        ("within 1 km of ups or within 2 km of starbucks", AmenityOrFilter),
        ("any coffee nearby?", ProximityLookup),
        ("which property has a starbucks", NearestPropertiesLookup),
        ("reset", Reset),
        ("Show all properties", Reset),
        ("what types do you have", TypeList),
        ("do you have warehouse space", TypeFilter),
        ("what size are they", SizeFaq),
        ("how much does it cost", PriceFaq),
        ("anything downtown", AreaLookup),
        ("hello", Fallback),
    ],
)
def test_priority_order_classification(text, expected):
    assert isinstance(interpret(text), expected)


def test_single_clause_payload_keeps_user_number_and_unit():
    intent = interpret("Show me properties WITHIN 5 Miles of FedEx")
    clause = intent.clause
    assert clause.amenity_type == AmenityType.FEDEX
    assert clause.distance == 5
    assert clause.unit == MILES
    assert clause.operator == Operator.WITHIN
    assert clause.distance_km == pytest.approx(8.0467)


@pytest.mark.parametrize(
    "text, unit, distance_km",
    [
        ("within 2.5 km from ups", KILOMETERS, 2.5),
        ("within 3 kilometers to starbucks", KILOMETERS, 3.0),
        ("within 1 kilometer of starbucks", KILOMETERS, 1.0),
        ("within 2 mile of ups", MILES, 3.21868),
    ],
)
def test_unit_normalisation(text, unit, distance_km):
    clause = interpret(text).clause
    assert clause.unit == unit
    assert clause.distance_km == pytest.approx(distance_km)


def test_each_clause_captures_its_own_operator():
    intent = interpret("at least 2 miles of starbucks and within 1 mile of fedex")
    first, second = intent.clauses
    assert (first.amenity_type, first.operator) == (AmenityType.STARBUCKS, Operator.AT_LEAST)
    assert (second.amenity_type, second.operator) == (AmenityType.FEDEX, Operator.WITHIN)

    intent = interpret("within 1 mile of fedex and at least 2 miles of starbucks")
    first, second = intent.clauses
    assert first.operator == Operator.WITHIN
    assert second.operator == Operator.AT_LEAST


def test_shared_distance_applies_to_both_amenities():
    intent = interpret("at least 3 km from fedex or starbucks")
    assert [c.amenity_type for c in intent.clauses] == [AmenityType.FEDEX, AmenityType.STARBUCKS]
    assert {(c.distance, c.unit, c.operator) for c in intent.clauses} == {(3.0, KILOMETERS, Operator.AT_LEAST)}


def test_malformed_number_falls_through():
    assert tokenize("within five miles of fedex").clauses == ()
    assert isinstance(interpret("within five miles of fedex"), Fallback)


def test_synonyms_map_to_amenity_types():
    assert interpret("any coffee nearby?").amenity_type == AmenityType.STARBUCKS
    assert interpret("shipping close by").amenity_type == AmenityType.FEDEX
    assert interpret("parcel drop near here").amenity_type == AmenityType.UPS


def test_type_filter_and_area_payloads():
    assert interpret("any flex buildings").property_type == PropertyType.FLEX
    assert interpret("something in the north").area == "north"


def test_whitespace_is_collapsed_before_matching():
    intent = interpret("  within   4   km\tof   UPS ")
    assert isinstance(intent, AmenityDistanceFilter)
    assert intent.clause.distance == 4


def test_clauses_keep_the_typed_number():
    intent = interpret("within 0.50 miles of fedex or ups")
    assert [c.spoken for c in intent.clauses] == ["0.50", "0.50"]
    assert [c.describe() for c in intent.clauses] == ["within 0.50 miles of FedEx", "within 0.50 miles of UPS"]
    assert interpret("within 1 mile of ups").clause.describe() == "within 1 mile of UPS"


@pytest.mark.parametrize(
    "value, expected",
    [(2.0, "2"), (1.5, "1.5"), (0.126, "0.13"), (1234567.0, "1234567"), (-0.001, "0")],
)
def test_number_text_is_plain_decimal(value, expected):
    assert number_text(value) == expected
