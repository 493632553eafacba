from typing import Any, Dict

from ..utils.coerce import to_bool, to_float, to_int, to_str


def map_property_row(r: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": to_str(r.get("id")),
        "name": to_str(r.get("name")),
        "address": to_str(r.get("address")),
        "city": to_str(r.get("city")),
        "state": to_str(r.get("state")),
        "zip": to_str(r.get("zip") or r.get("zipcode")),
        "longitude": to_float(r.get("longitude")),
        "latitude": to_float(r.get("latitude")),
        "square_feet": to_int(r.get("square_feet") or r.get("sqft")),
        "price_per_sqft": to_float(r.get("price_per_sqft")),
        "type": to_str(r.get("type")).lower(),
        "year_built": to_int(r.get("year_built")),
        "available": to_bool(r.get("available")),
        "image": to_str(r.get("image")),
        "description": to_str(r.get("description")),
    }


def map_amenity_row(r: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": to_str(r.get("id")),
        "name": to_str(r.get("name")),
        "type": to_str(r.get("type")).lower(),
        "longitude": to_float(r.get("longitude")),
        "latitude": to_float(r.get("latitude")),
        "address": to_str(r.get("address")),
    }
