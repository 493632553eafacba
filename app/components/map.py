"""Plotly map of the displayed properties and the amenity overlay."""

from __future__ import annotations

from typing import Dict, List, Optional

import plotly.graph_objects as go

PROPERTY_COLORS = {
    "warehouse": "#3b82f6",
    "manufacturing": "#f97316",
    "distribution": "#22c55e",
    "flex": "#a855f7",
    "office": "#ec4899",
}
AMENITY_COLORS = {
    "ups": "#7C2629",
    "fedex": "#4D148C",
    "starbucks": "#066D38",
}
AMENITY_LABELS = {"ups": "UPS", "fedex": "FedEx", "starbucks": "Starbucks"}
DALLAS_CENTER = {"lat": 32.78, "lon": -96.8}


def _zoom_for(bounds: Optional[tuple]) -> float:
    if bounds is None:
        return 10
    min_lon, min_lat, max_lon, max_lat = bounds
    span = max(max_lon - min_lon, max_lat - min_lat)
    if span < 0.01:
        return 14
    if span < 0.05:
        return 12.5
    if span < 0.15:
        return 11
    return 10


def build_map(
    properties: List[Dict],
    amenities: List[Dict],
    selected_id: Optional[str] = None,
    bounds: Optional[tuple] = None,
) -> go.Figure:
    fig = go.Figure()
    for prop_type, color in PROPERTY_COLORS.items():
        group = [p for p in properties if p.get("type") == prop_type]
        if not group:
            continue
        fig.add_trace(
            go.Scattermap(
                lat=[p["latitude"] for p in group],
                lon=[p["longitude"] for p in group],
                mode="markers",
                marker=dict(size=[18 if p["id"] == selected_id else 12 for p in group], color=color),
                text=[p["name"] for p in group],
                customdata=[p["id"] for p in group],
                hovertemplate="%{text}<extra></extra>",
                name=prop_type.title(),
            )
        )
    for amenity_type, color in AMENITY_COLORS.items():
        group = [a for a in amenities if a.get("type") == amenity_type]
        if not group:
            continue
        fig.add_trace(
            go.Scattermap(
                lat=[a["latitude"] for a in group],
                lon=[a["longitude"] for a in group],
                mode="markers",
                marker=dict(size=9, color=color, symbol="circle"),
                text=[f"{a['name']}<br>{a['address']}" for a in group],
                hovertemplate="%{text}<extra></extra>",
                name=AMENITY_LABELS[amenity_type],
            )
        )

    center = DALLAS_CENTER
    if bounds is not None:
        min_lon, min_lat, max_lon, max_lat = bounds
        center = {"lat": (min_lat + max_lat) / 2, "lon": (min_lon + max_lon) / 2}
    fig.update_layout(
        map=dict(style="carto-positron", center=center, zoom=_zoom_for(bounds)),
        margin=dict(l=0, r=0, t=0, b=0),
        height=560,
        legend=dict(orientation="h", yanchor="bottom", y=0.01, xanchor="left", x=0.01),
    )
    return fig
