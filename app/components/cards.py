"""Streamlit components for property cards."""

from __future__ import annotations

from typing import Callable, Dict, Optional

import streamlit as st


def availability_pill(available: Optional[bool]) -> str:
    tone = "available" if available else "leased"
    return f"availability-pill availability-{tone}"


def render_property_card(
    property_data: Dict,
    on_click: Callable[[], None],
    key: Optional[str] = None,
) -> None:
    key = key or property_data.get("id")
    available = property_data.get("available")
    card_html = f"""
        <div class="property-card">
            <div class="property-card__header">
                <span class="{availability_pill(available)}">{'Available' if available else 'Leased'}</span>
                <span class="property-card__type">{property_data.get('type', '').title()}</span>
            </div>
            <h4>{property_data.get('name')}</h4>
            <p class="property-card__meta">{property_data.get('address')}, {property_data.get('city')}, {property_data.get('state')} {property_data.get('zip')}</p>
            <p class="property-card__meta">{int(property_data.get('square_feet') or 0):,} SF · Built {property_data.get('year_built')}</p>
            <p class="property-card__value">${float(property_data.get('price_per_sqft') or 0):.2f}/SF</p>
        </div>
    """
    with st.container():
        st.markdown(card_html, unsafe_allow_html=True)
        st.button("Show on map", key=f"open-{key}", on_click=on_click)
