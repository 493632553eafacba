"""Tabular view of the properties currently on the map."""

from __future__ import annotations

from typing import List

import pandas as pd
import streamlit as st


def _fmt_currency(value) -> str:
    if value is None:
        return "—"
    return f"${value:,.2f}"


def render_property_table(properties: List[dict]) -> None:
    if not properties:
        st.info("No properties match the current filter.")
        return
    df = pd.DataFrame(properties)
    df = df.rename(
        columns={
            "name": "Property",
            "type": "Type",
            "square_feet": "Size (SF)",
            "price_per_sqft": "Rate ($/SF)",
            "city": "City",
        }
    )
    df["Rate ($/SF)"] = df["Rate ($/SF)"].apply(_fmt_currency)
    df["Size (SF)"] = df["Size (SF)"].apply(lambda x: f"{int(x):,}")
    df["Type"] = df["Type"].str.title()
    st.dataframe(df[["Property", "Type", "Size (SF)", "Rate ($/SF)", "City"]], hide_index=True, width="stretch")
