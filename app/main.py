"""Streamlit UI for the industrial property map chat."""

from __future__ import annotations

import sys
import time
from pathlib import Path
from typing import Dict, List, Optional

import streamlit as st
from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

load_dotenv(dotenv_path=ROOT_DIR / ".env", override=False)

from app.backend_client import BackendClient
from app.components.chat import chat_prompt, render_transcript
from app.components.map import build_map
from app.components.tables import render_property_table
from mapchat.models.chat import DisplayUpdate
from mapchat.services.map_view import map_bounds, results_caption
from mapchat.services.session import REPLY_DELAY_SECONDS

st.set_page_config(page_title="Industrial Map Chat", layout="wide", page_icon="🏭")

DISCLAIMER_HTML = "<p class='disclaimer'>Demo catalog of Dallas industrial properties. Informational only.</p>"


@st.cache_resource(show_spinner=False)
def get_backend_client() -> BackendClient:
    return BackendClient()


def load_styles() -> None:
    css_path = Path(__file__).resolve().parent / "assets" / "styles.css"
    if css_path.exists():
        st.markdown(f"<style>{css_path.read_text()}</style>", unsafe_allow_html=True)


def ensure_session(backend: BackendClient) -> None:
    if "chat_session_id" in st.session_state:
        return
    started = backend.start_session()
    st.session_state["chat_session_id"] = started["session_id"]
    st.session_state["messages"] = started["transcript"]
    st.session_state["display"] = None
    st.session_state["selected_id"] = None


def apply_result(result: Dict) -> None:
    st.session_state["messages"].extend(result.get("messages", []))
    if result.get("display") is not None:
        st.session_state["display"] = result["display"]
    selected = result.get("selected_property")
    st.session_state["selected_id"] = selected["id"] if selected else None


def select_property(backend: BackendClient, property_id: str) -> None:
    result = backend.select_property(st.session_state["chat_session_id"], property_id)
    apply_result(result)


def current_view(backend: BackendClient) -> tuple[List[Dict], List[Dict], Optional[str], Optional[tuple]]:
    display = st.session_state.get("display")
    if display is None:
        return backend.list_properties(), backend.list_amenities(), None, None
    model = DisplayUpdate.model_validate(display)
    return display["properties"], display["amenities"], results_caption(model), map_bounds(model.properties)


def render_page() -> None:
    backend = get_backend_client()
    ensure_session(backend)

    st.title("Industrial Map Chat · Dallas")
    chat_col, map_col = st.columns([2, 3])

    with chat_col:
        st.markdown("### Property Assistant")
        render_transcript(st.session_state["messages"], on_select=lambda pid: select_property(backend, pid))
        prompt = chat_prompt()
        if prompt:
            with st.spinner("Assistant is typing..."):
                time.sleep(REPLY_DELAY_SECONDS)
                result = backend.send_message(st.session_state["chat_session_id"], prompt)
            apply_result(result)
            st.rerun()

    with map_col:
        properties, amenities, caption, bounds = current_view(backend)
        if caption:
            st.caption(caption)
        fig = build_map(properties, amenities, selected_id=st.session_state.get("selected_id"), bounds=bounds)
        st.plotly_chart(fig, use_container_width=True)

        options = {prop["name"]: prop["id"] for prop in properties}
        if options:

            def on_pick() -> None:
                choice = st.session_state.get("map_select")
                if choice in options:
                    select_property(backend, options[choice])

            st.selectbox("Select a property", ["—"] + list(options), key="map_select", on_change=on_pick)
        render_property_table(properties)

    st.markdown(DISCLAIMER_HTML, unsafe_allow_html=True)


load_styles()
render_page()
