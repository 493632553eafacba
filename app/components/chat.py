"""Property assistant chat panel."""

from __future__ import annotations

from typing import Callable, Dict, List, Optional

import streamlit as st

from app.components.cards import render_property_card


def _format_time(timestamp: str) -> str:
    # ISO timestamps from the API; show HH:MM like a chat client
    return timestamp[11:16] if len(timestamp) >= 16 else timestamp


def render_transcript(messages: List[Dict], on_select: Callable[[str], None]) -> None:
    for message in messages:
        role = "user" if message["sender"] == "user" else "assistant"
        with st.chat_message(role):
            st.markdown(message["text"].replace("\n", "  \n"))
            prop = message.get("property")
            if prop:
                render_property_card(prop, on_click=lambda pid=prop["id"]: on_select(pid), key=f"msg-{message['id']}")
            st.caption(_format_time(str(message.get("timestamp", ""))))


def chat_prompt(input_key: str = "chat_input") -> Optional[str]:
    return st.chat_input("Ask about industrial properties...", key=input_key)
