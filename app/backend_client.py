"""Helper client used by the Streamlit app to talk to the API or fall back to local sessions."""

from __future__ import annotations

import json
import os
from typing import Dict, List, Optional

import requests
from requests import Response

from mapchat.db.catalog import Catalog, get_catalog
from mapchat.services.session import Session


class BackendClient:
    def __init__(self) -> None:
        self.base_url = os.getenv("API_BASE_URL", "http://localhost:8000")
        self.session = requests.Session()
        self.use_api = self._ping_api()
        self.catalog: Optional[Catalog] = None
        self._local_sessions: Dict[str, Session] = {}
        if not self.use_api:
            self._enable_local_mode()

    def _ping_api(self) -> bool:
        try:
            resp = self.session.get(f"{self.base_url}/api/health", timeout=2)
            return resp.status_code == 200
        except requests.RequestException:
            return False

    def list_properties(self) -> List[Dict]:
        if self.use_api:
            try:
                resp = self.session.get(f"{self.base_url}/api/properties", params={"limit": 500}, timeout=10)
                self._raise_for_status(resp)
                return resp.json()["items"]
            except requests.RequestException:
                self._enable_local_mode()
        return [json.loads(prop.model_dump_json()) for prop in self.catalog.properties]

    def list_amenities(self) -> List[Dict]:
        if self.use_api:
            try:
                resp = self.session.get(f"{self.base_url}/api/amenities", timeout=10)
                self._raise_for_status(resp)
                return resp.json()["items"]
            except requests.RequestException:
                self._enable_local_mode()
        return [json.loads(amenity.model_dump_json()) for amenity in self.catalog.amenities]

    def start_session(self) -> Dict:
        if self.use_api:
            try:
                resp = self.session.post(f"{self.base_url}/api/sessions", timeout=10)
                self._raise_for_status(resp)
                return resp.json()
            except requests.RequestException:
                self._enable_local_mode()
        local = Session(self.catalog)
        self._local_sessions[local.session_id] = local
        return {
            "session_id": local.session_id,
            "transcript": [json.loads(message.model_dump_json()) for message in local.transcript],
            "selected_property": None,
        }

    def send_message(self, session_id: str, text: str) -> Dict:
        if self.use_api:
            resp = self.session.post(
                f"{self.base_url}/api/sessions/{session_id}/turns", json={"text": text}, timeout=10
            )
            self._raise_for_status(resp)
            return resp.json()
        result = self._local(session_id).apply_turn(text)
        return json.loads(result.model_dump_json())

    def select_property(self, session_id: str, property_id: str) -> Dict:
        if self.use_api:
            resp = self.session.post(
                f"{self.base_url}/api/sessions/{session_id}/select",
                json={"property_id": property_id},
                timeout=10,
            )
            self._raise_for_status(resp)
            return resp.json()
        result = self._local(session_id).select_property(property_id)
        return json.loads(result.model_dump_json())

    def _local(self, session_id: str) -> Session:
        try:
            return self._local_sessions[session_id]
        except KeyError:
            raise ValueError(f"Unknown chat session: {session_id}") from None

    def _enable_local_mode(self) -> None:
        if self.catalog is None:
            self.catalog = get_catalog()
        self.use_api = False

    def _raise_for_status(self, response: Response) -> None:
        response.raise_for_status()
