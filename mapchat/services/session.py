"""Turn-by-turn chat sessions over the property catalog."""

from __future__ import annotations

import os
import random
import threading
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Sequence

from ..db.catalog import Catalog, get_catalog
from ..models.chat import AmenityFilter, ChatMessage, DisplayUpdate, TurnResult
from ..models.property import Property
from ..utils.logging import get_logger
from .evaluator import FilterEvaluator, Narration, spotlight_text
from .interpreter import interpret

LOGGER = get_logger("services.session")

REPLY_DELAY_SECONDS = float(os.getenv("MAPCHAT_REPLY_DELAY_SECONDS", "1.0"))

GREETING = (
    "Hi there! I'm your industrial property assistant. "
    "How can I help you find the perfect property in Dallas?"
)

FilterCallback = Callable[[List[Property], AmenityFilter], None]
SelectCallback = Callable[[Property], None]


class SessionClosed(RuntimeError):
    """Raised when a turn is submitted to a session that has ended."""


class SessionNotFound(KeyError):
    """Raised when a session id is unknown to the store."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Session:
    """Owns the transcript, the selected property and the last display update.

    State only changes through ``apply_turn`` and ``select_property``; each turn is
    interpreted and evaluated on its own, so earlier filters never leak into later ones.
    Turns are serialised: one utterance is fully answered before the next is accepted.
    """

    def __init__(
        self,
        catalog: Optional[Catalog] = None,
        session_id: Optional[str] = None,
        on_filter_properties: Optional[FilterCallback] = None,
        on_property_select: Optional[SelectCallback] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = _utcnow,
        reply_delay: float = REPLY_DELAY_SECONDS,
    ) -> None:
        self.catalog = catalog or get_catalog()
        self.session_id = session_id or uuid.uuid4().hex
        self.evaluator = FilterEvaluator(self.catalog, rng=rng)
        self.on_filter_properties = on_filter_properties
        self.on_property_select = on_property_select
        self.clock = clock
        self.reply_delay = timedelta(seconds=reply_delay)
        self.selected_property: Optional[Property] = None
        self.last_display: Optional[DisplayUpdate] = None
        self.closed = False
        # reentrant so collaborator callbacks may read session state mid-turn
        self._lock = threading.RLock()
        self._transcript: List[ChatMessage] = []
        self._append("system", GREETING, self.clock())

    @property
    def transcript(self) -> Sequence[ChatMessage]:
        with self._lock:
            return tuple(self._transcript)

    def _append(self, sender: str, text: str, timestamp: datetime, prop: Optional[Property] = None) -> ChatMessage:
        message = ChatMessage(
            id=str(len(self._transcript) + 1),
            sender=sender,
            text=text,
            timestamp=timestamp,
            property=prop,
        )
        self._transcript.append(message)
        return message

    def _ensure_open(self) -> None:
        if self.closed:
            raise SessionClosed(self.session_id)

    def apply_turn(self, utterance: str) -> TurnResult:
        with self._lock:
            return self._apply_turn(utterance)

    def _apply_turn(self, utterance: str) -> TurnResult:
        self._ensure_open()
        text = (utterance or "").strip()
        if not text:
            return TurnResult(intent="empty", selected_property=self.selected_property)

        submitted_at = self.clock()
        messages = [self._append("user", text, submitted_at)]
        intent = interpret(text)
        evaluation = self.evaluator.evaluate(intent, self.selected_property)

        # replies are stamped as if sent after the typing delay
        reply_at = submitted_at + self.reply_delay
        for line in evaluation.narration:
            messages.append(self._append("system", line.text, reply_at, line.property))

        if evaluation.display is not None:
            self.last_display = evaluation.display
            if self.on_filter_properties:
                self.on_filter_properties(evaluation.display.properties, evaluation.display.amenity_filter)
        if evaluation.spotlight is not None:
            self.selected_property = evaluation.spotlight
            if self.on_property_select:
                self.on_property_select(evaluation.spotlight)

        LOGGER.info(
            "turn_processed session=%s intent=%s replies=%d display=%s",
            self.session_id,
            intent.kind,
            len(evaluation.narration),
            None if evaluation.display is None else len(evaluation.display.properties),
        )
        return TurnResult(
            intent=intent.kind,
            messages=messages,
            display=evaluation.display,
            selected_property=self.selected_property,
        )

    def select_property(self, property_id: str) -> TurnResult:
        """Focus a property picked on the map, spotlighting it once in the transcript."""

        with self._lock:
            return self._select_property(property_id)

    def _select_property(self, property_id: str) -> TurnResult:
        self._ensure_open()
        prop = self.catalog.get_property(property_id)
        self.selected_property = prop
        messages: List[ChatMessage] = []
        already_shown = any(
            message.property is not None and message.property.id == prop.id and prop.name in message.text
            for message in self._transcript
        )
        if not already_shown:
            line = Narration(spotlight_text(prop), property=prop)
            messages.append(self._append("system", line.text, self.clock(), line.property))
        LOGGER.info("property_selected session=%s property=%s", self.session_id, prop.id)
        return TurnResult(intent="property_selected", messages=messages, selected_property=prop)

    def close(self) -> None:
        """End the session once any in-flight turn has finished."""
        with self._lock:
            self.closed = True


class SessionStore:
    """In-memory registry of live sessions, shared by API requests."""

    def __init__(self, catalog_factory: Callable[[], Catalog] = get_catalog) -> None:
        self._catalog_factory = catalog_factory
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()

    def create(self) -> Session:
        session = Session(self._catalog_factory())
        with self._lock:
            self._sessions[session.session_id] = session
        LOGGER.info("session_created session=%s", session.session_id)
        return session

    def get(self, session_id: str) -> Session:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def end(self, session_id: str) -> None:
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            raise SessionNotFound(session_id)
        session.close()
        LOGGER.info("session_ended session=%s", session_id)


__all__ = ["Session", "SessionStore", "SessionClosed", "SessionNotFound", "GREETING", "REPLY_DELAY_SECONDS"]
