import random
import threading
import time
from datetime import datetime, timedelta, timezone

import pytest

from mapchat.db.catalog import Catalog, PropertyNotFound
from mapchat.services import session as session_module
from mapchat.services.session import GREETING, Session, SessionClosed, SessionNotFound, SessionStore

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _session(catalog, **kwargs):
    return Session(catalog, clock=lambda: T0, reply_delay=1.0, **kwargs)


def test_new_session_starts_with_greeting(dallas_catalog):
    session = _session(dallas_catalog)
    assert [m.text for m in session.transcript] == [GREETING]
    assert session.transcript[0].sender == "system"


def test_turn_appends_user_message_and_delayed_replies(dallas_catalog):
    session = _session(dallas_catalog)
    result = session.apply_turn("what types do you have")
    assert result.intent == "type_list"
    user, reply = result.messages
    assert (user.sender, user.text, user.timestamp) == ("user", "what types do you have", T0)
    assert reply.sender == "system"
    assert reply.timestamp == T0 + timedelta(seconds=1)
    assert [m.id for m in session.transcript] == ["1", "2", "3"]


def test_transcript_is_append_only(dallas_catalog):
    session = _session(dallas_catalog)
    before = list(session.transcript)
    session.apply_turn("within 2 miles of ups")
    middle = list(session.transcript)
    session.apply_turn("reset")
    after = list(session.transcript)
    assert middle[: len(before)] == before
    assert after[: len(middle)] == middle
    assert len(after) > len(middle) > len(before)


def test_blank_input_is_ignored(dallas_catalog):
    session = _session(dallas_catalog)
    result = session.apply_turn("   ")
    assert result.messages == []
    assert len(session.transcript) == 1


def test_proximity_without_selection_emits_no_filter(dallas_catalog):
    filtered = []
    session = _session(dallas_catalog, on_filter_properties=lambda props, overlay: filtered.append(props))
    result = session.apply_turn("starbucks nearby")
    assert result.display is None
    assert filtered == []
    assert len(result.messages) == 2
    assert "select a property" in result.messages[1].text


def test_proximity_after_selecting_a_property(dallas_catalog):
    session = _session(dallas_catalog)
    session.select_property("1")
    result = session.apply_turn("any coffee nearby?")
    assert result.display is not None
    assert [p.id for p in result.display.properties] == ["1"]
    assert {a.type.value for a in result.display.amenities} == {"starbucks"}
    assert result.messages[1].text.count("\n") == 3


def test_reset_after_filter_restores_catalog(dallas_catalog):
    calls = []
    session = _session(dallas_catalog, on_filter_properties=lambda props, overlay: calls.append((props, overlay)))
    session.apply_turn("within 1 mile of fedex")
    assert len(calls[0][0]) < len(dallas_catalog.properties)
    assert calls[0][1] is not None

    for text in ("reset", "show all properties"):
        result = session.apply_turn(text)
        assert len(result.display.properties) == len(dallas_catalog.properties)
        assert result.display.amenity_filter is None
        assert calls[-1] == (result.display.properties, None)
    assert session.last_display.amenity_filter is None


def test_spotlight_updates_selection_and_calls_back(dallas_catalog):
    selected = []
    session = _session(dallas_catalog, on_property_select=selected.append)
    result = session.apply_turn("any warehouse")
    assert result.selected_property.type.value == "warehouse"
    assert selected == [result.selected_property]
    assert session.selected_property == result.selected_property
    assert result.messages[-1].property == result.selected_property


def test_area_lookup_picks_a_catalog_property(dallas_catalog):
    session = _session(dallas_catalog, rng=random.Random(3))
    result = session.apply_turn("something in the north")
    assert result.intent == "area_lookup"
    assert result.selected_property in dallas_catalog.properties


def test_select_property_spotlights_once(dallas_catalog):
    session = _session(dallas_catalog)
    first = session.select_property("3")
    assert first.messages[0].text == "Here's information about Northwest Highway Distribution:"
    assert first.messages[0].property.id == "3"
    again = session.select_property("3")
    assert again.messages == []
    assert session.selected_property.id == "3"


def test_select_unknown_property_raises(dallas_catalog):
    session = _session(dallas_catalog)
    with pytest.raises(PropertyNotFound):
        session.select_property("missing")


def test_closed_session_rejects_turns(dallas_catalog):
    session = _session(dallas_catalog)
    session.close()
    with pytest.raises(SessionClosed):
        session.apply_turn("reset")


def test_store_lifecycle(dallas_catalog):
    store = SessionStore(lambda: dallas_catalog)
    session = store.create()
    assert store.get(session.session_id) is session
    store.end(session.session_id)
    assert session.closed
    with pytest.raises(SessionNotFound):
        store.get(session.session_id)
    with pytest.raises(SessionNotFound):
        store.end(session.session_id)


def test_turns_are_independent_of_previous_filters(make_property, make_amenity):
    catalog = Catalog(
        [make_property("A", 0.5), make_property("B", 20.0)],
        [make_amenity("f1", "fedex", 0.0), make_amenity("u1", "ups", 20.0)],
    )
    session = _session(catalog)
    first = session.apply_turn("within 1 km of fedex")
    second = session.apply_turn("within 1 km of ups")
    assert [p.id for p in first.display.properties] == ["A"]
    assert [p.id for p in second.display.properties] == ["B"]


def _slow_interpret(monkeypatch, started=None):
    real = session_module.interpret

    def slow(text):
        if started is not None:
            started.set()
        time.sleep(0.05)
        return real(text)

    monkeypatch.setattr(session_module, "interpret", slow)


def test_concurrent_turns_do_not_interleave(dallas_catalog, monkeypatch):
    _slow_interpret(monkeypatch)
    session = _session(dallas_catalog)
    threads = [threading.Thread(target=session.apply_turn, args=("what types do you have",)) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    senders = [m.sender for m in session.transcript]
    assert senders == ["system"] + ["user", "system"] * 4
    assert [m.id for m in session.transcript] == [str(i) for i in range(1, 10)]


def test_close_waits_for_turn_in_flight(dallas_catalog, monkeypatch):
    started = threading.Event()
    _slow_interpret(monkeypatch, started)
    session = _session(dallas_catalog)
    results = []
    worker = threading.Thread(target=lambda: results.append(session.apply_turn("reset")))
    worker.start()
    assert started.wait(1.0)
    session.close()
    worker.join()
    assert [m.sender for m in results[0].messages] == ["user", "system"]
    assert session.transcript[-1].sender == "system"
    with pytest.raises(SessionClosed):
        session.apply_turn("reset")
