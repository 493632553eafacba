from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import APIRouter, FastAPI, HTTPException, Query
from fastapi.encoders import jsonable_encoder

load_dotenv(dotenv_path=Path(__file__).resolve().parents[1] / ".env", override=False)

from .db.catalog import PropertyNotFound, get_catalog
from .models.chat import (
    AmenityListResponse,
    PropertyListResponse,
    SelectRequest,
    SessionResponse,
    TurnRequest,
)
from .models.property import AmenityType, PropertyType
from .services.session import Session, SessionClosed, SessionNotFound, SessionStore
from .utils.logging import get_logger

LOGGER = get_logger("api")

app = FastAPI(title="Industrial Map Chat")
router = APIRouter(prefix="/api")
sessions = SessionStore()


def _session(session_id: str) -> Session:
    try:
        return sessions.get(session_id)
    except SessionNotFound:
        raise HTTPException(404, detail="session not found") from None


def _session_payload(session: Session) -> dict:
    payload = SessionResponse(
        session_id=session.session_id,
        transcript=list(session.transcript),
        selected_property=session.selected_property,
    )
    return jsonable_encoder(payload)


@router.get("/health")
def health(): return {"status": "ok"}


@router.get("/properties")
def list_props(type: Optional[PropertyType] = Query(None), limit: int = Query(200, ge=1, le=500)):
    catalog = get_catalog()
    items = catalog.filter_properties(type, limit=limit)
    return jsonable_encoder(PropertyListResponse(items=items, total=len(catalog.properties)))


@router.get("/amenities")
def list_amenities(type: Optional[AmenityType] = Query(None)):
    catalog = get_catalog()
    items = catalog.amenities_of_type(type) if type else list(catalog.amenities)
    return jsonable_encoder(AmenityListResponse(items=items, total=len(items)))


@router.post("/sessions")
def create_session():
    return _session_payload(sessions.create())


@router.get("/sessions/{session_id}")
def get_session(session_id: str):
    return _session_payload(_session(session_id))


@router.delete("/sessions/{session_id}")
def end_session(session_id: str):
    try:
        sessions.end(session_id)
    except SessionNotFound:
        raise HTTPException(404, detail="session not found") from None
    return {"status": "ended"}


@router.post("/sessions/{session_id}/turns")
def post_turn(session_id: str, req: TurnRequest):
    session = _session(session_id)
    try:
        result = session.apply_turn(req.text)
    except SessionClosed:
        raise HTTPException(409, detail="session has ended") from None
    return jsonable_encoder(result)


@router.post("/sessions/{session_id}/select")
def select_property(session_id: str, req: SelectRequest):
    session = _session(session_id)
    try:
        result = session.select_property(req.property_id)
    except PropertyNotFound:
        raise HTTPException(404, detail=f"property not found: {req.property_id}") from None
    except SessionClosed:
        raise HTTPException(409, detail="session has ended") from None
    return jsonable_encoder(result)


app.include_router(router)
