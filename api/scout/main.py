from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .connectors.gemini import GeminiClient
from .forms import example_request, search_options
from .lookup import ApplicantLookupError, ApplicantLookupService
from .presentation import render_session
from .schemas import LookupRequest, LookupResponse, SearchOptions, SearchRequest, SessionView
from .sessions import SessionBusy, SessionNotFound, SessionStore


logger = logging.getLogger(__name__)

settings = get_settings()
app = FastAPI(title=settings.app_name, version="0.1.0", debug=settings.debug)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

sessions = SessionStore(ttl_seconds=settings.session_ttl_seconds, max_sessions=settings.max_sessions)


@lru_cache(maxsize=1)
def get_lookup_service() -> ApplicantLookupService:
    cfg = get_settings()
    return ApplicantLookupService(
        GeminiClient.from_settings(cfg),
        redirector_marker=cfg.redirector_marker,
        image_base=cfg.placeholder_image_base,
    )


def get_session_store() -> SessionStore:
    return sessions


@app.on_event("startup")
def _startup() -> None:
    # Fails fast when GEMINI_API_KEY is missing.
    get_lookup_service()
    logger.info("Lookup service ready (model=%s)", settings.gemini_model)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok", "version": "0.1.0"}


@app.get("/search/options", response_model=SearchOptions, response_model_by_alias=True)
async def get_search_options() -> SearchOptions:
    return search_options()


@app.post("/lookup", response_model=LookupResponse, response_model_by_alias=True)
async def post_lookup(
    payload: LookupRequest,
    service: ApplicantLookupService = Depends(get_lookup_service),
) -> LookupResponse:
    try:
        applicants = await service.lookup(payload.query, payload.filters, payload.exclude_urls)
    except ApplicantLookupError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return LookupResponse(applicants=applicants)


@app.post("/sessions", response_model=SessionView, response_model_by_alias=True, status_code=201)
async def create_session(
    service: ApplicantLookupService = Depends(get_lookup_service),
    store: SessionStore = Depends(get_session_store),
) -> SessionView:
    return render_session(store.create(service))


def _get_or_404(store: SessionStore, session_id: str):
    try:
        return store.get(session_id)
    except SessionNotFound as exc:
        raise HTTPException(status_code=404, detail="session not found") from exc


@app.get("/sessions/{session_id}", response_model=SessionView, response_model_by_alias=True)
async def get_session_view(session_id: str, store: SessionStore = Depends(get_session_store)) -> SessionView:
    return render_session(_get_or_404(store, session_id))


@app.delete("/sessions/{session_id}")
async def delete_session(session_id: str, store: SessionStore = Depends(get_session_store)) -> dict:
    try:
        store.remove(session_id)
    except SessionNotFound as exc:
        raise HTTPException(status_code=404, detail="session not found") from exc
    return {"deleted": session_id}


@app.post("/sessions/{session_id}/search", response_model=SessionView, response_model_by_alias=True)
async def post_session_search(
    session_id: str,
    payload: SearchRequest,
    store: SessionStore = Depends(get_session_store),
) -> SessionView:
    session = _get_or_404(store, session_id)
    applied = await session.search(payload.query, payload.filters)
    return render_session(session, superseded=not applied)


@app.post("/sessions/{session_id}/examples/{index}", response_model=SessionView, response_model_by_alias=True)
async def post_session_example(
    session_id: str,
    index: int,
    store: SessionStore = Depends(get_session_store),
) -> SessionView:
    session = _get_or_404(store, session_id)
    try:
        request = example_request(index)
    except IndexError as exc:
        raise HTTPException(status_code=404, detail="example not found") from exc
    applied = await session.search(request.query, request.filters)
    return render_session(session, superseded=not applied)


@app.post("/sessions/{session_id}/more", response_model=SessionView, response_model_by_alias=True)
async def post_session_more(session_id: str, store: SessionStore = Depends(get_session_store)) -> SessionView:
    session = _get_or_404(store, session_id)
    try:
        applied = await session.find_more()
    except SessionBusy as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return render_session(session, superseded=not applied)
