"""
Extraction Session API Routes
=============================

REST endpoints backing the upload -> extract -> review -> export flow.

Endpoints:
- POST   /api/sessions                 - Start a session
- GET    /api/sessions/{id}            - Current state (pages, result, error)
- DELETE /api/sessions/{id}            - Discard a session
- POST   /api/sessions/{id}/file       - Select an image or PDF
- POST   /api/sessions/{id}/rotate     - Rotate a page before extraction
- POST   /api/sessions/{id}/process    - Run the extraction
- GET    /api/sessions/{id}/table      - Result as HTML tables
- GET    /api/sessions/{id}/export     - Result as an .xlsx download
- GET    /api/stats                    - Usage counters
"""

import logging
from io import BytesIO
from typing import Optional

from fastapi import APIRouter, File, HTTPException, Query, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, StreamingResponse

from autommr.models import RotateRequest, SessionState, UsageStats
from autommr.services.exporter import build_workbook, export_filename
from autommr.services.renderer import render_mmr_html, render_sections_html
from autommr.services.session import ExtractionMode, ExtractionSession, SessionManager
from autommr.utils.counter_store import JsonFileStore, UsageCounters

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Extraction Sessions"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


# ============================================================================
# Shared State (Singletons)
# ============================================================================

_session_manager: Optional[SessionManager] = None
_usage_counters: Optional[UsageCounters] = None


def get_session_manager() -> SessionManager:
    """Get or create the session registry."""
    global _session_manager

    if _session_manager is None:
        _session_manager = SessionManager()
    return _session_manager


def get_usage_counters() -> UsageCounters:
    """Get or create the usage counters, loading persisted values."""
    global _usage_counters

    if _usage_counters is None:
        _usage_counters = UsageCounters(JsonFileStore())
        logger.info("Initialized UsageCounters singleton")
    return _usage_counters


def _get_session(session_id: str) -> ExtractionSession:
    session = get_session_manager().get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


# ============================================================================
# API Endpoints
# ============================================================================

@router.post("/sessions", response_model=SessionState, status_code=201)
async def create_session() -> SessionState:
    """Start a new extraction session."""
    return get_session_manager().create().to_state()


@router.get("/sessions/{session_id}", response_model=SessionState)
async def get_session(session_id: str) -> SessionState:
    """Get the current state of a session."""
    return _get_session(session_id).to_state()


@router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(session_id: str):
    """Discard a session and its pages."""
    if not get_session_manager().delete(session_id):
        raise HTTPException(status_code=404, detail="Session not found")


@router.post("/sessions/{session_id}/file", response_model=SessionState)
async def select_file(
    session_id: str,
    file: UploadFile = File(..., description="Manifest image (JPG, PNG, WEBP) or PDF")
) -> SessionState:
    """
    Select the file to extract.

    Unsupported files are reported in the session error and leave the
    previous selection and result untouched.
    """
    session = _get_session(session_id)
    data = await file.read()
    logger.info(f"Received {file.filename} ({len(data)} bytes, {file.content_type})")
    session.select_file(file.filename or "upload", file.content_type, data)
    return session.to_state()


@router.post("/sessions/{session_id}/rotate", response_model=SessionState)
async def rotate_page(session_id: str, request: RotateRequest) -> SessionState:
    """Rotate one page of the selected file by a multiple of 90 degrees."""
    session = _get_session(session_id)
    try:
        session.rotate_page(request.page_number, request.degrees)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return session.to_state()


@router.post("/sessions/{session_id}/process", response_model=SessionState)
async def process_session(
    session_id: str,
    mode: ExtractionMode = Query(ExtractionMode.MMR, description="mmr | sections")
) -> SessionState:
    """
    Run the extraction on the selected file.

    Failures are returned in the session ``error`` field. The model calls
    run in the threadpool; the session stays marked as loading until they
    finish.
    """
    session = _get_session(session_id)
    if session.is_loading:
        raise HTTPException(status_code=409, detail="An extraction is already running for this session")

    session.is_loading = True
    await run_in_threadpool(session.process, get_usage_counters(), mode=mode)
    return session.to_state()


@router.get("/sessions/{session_id}/table", response_class=HTMLResponse)
async def session_table(session_id: str) -> HTMLResponse:
    """Render the current result as HTML tables."""
    session = _get_session(session_id)
    if session.extracted_data is not None:
        return HTMLResponse(render_mmr_html(session.extracted_data))
    if session.sections:
        return HTMLResponse(render_sections_html(session.sections))
    raise HTTPException(status_code=404, detail="There is no extracted data to display.")


@router.get("/sessions/{session_id}/export")
async def export_session(session_id: str):
    """Download the current result as an Excel workbook."""
    session = _get_session(session_id)
    try:
        content = build_workbook(session.extracted_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    filename = export_filename()
    return StreamingResponse(
        BytesIO(content),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.get("/stats", response_model=UsageStats)
async def get_stats() -> UsageStats:
    """Documents processed and estimated minutes saved."""
    return UsageStats(**get_usage_counters().get_stats())
