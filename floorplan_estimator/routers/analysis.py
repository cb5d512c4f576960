"""
Floor-plan analysis endpoints.

POST   /api/analyze          - upload a plan (image or PDF), run the AI analysis
GET    /api/analysis/current - the caller's current raw analysis
DELETE /api/analysis/current - clear it (saved settings and overrides are kept)

Only the newest analyze request per user may replace the current analysis.
A failed analysis never touches it.
"""

import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool

from .. import analysis_service
from ..calculators.calibration import AREA_UNITS, suggested_calibration_area
from ..config import settings
from ..identity import get_user_key

logger = logging.getLogger(__name__)

router = APIRouter(tags=["analysis"])


def _get_extension(filename: str) -> str:
    if not filename or "." not in filename:
        return ""
    return filename.rsplit(".", 1)[-1].lower()


def _service_error_status(error: analysis_service.AnalysisServiceError) -> int:
    if isinstance(error, analysis_service.AnalysisNotConfigured):
        return 500
    return 503 if error.retryable else 502


@router.post("/analyze")
async def analyze(
    file: UploadFile = File(...),
    area_unit: str = Form("sqm"),
    user_key: str = Depends(get_user_key),
):
    """
    Analyze an uploaded floor plan.

    - Validates file type (jpg, jpeg, png, webp, pdf) and size (MAX_UPLOAD_MB)
    - Replaces the caller's current analysis on success
    - Returns the raw analysis and the suggested calibration area in area_unit
    """
    if area_unit not in AREA_UNITS:
        raise HTTPException(status_code=400, detail=f"area_unit must be one of: {', '.join(AREA_UNITS)}")

    ext = _get_extension(file.filename or "")
    if ext not in analysis_service.MIME_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"File type '{ext}' not allowed. Allowed: {', '.join(sorted(analysis_service.MIME_TYPES))}",
        )

    file_bytes = await file.read()
    if len(file_bytes) == 0:
        raise HTTPException(status_code=400, detail="Empty file.")
    max_bytes = settings.MAX_UPLOAD_MB * 1024 * 1024
    if len(file_bytes) > max_bytes:
        raise HTTPException(
            status_code=400,
            detail=f"File too large ({len(file_bytes) / 1024 / 1024:.1f}MB). Maximum is {settings.MAX_UPLOAD_MB}MB.",
        )

    session = analysis_service.get_session(user_key)
    ticket = session.begin()

    try:
        raw_analysis = await run_in_threadpool(
            analysis_service.analyze_floor_plan, file_bytes, analysis_service.MIME_TYPES[ext]
        )
    except analysis_service.AnalysisServiceError as e:
        logger.warning("Analysis failed for %s: %s", file.filename, e.message)
        raise HTTPException(status_code=_service_error_status(e), detail=e.message)

    if not session.commit(ticket, raw_analysis, file.filename):
        raise HTTPException(status_code=409, detail="Superseded by a newer analysis request")

    return {
        "file_name": file.filename,
        "analysis": raw_analysis,
        "area_unit": area_unit,
        "suggested_calibration_area": suggested_calibration_area(raw_analysis, area_unit),
    }


@router.get("/analysis/current")
def get_current_analysis(user_key: str = Depends(get_user_key)):
    session = analysis_service.find_session(user_key)
    if session is None or session.raw_analysis is None:
        raise HTTPException(status_code=404, detail="No analysis yet. Upload a floor plan first.")
    return {"file_name": session.file_name, "analysis": session.raw_analysis}


@router.delete("/analysis/current")
def clear_current_analysis(user_key: str = Depends(get_user_key)):
    """Reset the workspace. Also invalidates any analyze request still in flight."""
    session = analysis_service.find_session(user_key)
    if session is not None:
        session.clear()
    return {"ok": True}
