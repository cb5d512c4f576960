"""
Estimate endpoints.

POST /api/estimate     - full estimate report (JSON)
POST /api/estimate/pdf - the same report rendered as a PDF

Inputs resolve in order: request body, then the caller's saved settings,
then configured defaults. The analysis defaults to the caller's current one.
"""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from sqlalchemy.orm import Session

from .. import analysis_service, schemas
from ..database import get_db
from ..identity import get_user_key
from ..pdf_generator import generate_estimate_pdf
from ..pricing_engine import PricingEngine
from ..settings_store import SettingsStore, merge_saved

router = APIRouter(prefix="/estimate", tags=["estimate"])


def _build_estimate(request: schemas.EstimateRequest, user_key: str, db: Session) -> dict:
    if request.analysis is not None:
        raw_analysis = request.analysis.model_dump(mode="json")
    else:
        session = analysis_service.find_session(user_key)
        raw_analysis = session.raw_analysis if session else None
    if raw_analysis is None:
        raise HTTPException(status_code=404, detail="No analysis yet. Upload a floor plan first.")

    saved = merge_saved(SettingsStore(db).fetch(user_key))
    # Fields the request leaves out keep their saved values
    project_settings = dict(saved["project_settings"])
    if request.settings is not None:
        project_settings.update(request.settings.model_dump(mode="json", exclude_unset=True))
    custom_rates = request.custom_rates if request.custom_rates is not None else saved["custom_rates"]
    custom_quantities = (
        request.custom_quantities if request.custom_quantities is not None else saved["custom_quantities"]
    )

    return PricingEngine().build_estimate(
        raw_analysis,
        project_settings,
        custom_rates=custom_rates,
        custom_quantities=custom_quantities,
        calibration_area=request.calibration_area,
        area_unit=request.area_unit,
    )


@router.post("/")
def estimate(
    request: schemas.EstimateRequest,
    user_key: str = Depends(get_user_key),
    db: Session = Depends(get_db),
):
    return _build_estimate(request, user_key, db)


@router.post("/pdf")
def estimate_pdf(
    request: schemas.EstimateRequest,
    user_key: str = Depends(get_user_key),
    db: Session = Depends(get_db),
):
    """Returns: application/pdf"""
    report = _build_estimate(request, user_key, db)
    pdf_bytes = generate_estimate_pdf(report)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": 'attachment; filename="Project_Estimate.pdf"',
        },
    )
