"""
Project settings endpoints.

GET  /api/settings - the caller's saved settings laid over the defaults
POST /api/settings - upsert settings and/or override maps
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..identity import get_user_key
from ..settings_store import SettingsStore, merge_saved

router = APIRouter(prefix="/settings", tags=["settings"])


def _settings_response(saved: dict) -> dict:
    merged = merge_saved(saved)
    return {
        "saved": bool(saved),
        **merged,
    }


@router.get("/")
def get_settings(user_key: str = Depends(get_user_key), db: Session = Depends(get_db)):
    return _settings_response(SettingsStore(db).fetch(user_key))


@router.post("/")
def save_settings(
    payload: schemas.SettingsPayload,
    user_key: str = Depends(get_user_key),
    db: Session = Depends(get_db),
):
    """Fields left out of the payload, at either level, keep their stored values."""
    store = SettingsStore(db)
    project_settings = None
    if payload.project_settings is not None:
        project_settings = dict(store.fetch(user_key).get("project_settings") or {})
        project_settings.update(payload.project_settings.model_dump(mode="json", exclude_unset=True))
    store.save(
        user_key,
        project_settings=project_settings,
        custom_rates=payload.custom_rates,
        custom_quantities=payload.custom_quantities,
    )
    return _settings_response(store.fetch(user_key))
