"""
Saved project settings and overrides, keyed by user.

fetch() returns whatever was saved - any field may be missing.
merge_saved() lays saved values over the in-memory defaults so callers
never have to care which fields were stored.
"""

from datetime import datetime

from sqlalchemy.orm import Session

from . import models
from .config import settings


def default_project_settings() -> dict:
    return {
        "currency": settings.DEFAULT_CURRENCY,
        "wall_height_m": settings.DEFAULT_WALL_HEIGHT_M,
        "brick_size": settings.DEFAULT_BRICK_SIZE,
    }


class SettingsStore:

    def __init__(self, db: Session):
        self.db = db

    def _get_row(self, user_key: str):
        return self.db.query(models.UserSettings).filter(
            models.UserSettings.user_key == user_key
        ).first()

    def fetch(self, user_key: str) -> dict:
        """
        Saved {project_settings?, custom_rates?, custom_quantities?} for a user.
        Empty dict when nothing has been saved.
        """
        row = self._get_row(user_key)
        if row is None:
            return {}
        saved = {}
        if row.project_settings is not None:
            saved["project_settings"] = row.project_settings
        if row.custom_rates is not None:
            saved["custom_rates"] = row.custom_rates
        if row.custom_quantities is not None:
            saved["custom_quantities"] = row.custom_quantities
        return saved

    def save(self, user_key: str, project_settings: dict = None,
             custom_rates: dict = None, custom_quantities: dict = None) -> models.UserSettings:
        """Upsert the user's settings row. None leaves a stored field as it was."""
        row = self._get_row(user_key)
        if row is None:
            row = models.UserSettings(user_key=user_key)
            self.db.add(row)
        if project_settings is not None:
            row.project_settings = project_settings
        if custom_rates is not None:
            row.custom_rates = custom_rates
        if custom_quantities is not None:
            row.custom_quantities = custom_quantities
        row.updated_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(row)
        return row


def merge_saved(saved: dict, project_settings: dict = None,
                custom_rates: dict = None, custom_quantities: dict = None) -> dict:
    """
    Overlay saved values on the current ones.

    project_settings are merged key by key (a saved partial settings dict
    keeps current values for keys it lacks); override maps are replaced
    wholesale when present.
    """
    merged_settings = dict(project_settings or default_project_settings())
    merged_settings.update(saved.get("project_settings") or {})

    rates = saved.get("custom_rates")
    quantities = saved.get("custom_quantities")
    return {
        "project_settings": merged_settings,
        "custom_rates": dict(rates if rates is not None else (custom_rates or {})),
        "custom_quantities": dict(quantities if quantities is not None else (custom_quantities or {})),
    }
