"""
Abstract base class for the quantity calculators.

Input: a calibrated analysis dict (or one room of it), project settings dict,
and the custom rate overrides.
Output: MaterialItem dicts - {id, category, name, unit, quantity, unit_rate, total_cost}.
"""

import logging
import math
from abc import ABC, abstractmethod

from .material_catalog import MaterialCatalog

logger = logging.getLogger(__name__)

SQFT_PER_SQM = 10.7639
FT_PER_M = 3.28084

# Digits kept before rounding a quantity up. Binary floats turn 32.706 * 500
# into 16353.000000000002, which must still be 16353 bricks.
QUANTITY_PRECISION = 6


class BaseCalculator(ABC):
    """All quantity calculators inherit from this."""

    def __init__(self, catalog: MaterialCatalog = None):
        self.catalog = catalog or MaterialCatalog()

    @abstractmethod
    def calculate(self, source: dict, settings: dict, custom_rates: dict = None):
        """
        Takes a calibrated analysis (or a single room), the project settings and
        the custom rate overrides. Never raises on well-typed input.
        """
        pass

    # --- Helper methods for all calculators ---

    def ceil_qty(self, value: float) -> int:
        """Round a quantity UP to the next whole unit - you can't buy half a bag."""
        return math.ceil(round(value, QUANTITY_PRECISION))

    def sq_m_to_sq_ft(self, area_sq_m: float) -> float:
        return area_sq_m * SQFT_PER_SQM

    def m_to_ft(self, length_m: float) -> float:
        return length_m * FT_PER_M

    def wall_height_m(self, settings: dict) -> float:
        return float((settings or {}).get("wall_height_m", 3.0))

    def make_material_item(self, material_id: str, quantity: float, custom_rates: dict = None,
                           name: str = None, unit: str = None, category: str = None) -> dict:
        """
        Build a MaterialItem dict. Name, unit and category default to the catalog
        entry; the rate is the custom override, else the catalog default, else 0.
        """
        rate = self.catalog.resolve_rate(material_id, custom_rates)
        return {
            "id": material_id,
            "category": category or self.catalog.get_category(material_id),
            "name": name or self.catalog.get_name(material_id),
            "unit": unit or self.catalog.get_unit(material_id),
            "quantity": quantity,
            "unit_rate": rate,
            "total_cost": quantity * rate,
        }
