"""
Area calibration - rescales a raw AI analysis to a user-asserted floor area.

The AI reads geometry off an image with an unknown scale, so the user can
type the true built-up area (m² or ft²) and every dimension is rescaled:
areas by scale², lengths by scale, wall thickness untouched.

Always calibrate from the immutable raw analysis. Chaining calibrations on an
already-calibrated analysis compounds the scale factor.
"""

import copy
import logging
import math

from .base import SQFT_PER_SQM

logger = logging.getLogger(__name__)

AREA_UNITS = ("sqm", "sqft")


def parse_area(value) -> float:
    """
    Parse a user-entered area. Returns NaN for blank or non-numeric input
    so callers can treat it as "no calibration".
    """
    if value is None:
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    if not text:
        return math.nan
    try:
        return float(text)
    except ValueError:
        return math.nan


def to_square_meters(value: float, unit: str = "sqm") -> float:
    """Convert an area in the given unit to m²."""
    if unit == "sqft":
        return value / SQFT_PER_SQM
    return value


def fallback_perimeter_m(area_sq_m: float) -> float:
    """Perimeter of a square room with the given area - an estimate, not a measurement."""
    return 4 * math.sqrt(max(area_sq_m, 0.0))


def room_perimeter_m(room: dict) -> float:
    """Room perimeter, falling back to the square-room estimate when missing or zero."""
    perimeter = room.get("perimeter_m")
    if not perimeter:
        return fallback_perimeter_m(room.get("area_sq_m", 0.0))
    return perimeter


def calibrate_analysis(raw_analysis: dict, target_area, unit: str = "sqm") -> dict:
    """
    Return a new analysis rescaled so its total area equals target_area.

    Blank, NaN or non-positive targets return an unscaled copy of raw_analysis.
    raw_analysis itself is never modified.
    """
    target = parse_area(target_area)
    if math.isnan(target) or math.isinf(target) or target <= 0:
        return copy.deepcopy(raw_analysis)

    target_sq_m = to_square_meters(target, unit)
    summary = raw_analysis.get("summary", {})
    raw_area = summary.get("total_area_sq_m", 0.0)

    if raw_area and raw_area > 0:
        scale_factor = math.sqrt(target_sq_m / raw_area)
    else:
        # Nothing to scale against; keep lengths as read.
        logger.info("Raw analysis has no usable area (%r), calibrating area only", raw_area)
        scale_factor = 1.0

    calibrated = copy.deepcopy(raw_analysis)
    calibrated["summary"] = {
        "total_area_sq_m": target_sq_m,
        "total_wall_length_m": summary.get("total_wall_length_m", 0.0) * scale_factor,
        "wall_thickness_m": summary.get("wall_thickness_m", 0.0),
    }
    calibrated["rooms"] = [
        {
            **room,
            "area_sq_m": room.get("area_sq_m", 0.0) * (scale_factor * scale_factor),
            "perimeter_m": room_perimeter_m(room) * scale_factor,
        }
        for room in copy.deepcopy(raw_analysis.get("rooms", []))
    ]
    return calibrated


def calibration_scale_factor(raw_analysis: dict, target_area, unit: str = "sqm") -> float:
    """Linear scale factor calibrate_analysis would apply (1.0 when it would be identity)."""
    target = parse_area(target_area)
    raw_area = raw_analysis.get("summary", {}).get("total_area_sq_m", 0.0)
    if math.isnan(target) or math.isinf(target) or target <= 0 or not raw_area or raw_area <= 0:
        return 1.0
    return math.sqrt(to_square_meters(target, unit) / raw_area)


def suggested_calibration_area(analysis: dict, unit: str = "sqm") -> str:
    """The analysis' own total area in the chosen unit, formatted to 1 decimal."""
    area = analysis.get("summary", {}).get("total_area_sq_m", 0.0)
    if unit == "sqft":
        area = area * SQFT_PER_SQM
    return f"{area:.1f}"


def convert_calibration_area(value, from_unit: str, to_unit: str):
    """
    Convert an entered calibration area when the unit toggle changes.
    Blank or non-numeric input is returned as-is.
    """
    current = parse_area(value)
    if math.isnan(current) or from_unit == to_unit:
        return value
    if from_unit == "sqm" and to_unit == "sqft":
        return f"{current * SQFT_PER_SQM:.1f}"
    if from_unit == "sqft" and to_unit == "sqm":
        return f"{current / SQFT_PER_SQM:.1f}"
    return value
