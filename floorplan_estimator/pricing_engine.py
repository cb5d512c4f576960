"""
Pricing engine - the override & aggregation layer.

Combines the structural and per-room calculator outputs into a project
estimate. Pure math - no AI. Quantity x rate, summed by material and by
report bucket.

Input: raw analysis + calibration area + settings + custom rates/quantities
Output: estimate report dict (calibrated analysis, scaled structure and room
costs, BOQ, consolidated category report, project total)

A custom quantity replaces the calculated project-wide quantity of that
material. Every place the material appears (structure and each room) is
rescaled by custom / calculated so the parts still add up to the override.
"""

import logging
import math
from datetime import datetime

from .calculators.calibration import calibrate_analysis, calibration_scale_factor
from .calculators.base import SQFT_PER_SQM
from .calculators.material_catalog import MaterialCatalog
from .calculators.room_finishing import RoomFinishingCalculator
from .calculators.structural import StructuralCalculator

logger = logging.getLogger(__name__)


class PricingEngine:
    """
    Assembles the full estimate from a raw analysis and the user's overrides.
    Stateless: every call recomputes from its arguments.
    """

    # Calculated quantities below this can't carry a custom quantity as a ratio
    SCALING_EPSILON = 0.0001

    def __init__(self, catalog: MaterialCatalog = None):
        self.catalog = catalog or MaterialCatalog()
        self.structural = StructuralCalculator(self.catalog)
        self.rooms = RoomFinishingCalculator(self.catalog)

    def build_estimate(self, raw_analysis: dict, settings: dict,
                       custom_rates: dict = None, custom_quantities: dict = None,
                       calibration_area=None, area_unit: str = "sqm") -> dict:
        """
        Build the estimate report.

        Args:
            raw_analysis: analysis dict exactly as returned by the AI service
            settings: {currency, wall_height_m, brick_size}
            custom_rates: {material_id: rate} - absent ids use the catalog rate
            custom_quantities: {material_id: qty} - absent ids use calculated qty
            calibration_area: user-entered true total area (blank = no calibration)
            area_unit: "sqm" | "sqft" for calibration_area

        Returns:
            dict with calibrated_analysis, structure_costs, room_costs,
            calculated_quantities, scaling_factors, boq, combined_materials,
            consolidated_report, total_project_cost and the inputs echoed back.
        """
        custom_rates = dict(custom_rates or {})
        custom_quantities = dict(custom_quantities or {})

        calibrated = calibrate_analysis(raw_analysis, calibration_area, area_unit)

        # --- Base (unscaled) quantities ---
        base_structure = self.structural.calculate(calibrated, settings, custom_rates)
        base_rooms = [
            self.rooms.calculate(room, settings, custom_rates)
            for room in calibrated.get("rooms", [])
        ]
        calculated = self.calculated_quantities(base_structure, base_rooms)

        # --- Overrides ---
        factors = self.scaling_factors(calculated, custom_quantities)
        structure_costs = self.apply_scaling(base_structure, factors)
        room_costs = [self.scale_room(room, factors) for room in base_rooms]

        # --- Aggregation ---
        boq = self.build_boq(calculated, custom_quantities, custom_rates)
        total = self.total_project_cost(boq)
        consolidated = self.consolidate(boq)

        total_area = calibrated.get("summary", {}).get("total_area_sq_m", 0.0)

        return {
            "calibrated_analysis": calibrated,
            "calibration_scale_factor": calibration_scale_factor(raw_analysis, calibration_area, area_unit),
            "structure_costs": structure_costs,
            "room_costs": room_costs,
            "calculated_quantities": calculated,
            "scaling_factors": factors,
            "boq": boq,
            "combined_materials": self.combine_materials(structure_costs, room_costs),
            "consolidated_report": consolidated,
            "total_project_cost": total,
            "total_area_sq_m": total_area,
            "total_area_sq_ft": total_area * SQFT_PER_SQM,
            "room_count": len(room_costs),
            "settings": dict(settings or {}),
            "custom_rates": custom_rates,
            "custom_quantities": custom_quantities,
            "calibration_area": calibration_area,
            "area_unit": area_unit,
            "generated_at": datetime.utcnow().isoformat(),
        }

    def calculated_quantities(self, structure_items: list, room_costs: list) -> dict:
        """Project-wide calculated quantity per material id (structure + all rooms)."""
        quantities = {}
        for item in structure_items:
            quantities[item["id"]] = quantities.get(item["id"], 0) + item["quantity"]
        for room in room_costs:
            for item in room["materials"]:
                quantities[item["id"]] = quantities.get(item["id"], 0) + item["quantity"]
        return quantities

    def scaling_factors(self, calculated: dict, custom_quantities: dict) -> dict:
        """
        custom / calculated for every overridden material.
        Materials whose calculated quantity is ~0 get no factor (i.e. 1.0).
        """
        factors = {}
        for material_id, calc in calculated.items():
            custom = custom_quantities.get(material_id)
            if custom is None:
                continue
            if calc > self.SCALING_EPSILON:
                factors[material_id] = custom / calc
            else:
                logger.info(
                    "Custom quantity for %r ignored for scaling: calculated quantity is %r",
                    material_id, calc,
                )
        return factors

    def apply_scaling(self, items: list, factors: dict) -> list:
        """New item list with overridden quantities rescaled. Input items are untouched."""
        scaled = []
        for item in items:
            factor = factors.get(item["id"])
            if factor is None:
                scaled.append(dict(item))
                continue
            quantity = item["quantity"] * factor
            scaled.append({**item, "quantity": quantity, "total_cost": quantity * item["unit_rate"]})
        return scaled

    def scale_room(self, room: dict, factors: dict) -> dict:
        materials = self.apply_scaling(room["materials"], factors)
        return {
            "room_name": room["room_name"],
            "total_cost": sum(item["total_cost"] for item in materials),
            "materials": materials,
        }

    def effective_quantity(self, material_id: str, calculated: dict, custom_quantities: dict) -> float:
        custom = custom_quantities.get(material_id)
        if custom is not None:
            return custom
        return calculated.get(material_id, 0)

    def build_boq(self, calculated: dict, custom_quantities: dict, custom_rates: dict) -> list:
        """
        One line per material id ever calculated or overridden:
        effective quantity x effective rate, sorted by total descending.
        """
        material_ids = list(calculated)
        material_ids += [mid for mid in custom_quantities if mid not in calculated]

        lines = []
        for material_id in material_ids:
            quantity = self.effective_quantity(material_id, calculated, custom_quantities)
            rate = self.catalog.resolve_rate(material_id, custom_rates)
            lines.append({
                "id": material_id,
                "category": self.catalog.get_category(material_id),
                "report_bucket": self.catalog.report_bucket_for(material_id),
                "name": self.catalog.get_name(material_id),
                "unit": self.catalog.get_unit(material_id),
                "calculated_quantity": calculated.get(material_id, 0),
                "quantity": quantity,
                "unit_rate": rate,
                "total_cost": quantity * rate,
                "overridden": material_id in custom_quantities,
            })
        lines.sort(key=lambda line: line["total_cost"], reverse=True)
        return lines

    def total_project_cost(self, boq: list) -> float:
        return math.fsum(line["total_cost"] for line in boq)

    def consolidate(self, boq: list) -> list:
        """
        Category report - BOQ totals grouped by report bucket, sorted by cost
        descending. Returns [{"category": str, "cost": float}, ...].
        """
        buckets = {}
        for line in boq:
            buckets.setdefault(line["report_bucket"], []).append(line["total_cost"])
        report = [
            {"category": bucket, "cost": math.fsum(costs)}
            for bucket, costs in buckets.items()
        ]
        report.sort(key=lambda row: row["cost"], reverse=True)
        return report

    def combine_materials(self, structure_costs: list, room_costs: list) -> list:
        """Scaled structure and room items merged by material id."""
        combined = {}
        for item in structure_costs + [m for room in room_costs for m in room["materials"]]:
            existing = combined.get(item["id"])
            if existing is None:
                combined[item["id"]] = dict(item)
            else:
                existing["quantity"] += item["quantity"]
                existing["total_cost"] += item["total_cost"]
        return list(combined.values())
