"""
Structural quantity calculator.

Whole-building quantities from wall geometry and built-up area:
brickwork volume net of openings, an RCC allowance per m² of floor,
and two-side 15mm plaster on every wall.

Coefficients are thumb rules from Indian residential practice and must
not drift - saved estimates are compared against fresh ones.
"""

from .base import BaseCalculator, SQFT_PER_SQM

BRICKS_PER_M3 = 500
STEEL_KG_PER_SQFT = 3.5
CONCRETE_M3_PER_SQM = 0.17       # slab + beams + columns

DOOR_OPENING_SQM = 1.89          # 0.9m x 2.1m
WINDOW_OPENING_SQM = 1.8         # 1.2m x 1.5m

PLASTER_THICKNESS_M = 0.015


class StructuralCalculator(BaseCalculator):

    def calculate(self, analysis: dict, settings: dict, custom_rates: dict = None) -> list[dict]:
        summary = analysis.get("summary", {})
        elements = analysis.get("elements", {})

        wall_length = summary.get("total_wall_length_m", 0.0)
        total_area = summary.get("total_area_sq_m", 0.0)
        thickness = summary.get("wall_thickness_m", 0.0)
        wall_height = self.wall_height_m(settings)
        total_area_sq_ft = total_area * SQFT_PER_SQM

        # 1. Volumes
        gross_wall_vol = wall_length * wall_height * thickness
        opening_vol = ((elements.get("doors", 0) * DOOR_OPENING_SQM)
                       + (elements.get("windows", 0) * WINDOW_OPENING_SQM)) * thickness
        net_brickwork_vol = max(0, gross_wall_vol - opening_vol)
        concrete_vol = total_area * CONCRETE_M3_PER_SQM

        # Two faces of every wall, 15mm plaster
        plaster_face_vol = wall_length * wall_height * 2 * PLASTER_THICKNESS_M

        # 2. Quantities
        bricks = self.ceil_qty(net_brickwork_vol * BRICKS_PER_M3)
        cement_bags = self.ceil_qty(
            (net_brickwork_vol * 1.26) + (concrete_vol * 8.0) + (plaster_face_vol * 0.15 * 28)
        )
        steel_kg = self.ceil_qty(total_area_sq_ft * STEEL_KG_PER_SQFT)
        sand_cft = self.ceil_qty(
            (net_brickwork_vol * 6) + (concrete_vol * 15) + (plaster_face_vol * 1.2 * 35)
        )
        aggregate_cft = self.ceil_qty(concrete_vol * 30)

        return [
            self.make_material_item("cement", cement_bags, custom_rates),
            self.make_material_item("steel", steel_kg, custom_rates),
            self.make_material_item("sand", sand_cft, custom_rates),
            self.make_material_item("aggregate", aggregate_cft, custom_rates),
            self.make_material_item("bricks", bricks, custom_rates),
        ]
