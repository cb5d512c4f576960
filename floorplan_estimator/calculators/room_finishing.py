"""
Room finishing calculator.

Per-room finishes and services, branched on room type:
- Bathroom: anti-skid floor, 7ft wall tiling, sanitary fixtures, toilet door
- Kitchen: vitrified floor, granite counter on half the perimeter, dado, sink
- Everything else: vitrified floor, putty/primer/emulsion on walls + ceiling,
  plus a flush door for bedrooms

Every room also gets electrical points from a fixed per-type table.
"""

from .base import BaseCalculator
from .calibration import room_perimeter_m
from ..models import RoomType

BATHROOM_TILE_HEIGHT_FT = 7
COUNTER_WIDTH_FT = 2.5
DADO_HEIGHT_FT = 2
OPENING_DEDUCTION = 0.85          # walls lose ~15% to doors/windows

PUTTY_SQFT_PER_KG = 14
PRIMER_SQFT_PER_LITER = 140
EMULSION_SQFT_PER_LITER = 120

# Light, fan, sockets, AC, TV... thumb rules per room type
ELECTRICAL_POINTS = {
    RoomType.BEDROOM.value: 8,
    RoomType.LIVING.value: 12,
    RoomType.KITCHEN.value: 6,
    RoomType.BATHROOM.value: 3,
}
DEFAULT_ELECTRICAL_POINTS = 4


class RoomFinishingCalculator(BaseCalculator):

    def calculate(self, room: dict, settings: dict, custom_rates: dict = None) -> dict:
        """Returns a RoomCost dict: {room_name, total_cost, materials}."""
        room_type = room.get("type", RoomType.OTHER.value)
        area_sq_ft = self.sq_m_to_sq_ft(room.get("area_sq_m", 0.0))
        perimeter_ft = self.m_to_ft(room_perimeter_m(room))
        wall_height_ft = self.m_to_ft(self.wall_height_m(settings))
        wall_area_sq_ft = perimeter_ft * wall_height_ft

        if room_type == RoomType.BATHROOM.value:
            items = self._bathroom_items(area_sq_ft, perimeter_ft, custom_rates)
        elif room_type == RoomType.KITCHEN.value:
            items = self._kitchen_items(area_sq_ft, perimeter_ft, custom_rates)
        else:
            items = self._dry_room_items(room_type, area_sq_ft, wall_area_sq_ft, custom_rates)

        items.append(self.make_material_item(
            "electrical_point", self.electrical_points(room_type), custom_rates,
            name="Electrical Points (Wiring+Switch)",
        ))

        return {
            "room_name": room.get("name") or room_type,
            "total_cost": sum(item["total_cost"] for item in items),
            "materials": items,
        }

    def electrical_points(self, room_type: str) -> int:
        return ELECTRICAL_POINTS.get(room_type, DEFAULT_ELECTRICAL_POINTS)

    def _bathroom_items(self, area_sq_ft: float, perimeter_ft: float, custom_rates: dict) -> list:
        return [
            self.make_material_item("flooring_antiskid", self.ceil_qty(area_sq_ft * 1.1), custom_rates),
            self.make_material_item("wall_tiles_bath",
                                    self.ceil_qty(perimeter_ft * BATHROOM_TILE_HEIGHT_FT), custom_rates),
            self.make_material_item("wc_ewc", 1, custom_rates),
            self.make_material_item("wash_basin", 1, custom_rates),
            self.make_material_item("taps_mixer", 1, custom_rates),
            # WC, basin, shower x2, geyser
            self.make_material_item("plumbing_point", 5, custom_rates,
                                    name="Plumbing Points (Inlet/Outlet)"),
            self.make_material_item("door_toilet", 1, custom_rates),
        ]

    def _kitchen_items(self, area_sq_ft: float, perimeter_ft: float, custom_rates: dict) -> list:
        # L-shaped counter along roughly half the walls
        counter_len_ft = perimeter_ft * 0.5
        return [
            self.make_material_item("flooring_vitrified", self.ceil_qty(area_sq_ft * 1.1), custom_rates),
            self.make_material_item("granite",
                                    self.ceil_qty(counter_len_ft * COUNTER_WIDTH_FT), custom_rates),
            self.make_material_item("wall_tiles_kitchen",
                                    self.ceil_qty(counter_len_ft * DADO_HEIGHT_FT), custom_rates),
            self.make_material_item("kitchen_sink", 1, custom_rates),
            self.make_material_item("taps_mixer", 1, custom_rates, name="Sink Mixer/Tap", unit="Nos"),
            # Sink, RO, dishwasher
            self.make_material_item("plumbing_point", 3, custom_rates),
        ]

    def _dry_room_items(self, room_type: str, area_sq_ft: float, wall_area_sq_ft: float,
                        custom_rates: dict) -> list:
        # Walls less openings, plus the ceiling
        paint_area = (wall_area_sq_ft * OPENING_DEDUCTION) + area_sq_ft
        items = [
            self.make_material_item("flooring_vitrified", self.ceil_qty(area_sq_ft * 1.05), custom_rates),
            self.make_material_item("putty", self.ceil_qty(paint_area / PUTTY_SQFT_PER_KG), custom_rates),
            self.make_material_item("primer", self.ceil_qty(paint_area / PRIMER_SQFT_PER_LITER), custom_rates),
            self.make_material_item("paint_emulsion",
                                    self.ceil_qty(paint_area / EMULSION_SQFT_PER_LITER), custom_rates),
        ]
        if room_type == RoomType.BEDROOM.value:
            items.append(self.make_material_item("door_flush", 1, custom_rates))
        return items
