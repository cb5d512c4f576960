"""
Material rate catalog - default unit rates (INR) for every material the
calculators can produce.

Each entry carries its native category and the report bucket it rolls up
into, so the consolidated report never has to guess a bucket from the id.

Rates are market averages for Indian residential construction.
"""

import logging

from ..models import MaterialCategory, ReportBucket

logger = logging.getLogger(__name__)

OTHER_BUCKET = "Other"

MATERIAL_CATALOG = {
    # Structure
    "cement": {
        "name": "Cement (Ultratech/ACC)", "unit": "Bags", "default_rate": 390.0,
        "category": MaterialCategory.STRUCTURE, "report_bucket": ReportBucket.CIVIL_STRUCTURE,
    },
    "steel": {
        "name": "TMT Steel Bars (Fe550)", "unit": "Kg", "default_rate": 72.0,
        "category": MaterialCategory.REINFORCEMENT, "report_bucket": ReportBucket.CIVIL_STRUCTURE,
    },
    "sand": {
        "name": "M-Sand / River Sand", "unit": "Cubic Ft", "default_rate": 65.0,
        "category": MaterialCategory.STRUCTURE, "report_bucket": ReportBucket.CIVIL_STRUCTURE,
    },
    "aggregate": {
        "name": "Aggregate (20mm)", "unit": "Cubic Ft", "default_rate": 45.0,
        "category": MaterialCategory.STRUCTURE, "report_bucket": ReportBucket.CIVIL_STRUCTURE,
    },
    "bricks": {
        "name": "Red Clay Bricks", "unit": "Nos", "default_rate": 10.0,
        "category": MaterialCategory.STRUCTURE, "report_bucket": ReportBucket.CIVIL_STRUCTURE,
    },
    # Flooring & wall tiles
    "flooring_vitrified": {
        "name": "Vitrified Floor Tiles", "unit": "Sq. Ft", "default_rate": 65.0,
        "category": MaterialCategory.FINISHING, "report_bucket": ReportBucket.FLOORING_TILING,
    },
    "flooring_antiskid": {
        "name": "Anti-Skid Floor Tiles", "unit": "Sq. Ft", "default_rate": 55.0,
        "category": MaterialCategory.FINISHING, "report_bucket": ReportBucket.FLOORING_TILING,
    },
    "wall_tiles_bath": {
        "name": "Wall Tiles (Ceramic)", "unit": "Sq. Ft", "default_rate": 50.0,
        "category": MaterialCategory.FINISHING, "report_bucket": ReportBucket.FLOORING_TILING,
    },
    "wall_tiles_kitchen": {
        "name": "Dado Wall Tiles", "unit": "Sq. Ft", "default_rate": 60.0,
        "category": MaterialCategory.FINISHING, "report_bucket": ReportBucket.FLOORING_TILING,
    },
    "granite": {
        "name": "Granite Countertop", "unit": "Sq. Ft", "default_rate": 180.0,
        "category": MaterialCategory.INTERIORS, "report_bucket": ReportBucket.FLOORING_TILING,
    },
    # Paint
    "putty": {
        "name": "Wall Putty (2 Coats)", "unit": "Kg", "default_rate": 30.0,
        "category": MaterialCategory.FINISHING, "report_bucket": ReportBucket.PAINTING_FINISH,
    },
    "primer": {
        "name": "Primer", "unit": "Liters", "default_rate": 220.0,
        "category": MaterialCategory.FINISHING, "report_bucket": ReportBucket.PAINTING_FINISH,
    },
    "paint_emulsion": {
        "name": "Emulsion Paint", "unit": "Liters", "default_rate": 350.0,
        "category": MaterialCategory.FINISHING, "report_bucket": ReportBucket.PAINTING_FINISH,
    },
    # Doors & windows
    "door_flush": {
        "name": "Flush Door (Laminate)", "unit": "Nos", "default_rate": 8000.0,
        "category": MaterialCategory.FINISHING, "report_bucket": ReportBucket.DOORS_WINDOWS,
    },
    "door_toilet": {
        "name": "PVC/WPC Door", "unit": "Nos", "default_rate": 4500.0,
        "category": MaterialCategory.FINISHING, "report_bucket": ReportBucket.DOORS_WINDOWS,
    },
    "window_upvc": {
        "name": "UPVC Windows", "unit": "Sq. Ft", "default_rate": 600.0,
        "category": MaterialCategory.FINISHING, "report_bucket": ReportBucket.DOORS_WINDOWS,
    },
    # Plumbing / sanitary
    "wc_ewc": {
        "name": "EWC / Commode", "unit": "Nos", "default_rate": 12000.0,
        "category": MaterialCategory.SERVICES, "report_bucket": ReportBucket.ELECTRICAL_PLUMBING,
    },
    "wash_basin": {
        "name": "Wash Basin", "unit": "Nos", "default_rate": 4000.0,
        "category": MaterialCategory.SERVICES, "report_bucket": ReportBucket.ELECTRICAL_PLUMBING,
    },
    "kitchen_sink": {
        "name": "SS Sink", "unit": "Nos", "default_rate": 6000.0,
        "category": MaterialCategory.SERVICES, "report_bucket": ReportBucket.ELECTRICAL_PLUMBING,
    },
    "taps_mixer": {
        "name": "Taps & Mixers (Set)", "unit": "Set", "default_rate": 3500.0,
        "category": MaterialCategory.SERVICES, "report_bucket": ReportBucket.ELECTRICAL_PLUMBING,
    },
    "plumbing_point": {
        "name": "Plumbing Points", "unit": "Pts", "default_rate": 1500.0,
        "category": MaterialCategory.SERVICES, "report_bucket": ReportBucket.ELECTRICAL_PLUMBING,
    },
    # Electrical
    "electrical_point": {
        "name": "Electrical Points", "unit": "Pts", "default_rate": 850.0,
        "category": MaterialCategory.SERVICES, "report_bucket": ReportBucket.ELECTRICAL_PLUMBING,
    },
}


class MaterialCatalog:
    """Read-only lookups over MATERIAL_CATALOG."""

    def get_default_rate(self, material_id: str) -> float:
        """
        Default unit rate for a material id.
        Unknown ids resolve to 0.0 and are logged - the aggregation pass
        must keep going even if an override references a retired id.
        """
        entry = MATERIAL_CATALOG.get(material_id)
        if entry is None:
            logger.warning("Unknown material id %r in rate lookup, using rate 0", material_id)
            return 0.0
        return entry["default_rate"]

    def resolve_rate(self, material_id: str, custom_rates: dict = None) -> float:
        """Effective rate: custom override if present, else catalog default, else 0."""
        custom = (custom_rates or {}).get(material_id)
        if custom is not None:
            return float(custom)
        return self.get_default_rate(material_id)

    def get_name(self, material_id: str) -> str:
        entry = MATERIAL_CATALOG.get(material_id)
        if entry is None:
            return material_id.replace("-", " ").upper()
        return entry["name"]

    def get_unit(self, material_id: str) -> str:
        entry = MATERIAL_CATALOG.get(material_id)
        return entry["unit"] if entry else "-"

    def get_category(self, material_id: str) -> str:
        entry = MATERIAL_CATALOG.get(material_id)
        return entry["category"].value if entry else OTHER_BUCKET

    def report_bucket_for(self, material_id: str) -> str:
        """Consolidated report bucket for a material id ("Other" if uncatalogued)."""
        entry = MATERIAL_CATALOG.get(material_id)
        if entry is None:
            return OTHER_BUCKET
        return entry["report_bucket"].value

    def list_materials(self) -> list[dict]:
        """All catalog entries as plain dicts, in catalog order."""
        return [
            {
                "id": material_id,
                "name": entry["name"],
                "unit": entry["unit"],
                "category": entry["category"].value,
                "report_bucket": entry["report_bucket"].value,
                "default_rate": entry["default_rate"],
            }
            for material_id, entry in MATERIAL_CATALOG.items()
        ]
