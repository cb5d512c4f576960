from fastapi import APIRouter

from ..calculators.material_catalog import MaterialCatalog

router = APIRouter(prefix="/materials", tags=["materials"])


@router.get("/")
def list_materials():
    """Catalog materials with their default rates, units and report buckets."""
    return MaterialCatalog().list_materials()
