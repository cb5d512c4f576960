from sqlalchemy import Column, Integer, String, DateTime, JSON
from datetime import datetime
from .database import Base
import enum


# --- Enums ---

class RoomType(str, enum.Enum):
    BEDROOM = "Bedroom"
    KITCHEN = "Kitchen"
    BATHROOM = "Bathroom"
    LIVING = "Living"
    DINING = "Dining"
    CORRIDOR = "Corridor"
    OTHER = "Other"


class MaterialCategory(str, enum.Enum):
    """Native catalog category of a material."""
    STRUCTURE = "Structure"
    REINFORCEMENT = "Reinforcement"
    FINISHING = "Finishing"
    SERVICES = "Services"
    INTERIORS = "Interiors"


class ReportBucket(str, enum.Enum):
    """Simplified buckets used by the consolidated cost report."""
    CIVIL_STRUCTURE = "Civil Structure"
    FLOORING_TILING = "Flooring & Tiling"
    PAINTING_FINISH = "Painting & Finish"
    DOORS_WINDOWS = "Doors & Windows"
    ELECTRICAL_PLUMBING = "Electrical & Plumbing"


class BrickSize(str, enum.Enum):
    STANDARD = "standard"
    MODULAR = "modular"


# --- Tables ---

class UserSettings(Base):
    """Saved project settings and overrides, one row per user key."""
    __tablename__ = "user_settings"

    id = Column(Integer, primary_key=True, index=True)
    user_key = Column(String, unique=True, nullable=False, index=True)
    project_settings = Column(JSON, nullable=True)    # {currency, wall_height_m, brick_size}
    custom_rates = Column(JSON, nullable=True)        # {material_id: rate}
    custom_quantities = Column(JSON, nullable=True)   # {material_id: quantity}
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class FloorPlan(Base):
    """A saved analysis together with the cost estimation captured at save time."""
    __tablename__ = "floor_plans"

    id = Column(Integer, primary_key=True, index=True)
    user_key = Column(String, nullable=False, index=True)
    file_name = Column(String, nullable=False)
    analysis_json = Column(JSON, nullable=False)
    cost_estimation_json = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
