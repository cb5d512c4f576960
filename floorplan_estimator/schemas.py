from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Annotated, Optional, List, Dict, Literal, Union
from datetime import datetime
from .models import RoomType, BrickSize
from .config import settings as app_settings


class CamelModel(BaseModel):
    """Accepts both the AI service's camelCase keys and snake_case."""
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class Summary(CamelModel):
    total_area_sq_m: float = Field(ge=0)
    total_wall_length_m: float = Field(ge=0)
    wall_thickness_m: float = Field(ge=0)


class Room(CamelModel):
    name: str = ""
    type: RoomType = RoomType.OTHER
    area_sq_m: float = Field(ge=0)
    perimeter_m: Optional[float] = Field(default=None, ge=0)

    @field_validator("type", mode="before")
    @classmethod
    def coerce_room_type(cls, value):
        """Unknown types from the AI land in Other instead of failing the analysis."""
        if isinstance(value, RoomType):
            return value
        for room_type in RoomType:
            if str(value or "").strip().lower() == room_type.value.lower():
                return room_type
        return RoomType.OTHER


class Elements(CamelModel):
    doors: float = Field(default=0, ge=0)
    windows: float = Field(default=0, ge=0)


class AnalysisResult(CamelModel):
    summary: Summary
    rooms: List[Room] = []
    elements: Elements = Elements()


# Rate and quantity overrides: finite and non-negative
OverrideValue = Annotated[float, Field(ge=0, allow_inf_nan=False)]


class ProjectSettings(CamelModel):
    currency: str = app_settings.DEFAULT_CURRENCY
    wall_height_m: float = Field(default=app_settings.DEFAULT_WALL_HEIGHT_M, gt=0, allow_inf_nan=False)
    brick_size: BrickSize = BrickSize(app_settings.DEFAULT_BRICK_SIZE)


class SettingsPayload(CamelModel):
    project_settings: Optional[ProjectSettings] = None
    custom_rates: Optional[Dict[str, OverrideValue]] = None
    custom_quantities: Optional[Dict[str, OverrideValue]] = None


class EstimateRequest(CamelModel):
    analysis: Optional[AnalysisResult] = None
    calibration_area: Optional[Union[float, str]] = None
    area_unit: Literal["sqm", "sqft"] = "sqm"
    settings: Optional[ProjectSettings] = None
    custom_rates: Optional[Dict[str, OverrideValue]] = None
    custom_quantities: Optional[Dict[str, OverrideValue]] = None


class FloorPlanCreate(CamelModel):
    file_name: str
    analysis: AnalysisResult
    cost_estimation: Optional[dict] = None


class FloorPlan(BaseModel):
    id: int
    user_key: str
    file_name: str
    analysis_json: dict
    cost_estimation_json: Optional[dict] = None
    created_at: datetime
    class Config:
        from_attributes = True
