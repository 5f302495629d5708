"""Plant-related models and schemas."""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from verdant.plants.schedule import Schedule


class CareTaskKind(str, Enum):
    """The three independent care tracks a plant may have."""
    WATERING = "watering"
    ROTATION = "rotation"
    FERTILIZING = "fertilizing"

    @property
    def label(self) -> str:
        return _TASK_LABELS[self]


_TASK_LABELS = {
    CareTaskKind.WATERING: "Water",
    CareTaskKind.ROTATION: "Rotate",
    CareTaskKind.FERTILIZING: "Fertilize",
}


# ==================== Domain ====================


class CareTrack(BaseModel):
    """Schedule plus last/next dates for one care kind."""
    model_config = ConfigDict(frozen=True)

    schedule: Schedule = Schedule.NONE
    last_date: Optional[datetime] = None
    next_date: Optional[datetime] = None


class Plant(BaseModel):
    """A plant as stored. Instances are immutable snapshots."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    watering: CareTrack
    rotation: CareTrack = Field(default_factory=CareTrack)
    fertilizing: CareTrack = Field(default_factory=CareTrack)
    notes: Optional[str] = None
    image_key: Optional[str] = None
    created_at: datetime

    def track(self, kind: CareTaskKind) -> CareTrack:
        return getattr(self, CareTaskKind(kind).value)

    def with_track(self, kind: CareTaskKind, track: CareTrack) -> "Plant":
        return self.model_copy(update={CareTaskKind(kind).value: track})


# ==================== Request Schemas ====================


def _clean_name(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError("Plant name must not be blank")
    return value


def _require_watering(value: Optional[Schedule]) -> Optional[Schedule]:
    if value is Schedule.NONE:
        raise ValueError("Watering schedule cannot be None")
    return value


class PlantCreate(BaseModel):
    """Schema to add a plant."""
    name: str = Field(..., max_length=200)
    watering_schedule: Schedule = Schedule.WEEKLY
    rotation_schedule: Schedule = Schedule.NONE
    fertilizing_schedule: Schedule = Schedule.NONE
    notes: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value):
        return _clean_name(value)

    @field_validator("watering_schedule")
    @classmethod
    def validate_watering(cls, value):
        return _require_watering(value)


class PlantUpdate(BaseModel):
    """Schema to update a plant. Omitted fields are left unchanged."""
    name: Optional[str] = Field(None, max_length=200)
    notes: Optional[str] = None
    watering_schedule: Optional[Schedule] = None
    rotation_schedule: Optional[Schedule] = None
    fertilizing_schedule: Optional[Schedule] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value):
        return _clean_name(value)

    @field_validator("watering_schedule")
    @classmethod
    def validate_watering(cls, value):
        return _require_watering(value)


class PlantImageUpload(BaseModel):
    """Base64 encoded photo for a plant."""
    image_base64: str = Field(..., min_length=1)
    content_type: str = Field(default="image/jpeg", pattern=r"^image/[a-z0-9.+-]+$")


# ==================== Response Schemas ====================


class CareTrackResponse(BaseModel):
    schedule: Schedule
    last_date: Optional[datetime] = None
    next_date: Optional[datetime] = None
    needs_care: bool = False


class PlantResponse(BaseModel):
    """Response schema for a plant."""
    id: str
    name: str
    watering: CareTrackResponse
    rotation: CareTrackResponse
    fertilizing: CareTrackResponse
    notes: Optional[str] = None
    image_url: Optional[str] = None
    next_care_date: datetime
    days_until_next_care: int
    needs_care: bool
    created_at: datetime


class CareOverview(BaseModel):
    """How many plants need each kind of care today."""
    plants_needing_water: int = 0
    plants_needing_rotation: int = 0
    plants_needing_fertilizing: int = 0
    plants_needing_care: int = 0
    total_tasks: int = 0
    status_text: str
