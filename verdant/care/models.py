"""Care task and care session models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel

from verdant.plants.models import CareTaskKind, Plant, PlantResponse


@dataclass(frozen=True)
class CareTask:
    """
    One (kind, plant) task inside a care session.

    Equality covers kind, plant name and plant id. Tasks built without an
    id compare by kind and name only; the session service always passes the
    id, so two plants sharing a name stay distinct.
    """
    kind: CareTaskKind
    plant_name: str
    plant_id: Optional[str] = None
    completed_at: Optional[datetime] = field(default=None, compare=False)

    @classmethod
    def for_plant(cls, kind: CareTaskKind, plant: Plant) -> "CareTask":
        return cls(kind=CareTaskKind(kind), plant_name=plant.name, plant_id=plant.id)

    @property
    def description(self) -> str:
        return self.kind.label

    def belongs_to(self, plant: Plant) -> bool:
        if self.plant_name != plant.name:
            return False
        return self.plant_id is None or self.plant_id == plant.id


@dataclass(frozen=True)
class CareTaskCompleted:
    """Emitted when a task is completed; carries the updated plant snapshot."""
    task: CareTask
    plant: Plant
    completed_at: datetime

    @property
    def track(self):
        return self.plant.track(self.task.kind)


# ==================== API Schemas ====================


class CompleteTaskRequest(BaseModel):
    """Complete a task on the session's current plant."""
    kind: CareTaskKind


class SessionTask(BaseModel):
    kind: CareTaskKind
    label: str
    completed: bool


class CareSessionState(BaseModel):
    """Snapshot of the active care session."""
    status: str  # "in_progress" | "complete"
    current_index: int
    total_plants: int
    current_plant: Optional[PlantResponse] = None
    tasks: List[SessionTask]
    advancing: bool = False
    last_error: Optional[str] = None
