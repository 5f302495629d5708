"""Needs-care predicates and list ordering for plants.

A track needs care when its next date falls on today's calendar day or
earlier. Rotation and fertilizing are optional: a track with no schedule
never needs care, whatever dates it still carries.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

from verdant.core.clock import as_aware
from verdant.plants.models import CareTaskKind, Plant
from verdant.plants.schedule import Schedule


def is_due(next_date: Optional[datetime], now: datetime) -> bool:
    """True if `next_date` is today (in now's timezone) or already past."""
    if next_date is None:
        return False
    local_next = as_aware(next_date, now.tzinfo) if now.tzinfo else next_date
    return local_next.date() == now.date() or local_next < now


def needs_watering(plant: Plant, now: datetime) -> bool:
    # Watering is always enabled.
    return is_due(plant.watering.next_date, now)


def needs_rotation(plant: Plant, now: datetime) -> bool:
    return _optional_track_due(plant, CareTaskKind.ROTATION, now)


def needs_fertilizing(plant: Plant, now: datetime) -> bool:
    return _optional_track_due(plant, CareTaskKind.FERTILIZING, now)


def _optional_track_due(plant: Plant, kind: CareTaskKind, now: datetime) -> bool:
    track = plant.track(kind)
    if track.schedule is Schedule.NONE:
        return False
    return is_due(track.next_date, now)


_PREDICATES = {
    CareTaskKind.WATERING: needs_watering,
    CareTaskKind.ROTATION: needs_rotation,
    CareTaskKind.FERTILIZING: needs_fertilizing,
}


def needs_care(plant: Plant, kind: CareTaskKind, now: datetime) -> bool:
    return _PREDICATES[CareTaskKind(kind)](plant, now)


def needs_any_care(plant: Plant, now: datetime) -> bool:
    return any(predicate(plant, now) for predicate in _PREDICATES.values())


def outstanding_kinds(plant: Plant, now: datetime) -> List[CareTaskKind]:
    """Care kinds the plant needs right now, in watering/rotation/fertilizing order."""
    return [kind for kind, predicate in _PREDICATES.items() if predicate(plant, now)]


def next_care_date(plant: Plant) -> datetime:
    """
    Earliest of the watering and rotation due dates.

    Fertilizing does not take part in this aggregate.
    """
    watering_next = plant.watering.next_date
    rotation_next = plant.rotation.next_date
    if rotation_next is not None:
        return min(watering_next, rotation_next)
    return watering_next


def sort_plants(plants: Iterable[Plant]) -> List[Plant]:
    """Order plants by next care date, then by name."""
    return sorted(plants, key=lambda p: (next_care_date(p), p.name))


def plants_needing_care(plants: Iterable[Plant], now: datetime) -> List[Plant]:
    """Sorted plants with at least one outstanding care task."""
    return [p for p in sort_plants(plants) if needs_any_care(p, now)]


@dataclass(frozen=True)
class CareCounts:
    water: int
    rotation: int
    fertilizing: int
    any_care: int

    @property
    def total_tasks(self) -> int:
        return self.water + self.rotation + self.fertilizing

    @property
    def status_text(self) -> str:
        noun = "task" if self.total_tasks == 1 else "tasks"
        return f"{self.total_tasks} {noun} toward happy plants"


def count_care_needs(plants: Iterable[Plant], now: datetime) -> CareCounts:
    plants = list(plants)
    return CareCounts(
        water=sum(1 for p in plants if needs_watering(p, now)),
        rotation=sum(1 for p in plants if needs_rotation(p, now)),
        fertilizing=sum(1 for p in plants if needs_fertilizing(p, now)),
        any_care=sum(1 for p in plants if needs_any_care(p, now)),
    )
