"""Guided care session engine.

A session walks a fixed snapshot of plants that needed care when it
started. Completing a task advances that track's schedule on the session's
own copy of the plant and returns a CareTaskCompleted event; persisting the
change is the caller's job. Once every outstanding task on the current
plant is done, the session moves to the next plant after a short delay.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Iterable, List, Optional, Set, Tuple

from verdant.core.config import get_settings
from verdant.care.models import CareTask, CareTaskCompleted
from verdant.plants.care_state import needs_any_care, needs_care
from verdant.plants.models import CareTaskKind, Plant

logger = logging.getLogger(__name__)

# (delay_seconds, callback) -> handle exposing cancel()
Scheduler = Callable[[float, Callable[[], None]], Any]


def loop_scheduler(delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
    """Schedule `callback` on the running event loop."""
    return asyncio.get_running_loop().call_later(delay, callback)


class SessionStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


class CareSession:
    """State machine over a snapshot of plants needing care."""

    def __init__(
        self,
        plants: Iterable[Plant],
        *,
        clock: Callable[[], datetime],
        advance_delay: Optional[float] = None,
        scheduler: Optional[Scheduler] = None,
    ):
        self._clock = clock
        now = clock()
        self.plants: List[Plant] = [p for p in plants if needs_any_care(p, now)]
        self.current_index = 0
        self.completed_tasks: Set[CareTask] = set()
        if advance_delay is None:
            advance_delay = get_settings().CARE_SESSION_ADVANCE_DELAY_SECONDS
        self.advance_delay = advance_delay
        self._schedule = scheduler or loop_scheduler
        self._advance_handle = None
        self._closed = False

    # ==================== State ====================

    @property
    def current_plant(self) -> Optional[Plant]:
        if not self.plants:
            return None
        return self.plants[self.current_index]

    @property
    def has_next_plant(self) -> bool:
        return self.current_index < len(self.plants) - 1

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def is_advancing(self) -> bool:
        return self._advance_handle is not None

    @property
    def is_current_plant_complete(self) -> bool:
        """Every track either needs no care or was completed in this session."""
        plant = self.current_plant
        if plant is None:
            return True
        now = self._clock()
        return all(
            not needs_care(plant, kind, now) or self._has_completed(kind, plant)
            for kind in CareTaskKind
        )

    @property
    def is_complete(self) -> bool:
        return not self.has_next_plant and self.is_current_plant_complete

    @property
    def status(self) -> SessionStatus:
        return SessionStatus.COMPLETE if self.is_complete else SessionStatus.IN_PROGRESS

    def _has_completed(self, kind: CareTaskKind, plant: Plant) -> bool:
        return any(t.kind is kind and t.belongs_to(plant) for t in self.completed_tasks)

    def current_tasks(self) -> List[Tuple[CareTask, bool]]:
        """Tasks shown for the current plant: outstanding ones and those already done."""
        plant = self.current_plant
        if plant is None:
            return []
        now = self._clock()
        tasks = []
        for kind in CareTaskKind:
            done = self._has_completed(kind, plant)
            if done or needs_care(plant, kind, now):
                tasks.append((CareTask.for_plant(kind, plant), done))
        return tasks

    # ==================== Transitions ====================

    def complete_task(self, task: CareTask) -> Optional[CareTaskCompleted]:
        """
        Complete `task` on the current plant.

        Returns the resulting event, or None when nothing changed: the
        session is closed, the task is for another plant, or the track does
        not need care (e.g. it was already completed).
        """
        plant = self.current_plant
        if self._closed or plant is None:
            logger.warning(f"Ignoring {task.kind.value} task: session is not active")
            return None
        if not task.belongs_to(plant):
            logger.warning(
                f"Ignoring {task.kind.value} task for '{task.plant_name}': "
                f"current plant is '{plant.name}'"
            )
            return None

        now = self._clock()
        if not needs_care(plant, task.kind, now):
            logger.debug(f"{task.kind.value} for '{plant.name}' needs no care; skipping")
            return None

        task = replace(task, completed_at=now)
        track = plant.track(task.kind)
        updates = {"last_date": now}
        next_due = track.schedule.next_date(now)
        if next_due is not None:
            updates["next_date"] = next_due
        plant = plant.with_track(task.kind, track.model_copy(update=updates))
        self.plants[self.current_index] = plant
        self.completed_tasks.add(task)

        logger.info(f"Completed {task.kind.value} for '{plant.name}', next due {next_due}")

        if self.is_current_plant_complete and self.has_next_plant:
            self._schedule_advance()

        return CareTaskCompleted(task=task, plant=plant, completed_at=now)

    def advance_to_next_plant(self) -> bool:
        """Move to the next plant in the snapshot. Returns False if there is none."""
        self._cancel_advance()
        if self._closed or not self.has_next_plant:
            return False
        self.current_index += 1
        return True

    def close(self) -> None:
        """Tear the session down; any pending auto-advance is dropped."""
        self._closed = True
        self._cancel_advance()

    def _schedule_advance(self) -> None:
        if self._advance_handle is not None:
            return
        self._advance_handle = self._schedule(self.advance_delay, self._on_advance_due)

    def _on_advance_due(self) -> None:
        self._advance_handle = None
        if self._closed:
            return
        self.advance_to_next_plant()

    def _cancel_advance(self) -> None:
        if self._advance_handle is not None:
            self._advance_handle.cancel()
            self._advance_handle = None
