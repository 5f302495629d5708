"""Care session service - owns the single active guided care session."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Callable, List, Optional

from verdant.core.clock import get_clock
from verdant.core.exceptions import BadRequestException, ConflictException, NotFoundException
from verdant.care.models import CareSessionState, CareTask, CareTaskCompleted, SessionTask
from verdant.care.session import CareSession
from verdant.plants.models import CareTaskKind
from verdant.plants.service import PlantService

logger = logging.getLogger(__name__)


class CareSessionService:
    """
    Starts, drives and ends the care session.

    The session mutates only its own plant snapshots; every completed task
    is written back through PlantService. A failed write is kept as a
    pending event and replayed on the next call, and reported in the
    session state until it goes through. It does not stop the session.
    """

    _session: Optional[CareSession] = None
    _lock: Optional[asyncio.Lock] = None
    _last_error: Optional[str] = None
    _pending_events: List[CareTaskCompleted] = []

    @classmethod
    def _get_lock(cls) -> asyncio.Lock:
        if cls._lock is None:
            cls._lock = asyncio.Lock()
        return cls._lock

    @classmethod
    def _require_session(cls) -> CareSession:
        if cls._session is None:
            raise NotFoundException("No care session in progress")
        return cls._session

    @classmethod
    async def _save_pending(cls) -> bool:
        """Write queued care events in order. Stops at the first failure."""
        while cls._pending_events:
            event = cls._pending_events[0]
            try:
                await PlantService.apply_care_event(event)
            except NotFoundException:
                logger.warning(f"Dropping {event.task.kind.value} for deleted plant {event.plant.id}")
            except Exception as e:
                logger.error(f"Failed to save {event.task.kind.value} for plant {event.plant.id}: {e}")
                cls._last_error = f"Could not save {event.task.kind.label.lower()} for {event.plant.name}"
                return False
            cls._pending_events.pop(0)

        cls._last_error = None
        return True

    @classmethod
    async def start_session(cls, clock: Optional[Callable[[], datetime]] = None) -> CareSessionState:
        """Snapshot the plants needing care and start walking through them."""
        clock = clock or get_clock()
        existing = cls._session
        if existing is not None:
            if not existing.is_complete:
                raise ConflictException("A care session is already in progress")
            existing.close()
            cls._session = None

        async with cls._get_lock():
            await cls._save_pending()
            plants = await PlantService.get_plants_needing_care(clock())
            if not plants:
                raise BadRequestException("No plants need care right now")
            cls._session = CareSession(plants, clock=clock)

        logger.info(f"Started care session with {len(cls._session.plants)} plant(s)")
        return cls._state(cls._session, clock())

    @classmethod
    async def get_state(cls, clock: Optional[Callable[[], datetime]] = None) -> CareSessionState:
        clock = clock or get_clock()
        session = cls._require_session()
        async with cls._get_lock():
            await cls._save_pending()
        return cls._state(session, clock())

    @classmethod
    async def complete_task(
        cls, kind: CareTaskKind, clock: Optional[Callable[[], datetime]] = None
    ) -> CareSessionState:
        """Complete `kind` on the current plant and persist the new dates."""
        clock = clock or get_clock()
        session = cls._require_session()

        async with cls._get_lock():
            plant = session.current_plant
            if plant is None:
                raise BadRequestException("Care session has no plants")

            event = session.complete_task(CareTask.for_plant(kind, plant))
            if event is not None:
                cls._pending_events.append(event)
            await cls._save_pending()

        return cls._state(session, clock())

    @classmethod
    async def end_session(cls) -> None:
        """Cancel or dismiss the session after saving any completed tasks."""
        session = cls._require_session()
        session.close()
        cls._session = None
        async with cls._get_lock():
            if not await cls._save_pending():
                logger.error(f"Care session ended with {len(cls._pending_events)} unsaved task(s)")
        logger.info("Care session ended")

    @classmethod
    async def shutdown(cls) -> None:
        """Close the active session, if any, on application shutdown."""
        if cls._session is not None:
            await cls.end_session()
        elif cls._pending_events:
            await cls._save_pending()

    @classmethod
    def _state(cls, session: CareSession, now: datetime) -> CareSessionState:
        plant = session.current_plant
        return CareSessionState(
            status=session.status.value,
            current_index=session.current_index,
            total_plants=len(session.plants),
            current_plant=PlantService._to_response(plant, now) if plant else None,
            tasks=[
                SessionTask(kind=task.kind, label=task.description, completed=done)
                for task, done in session.current_tasks()
            ],
            advancing=session.is_advancing,
            last_error=cls._last_error,
        )
