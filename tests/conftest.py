"""Shared fixtures: pinned clock, plant factory and an in-memory plants collection."""

import copy
import uuid
from datetime import datetime, timedelta
from types import SimpleNamespace
from zoneinfo import ZoneInfo

import pytest

from verdant.care.service import CareSessionService
from verdant.core.clock import FixedClock
from verdant.plants.models import CareTrack, Plant
from verdant.plants.schedule import Schedule
from verdant.plants.service import PlantService

UTC = ZoneInfo("UTC")


def make_dt(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=UTC)


NOW = make_dt(2026, 3, 10, 15, 30)


def make_plant(
    name: str = "Fern",
    *,
    watering: Schedule = Schedule.WEEKLY,
    next_watering: datetime = None,
    rotation: Schedule = Schedule.NONE,
    next_rotation: datetime = None,
    fertilizing: Schedule = Schedule.NONE,
    next_fertilizing: datetime = None,
    plant_id: str = None,
) -> Plant:
    """Build a plant; dates default to 'not due' relative to NOW."""
    return Plant(
        id=plant_id or str(uuid.uuid4()),
        name=name,
        watering=CareTrack(
            schedule=watering,
            last_date=NOW - timedelta(days=7),
            next_date=next_watering or NOW + timedelta(days=3),
        ),
        rotation=CareTrack(schedule=rotation, next_date=next_rotation),
        fertilizing=CareTrack(schedule=fertilizing, next_date=next_fertilizing),
        created_at=NOW - timedelta(days=30),
    )


class ManualScheduler:
    """Records delayed callbacks so tests decide when they fire."""

    def __init__(self):
        self.handles = []

    def __call__(self, delay, callback):
        handle = SimpleNamespace(delay=delay, callback=callback, cancelled=False)
        handle.cancel = lambda: setattr(handle, "cancelled", True)
        self.handles.append(handle)
        return handle

    @property
    def pending(self):
        return [h for h in self.handles if not h.cancelled]

    def fire_all(self, include_cancelled: bool = False):
        handles, self.handles = self.handles, []
        for handle in handles:
            if include_cancelled or not handle.cancelled:
                handle.callback()


# ==================== Fake Mongo collection ====================


class _Cursor:
    def __init__(self, docs):
        self._docs = docs

    async def to_list(self, length=None):
        return self._docs if length is None else self._docs[:length]

    def __aiter__(self):
        self._iter = iter(self._docs)
        return self

    async def __anext__(self):
        try:
            return next(self._iter)
        except StopIteration:
            raise StopAsyncIteration


class FakeCollection:
    """The subset of the motor collection API used by PlantService."""

    def __init__(self):
        self.docs = {}

    def _matches(self, doc, query):
        return all(doc.get(k) == v for k, v in query.items())

    async def insert_one(self, doc):
        self.docs[doc["_id"]] = copy.deepcopy(doc)
        return SimpleNamespace(inserted_id=doc["_id"])

    def find(self, query=None):
        query = query or {}
        return _Cursor([copy.deepcopy(d) for d in self.docs.values() if self._matches(d, query)])

    async def find_one(self, query):
        for doc in self.docs.values():
            if self._matches(doc, query):
                return copy.deepcopy(doc)
        return None

    async def find_one_and_update(self, query, update, return_document=None):
        for doc in self.docs.values():
            if self._matches(doc, query):
                for key, value in update.get("$set", {}).items():
                    target = doc
                    *parents, leaf = key.split(".")
                    for part in parents:
                        target = target.setdefault(part, {})
                    target[leaf] = copy.deepcopy(value)
                return copy.deepcopy(doc)
        return None

    async def delete_one(self, query):
        for key, doc in list(self.docs.items()):
            if self._matches(doc, query):
                del self.docs[key]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)


# ==================== Fixtures ====================


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def plants_collection(monkeypatch) -> FakeCollection:
    collection = FakeCollection()
    monkeypatch.setattr(PlantService, "_get_plants_collection", staticmethod(lambda: collection))
    return collection


@pytest.fixture
def store_plant(plants_collection):
    """Insert a Plant into the fake collection as PlantService would."""
    def _store(plant: Plant) -> Plant:
        plants_collection.docs[plant.id] = PlantService._plant_to_doc(plant)
        return plant
    return _store


@pytest.fixture(autouse=True)
def reset_care_session():
    CareSessionService._session = None
    CareSessionService._lock = None
    CareSessionService._last_error = None
    CareSessionService._pending_events = []
    yield
    if CareSessionService._session is not None:
        CareSessionService._session.close()
    CareSessionService._session = None
    CareSessionService._lock = None
    CareSessionService._last_error = None
    CareSessionService._pending_events = []
