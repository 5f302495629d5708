"""Plant service - handles plant CRUD and care-date persistence."""

import logging
import uuid
from datetime import datetime
from typing import Dict, List, Optional

from pymongo import ReturnDocument

from verdant.core.clock import as_aware, get_clock, get_tzinfo
from verdant.core.database import Database
from verdant.core.exceptions import BadRequestException, NotFoundException
from verdant.care.models import CareTaskCompleted
from verdant.plants import care_state
from verdant.plants.images import PlantImageService
from verdant.plants.models import (
    CareOverview,
    CareTaskKind,
    CareTrack,
    CareTrackResponse,
    Plant,
    PlantCreate,
    PlantImageUpload,
    PlantResponse,
    PlantUpdate,
)
from verdant.plants.schedule import Schedule, days_between

logger = logging.getLogger(__name__)


class PlantService:
    """Handles plant-related database operations."""

    @staticmethod
    def _get_plants_collection():
        return Database.get_collection("plants")

    @staticmethod
    def _validate_plant_id(id_str: str) -> str:
        """Validate a plant UUID and return its canonical form."""
        try:
            return str(uuid.UUID(id_str))
        except (ValueError, AttributeError, TypeError):
            raise BadRequestException("Invalid plant ID")

    @staticmethod
    def _now(now: Optional[datetime]) -> datetime:
        return now if now is not None else get_clock()()

    # ==================== CRUD ====================

    @classmethod
    async def create_plant(cls, plant_data: PlantCreate, now: Optional[datetime] = None) -> PlantResponse:
        """Add a plant. Every enabled track starts from `now`."""
        now = cls._now(now)
        collection = cls._get_plants_collection()

        plant = Plant(
            id=str(uuid.uuid4()),
            name=plant_data.name,
            watering=CareTrack(
                schedule=plant_data.watering_schedule,
                last_date=now,
                next_date=plant_data.watering_schedule.next_date(now) or now,
            ),
            rotation=cls._initial_track(plant_data.rotation_schedule, now),
            fertilizing=cls._initial_track(plant_data.fertilizing_schedule, now),
            notes=(plant_data.notes or "").strip() or None,
            created_at=now,
        )

        await collection.insert_one(cls._plant_to_doc(plant))
        logger.info(f"Created plant {plant.id} ('{plant.name}')")

        return cls._to_response(plant, now)

    @staticmethod
    def _initial_track(schedule: Schedule, now: datetime) -> CareTrack:
        return CareTrack(
            schedule=schedule,
            last_date=now if schedule.is_enabled else None,
            next_date=schedule.next_date(now),
        )

    @classmethod
    async def get_plants(cls) -> List[Plant]:
        """All plants, ordered by next care date then name."""
        collection = cls._get_plants_collection()
        docs = await collection.find({}).to_list(length=None)
        return care_state.sort_plants(cls._doc_to_plant(d) for d in docs)

    @classmethod
    async def list_plants(cls, now: Optional[datetime] = None) -> List[PlantResponse]:
        now = cls._now(now)
        return [cls._to_response(p, now) for p in await cls.get_plants()]

    @classmethod
    async def get_plant(cls, plant_id: str) -> Plant:
        """Get a specific plant by ID."""
        plant_id = cls._validate_plant_id(plant_id)
        doc = await cls._get_plants_collection().find_one({"_id": plant_id})
        if not doc:
            raise NotFoundException("Plant not found")
        return cls._doc_to_plant(doc)

    @classmethod
    async def get_plant_response(cls, plant_id: str, now: Optional[datetime] = None) -> PlantResponse:
        return cls._to_response(await cls.get_plant(plant_id), cls._now(now))

    @classmethod
    async def update_plant(
        cls, plant_id: str, updates: PlantUpdate, now: Optional[datetime] = None
    ) -> PlantResponse:
        """
        Update name, notes and schedules.

        A changed schedule restarts its track from `now`; switching an
        optional track to None clears its next date.
        """
        now = cls._now(now)
        plant = await cls.get_plant(plant_id)

        changes: Dict[str, object] = {}
        if updates.name is not None:
            changes["name"] = updates.name
        if updates.notes is not None:
            changes["notes"] = updates.notes.strip() or None

        requested = {
            CareTaskKind.WATERING: updates.watering_schedule,
            CareTaskKind.ROTATION: updates.rotation_schedule,
            CareTaskKind.FERTILIZING: updates.fertilizing_schedule,
        }
        for kind, schedule in requested.items():
            track = plant.track(kind)
            if schedule is None or schedule == track.schedule:
                continue
            changes[kind.value] = cls._track_to_doc(
                track.model_copy(update={"schedule": schedule, "next_date": schedule.next_date(now)})
            )

        if not changes:
            return cls._to_response(plant, now)

        result = await cls._get_plants_collection().find_one_and_update(
            {"_id": plant.id},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        if not result:
            raise NotFoundException("Plant not found")

        return cls._to_response(cls._doc_to_plant(result), now)

    @classmethod
    async def delete_plant(cls, plant_id: str) -> bool:
        """Delete a plant and release its stored image."""
        plant = await cls.get_plant(plant_id)

        result = await cls._get_plants_collection().delete_one({"_id": plant.id})
        if result.deleted_count == 0:
            raise NotFoundException("Plant not found")

        await PlantImageService.delete_image(plant.image_key)
        logger.info(f"Deleted plant {plant.id}")
        return True

    @classmethod
    async def set_plant_image(
        cls, plant_id: str, upload: PlantImageUpload, now: Optional[datetime] = None
    ) -> PlantResponse:
        """Store a new photo for the plant, replacing any previous one."""
        plant = await cls.get_plant(plant_id)
        key = await PlantImageService.upload_image(plant.id, upload.image_base64, upload.content_type)

        result = await cls._get_plants_collection().find_one_and_update(
            {"_id": plant.id},
            {"$set": {"image_key": key}},
            return_document=ReturnDocument.AFTER,
        )
        if not result:
            await PlantImageService.delete_image(key)
            raise NotFoundException("Plant not found")

        await PlantImageService.delete_image(plant.image_key)
        return cls._to_response(cls._doc_to_plant(result), cls._now(now))

    # ==================== Care ====================

    @classmethod
    async def apply_care_event(cls, event: CareTaskCompleted) -> Plant:
        """Persist the track dates produced by a completed care task."""
        kind = event.task.kind.value
        track = event.track
        result = await cls._get_plants_collection().find_one_and_update(
            {"_id": event.plant.id},
            {"$set": {
                f"{kind}.last_date": track.last_date,
                f"{kind}.next_date": track.next_date,
            }},
            return_document=ReturnDocument.AFTER,
        )
        if not result:
            raise NotFoundException("Plant not found")
        return cls._doc_to_plant(result)

    @classmethod
    async def get_plants_needing_care(cls, now: Optional[datetime] = None) -> List[Plant]:
        return care_state.plants_needing_care(await cls.get_plants(), cls._now(now))

    @classmethod
    async def get_care_overview(cls, now: Optional[datetime] = None) -> CareOverview:
        counts = care_state.count_care_needs(await cls.get_plants(), cls._now(now))
        return CareOverview(
            plants_needing_water=counts.water,
            plants_needing_rotation=counts.rotation,
            plants_needing_fertilizing=counts.fertilizing,
            plants_needing_care=counts.any_care,
            total_tasks=counts.total_tasks,
            status_text=counts.status_text,
        )

    # ==================== Helpers ====================

    @staticmethod
    def _track_to_doc(track: CareTrack) -> dict:
        return {
            "schedule": track.schedule.value,
            "last_date": track.last_date,
            "next_date": track.next_date,
        }

    @classmethod
    def _plant_to_doc(cls, plant: Plant) -> dict:
        return {
            "_id": plant.id,
            "name": plant.name,
            "watering": cls._track_to_doc(plant.watering),
            "rotation": cls._track_to_doc(plant.rotation),
            "fertilizing": cls._track_to_doc(plant.fertilizing),
            "notes": plant.notes,
            "image_key": plant.image_key,
            "created_at": plant.created_at,
        }

    @staticmethod
    def _doc_to_track(raw: Optional[dict]) -> CareTrack:
        if not raw:
            return CareTrack()
        tz = get_tzinfo()
        last_date = raw.get("last_date")
        next_date = raw.get("next_date")
        return CareTrack(
            schedule=Schedule(raw.get("schedule") or Schedule.NONE.value),
            last_date=as_aware(last_date, tz) if last_date else None,
            next_date=as_aware(next_date, tz) if next_date else None,
        )

    @classmethod
    def _doc_to_plant(cls, doc: dict) -> Plant:
        """Convert MongoDB document to a Plant snapshot."""
        return Plant(
            id=str(doc["_id"]),
            name=doc["name"],
            watering=cls._doc_to_track(doc.get("watering")),
            rotation=cls._doc_to_track(doc.get("rotation")),
            fertilizing=cls._doc_to_track(doc.get("fertilizing")),
            notes=doc.get("notes"),
            image_key=doc.get("image_key"),
            created_at=as_aware(doc["created_at"], get_tzinfo()),
        )

    @staticmethod
    def _track_response(plant: Plant, kind: CareTaskKind, now: datetime) -> CareTrackResponse:
        track = plant.track(kind)
        return CareTrackResponse(
            schedule=track.schedule,
            last_date=track.last_date,
            next_date=track.next_date,
            needs_care=care_state.needs_care(plant, kind, now),
        )

    @classmethod
    def _to_response(cls, plant: Plant, now: datetime) -> PlantResponse:
        next_care = care_state.next_care_date(plant)
        return PlantResponse(
            id=plant.id,
            name=plant.name,
            watering=cls._track_response(plant, CareTaskKind.WATERING, now),
            rotation=cls._track_response(plant, CareTaskKind.ROTATION, now),
            fertilizing=cls._track_response(plant, CareTaskKind.FERTILIZING, now),
            notes=plant.notes,
            image_url=PlantImageService.get_image_url(plant.image_key),
            next_care_date=next_care,
            days_until_next_care=days_between(as_aware(next_care, now.tzinfo), now),
            needs_care=care_state.needs_any_care(plant, now),
            created_at=plant.created_at,
        )
