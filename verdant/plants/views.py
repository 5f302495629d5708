"""Plants API routes."""

from typing import List
from fastapi import APIRouter, Depends, status

from verdant.core.clock import Clock, get_clock
from verdant.plants.models import (
    CareOverview,
    PlantCreate,
    PlantImageUpload,
    PlantResponse,
    PlantUpdate,
)
from verdant.plants.service import PlantService


router = APIRouter(prefix="/plants", tags=["Plants"])


@router.post("", response_model=PlantResponse, status_code=status.HTTP_201_CREATED)
async def create_plant(plant_data: PlantCreate, clock: Clock = Depends(get_clock)):
    """
    Add a plant to your collection.
    
    Watering (and any enabled rotation/fertilizing track) starts today:
    the first due date is one schedule period from the start of today.
    """
    return await PlantService.create_plant(plant_data, now=clock())


@router.get("", response_model=List[PlantResponse])
async def list_plants(clock: Clock = Depends(get_clock)):
    """Get all plants, soonest care first."""
    return await PlantService.list_plants(now=clock())


@router.get("/overview", response_model=CareOverview)
async def get_care_overview(clock: Clock = Depends(get_clock)):
    """How many plants need water, rotation or fertilizer today."""
    return await PlantService.get_care_overview(now=clock())


@router.get("/{plant_id}", response_model=PlantResponse)
async def get_plant(plant_id: str, clock: Clock = Depends(get_clock)):
    """Get a specific plant."""
    return await PlantService.get_plant_response(plant_id, now=clock())


@router.patch("/{plant_id}", response_model=PlantResponse)
async def update_plant(plant_id: str, updates: PlantUpdate, clock: Clock = Depends(get_clock)):
    """Update name, notes or schedules. A changed schedule restarts from today."""
    return await PlantService.update_plant(plant_id, updates, now=clock())


@router.delete("/{plant_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_plant(plant_id: str):
    """Delete a plant and its photo."""
    await PlantService.delete_plant(plant_id)


@router.put("/{plant_id}/image", response_model=PlantResponse)
async def upload_plant_image(
    plant_id: str,
    upload: PlantImageUpload,
    clock: Clock = Depends(get_clock),
):
    """Upload a new photo for a plant (base64), replacing the old one."""
    return await PlantService.set_plant_image(plant_id, upload, now=clock())
