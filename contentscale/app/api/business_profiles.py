"""Business profile endpoints."""

from typing import List

from fastapi import APIRouter, Response, status

from contentscale.app.api.deps import StorageDep
from contentscale.app.exceptions import NotFoundError
from contentscale.app.services.models import (
    BusinessProfile,
    BusinessProfileCreate,
    BusinessProfileUpdate,
)

router = APIRouter(prefix="/api/business-profiles", tags=["business-profiles"])


@router.post("", response_model=BusinessProfile, status_code=status.HTTP_201_CREATED)
async def create_business_profile(
    data: BusinessProfileCreate,
    storage: StorageDep,
) -> BusinessProfile:
    return storage.create_business_profile(data)


@router.get("", response_model=List[BusinessProfile])
async def list_business_profiles(storage: StorageDep) -> List[BusinessProfile]:
    return storage.list_business_profiles()


@router.get("/{profile_id}", response_model=BusinessProfile)
async def get_business_profile(profile_id: str, storage: StorageDep) -> BusinessProfile:
    profile = storage.get_business_profile(profile_id)
    if profile is None:
        raise NotFoundError("Business profile")
    return profile


@router.patch("/{profile_id}", response_model=BusinessProfile)
async def update_business_profile(
    profile_id: str,
    updates: BusinessProfileUpdate,
    storage: StorageDep,
) -> BusinessProfile:
    """Apply a partial update; omitted fields keep their values."""
    return storage.update_business_profile(profile_id, updates)


@router.delete("/{profile_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_business_profile(profile_id: str, storage: StorageDep) -> Response:
    if not storage.delete_business_profile(profile_id):
        raise NotFoundError("Business profile")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
