"""Aggregate statistics endpoint."""

from fastapi import APIRouter

from contentscale.app.api.deps import StorageDep
from contentscale.app.services.models import Statistics

router = APIRouter(prefix="/api/statistics", tags=["statistics"])


@router.get("", response_model=Statistics)
async def get_statistics(storage: StorageDep) -> Statistics:
    return storage.statistics()
