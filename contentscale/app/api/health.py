"""Service health endpoint."""

from datetime import datetime

from fastapi import APIRouter
from pydantic import BaseModel

from contentscale.app.api.deps import SettingsDep
from contentscale.app.services.storage import utcnow

router = APIRouter(tags=["health"])


class HealthStatus(BaseModel):
    status: str
    service: str
    version: str
    timestamp: datetime


@router.get("/", response_model=HealthStatus)
async def health(config: SettingsDep) -> HealthStatus:
    return HealthStatus(
        status="ok",
        service=config.app_name,
        version=config.app_version,
        timestamp=utcnow(),
    )
