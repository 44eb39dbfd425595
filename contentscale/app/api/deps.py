"""FastAPI dependencies for route handlers.

Services are created once in ``create_app`` and kept on ``app.state``;
these dependencies hand them to handlers.

Usage:
    from contentscale.app.api.deps import StorageDep

    @router.get("/items")
    async def list_items(storage: StorageDep):
        return storage.list_consultations()
"""

from typing import Annotated

from fastapi import Depends, Request

from contentscale.app.core.config import Settings
from contentscale.app.middleware.context import RequestContext, get_request_context
from contentscale.app.services.analysis import AnalysisService
from contentscale.app.services.storage import ConsultingStorage


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> ConsultingStorage:
    return request.app.state.storage


def get_analysis_service(request: Request) -> AnalysisService:
    return request.app.state.analysis_service


SettingsDep = Annotated[Settings, Depends(get_settings)]
StorageDep = Annotated[ConsultingStorage, Depends(get_storage)]
AnalysisServiceDep = Annotated[AnalysisService, Depends(get_analysis_service)]
RequestContextDep = Annotated[RequestContext, Depends(get_request_context)]

__all__ = [
    "AnalysisServiceDep",
    "RequestContextDep",
    "SettingsDep",
    "StorageDep",
]
