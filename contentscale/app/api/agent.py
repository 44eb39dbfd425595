"""Endpoints for automated clients (bots and AI agents).

Everything under ``/api/agent/`` shares the stricter agent rate limit.
"""

import time
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Request
from pydantic import Field, ValidationError

from contentscale.app.api.deps import (
    AnalysisServiceDep,
    RequestContextDep,
    SettingsDep,
    StorageDep,
)
from contentscale.app.core.logging import get_logger
from contentscale.app.exceptions import AnalysisFailedError
from contentscale.app.services.models import (
    AnalysisResult,
    CamelModel,
    ConsultationCreate,
    ConsultingCategory,
    ExportData,
)
from contentscale.app.services.storage import utcnow

router = APIRouter(prefix="/api/agent", tags=["agent"])
logger = get_logger(__name__)

AGENT_CAPABILITIES = [
    "business-consulting",
    "consultation-analysis",
    "report-generation",
    "multi-category-expertise",
]
CONTACT_ADDRESS = "consultant@contentscale.site"
MAX_BATCH_SIZE = 50


class AgentStatus(CamelModel):
    status: str
    name: str
    version: str
    capabilities: List[str]
    categories: List[ConsultingCategory]
    contact: str


class AgentHealth(CamelModel):
    status: str
    timestamp: datetime
    uptime_seconds: float
    environment: str


class BatchConsultationRequest(CamelModel):
    """Raw items are validated one by one so a bad item only fails itself."""

    consultations: List[Dict[str, Any]] = Field(..., max_length=MAX_BATCH_SIZE)


class BatchItemResult(CamelModel):
    index: int
    status: Literal["completed", "error"]
    consultation_id: Optional[str] = None
    analysis: Optional[AnalysisResult] = None
    error: Optional[str] = None


class BatchConsultationResponse(CamelModel):
    processed: int
    results: List[BatchItemResult]


@router.get("/status", response_model=AgentStatus)
async def agent_status(config: SettingsDep) -> AgentStatus:
    """Describe the service to automated clients."""
    return AgentStatus(
        status="active",
        name=config.app_name,
        version=config.app_version,
        capabilities=AGENT_CAPABILITIES,
        categories=list(ConsultingCategory),
        contact=CONTACT_ADDRESS,
    )


@router.get("/health", response_model=AgentHealth)
async def agent_health(request: Request, config: SettingsDep) -> AgentHealth:
    return AgentHealth(
        status="healthy",
        timestamp=utcnow(),
        uptime_seconds=round(time.monotonic() - request.app.state.started_at, 3),
        environment=config.environment,
    )


@router.get("/export-data", response_model=ExportData)
async def export_data(storage: StorageDep) -> ExportData:
    return storage.export_snapshot()


@router.post(
    "/batch-consultations",
    response_model=BatchConsultationResponse,
    response_model_exclude_none=True,
)
async def batch_consultations(
    payload: BatchConsultationRequest,
    storage: StorageDep,
    analysis: AnalysisServiceDep,
    context: RequestContextDep,
) -> BatchConsultationResponse:
    """Create and analyze several consultations in one call.

    Items are processed in order. An item that fails validation or analysis
    is reported with ``status="error"`` and the rest of the batch continues.
    """
    results: List[BatchItemResult] = []
    for index, raw in enumerate(payload.consultations):
        try:
            data = ConsultationCreate.model_validate(raw)
        except ValidationError as exc:
            results.append(
                BatchItemResult(
                    index=index,
                    status="error",
                    error=f"Invalid consultation: {exc.error_count()} validation error(s)",
                )
            )
            continue

        consultation = storage.create_consultation(
            data, submitted_by_agent=context.is_agent_request
        )
        try:
            result = await analysis.run(consultation.id)
        except AnalysisFailedError as exc:
            results.append(
                BatchItemResult(
                    index=index,
                    status="error",
                    consultation_id=consultation.id,
                    error=exc.message,
                )
            )
            continue

        results.append(
            BatchItemResult(
                index=index,
                status="completed",
                consultation_id=consultation.id,
                analysis=result,
            )
        )

    logger.info(
        f"Batch processed: {len(results)} item(s)",
        extra={"is_agent_request": context.is_agent_request},
    )
    return BatchConsultationResponse(processed=len(results), results=results)
