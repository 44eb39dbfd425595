"""Consultation request endpoints."""

from typing import List

from fastapi import APIRouter, BackgroundTasks, status

from contentscale.app.api.deps import (
    AnalysisServiceDep,
    RequestContextDep,
    SettingsDep,
    StorageDep,
)
from contentscale.app.services.models import Consultation, ConsultationCreate

router = APIRouter(prefix="/api/consultations", tags=["consultations"])


@router.post("", response_model=Consultation, status_code=status.HTTP_201_CREATED)
async def create_consultation(
    data: ConsultationCreate,
    storage: StorageDep,
    analysis: AnalysisServiceDep,
    context: RequestContextDep,
    config: SettingsDep,
    background_tasks: BackgroundTasks,
) -> Consultation:
    """Store a consultation request and schedule its analysis."""
    consultation = storage.create_consultation(
        data, submitted_by_agent=context.is_agent_request
    )
    background_tasks.add_task(
        analysis.run_in_background,
        consultation.id,
        config.analysis_delay_seconds,
    )
    return consultation


@router.get("", response_model=List[Consultation])
async def list_consultations(storage: StorageDep) -> List[Consultation]:
    return storage.list_consultations()


@router.get("/{consultation_id}", response_model=Consultation)
async def get_consultation(consultation_id: str, storage: StorageDep) -> Consultation:
    return storage.require_consultation(consultation_id)
