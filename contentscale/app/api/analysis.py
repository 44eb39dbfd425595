"""Analysis result endpoints."""

from typing import List

from fastapi import APIRouter

from contentscale.app.api.deps import AnalysisServiceDep, StorageDep
from contentscale.app.exceptions import NotFoundError
from contentscale.app.services.models import AnalysisResult

router = APIRouter(prefix="/api/analysis", tags=["analysis"])


@router.get("", response_model=List[AnalysisResult])
async def list_analyses(storage: StorageDep) -> List[AnalysisResult]:
    return storage.list_analyses()


@router.get("/{consultation_id}", response_model=AnalysisResult)
async def get_analysis(consultation_id: str, storage: StorageDep) -> AnalysisResult:
    analysis = storage.get_analysis(consultation_id)
    if analysis is None:
        raise NotFoundError("Analysis")
    return analysis


@router.post("/{consultation_id}", response_model=AnalysisResult)
async def run_analysis(consultation_id: str, service: AnalysisServiceDep) -> AnalysisResult:
    """Run (or re-run) the analysis for a consultation and wait for the result."""
    return await service.run(consultation_id)
