"""In-memory storage for consultations, analyses and business profiles.

Data lives for the lifetime of the process. One instance is created per
application and reached through the ``StorageDep`` dependency.
"""

import time
import uuid
from collections import Counter
from datetime import datetime, timezone
from typing import Dict, List, Optional

from contentscale.app.core.logging import get_logger
from contentscale.app.exceptions import NotFoundError
from contentscale.app.services.models import (
    AnalysisResult,
    BusinessProfile,
    BusinessProfileCreate,
    BusinessProfileUpdate,
    Consultation,
    ConsultationCreate,
    ConsultationStatus,
    ExportData,
    ExportPayload,
    ExportSummary,
    Statistics,
)

logger = get_logger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_id(prefix: str) -> str:
    """Build an ID like ``consultation_1719000000000_3f9a1c2b7``."""
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


class ConsultingStorage:
    """Keyed in-memory store. Listings return the newest entries first."""

    def __init__(self) -> None:
        self._consultations: Dict[str, Consultation] = {}
        self._analyses: Dict[str, AnalysisResult] = {}
        self._profiles: Dict[str, BusinessProfile] = {}

    # Consultations

    def create_consultation(
        self,
        data: ConsultationCreate,
        submitted_by_agent: bool = False,
    ) -> Consultation:
        consultation = Consultation(
            **data.model_dump(),
            id=generate_id("consultation"),
            status=ConsultationStatus.PENDING,
            submitted_by_agent=submitted_by_agent,
            created_at=utcnow(),
        )
        self._consultations[consultation.id] = consultation
        logger.info(
            f"Consultation created: {consultation.id}",
            extra={"category": consultation.category.value, "is_agent_request": submitted_by_agent},
        )
        return consultation

    def get_consultation(self, consultation_id: str) -> Optional[Consultation]:
        return self._consultations.get(consultation_id)

    def require_consultation(self, consultation_id: str) -> Consultation:
        consultation = self.get_consultation(consultation_id)
        if consultation is None:
            raise NotFoundError("Consultation")
        return consultation

    def list_consultations(self) -> List[Consultation]:
        return list(reversed(self._consultations.values()))

    def update_consultation_status(
        self,
        consultation_id: str,
        status: ConsultationStatus,
    ) -> Optional[Consultation]:
        """Set a consultation's status. Returns None if it does not exist."""
        consultation = self._consultations.get(consultation_id)
        if consultation is None:
            return None
        updated = consultation.model_copy(update={"status": status})
        self._consultations[consultation_id] = updated
        return updated

    # Analyses

    def save_analysis(self, analysis: AnalysisResult) -> AnalysisResult:
        """Store an analysis, replacing any earlier one for the same consultation."""
        self._analyses = {
            key: value
            for key, value in self._analyses.items()
            if value.consultation_id != analysis.consultation_id
        }
        self._analyses[analysis.id] = analysis
        return analysis

    def get_analysis(self, consultation_id: str) -> Optional[AnalysisResult]:
        for analysis in self._analyses.values():
            if analysis.consultation_id == consultation_id:
                return analysis
        return None

    def list_analyses(self) -> List[AnalysisResult]:
        return list(reversed(self._analyses.values()))

    # Business profiles

    def create_business_profile(self, data: BusinessProfileCreate) -> BusinessProfile:
        now = utcnow()
        profile = BusinessProfile(
            **data.model_dump(),
            id=generate_id("profile"),
            created_at=now,
            updated_at=now,
        )
        self._profiles[profile.id] = profile
        return profile

    def get_business_profile(self, profile_id: str) -> Optional[BusinessProfile]:
        return self._profiles.get(profile_id)

    def list_business_profiles(self) -> List[BusinessProfile]:
        return list(reversed(self._profiles.values()))

    def update_business_profile(
        self,
        profile_id: str,
        updates: BusinessProfileUpdate,
    ) -> BusinessProfile:
        profile = self._profiles.get(profile_id)
        if profile is None:
            raise NotFoundError("Business profile")
        changes = updates.model_dump(exclude_unset=True, exclude_none=True)
        changes["updated_at"] = utcnow()
        updated = profile.model_copy(update=changes)
        self._profiles[profile_id] = updated
        return updated

    def delete_business_profile(self, profile_id: str) -> bool:
        return self._profiles.pop(profile_id, None) is not None

    # Reporting

    def statistics(self) -> Statistics:
        consultations = self._consultations.values()
        by_category = Counter(c.category.value for c in consultations)
        by_status = Counter(c.status.value for c in consultations)
        return Statistics(
            total_consultations=len(self._consultations),
            total_analyses=len(self._analyses),
            total_business_profiles=len(self._profiles),
            consultations_by_category=dict(by_category),
            consultations_by_status=dict(by_status),
            last_updated=utcnow(),
        )

    def export_snapshot(self) -> ExportData:
        consultations = self.list_consultations()
        analyses = self.list_analyses()
        profiles = self.list_business_profiles()
        return ExportData(
            exported_at=utcnow(),
            summary=ExportSummary(
                total_consultations=len(consultations),
                completed_analyses=len(analyses),
                business_profiles=len(profiles),
            ),
            data=ExportPayload(
                consultations=consultations,
                analyses=analyses,
                profiles=profiles,
            ),
        )
