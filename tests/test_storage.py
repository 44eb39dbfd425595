"""Tests for the in-memory consulting storage."""

import re
from datetime import datetime, timezone

import pytest

from contentscale.app.exceptions import NotFoundError
from contentscale.app.services.models import (
    AnalysisResult,
    BusinessProfileCreate,
    BusinessProfileUpdate,
    ConsultationCreate,
    ConsultationStatus,
    ConsultingCategory,
)
from contentscale.app.services.storage import ConsultingStorage, generate_id


@pytest.fixture
def storage():
    return ConsultingStorage()


@pytest.fixture
def consultation_data(consultation_payload):
    return ConsultationCreate.model_validate(consultation_payload)


@pytest.fixture
def profile_data(profile_payload):
    return BusinessProfileCreate.model_validate(profile_payload)


def _analysis(consultation_id: str, text: str = "analysis") -> AnalysisResult:
    return AnalysisResult(
        id=generate_id("analysis"),
        consultation_id=consultation_id,
        category="marketing",
        analysis=text,
        recommendations=["Do the thing"],
        created_at=datetime.now(timezone.utc),
    )


def test_generate_id_format():
    assert re.fullmatch(r"consultation_\d+_[0-9a-f]{9}", generate_id("consultation"))
    assert generate_id("x") != generate_id("x")


class TestConsultations:
    def test_create_and_get(self, storage, consultation_data):
        consultation = storage.create_consultation(consultation_data)

        assert consultation.id.startswith("consultation_")
        assert consultation.status == ConsultationStatus.PENDING
        assert consultation.submitted_by_agent is False
        assert consultation.created_at.tzinfo is not None
        assert storage.get_consultation(consultation.id) == consultation

    def test_submitted_by_agent_recorded(self, storage, consultation_data):
        consultation = storage.create_consultation(consultation_data, submitted_by_agent=True)

        assert consultation.submitted_by_agent is True

    def test_list_newest_first(self, storage, consultation_data):
        first = storage.create_consultation(consultation_data)
        second = storage.create_consultation(consultation_data)

        assert [c.id for c in storage.list_consultations()] == [second.id, first.id]

    def test_get_missing(self, storage):
        assert storage.get_consultation("nope") is None
        with pytest.raises(NotFoundError, match="Consultation not found"):
            storage.require_consultation("nope")

    def test_update_status(self, storage, consultation_data):
        consultation = storage.create_consultation(consultation_data)

        updated = storage.update_consultation_status(consultation.id, ConsultationStatus.ANALYZING)

        assert updated.status == ConsultationStatus.ANALYZING
        assert storage.get_consultation(consultation.id).status == ConsultationStatus.ANALYZING
        assert consultation.status == ConsultationStatus.PENDING

    def test_update_status_missing(self, storage):
        assert storage.update_consultation_status("nope", ConsultationStatus.FAILED) is None


class TestAnalyses:
    def test_save_and_get_by_consultation(self, storage):
        analysis = storage.save_analysis(_analysis("c1"))

        assert storage.get_analysis("c1") == analysis
        assert storage.get_analysis("c2") is None

    def test_save_replaces_previous_for_same_consultation(self, storage):
        storage.save_analysis(_analysis("c1", "old"))
        storage.save_analysis(_analysis("c2"))
        storage.save_analysis(_analysis("c1", "new"))

        assert storage.get_analysis("c1").analysis == "new"
        assert len(storage.list_analyses()) == 2


class TestBusinessProfiles:
    def test_create_get_list(self, storage, profile_data):
        profile = storage.create_business_profile(profile_data)

        assert profile.id.startswith("profile_")
        assert profile.created_at == profile.updated_at
        assert storage.get_business_profile(profile.id) == profile
        assert storage.list_business_profiles() == [profile]

    def test_partial_update(self, storage, profile_data):
        profile = storage.create_business_profile(profile_data)

        updated = storage.update_business_profile(
            profile.id, BusinessProfileUpdate(industry="Retail")
        )

        assert updated.industry == "Retail"
        assert updated.name == profile.name
        assert updated.goals == profile.goals
        assert updated.updated_at >= profile.updated_at

    def test_update_missing(self, storage):
        with pytest.raises(NotFoundError, match="Business profile not found"):
            storage.update_business_profile("nope", BusinessProfileUpdate(name="x"))

    def test_delete(self, storage, profile_data):
        profile = storage.create_business_profile(profile_data)

        assert storage.delete_business_profile(profile.id) is True
        assert storage.delete_business_profile(profile.id) is False
        assert storage.get_business_profile(profile.id) is None


class TestReporting:
    def test_statistics(self, storage, consultation_data, profile_data):
        first = storage.create_consultation(consultation_data)
        storage.create_consultation(
            consultation_data.model_copy(update={"category": ConsultingCategory.SEO})
        )
        storage.update_consultation_status(first.id, ConsultationStatus.COMPLETED)
        storage.save_analysis(_analysis(first.id))
        storage.create_business_profile(profile_data)

        stats = storage.statistics()

        assert stats.total_consultations == 2
        assert stats.total_analyses == 1
        assert stats.total_business_profiles == 1
        assert stats.consultations_by_category == {"marketing": 1, "seo": 1}
        assert stats.consultations_by_status == {"completed": 1, "pending": 1}

    def test_empty_statistics(self, storage):
        stats = storage.statistics()

        assert stats.total_consultations == 0
        assert stats.consultations_by_category == {}

    def test_export_snapshot(self, storage, consultation_data, profile_data):
        consultation = storage.create_consultation(consultation_data)
        storage.save_analysis(_analysis(consultation.id))
        storage.create_business_profile(profile_data)

        export = storage.export_snapshot()

        assert export.summary.total_consultations == 1
        assert export.summary.completed_analyses == 1
        assert export.summary.business_profiles == 1
        assert export.data.consultations == [consultation]
        assert export.model_dump(by_alias=True)["summary"] == {
            "totalConsultations": 1,
            "completedAnalyses": 1,
            "businessProfiles": 1,
        }
