"""Tests for the analysis service and analyzer."""

from unittest.mock import patch

import pytest

from contentscale.app.exceptions import (
    AnalysisFailedError,
    BusinessOverviewFailedError,
    NotFoundError,
)
from contentscale.app.services.analysis import (
    CATEGORY_FRAMEWORKS,
    AnalysisDraft,
    AnalysisService,
    FrameworkAnalyzer,
)
from contentscale.app.services.models import (
    AnalysisStatus,
    Budget,
    ConsultationCreate,
    ConsultationStatus,
    ConsultingCategory,
)
from contentscale.app.services.storage import ConsultingStorage


class FailingAnalyzer:
    async def analyze(self, consultation):
        raise RuntimeError("upstream unavailable")

    async def overview(self, business_context, industry):
        raise RuntimeError("upstream unavailable")


class RecordingAnalyzer:
    def __init__(self, storage):
        self.storage = storage
        self.seen_status = None

    async def analyze(self, consultation):
        self.seen_status = self.storage.get_consultation(consultation.id).status
        return AnalysisDraft(analysis="ok", recommendations=["r"])


@pytest.fixture
def storage():
    return ConsultingStorage()


@pytest.fixture
def consultation(storage, consultation_payload):
    return storage.create_consultation(ConsultationCreate.model_validate(consultation_payload))


def test_every_category_has_a_framework():
    assert set(CATEGORY_FRAMEWORKS) == set(ConsultingCategory)
    for steps, metrics in CATEGORY_FRAMEWORKS.values():
        assert len(steps) == 3
        assert len(metrics) == 3


class TestFrameworkAnalyzer:
    @pytest.mark.asyncio
    async def test_builds_analysis_from_consultation(self, consultation):
        draft = await FrameworkAnalyzer().analyze(consultation)

        assert "Marketing Strategy" in draft.analysis
        assert "Acme Bakery" in draft.analysis
        assert "Low website traffic" in draft.analysis
        assert "Address: Low website traffic" in draft.recommendations
        assert "Plan towards: Double online orders" in draft.recommendations
        assert draft.metrics == CATEGORY_FRAMEWORKS[ConsultingCategory.MARKETING][1]

    @pytest.mark.asyncio
    async def test_fills_structured_fields(self, consultation):
        draft = await FrameworkAnalyzer().analyze(consultation)
        steps = CATEGORY_FRAMEWORKS[ConsultingCategory.MARKETING][0]

        assert draft.action_items[0] == f"Kick off: {steps[0]}"
        assert "Assign an owner and deadline for: No email list" in draft.action_items
        assert draft.expected_outcomes == ["Progress on: Double online orders"]
        assert all(step in draft.implementation_plan for step in steps)
        assert draft.implementation_plan.startswith("Phase 1 of 3:")
        assert draft.timeline == "3-6 months"
        assert "Marketing Strategy specialist" in draft.resources
        assert draft.confidence == 0.75

    @pytest.mark.asyncio
    async def test_risk_reflects_budget_and_timeline(self, consultation):
        analyzer = FrameworkAnalyzer()

        low_budget = await analyzer.analyze(consultation)
        comfortable = await analyzer.analyze(
            consultation.model_copy(update={"budget": Budget.OVER_100K})
        )

        assert low_budget.risk_assessment.startswith("Elevated risk:")
        assert "budget" in low_budget.risk_assessment
        assert comfortable.risk_assessment.startswith("Low risk:")

    @pytest.mark.asyncio
    async def test_confidence_is_capped(self, consultation):
        detailed = consultation.model_copy(
            update={"specific_challenges": ["c"] * 10, "goals": ["g"] * 10}
        )

        draft = await FrameworkAnalyzer().analyze(detailed)

        assert draft.confidence == 0.95

    @pytest.mark.asyncio
    async def test_overview_covers_industry_and_context(self):
        overview = await FrameworkAnalyzer().overview("Two bakeries in Leeds", "Food & Beverage")

        assert "Food & Beverage" in overview
        assert "Two bakeries in Leeds" in overview
        assert "Competitive positioning" in overview
        assert "Strategic recommendations" in overview

    @pytest.mark.asyncio
    async def test_deterministic(self, consultation):
        analyzer = FrameworkAnalyzer()

        assert await analyzer.analyze(consultation) == await analyzer.analyze(consultation)


class TestAnalysisService:
    @pytest.mark.asyncio
    async def test_run_completes_consultation(self, storage, consultation):
        result = await AnalysisService(storage).run(consultation.id)

        assert result.consultation_id == consultation.id
        assert result.category == ConsultingCategory.MARKETING
        assert result.status == AnalysisStatus.COMPLETED
        assert result.id.startswith("analysis_")
        assert storage.get_analysis(consultation.id) == result
        assert storage.get_consultation(consultation.id).status == ConsultationStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_status_is_analyzing_while_running(self, storage, consultation):
        analyzer = RecordingAnalyzer(storage)

        await AnalysisService(storage, analyzer).run(consultation.id)

        assert analyzer.seen_status == ConsultationStatus.ANALYZING

    @pytest.mark.asyncio
    async def test_failure_marks_consultation_failed(self, storage, consultation):
        service = AnalysisService(storage, FailingAnalyzer())

        with patch("contentscale.app.services.analysis.logger") as mock_logger:
            with pytest.raises(AnalysisFailedError):
                await service.run(consultation.id)

        mock_logger.exception.assert_called_once()
        assert storage.get_consultation(consultation.id).status == ConsultationStatus.FAILED
        assert storage.get_analysis(consultation.id) is None

    @pytest.mark.asyncio
    async def test_missing_consultation(self, storage):
        with pytest.raises(NotFoundError):
            await AnalysisService(storage).run("consultation_missing")

    @pytest.mark.asyncio
    async def test_background_run_swallows_analysis_failure(self, storage, consultation):
        service = AnalysisService(storage, FailingAnalyzer())

        await service.run_in_background(consultation.id)

        assert storage.get_consultation(consultation.id).status == ConsultationStatus.FAILED

    @pytest.mark.asyncio
    async def test_background_run_waits_for_delay(self, storage, consultation):
        service = AnalysisService(storage)

        with patch("contentscale.app.services.analysis.asyncio.sleep") as mock_sleep:
            await service.run_in_background(consultation.id, delay_seconds=1.5)

        mock_sleep.assert_awaited_once_with(1.5)
        assert storage.get_consultation(consultation.id).status == ConsultationStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_run_stores_structured_fields(self, storage, consultation):
        result = await AnalysisService(storage).run(consultation.id)

        assert result.metrics == CATEGORY_FRAMEWORKS[ConsultingCategory.MARKETING][1]
        assert result.action_items
        assert result.risk_assessment
        assert result.implementation_plan
        assert result.timeline == "3-6 months"
        assert 0 < result.confidence <= 1

    @pytest.mark.asyncio
    async def test_overview(self, storage):
        overview = await AnalysisService(storage).overview("Two bakeries", "Retail")

        assert "Retail" in overview

    @pytest.mark.asyncio
    async def test_overview_failure(self, storage):
        service = AnalysisService(storage, FailingAnalyzer())

        with patch("contentscale.app.services.analysis.logger") as mock_logger:
            with pytest.raises(BusinessOverviewFailedError):
                await service.overview("Two bakeries", "Retail")

        mock_logger.exception.assert_called_once()
