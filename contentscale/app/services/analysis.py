"""Consultation analysis.

The analyzer is pluggable. The default FrameworkAnalyzer produces a
deterministic report from the category's consulting framework and the
consultation's own challenges and goals; an AI-backed analyzer can be
swapped in through ``create_app``.
"""

import asyncio
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional, Protocol, Tuple

from contentscale.app.core.logging import get_logger
from contentscale.app.exceptions import AnalysisFailedError, BusinessOverviewFailedError
from contentscale.app.services.models import (
    CATEGORY_DISPLAY_NAMES,
    AnalysisResult,
    AnalysisStatus,
    Budget,
    Consultation,
    ConsultationStatus,
    ConsultingCategory,
    Timeline,
)
from contentscale.app.services.storage import ConsultingStorage, generate_id, utcnow

logger = get_logger(__name__)


# (framework steps, metrics) per category
CATEGORY_FRAMEWORKS: Dict[ConsultingCategory, Tuple[List[str], List[str]]] = {
    ConsultingCategory.SEO: (
        ["Technical SEO audit and site structure analysis",
         "Keyword research and competitive analysis",
         "Content gap analysis and optimization opportunities"],
        ["Organic traffic growth", "Keyword rankings", "Core Web Vitals scores"],
    ),
    ConsultingCategory.BUSINESS_STRATEGY: (
        ["Market opportunity and competitive landscape analysis",
         "SWOT analysis and strategic positioning",
         "Growth strategy and market expansion planning"],
        ["Market share growth", "Revenue growth rate", "Customer acquisition cost"],
    ),
    ConsultingCategory.FINANCIAL: (
        ["Financial health assessment and ratio analysis",
         "Cash flow forecasting and working capital management",
         "Budget planning and variance analysis"],
        ["Cash flow", "Profit margins", "EBITDA growth"],
    ),
    ConsultingCategory.MARKETING: (
        ["Brand positioning and market segmentation analysis",
         "Customer journey mapping and persona development",
         "Multi-channel marketing strategy optimization"],
        ["Customer acquisition cost", "Marketing ROI", "Conversion rates"],
    ),
    ConsultingCategory.OPERATIONS: (
        ["Process mapping and bottleneck identification",
         "Supply chain optimization and vendor management",
         "Capacity planning and resource optimization"],
        ["Operational efficiency", "Delivery times", "Process cycle time"],
    ),
    ConsultingCategory.HR: (
        ["Organizational structure and culture assessment",
         "Talent acquisition and retention strategies",
         "Performance management and development programs"],
        ["Employee retention rate", "Time to hire", "Employee satisfaction"],
    ),
    ConsultingCategory.IT: (
        ["IT infrastructure assessment and modernization planning",
         "Digital transformation roadmap development",
         "Cloud migration and architecture optimization"],
        ["System uptime", "IT cost optimization", "Project delivery time"],
    ),
    ConsultingCategory.LEGAL: (
        ["Legal compliance and regulatory assessment",
         "Contract review and negotiation strategies",
         "Risk mitigation and liability management"],
        ["Compliance score", "Legal cost management", "Risk exposure reduction"],
    ),
    ConsultingCategory.SALES: (
        ["Sales process optimization and pipeline management",
         "Sales team performance and training needs assessment",
         "Pricing strategy and deal structuring"],
        ["Sales conversion rates", "Average deal size", "Sales cycle length"],
    ),
    ConsultingCategory.CUSTOMER_EXPERIENCE: (
        ["Customer journey mapping and touchpoint analysis",
         "Customer satisfaction and loyalty assessment",
         "Customer success and retention strategies"],
        ["Net Promoter Score", "Retention rate", "Churn rate"],
    ),
    ConsultingCategory.SUSTAINABILITY: (
        ["Environmental impact assessment and carbon footprint analysis",
         "Sustainability strategy and ESG goal setting",
         "Sustainable supply chain and vendor assessment"],
        ["Carbon footprint reduction", "Energy efficiency", "ESG scores"],
    ),
    ConsultingCategory.CYBERSECURITY: (
        ["Security posture assessment and vulnerability analysis",
         "Incident response and business continuity planning",
         "Security awareness and training programs"],
        ["Security incidents", "Vulnerability remediation time", "Mean time to detection"],
    ),
}


TIMELINE_LABELS: Dict[Timeline, str] = {
    Timeline.IMMEDIATE: "Immediate (within 4 weeks)",
    Timeline.ONE_TO_THREE_MONTHS: "1-3 months",
    Timeline.THREE_TO_SIX_MONTHS: "3-6 months",
    Timeline.SIX_TO_TWELVE_MONTHS: "6-12 months",
    Timeline.OVER_TWELVE_MONTHS: "12+ months",
}

BUDGET_LABELS: Dict[Budget, str] = {
    Budget.UNDER_5K: "under $5k",
    Budget.FROM_5K_TO_15K: "$5k-$15k",
    Budget.FROM_15K_TO_50K: "$15k-$50k",
    Budget.FROM_50K_TO_100K: "$50k-$100k",
    Budget.OVER_100K: "over $100k",
}

# Tight timelines and small budgets raise delivery risk
HIGH_RISK_TIMELINES = frozenset({Timeline.IMMEDIATE, Timeline.ONE_TO_THREE_MONTHS})
LOW_BUDGETS = frozenset({Budget.UNDER_5K, Budget.FROM_5K_TO_15K})


@dataclass
class AnalysisDraft:
    """Analyzer output before it is stored."""
    analysis: str
    recommendations: List[str]
    action_items: List[str] = field(default_factory=list)
    risk_assessment: Optional[str] = None
    expected_outcomes: List[str] = field(default_factory=list)
    implementation_plan: str = ""
    resources: List[str] = field(default_factory=list)
    metrics: List[str] = field(default_factory=list)
    timeline: str = ""
    confidence: float = 0.0


class Analyzer(Protocol):
    async def analyze(self, consultation: Consultation) -> AnalysisDraft:
        ...

    async def overview(self, business_context: str, industry: str) -> str:
        ...


class FrameworkAnalyzer:
    """Builds analyses and overviews from the category frameworks, without external calls."""

    async def analyze(self, consultation: Consultation) -> AnalysisDraft:
        framework = CATEGORY_FRAMEWORKS.get(consultation.category)
        if framework is None:
            raise ValueError(f"Unknown consulting category: {consultation.category}")
        steps, metrics = framework
        display_name = CATEGORY_DISPLAY_NAMES[consultation.category]
        timeline = TIMELINE_LABELS[consultation.timeline]
        budget = BUDGET_LABELS[consultation.budget]

        analysis = (
            f"{display_name} review for {consultation.business_name} "
            f"({consultation.industry}). {consultation.description} "
            f"Main challenges: {'; '.join(consultation.specific_challenges)}. "
            f"The engagement follows these phases: "
            + " ".join(f"{i}. {step}." for i, step in enumerate(steps, start=1))
        )

        recommendations = [f"Address: {challenge}" for challenge in consultation.specific_challenges]
        recommendations.extend(f"Plan towards: {goal}" for goal in consultation.goals)
        recommendations.append(
            f"Schedule work for a {timeline} timeline within the {budget} budget band"
        )

        action_items = [f"Kick off: {steps[0]}"]
        action_items.extend(
            f"Assign an owner and deadline for: {challenge}"
            for challenge in consultation.specific_challenges
        )
        action_items.append(f"Set baselines for: {', '.join(metrics)}")

        phase_count = len(steps)
        implementation_plan = " ".join(
            f"Phase {i} of {phase_count}: {step}." for i, step in enumerate(steps, start=1)
        ) + f" Overall timeline: {timeline}."

        return AnalysisDraft(
            analysis=analysis,
            recommendations=recommendations,
            action_items=action_items,
            risk_assessment=self._risk_assessment(consultation),
            expected_outcomes=[f"Progress on: {goal}" for goal in consultation.goals],
            implementation_plan=implementation_plan,
            resources=[
                f"{display_name} specialist",
                f"Budget allocation of {budget}",
                f"Tracking for {metrics[0].lower()}",
            ],
            metrics=list(metrics),
            timeline=timeline,
            confidence=self._confidence(consultation),
        )

    async def overview(self, business_context: str, industry: str) -> str:
        return (
            f"Business overview for the {industry} industry. "
            f"Context: {business_context} "
            "1. Industry landscape: map the main competitors and market dynamics. "
            "2. Trends and opportunities: identify shifts in customer demand and channels. "
            "3. Competitive positioning: define what sets the business apart. "
            "4. Growth potential: size the reachable market and expansion options. "
            "5. Strategic recommendations: prioritise initiatives with measurable outcomes."
        )

    @staticmethod
    def _risk_assessment(consultation: Consultation) -> str:
        risks = []
        if consultation.timeline in HIGH_RISK_TIMELINES:
            risks.append("the short timeline leaves little room for iteration")
        if consultation.budget in LOW_BUDGETS:
            risks.append("the budget limits how many initiatives can run in parallel")
        if len(consultation.specific_challenges) > 3:
            risks.append("the number of open challenges calls for strict prioritisation")
        if not risks:
            return "Low risk: timeline and budget fit the scope. Review progress monthly."
        return "Elevated risk: " + "; ".join(risks) + ". Mitigate by phasing the work."

    @staticmethod
    def _confidence(consultation: Consultation) -> float:
        """More detail about challenges and goals gives a more confident analysis."""
        detail = len(consultation.specific_challenges) + len(consultation.goals)
        return round(min(0.95, 0.6 + 0.05 * detail), 2)


class AnalysisService:
    """Runs an analyzer for a consultation and tracks its status."""

    def __init__(self, storage: ConsultingStorage, analyzer: Optional[Analyzer] = None):
        self.storage = storage
        self.analyzer = analyzer or FrameworkAnalyzer()

    async def run(self, consultation_id: str) -> AnalysisResult:
        """Analyze a stored consultation.

        Moves the consultation through ``analyzing`` to ``completed``, or to
        ``failed`` if the analyzer raises.

        Raises:
            NotFoundError: If the consultation does not exist
            AnalysisFailedError: If the analyzer fails
        """
        consultation = self.storage.require_consultation(consultation_id)
        self.storage.update_consultation_status(consultation_id, ConsultationStatus.ANALYZING)

        try:
            draft = await self.analyzer.analyze(consultation)
        except Exception as exc:
            logger.exception(f"Analysis failed for consultation {consultation_id}")
            self.storage.update_consultation_status(consultation_id, ConsultationStatus.FAILED)
            raise AnalysisFailedError(consultation_id) from exc

        result = self.storage.save_analysis(
            AnalysisResult(
                **asdict(draft),
                id=generate_id("analysis"),
                consultation_id=consultation_id,
                category=consultation.category,
                status=AnalysisStatus.COMPLETED,
                created_at=utcnow(),
            )
        )
        self.storage.update_consultation_status(consultation_id, ConsultationStatus.COMPLETED)
        logger.info(f"Analysis completed for consultation {consultation_id}")
        return result

    async def run_in_background(self, consultation_id: str, delay_seconds: float = 0.0) -> None:
        """Background-task entry point: waits, then runs without raising."""
        if delay_seconds > 0:
            await asyncio.sleep(delay_seconds)
        try:
            await self.run(consultation_id)
        except AnalysisFailedError:
            # Already logged and recorded as failed
            return

    async def overview(self, business_context: str, industry: str) -> str:
        """Produce a strategic overview for a business.

        Raises:
            BusinessOverviewFailedError: If the analyzer fails
        """
        try:
            return await self.analyzer.overview(business_context, industry)
        except Exception as exc:
            logger.exception(f"Business overview failed for industry {industry!r}")
            raise BusinessOverviewFailedError() from exc
