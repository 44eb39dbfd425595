"""Domain models for consultations, analyses and business profiles.

Models serialize with camelCase keys, matching the JSON the web client
sends and expects.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ConsultingCategory(str, Enum):
    SEO = "seo"
    BUSINESS_STRATEGY = "business_strategy"
    FINANCIAL = "financial"
    MARKETING = "marketing"
    OPERATIONS = "operations"
    HR = "hr"
    IT = "it"
    LEGAL = "legal"
    SALES = "sales"
    CUSTOMER_EXPERIENCE = "customer_experience"
    SUSTAINABILITY = "sustainability"
    CYBERSECURITY = "cybersecurity"


CATEGORY_DISPLAY_NAMES: Dict[ConsultingCategory, str] = {
    ConsultingCategory.SEO: "SEO & Digital Marketing",
    ConsultingCategory.BUSINESS_STRATEGY: "Business Strategy",
    ConsultingCategory.FINANCIAL: "Financial Planning",
    ConsultingCategory.MARKETING: "Marketing Strategy",
    ConsultingCategory.OPERATIONS: "Operations Management",
    ConsultingCategory.HR: "Human Resources",
    ConsultingCategory.IT: "Information Technology",
    ConsultingCategory.LEGAL: "Legal & Compliance",
    ConsultingCategory.SALES: "Sales Strategy",
    ConsultingCategory.CUSTOMER_EXPERIENCE: "Customer Experience",
    ConsultingCategory.SUSTAINABILITY: "Sustainability",
    ConsultingCategory.CYBERSECURITY: "Cybersecurity",
}


class Timeline(str, Enum):
    IMMEDIATE = "immediate"
    ONE_TO_THREE_MONTHS = "1-3_months"
    THREE_TO_SIX_MONTHS = "3-6_months"
    SIX_TO_TWELVE_MONTHS = "6-12_months"
    OVER_TWELVE_MONTHS = "12+_months"


class Budget(str, Enum):
    UNDER_5K = "under_5k"
    FROM_5K_TO_15K = "5k-15k"
    FROM_15K_TO_50K = "15k-50k"
    FROM_50K_TO_100K = "50k-100k"
    OVER_100K = "100k+"


class BusinessSize(str, Enum):
    STARTUP = "startup"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    ENTERPRISE = "enterprise"


class ConsultationStatus(str, Enum):
    PENDING = "pending"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    FAILED = "failed"


class AnalysisStatus(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"


ShortText = Annotated[str, Field(min_length=1, max_length=200)]


class CamelModel(BaseModel):
    """Base model accepting and emitting camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ConsultationCreate(CamelModel):
    """Schema for submitting a consultation request."""

    category: ConsultingCategory
    business_name: str = Field(..., min_length=1, max_length=100)
    industry: str = Field(..., min_length=1, max_length=50)
    description: str = Field(..., min_length=10, max_length=1000)
    specific_challenges: List[ShortText] = Field(..., min_length=1, max_length=10)
    goals: List[ShortText] = Field(..., min_length=1, max_length=10)
    timeline: Timeline
    budget: Budget


class Consultation(ConsultationCreate):
    """Stored consultation request."""

    id: str
    status: ConsultationStatus = ConsultationStatus.PENDING
    submitted_by_agent: bool = False
    created_at: datetime


class AnalysisResult(CamelModel):
    """Analysis produced for a consultation."""

    id: str
    consultation_id: str
    category: ConsultingCategory
    analysis: str
    recommendations: List[str]
    action_items: List[str] = Field(default_factory=list)
    risk_assessment: Optional[str] = None
    expected_outcomes: List[str] = Field(default_factory=list)
    implementation_plan: str = ""
    resources: List[str] = Field(default_factory=list)
    metrics: List[str] = Field(default_factory=list)
    timeline: str = ""
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    status: AnalysisStatus = AnalysisStatus.COMPLETED
    created_at: datetime


class BusinessProfileCreate(CamelModel):
    """Schema for creating a business profile."""

    name: str = Field(..., min_length=1, max_length=100)
    industry: str = Field(..., min_length=1, max_length=50)
    size: BusinessSize
    description: str = Field(..., min_length=10, max_length=1000)
    challenges: List[ShortText] = Field(default_factory=list, max_length=20)
    goals: List[ShortText] = Field(default_factory=list, max_length=20)


class BusinessProfileUpdate(CamelModel):
    """Schema for partially updating a business profile."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    industry: Optional[str] = Field(None, min_length=1, max_length=50)
    size: Optional[BusinessSize] = None
    description: Optional[str] = Field(None, min_length=10, max_length=1000)
    challenges: Optional[List[ShortText]] = Field(None, max_length=20)
    goals: Optional[List[ShortText]] = Field(None, max_length=20)


class BusinessProfile(BusinessProfileCreate):
    """Stored business profile."""

    id: str
    created_at: datetime
    updated_at: datetime


class Statistics(CamelModel):
    """Aggregate counts over stored data."""

    total_consultations: int
    total_analyses: int
    total_business_profiles: int
    consultations_by_category: Dict[str, int]
    consultations_by_status: Dict[str, int]
    last_updated: datetime


class ExportSummary(CamelModel):
    total_consultations: int
    completed_analyses: int
    business_profiles: int


class ExportPayload(CamelModel):
    consultations: List[Consultation]
    analyses: List[AnalysisResult]
    profiles: List[BusinessProfile]


class ExportData(CamelModel):
    """Full snapshot of stored data for agent export."""

    exported_at: datetime
    summary: ExportSummary
    data: ExportPayload
