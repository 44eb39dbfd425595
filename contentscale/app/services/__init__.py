"""Domain services: storage and consultation analysis."""

from contentscale.app.services.analysis import AnalysisService, FrameworkAnalyzer
from contentscale.app.services.storage import ConsultingStorage

__all__ = ["AnalysisService", "ConsultingStorage", "FrameworkAnalyzer"]
