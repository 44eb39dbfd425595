"""HTTP routers."""

from contentscale.app.api.agent import router as agent_router
from contentscale.app.api.analysis import router as analysis_router
from contentscale.app.api.business_overview import router as business_overview_router
from contentscale.app.api.business_profiles import router as business_profiles_router
from contentscale.app.api.consultations import router as consultations_router
from contentscale.app.api.health import router as health_router
from contentscale.app.api.statistics import router as statistics_router

__all__ = [
    "agent_router",
    "analysis_router",
    "business_overview_router",
    "business_profiles_router",
    "consultations_router",
    "health_router",
    "statistics_router",
]
