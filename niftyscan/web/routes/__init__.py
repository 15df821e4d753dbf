"""HTTP routes."""

from .health_routes import router as health_router
from .report_routes import router as report_router

__all__ = ["health_router", "report_router"]
