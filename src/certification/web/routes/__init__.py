"""Route handlers for Web API."""

from certification.web.routes.health import router as health_router
from certification.web.routes.courses import router as courses_router
from certification.web.routes.treasury import router as treasury_router

__all__ = [
    "health_router",
    "courses_router",
    "treasury_router",
]
