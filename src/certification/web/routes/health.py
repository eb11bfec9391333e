"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from certification.core.platform import CertificationPlatform
from certification.web.deps import get_platform
from certification.web.schemas import HealthResponse

router = APIRouter(tags=["health"])

API_VERSION = "0.1.0"


@router.get("/health", response_model=HealthResponse)
async def health_check(
    platform: CertificationPlatform = Depends(get_platform),
) -> HealthResponse:
    """Report liveness and how many courses the platform serves."""
    return HealthResponse(
        status="ok",
        version=API_VERSION,
        courses=len(platform.course_ids()),
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
