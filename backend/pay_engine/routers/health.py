from fastapi import APIRouter

from pay_engine.config import settings
from pay_engine.models.schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health():
    return {
        "status": "healthy",
        "environment": settings.environment,
        "compliance_authority_configured": bool(settings.fair_work_api_url),
    }
