"""
Health Check Endpoint
"""
from fastapi import APIRouter, Depends
from datetime import datetime

from app.api.schemas import HealthCheckResponse
from app.config import settings
from app.core.sandbox import Sandbox, get_sandbox

router = APIRouter()


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(sandbox: Sandbox = Depends(get_sandbox)):
    """
    Health check endpoint

    Returns the API status and the size of the sandbox.
    """
    return HealthCheckResponse(
        status="healthy",
        version=settings.API_VERSION,
        pools=len(sandbox.registry),
        vaults=sandbox.factory.vault_count(),
        timestamp=datetime.utcnow()
    )
