"""
FastAPI Main Application

Simulation API for two-position LP vaults over a concentrated-liquidity pool.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from datetime import datetime

from lp_vault.errors import VaultError, AccessControlError

from app.config import settings
from app.api.v1 import health, markets, vaults
from app.core.sandbox import ResourceNotFound

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Include routers
app.include_router(health.router, prefix="/api/v1", tags=["Health"])
app.include_router(markets.router, prefix="/api/v1", tags=["Tokens & Pools"])
app.include_router(vaults.router, prefix="/api/v1", tags=["Vaults"])


# Engine errors → HTTP status (가장 구체적인 핸들러가 선택된다)
@app.exception_handler(AccessControlError)
async def access_control_handler(request: Request, exc: AccessControlError):
    return JSONResponse(status_code=403, content={"detail": str(exc)})


@app.exception_handler(VaultError)
async def vault_error_handler(request: Request, exc: VaultError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(ResourceNotFound)
async def not_found_handler(request: Request, exc: ResourceNotFound):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "name": settings.API_TITLE,
        "version": settings.API_VERSION,
        "description": settings.API_DESCRIPTION,
        "docs": "/docs",
        "health": "/api/v1/health",
        "timestamp": datetime.utcnow().isoformat()
    }


@app.on_event("startup")
async def startup_event():
    """Actions to perform on application startup"""
    logger.info("Starting %s v%s", settings.API_TITLE, settings.API_VERSION)
    logger.info("Factory owner: %s, fee recipient: %s", settings.FACTORY_OWNER, settings.FEE_RECIPIENT)


@app.on_event("shutdown")
async def shutdown_event():
    """Actions to perform on application shutdown"""
    logger.info("Shutting down %s", settings.API_TITLE)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )
