"""Health check endpoints."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from formulary_service import __version__
from formulary_service.api.dependencies import get_formulary_service
from formulary_service.services.formulary import FormularyService
from formulary_service.services.kv_store import KeyValueStoreError

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str


@router.get("/", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check endpoint.
    
    Returns:
        Health status and version
    """
    return HealthResponse(status="healthy", version=__version__)


@router.get("/ready", response_model=HealthResponse)
def readiness_check(service: FormularyService = Depends(get_formulary_service)):
    """Readiness check that pings the key-value store.
    
    Returns:
        Readiness status, 503 when the store is unreachable
    """
    try:
        service.store.ping()
    except KeyValueStoreError:
        return JSONResponse(
            status_code=503,
            content=HealthResponse(status="unavailable", version=__version__).model_dump(),
        )
    return HealthResponse(status="ready", version=__version__)


@router.get("/live", response_model=HealthResponse)
async def liveness_check() -> HealthResponse:
    """Liveness check for orchestration."""
    return HealthResponse(status="alive", version=__version__)
