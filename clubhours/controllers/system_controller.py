# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: System endpoints (health, readiness, metrics).
Pure HTTP layer, no business logic.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy.exc import SQLAlchemyError
from starlette.responses import Response

from clubhours.core.config import settings
from clubhours.core.dependencies import get_credential_repo, get_records_client
from clubhours.core.exceptions import UpstreamError
from clubhours.repositories.credential_repository import CredentialRepository
from clubhours.services.records_client import RecordsClient

router = APIRouter(tags=["System"])


@router.get("/health")
def health_check():
    """Shallow health check: confirms the process is alive."""
    return {"status": "ok", "service": settings.SERVICE_NAME}


@router.get("/api/health")
def api_health_check():
    return {
        "status": "healthy",
        "service": settings.SERVICE_NAME,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/health/ready")
async def readiness_check(
    credentials: CredentialRepository = Depends(get_credential_repo),
    records: RecordsClient = Depends(get_records_client),
):
    """Deep health check of the credential database and Records Service."""
    try:
        credentials.verify_connection()
    except SQLAlchemyError as exc:
        raise HTTPException(status_code=503, detail=f"Database unavailable: {exc}")
    try:
        await records.verify_connection()
    except UpstreamError as exc:
        raise HTTPException(status_code=503, detail=f"Records Service unavailable: {exc.detail}")
    return {"status": "ok", "database": "connected", "records_service": "reachable"}


@router.get("/metrics")
def prometheus_metrics():
    """Expose Prometheus metrics in OpenMetrics format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
