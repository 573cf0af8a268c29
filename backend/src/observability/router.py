"""Observability API endpoints: Prometheus metrics and health probes."""

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy.orm import Session

from database import get_db
from dependencies import get_system_status
from domain.ports.system_status_port import SystemStatusPort
from .health import (
    HealthStatus,
    check_availability,
    check_database_health,
    get_overall_health,
)

router = APIRouter(tags=["Observability"])


@router.get("/metrics", include_in_schema=False)
def metrics():
    """Expose Prometheus metrics in text exposition format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@router.get(
    "/health",
    summary="Health check endpoint",
    description="Returns health status of the database and portal availability",
)
def health_check(
    db: Session = Depends(get_db),
    system_status: SystemStatusPort = Depends(get_system_status),
):
    """Check health of all components.

    Returns 200 while healthy or degraded (maintenance mode), 503 if the
    database is unreachable.
    """
    components = {
        "database": check_database_health(db),
        "availability": check_availability(system_status),
    }
    overall_status = get_overall_health(components)

    response_data = {
        "status": overall_status.value,
        "components": {
            name: {
                "status": comp.status.value,
                "message": comp.message,
                "latency_ms": comp.latency_ms,
            }
            for name, comp in components.items()
        }
    }

    status_code = 200 if overall_status != HealthStatus.UNHEALTHY else 503
    return JSONResponse(content=response_data, status_code=status_code)


@router.get("/ready", summary="Readiness check endpoint")
def readiness_check(db: Session = Depends(get_db)):
    """Ready once the database answers."""
    db_health = check_database_health(db)

    if db_health.status == HealthStatus.HEALTHY:
        return {"status": "ready", "message": "Application is ready to serve traffic"}
    return JSONResponse(
        content={"status": "not_ready", "message": db_health.message},
        status_code=503
    )
