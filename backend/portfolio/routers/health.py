from fastapi import APIRouter, Depends
from portfolio.config import settings
from portfolio.database import is_database_available
from portfolio.services.geolocation import GeoResolver
from portfolio.services.scheduler import get_scheduler_status
from portfolio.utils.dependencies import get_geo_resolver
from portfolio.utils.time_utils import utcnow

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    summary="Service health",
    description="Liveness check; also reports whether analytics storage is configured, the background job state and the geolocation cache size."
)
def health(geo_resolver: GeoResolver = Depends(get_geo_resolver)):
    return {
        "status": "ok",
        "timestamp": utcnow().isoformat(),
        "environment": settings.ENVIRONMENT,
        "database": "connected" if is_database_available() else "not configured",
        "scheduler": get_scheduler_status(),
        "geoCache": geo_resolver.cache.get_status(),
    }
