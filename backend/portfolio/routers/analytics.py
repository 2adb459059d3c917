from typing import Optional
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from portfolio.database import get_db
from portfolio.schemas.analytics import VisitCreate, VisitResponse, ClickCreate, ClickResponse
from portfolio.services.analytics_service import record_visit, record_click
from portfolio.services.geolocation import GeoResolver, get_client_ip
from portfolio.utils.dependencies import get_geo_resolver
from portfolio.utils.logger import analytics_logger

router = APIRouter(prefix="/analytics", tags=["Analytics"])

DB_NOT_CONFIGURED = "Database not configured"


@router.post(
    "/visit",
    response_model=VisitResponse,
    summary="Record a page visit",
    description="""
Records one page load.

- `fingerprint`: optional client fingerprint; hashed again before storage. Without it a daily fingerprint is derived from the User-Agent and Accept-Language headers.
- `path`: page path, `/` by default.
- `referrer`: used when the request carries no Referer header.
- Without a configured database nothing is stored and `success` is false.
""",
)
async def create_visit(
    visit: VisitCreate,
    request: Request,
    db: Optional[Session] = Depends(get_db),
    geo_resolver: GeoResolver = Depends(get_geo_resolver),
):
    if db is None:
        return VisitResponse(success=False, message=DB_NOT_CONFIGURED)

    result = await record_visit(
        db,
        geo_resolver,
        ip=get_client_ip(request),
        user_agent=request.headers.get("user-agent", ""),
        accept_language=request.headers.get("accept-language", ""),
        fingerprint=visit.fingerprint,
        path=visit.path,
        referrer=request.headers.get("referer") or visit.referrer,
    )
    analytics_logger.debug(f"Visit {result.visit_id} recorded for session {result.session_id}")
    return VisitResponse(success=True, session_id=result.session_id, visit_id=result.visit_id)


@router.post(
    "/click",
    response_model=ClickResponse,
    summary="Record an outbound link click",
    description="""
Records one click on an outbound link.

- `linkUrl` is required (400 otherwise).
- `sessionId`, `linkLabel` and `referrerPath` are optional.
""",
)
def create_click(
    click: ClickCreate,
    db: Optional[Session] = Depends(get_db),
):
    if db is None:
        return ClickResponse(success=False, message=DB_NOT_CONFIGURED)

    click_id = record_click(
        db,
        link_url=click.link_url,
        session_id=click.session_id,
        link_label=click.link_label,
        referrer_path=click.referrer_path,
    )
    return ClickResponse(success=True, click_id=click_id)
