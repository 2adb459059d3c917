import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portfolio.models.link_click import LinkClick
from portfolio.models.page_visit import PageVisit
from portfolio.services.fingerprint import generate_fingerprint, hash_client_fingerprint
from portfolio.services.geolocation import GeoResolver
from portfolio.services.session_registry import resolve_session
from portfolio.utils.exceptions import BadRequestException, InternalServerException

logger = logging.getLogger(__name__)


@dataclass
class VisitRecord:
    visit_id: int
    session_id: Optional[str]


def resolve_fingerprint(client_fingerprint: Optional[str], user_agent: str, accept_language: str) -> str:
    """Hash what the browser sent, or derive a daily fingerprint from request headers."""
    if client_fingerprint:
        return hash_client_fingerprint(client_fingerprint)
    return generate_fingerprint(user_agent, accept_language)


async def record_visit(
    db: Session,
    geo_resolver: GeoResolver,
    ip: str,
    user_agent: str = "",
    accept_language: str = "",
    fingerprint: Optional[str] = None,
    path: Optional[str] = None,
    referrer: Optional[str] = None,
) -> VisitRecord:
    session_id = resolve_session(db, resolve_fingerprint(fingerprint, user_agent, accept_language))
    geo = await geo_resolver.resolve(ip)

    visit = PageVisit(
        session_id=session_id,
        ip_address=ip,
        user_agent=user_agent,
        referrer=referrer or "",
        path=path or "/",
        country=geo.country,
        country_code=geo.country_code,
        city=geo.city,
        region=geo.region,
    )
    try:
        db.add(visit)
        db.commit()
        db.refresh(visit)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to record visit: {str(e)}")
        raise InternalServerException("Failed to record visit")

    return VisitRecord(visit_id=visit.id, session_id=session_id)


def record_click(
    db: Session,
    link_url: Optional[str],
    session_id: Optional[str] = None,
    link_label: Optional[str] = None,
    referrer_path: Optional[str] = None,
) -> int:
    if not link_url:
        raise BadRequestException("linkUrl is required")

    click = LinkClick(
        session_id=session_id or None,
        link_url=link_url,
        link_label=link_label,
        referrer_path=referrer_path,
    )
    try:
        db.add(click)
        db.commit()
        db.refresh(click)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to record click: {str(e)}")
        raise InternalServerException("Failed to record click")

    return click.id
