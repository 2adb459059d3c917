from typing import Optional
from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from portfolio.config import settings
from portfolio.core.security import AdminIdentity, decode_admin_token
from portfolio.database import get_db
from portfolio.services.chat_service import ChatGateway
from portfolio.services.geolocation import GeoResolver
from portfolio.services.rate_limiter import DailyRequestCounter
from portfolio.utils.exceptions import UnauthorizedException, ServiceUnavailableException

LOGIN_URL = "/api/auth/google"

# Admin token is normally the session cookie; a Bearer header is accepted too
oauth2_scheme_optional = OAuth2PasswordBearer(tokenUrl=LOGIN_URL, auto_error=False)


def get_optional_admin(request: Request, token: Optional[str] = Depends(oauth2_scheme_optional)) -> Optional[AdminIdentity]:
    token = request.cookies.get(settings.ADMIN_COOKIE_NAME) or token
    if not token:
        return None
    return decode_admin_token(token)


def get_current_admin(admin: Optional[AdminIdentity] = Depends(get_optional_admin)) -> AdminIdentity:
    if admin is None:
        raise UnauthorizedException(
            "Unauthorized",
            extra_data={"authenticated": False, "loginUrl": LOGIN_URL},
        )
    return admin


def require_db(db: Optional[Session] = Depends(get_db)) -> Session:
    """Session for endpoints that cannot work without storage."""
    if db is None:
        raise ServiceUnavailableException("Database not configured")
    return db


# Process-wide components are built once in the app lifespan and live on app.state
def get_rate_limiter(request: Request) -> DailyRequestCounter:
    return request.app.state.rate_limiter


def get_geo_resolver(request: Request) -> GeoResolver:
    return request.app.state.geo_resolver


def get_chat_gateway(request: Request) -> ChatGateway:
    return request.app.state.chat_gateway
