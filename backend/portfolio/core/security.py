from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from jose import jwt, JWTError
from pydantic import BaseModel
from portfolio.config import settings
from portfolio.utils.logger import auth_logger


class AdminIdentity(BaseModel):
    id: str
    email: str
    display_name: Optional[str] = None
    picture: Optional[str] = None


def is_allowed_email(email: Optional[str]) -> bool:
    """Admin access is an explicit allowlist; an empty list admits nobody."""
    allowed = settings.allowed_admin_emails
    if not allowed:
        auth_logger.warning("ALLOWED_ADMIN_EMAILS not configured - admin access denied")
        return False
    return bool(email) and email.lower() in allowed


# Signed admin session token
def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=15)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_admin_token(admin: AdminIdentity) -> str:
    return create_access_token(
        {
            "sub": admin.id,
            "email": admin.email,
            "name": admin.display_name,
            "picture": admin.picture,
        },
        expires_delta=timedelta(hours=settings.ADMIN_SESSION_EXPIRE_HOURS),
    )


def decode_admin_token(token: str) -> Optional[AdminIdentity]:
    """Identity from a token, or None if it is invalid, expired, or no longer allowlisted."""
    try:
        payload: Dict[str, Any] = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None

    subject = payload.get("sub")
    email = payload.get("email")
    if not subject or not email or not is_allowed_email(email):
        return None

    return AdminIdentity(
        id=subject,
        email=email,
        display_name=payload.get("name"),
        picture=payload.get("picture"),
    )
