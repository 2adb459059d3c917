import secrets
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, RedirectResponse

from portfolio.config import settings
from portfolio.core.security import AdminIdentity, create_admin_token, is_allowed_email
from portfolio.schemas.auth import AdminMe, AdminUser, AuthStatus
from portfolio.utils.dependencies import get_current_admin, get_optional_admin
from portfolio.utils.exceptions import ServiceUnavailableException
from portfolio.utils.logger import auth_logger

router = APIRouter(prefix="/auth", tags=["Auth"])

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"

STATE_COOKIE = "oauth_state"
LOGIN_FAILURE_REDIRECT = "/admin/login?error=unauthorized"
LOGIN_SUCCESS_REDIRECT = "/admin"


async def exchange_code_for_profile(code: str) -> Optional[Dict[str, Any]]:
    """Trade an authorization code for the Google profile; None on any failure."""
    token_data = {
        "grant_type": "authorization_code",
        "client_id": settings.GOOGLE_CLIENT_ID,
        "client_secret": settings.GOOGLE_CLIENT_SECRET,
        "redirect_uri": settings.GOOGLE_CALLBACK_URL,
        "code": code,
    }
    try:
        async with httpx.AsyncClient() as client:
            token_response = await client.post(GOOGLE_TOKEN_URL, data=token_data)
            token_json = token_response.json()
            access_token = token_json.get("access_token")
            if not access_token:
                auth_logger.warning(f"Google token exchange failed: {token_json.get('error', 'no access_token')}")
                return None

            profile_response = await client.get(
                GOOGLE_USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"}
            )
            if profile_response.status_code != 200:
                auth_logger.warning(f"Google userinfo request failed: {profile_response.status_code}")
                return None
            return profile_response.json()
    except (httpx.HTTPError, ValueError) as e:
        auth_logger.error(f"Google OAuth request failed: {str(e)}")
        return None


def _set_session_cookie(response: RedirectResponse, token: str) -> None:
    response.set_cookie(
        settings.ADMIN_COOKIE_NAME,
        token,
        max_age=settings.ADMIN_SESSION_EXPIRE_HOURS * 3600,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


@router.get("/google", summary="Start Google login")
def google_login():
    if not settings.google_oauth_configured:
        auth_logger.warning("Google OAuth not configured - admin login disabled")
        raise ServiceUnavailableException("Google OAuth not configured")

    state = secrets.token_urlsafe(24)
    params = {
        "client_id": settings.GOOGLE_CLIENT_ID,
        "redirect_uri": settings.GOOGLE_CALLBACK_URL,
        "response_type": "code",
        "scope": "openid email profile",
        "state": state,
        "prompt": "select_account",
    }
    response = RedirectResponse(f"{GOOGLE_AUTH_URL}?{urlencode(params)}")
    response.set_cookie(STATE_COOKIE, state, max_age=600, httponly=True, secure=settings.is_production, samesite="lax")
    return response


@router.get("/google/callback", summary="Google login callback")
async def google_callback(request: Request, code: Optional[str] = None, state: Optional[str] = None):
    expected_state = request.cookies.get(STATE_COOKIE)
    failure = RedirectResponse(LOGIN_FAILURE_REDIRECT, status_code=302)
    failure.delete_cookie(STATE_COOKIE)

    if not code or not state or not expected_state or not secrets.compare_digest(state.encode(), expected_state.encode()):
        auth_logger.warning("OAuth callback rejected: missing code or state mismatch")
        return failure

    profile = await exchange_code_for_profile(code)
    if not profile:
        return failure

    email = profile.get("email")
    if not email:
        auth_logger.warning("OAuth callback rejected: no email found in profile")
        return failure
    if not is_allowed_email(email):
        auth_logger.info(f"Access denied for email: {email}")
        return failure

    admin = AdminIdentity(
        id=str(profile.get("sub") or email),
        email=email,
        display_name=profile.get("name"),
        picture=profile.get("picture"),
    )
    auth_logger.info(f"User authenticated: {email}")

    response = RedirectResponse(LOGIN_SUCCESS_REDIRECT, status_code=302)
    response.delete_cookie(STATE_COOKIE)
    _set_session_cookie(response, create_admin_token(admin))
    return response


@router.get("/status", response_model=AuthStatus, response_model_exclude_none=True, summary="Current login state")
def auth_status(admin: Optional[AdminIdentity] = Depends(get_optional_admin)):
    if admin is None:
        return AuthStatus(authenticated=False)
    return AuthStatus(
        authenticated=True,
        user=AdminUser(email=admin.email, display_name=admin.display_name, picture=admin.picture),
    )


@router.get("/me", response_model=AdminMe, summary="Logged in admin")
def auth_me(admin: AdminIdentity = Depends(get_current_admin)):
    return AdminMe(id=admin.id, email=admin.email, display_name=admin.display_name, picture=admin.picture)


@router.post("/logout", summary="Log out")
def logout():
    response = JSONResponse({"success": True, "message": "Logged out successfully"})
    response.delete_cookie(settings.ADMIN_COOKIE_NAME)
    return response
