from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from portfolio.core.security import AdminIdentity
from portfolio.services.statistics_service import StatisticsService
from portfolio.utils.dependencies import get_current_admin, require_db

router = APIRouter(prefix="/admin/analytics", tags=["Admin Analytics"])

MAX_DAYS = 3650


def parse_days(value: Optional[str], default: int) -> int:
    """Window length from the query string; anything unusable means the default.

    Longer windows are capped at MAX_DAYS.
    """
    try:
        days = int(value) if value is not None else default
    except ValueError:
        return default
    if days <= 0:
        return default
    return min(days, MAX_DAYS)


@router.get("/summary", summary="Visit, click and chat totals")
def get_summary(
    days: Optional[str] = Query(None, description="Trailing window in days (default 30)"),
    admin: AdminIdentity = Depends(get_current_admin),
    db: Session = Depends(require_db),
):
    return StatisticsService.get_summary(db, parse_days(days, 30))


@router.get("/daily", summary="Visits and clicks per day")
def get_daily(
    days: Optional[str] = Query(None, description="Trailing window in days (default 30)"),
    admin: AdminIdentity = Depends(get_current_admin),
    db: Session = Depends(require_db),
):
    return StatisticsService.get_daily_series(db, parse_days(days, 30))


@router.get("/geo", summary="Visits by country and city")
def get_geo(
    days: Optional[str] = Query(None, description="Trailing window in days (default 30)"),
    admin: AdminIdentity = Depends(get_current_admin),
    db: Session = Depends(require_db),
):
    return StatisticsService.get_geo_breakdown(db, parse_days(days, 30))


@router.get("/clicks", summary="Clicks per link")
def get_clicks(
    days: Optional[str] = Query(None, description="Trailing window in days (default 30)"),
    admin: AdminIdentity = Depends(get_current_admin),
    db: Session = Depends(require_db),
):
    return StatisticsService.get_click_breakdown(db, parse_days(days, 30))


@router.get("/visits", summary="Raw visits, newest first")
def get_visits(
    days: Optional[str] = Query(None, description="Trailing window in days (default 7)"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    admin: AdminIdentity = Depends(get_current_admin),
    db: Session = Depends(require_db),
):
    return {"visits": StatisticsService.list_visits(db, parse_days(days, 7), limit, offset)}


@router.get("/conversations", summary="Chat conversations, most recently active first")
def get_conversations(
    limit: int = Query(20, ge=1, le=200),
    offset: int = Query(0, ge=0),
    admin: AdminIdentity = Depends(get_current_admin),
    db: Session = Depends(require_db),
):
    return {"conversations": StatisticsService.list_conversations(db, limit, offset)}


@router.get("/conversations/{conversation_id}", summary="One conversation with its messages")
def get_conversation(
    conversation_id: int,
    admin: AdminIdentity = Depends(get_current_admin),
    db: Session = Depends(require_db),
):
    return StatisticsService.get_conversation(db, conversation_id)
