from typing import List, Dict, Any
from datetime import datetime, timedelta
from sqlalchemy.orm import Session
from sqlalchemy import func
from portfolio.models.page_visit import PageVisit
from portfolio.models.link_click import LinkClick
from portfolio.models.chat_conversation import ChatConversation
from portfolio.models.chat_message import ChatMessage
from portfolio.utils.exceptions import NotFoundException
from portfolio.utils.time_utils import utcnow
import logging

logger = logging.getLogger(__name__)

CITY_LIMIT = 20


def _day(value) -> str:
    # DATE() comes back as a date on PostgreSQL and as text on SQLite
    return value.isoformat() if hasattr(value, "isoformat") else str(value)


class StatisticsService:
    """Read-only aggregations for the admin dashboard."""

    @staticmethod
    def window_start(days: int) -> datetime:
        return utcnow() - timedelta(days=days)

    @staticmethod
    def get_summary(db: Session, days: int = 30) -> Dict[str, Any]:
        """Totals inside the trailing window."""
        try:
            start = StatisticsService.window_start(days)

            total_visits = db.query(func.count(PageVisit.id)).filter(PageVisit.timestamp >= start).scalar()
            # Session-less visits are not counted as visitors
            unique_visitors = db.query(func.count(func.distinct(PageVisit.session_id))).filter(
                PageVisit.timestamp >= start
            ).scalar()
            total_clicks = db.query(func.count(LinkClick.id)).filter(LinkClick.timestamp >= start).scalar()
            conversations = db.query(func.count(ChatConversation.id)).filter(
                ChatConversation.started_at >= start
            ).scalar()
            messages = db.query(func.count(ChatMessage.id)).filter(ChatMessage.timestamp >= start).scalar()

            return {
                "period": {"days": days, "from": start.isoformat()},
                "visits": {
                    "total": total_visits or 0,
                    "uniqueVisitors": unique_visitors or 0,
                },
                "clicks": {"total": total_clicks or 0},
                "chat": {
                    "conversations": conversations or 0,
                    "messages": messages or 0,
                },
            }
        except Exception as e:
            logger.error(f"Failed to get analytics summary: {str(e)}")
            raise

    @staticmethod
    def get_daily_series(db: Session, days: int = 30) -> Dict[str, List[Dict[str, Any]]]:
        """Visits, unique visitors and clicks per calendar day, oldest first."""
        try:
            start = StatisticsService.window_start(days)

            visit_day = func.date(PageVisit.timestamp).label("day")
            daily_visits = db.query(
                visit_day,
                func.count(PageVisit.id).label("visits"),
                func.count(func.distinct(PageVisit.session_id)).label("unique_visitors"),
            ).filter(
                PageVisit.timestamp >= start
            ).group_by(visit_day).order_by(visit_day).all()

            click_day = func.date(LinkClick.timestamp).label("day")
            daily_clicks = db.query(
                click_day,
                func.count(LinkClick.id).label("clicks"),
            ).filter(
                LinkClick.timestamp >= start
            ).group_by(click_day).order_by(click_day).all()

            return {
                "dailyVisits": [
                    {"date": _day(row.day), "visits": row.visits, "uniqueVisitors": row.unique_visitors}
                    for row in daily_visits
                ],
                "dailyClicks": [
                    {"date": _day(row.day), "clicks": row.clicks}
                    for row in daily_clicks
                ],
            }
        except Exception as e:
            logger.error(f"Failed to get daily stats: {str(e)}")
            raise

    @staticmethod
    def get_geo_breakdown(db: Session, days: int = 30) -> Dict[str, List[Dict[str, Any]]]:
        """Visits by country and by city (top 20), most visits first."""
        try:
            start = StatisticsService.window_start(days)

            country_count = func.count(PageVisit.id).label("visit_count")
            by_country = db.query(
                PageVisit.country,
                PageVisit.country_code,
                country_count,
            ).filter(
                PageVisit.timestamp >= start
            ).group_by(
                PageVisit.country, PageVisit.country_code
            ).order_by(country_count.desc()).all()

            city_count = func.count(PageVisit.id).label("visit_count")
            by_city = db.query(
                PageVisit.city,
                PageVisit.country,
                city_count,
            ).filter(
                PageVisit.timestamp >= start
            ).group_by(
                PageVisit.city, PageVisit.country
            ).order_by(city_count.desc()).limit(CITY_LIMIT).all()

            return {
                "byCountry": [
                    {"country": row.country, "countryCode": row.country_code, "visitCount": row.visit_count}
                    for row in by_country
                ],
                "byCity": [
                    {"city": row.city, "country": row.country, "visitCount": row.visit_count}
                    for row in by_city
                ],
            }
        except Exception as e:
            logger.error(f"Failed to get geo data: {str(e)}")
            raise

    @staticmethod
    def get_click_breakdown(db: Session, days: int = 30) -> Dict[str, List[Dict[str, Any]]]:
        try:
            start = StatisticsService.window_start(days)

            click_count = func.count(LinkClick.id).label("click_count")
            clicks_by_link = db.query(
                LinkClick.link_url,
                LinkClick.link_label,
                click_count,
            ).filter(
                LinkClick.timestamp >= start
            ).group_by(
                LinkClick.link_url, LinkClick.link_label
            ).order_by(click_count.desc()).all()

            return {
                "clicksByLink": [
                    {"linkUrl": row.link_url, "linkLabel": row.link_label, "clickCount": row.click_count}
                    for row in clicks_by_link
                ]
            }
        except Exception as e:
            logger.error(f"Failed to get clicks: {str(e)}")
            raise

    @staticmethod
    def list_visits(db: Session, days: int = 7, limit: int = 50, offset: int = 0) -> List[Dict[str, Any]]:
        """Raw visits, newest first."""
        try:
            start = StatisticsService.window_start(days)
            visits = db.query(PageVisit).filter(
                PageVisit.timestamp >= start
            ).order_by(
                PageVisit.timestamp.desc(), PageVisit.id.desc()
            ).offset(offset).limit(limit).all()
            return [visit.to_dict() for visit in visits]
        except Exception as e:
            logger.error(f"Failed to get visits: {str(e)}")
            raise

    @staticmethod
    def list_conversations(db: Session, limit: int = 20, offset: int = 0) -> List[Dict[str, Any]]:
        """Most recently active conversations first."""
        try:
            conversations = db.query(ChatConversation).order_by(
                ChatConversation.last_message_at.desc(), ChatConversation.id.desc()
            ).offset(offset).limit(limit).all()
            return [conversation.to_dict() for conversation in conversations]
        except Exception as e:
            logger.error(f"Failed to get conversations: {str(e)}")
            raise

    @staticmethod
    def get_conversation(db: Session, conversation_id: int) -> Dict[str, Any]:
        """A conversation with its messages in the order they were written."""
        conversation = db.query(ChatConversation).filter(ChatConversation.id == conversation_id).first()
        if not conversation:
            raise NotFoundException("Conversation", "Conversation not found")

        messages = db.query(ChatMessage).filter(
            ChatMessage.conversation_id == conversation_id
        ).order_by(ChatMessage.timestamp, ChatMessage.id).all()

        return {
            "conversation": conversation.to_dict(),
            "messages": [message.to_dict() for message in messages],
        }
