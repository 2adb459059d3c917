# Analytics schemas
from .analytics import VisitCreate, VisitResponse, ClickCreate, ClickResponse

# Chat schemas
from .chat import HistoryMessage, ChatRequest, UsageResponse, SuggestedQuestionsResponse

# Admin auth schemas
from .auth import AdminUser, AdminMe, AuthStatus

__all__ = [
    "VisitCreate", "VisitResponse", "ClickCreate", "ClickResponse",
    "HistoryMessage", "ChatRequest", "UsageResponse", "SuggestedQuestionsResponse",
    "AdminUser", "AdminMe", "AuthStatus",
]
