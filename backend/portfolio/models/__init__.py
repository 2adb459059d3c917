# Visitor tracking models
from .visitor_session import VisitorSession
from .page_visit import PageVisit
from .link_click import LinkClick

# Chat models
from .chat_conversation import ChatConversation
from .chat_message import ChatMessage

__all__ = [
    # Visitor tracking
    "VisitorSession", "PageVisit", "LinkClick",
    # Chat
    "ChatConversation", "ChatMessage",
]
