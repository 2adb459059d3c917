from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from portfolio.database.postgresql import Base
from portfolio.utils.time_utils import utcnow

class ChatConversation(Base):
    __tablename__ = "chat_conversations"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String(36), ForeignKey("sessions.id"), nullable=True)
    started_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    last_message_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    message_count = Column(Integer, default=0, nullable=False)   # +2 per exchange

    # Captured once when the conversation is created
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(Text, nullable=True)
    country = Column(String(100), nullable=True)
    city = Column(String(100), nullable=True)

    session = relationship("VisitorSession", back_populates="chat_conversations")
    messages = relationship("ChatMessage", back_populates="conversation", order_by="ChatMessage.timestamp")

    def to_dict(self):
        return {
            "id": self.id,
            "sessionId": self.session_id,
            "startedAt": self.started_at.isoformat() if self.started_at else None,
            "lastMessageAt": self.last_message_at.isoformat() if self.last_message_at else None,
            "messageCount": self.message_count,
            "ipAddress": self.ip_address,
            "userAgent": self.user_agent,
            "country": self.country,
            "city": self.city,
        }
