from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from portfolio.database.postgresql import Base
from portfolio.utils.time_utils import utcnow

class ChatMessage(Base):
    __tablename__ = "chat_messages"

    id = Column(Integer, primary_key=True, index=True)
    conversation_id = Column(Integer, ForeignKey("chat_conversations.id"), nullable=False, index=True)
    timestamp = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    role = Column(String(20), nullable=False)          # "user" or "assistant"
    content = Column(Text, nullable=False)

    # Token usage, assistant messages only
    prompt_tokens = Column(Integer, nullable=True)
    completion_tokens = Column(Integer, nullable=True)

    conversation = relationship("ChatConversation", back_populates="messages")

    def to_dict(self):
        return {
            "id": self.id,
            "conversationId": self.conversation_id,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "role": self.role,
            "content": self.content,
            "promptTokens": self.prompt_tokens,
            "completionTokens": self.completion_tokens,
        }
