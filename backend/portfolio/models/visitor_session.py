import uuid
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from portfolio.database.postgresql import Base
from portfolio.utils.time_utils import utcnow


def _new_session_id() -> str:
    return str(uuid.uuid4())


class VisitorSession(Base):
    __tablename__ = "sessions"

    id = Column(String(36), primary_key=True, default=_new_session_id)   # UUID
    fingerprint = Column(String(64), nullable=False, index=True)         # 32-char hex hash
    first_seen = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    last_seen = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    visit_count = Column(Integer, default=1, nullable=False)

    page_visits = relationship("PageVisit", back_populates="session")
    link_clicks = relationship("LinkClick", back_populates="session")
    chat_conversations = relationship("ChatConversation", back_populates="session")
