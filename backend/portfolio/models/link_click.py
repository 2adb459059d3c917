from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from portfolio.database.postgresql import Base
from portfolio.utils.time_utils import utcnow

class LinkClick(Base):
    __tablename__ = "link_clicks"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String(36), ForeignKey("sessions.id"), nullable=True)
    timestamp = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    link_url = Column(Text, nullable=False)
    link_label = Column(String(200), nullable=True)
    referrer_path = Column(String(500), nullable=True)   # page the click happened on

    session = relationship("VisitorSession", back_populates="link_clicks")

    __table_args__ = (
        Index("idx_link_clicks_timestamp", "timestamp"),
    )
