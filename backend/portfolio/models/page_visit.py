from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from portfolio.database.postgresql import Base
from portfolio.utils.time_utils import utcnow

class PageVisit(Base):
    __tablename__ = "page_visits"

    id = Column(Integer, primary_key=True, index=True)
    # Weak reference: a visit is kept even when session resolution failed
    session_id = Column(String(36), ForeignKey("sessions.id"), nullable=True)
    timestamp = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    ip_address = Column(String(45), nullable=True)      # IPv6 length
    user_agent = Column(Text, nullable=True)
    referrer = Column(Text, nullable=True)

    # Geolocation (best effort)
    country = Column(String(100), nullable=True)
    country_code = Column(String(2), nullable=True)
    city = Column(String(100), nullable=True)
    region = Column(String(100), nullable=True)

    path = Column(String(500), default="/")

    session = relationship("VisitorSession", back_populates="page_visits")

    __table_args__ = (
        Index("idx_page_visits_timestamp", "timestamp"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "sessionId": self.session_id,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "ipAddress": self.ip_address,
            "userAgent": self.user_agent,
            "referrer": self.referrer,
            "country": self.country,
            "countryCode": self.country_code,
            "city": self.city,
            "region": self.region,
            "path": self.path,
        }
