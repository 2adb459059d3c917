import logging
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from portfolio.models.visitor_session import VisitorSession
from portfolio.utils.time_utils import utcnow

logger = logging.getLogger(__name__)


def resolve_session(db: Session, fingerprint: str) -> Optional[str]:
    """Return the session id for a fingerprint, creating the session on first sight.

    A known fingerprint bumps last_seen and visit_count. Any database error
    returns None and the caller carries on without a session.
    Identical fingerprints from different visitors share one session.
    """
    try:
        existing = db.query(VisitorSession.id).filter(
            VisitorSession.fingerprint == fingerprint
        ).first()

        if existing:
            session_id = existing.id
            db.query(VisitorSession).filter(VisitorSession.id == session_id).update(
                {
                    VisitorSession.last_seen: utcnow(),
                    VisitorSession.visit_count: VisitorSession.visit_count + 1,
                },
                synchronize_session=False,
            )
            db.commit()
            return session_id

        now = utcnow()
        session = VisitorSession(fingerprint=fingerprint, first_seen=now, last_seen=now, visit_count=1)
        db.add(session)
        db.commit()
        db.refresh(session)
        logger.info(f"New visitor session: {session.id}")
        return session.id
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to get/create session: {str(e)}")
        return None
