from typing import Iterator, Optional
from sqlalchemy.orm import Session
from portfolio.database.postgresql import Base, engine, SessionLocal, is_database_available

# DB session dependency; yields None when no database is configured
def get_db() -> Iterator[Optional[Session]]:
    if SessionLocal is None:
        yield None
        return
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

# Models register themselves on Base via portfolio.models
