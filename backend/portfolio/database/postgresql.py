# postgresql.py
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from portfolio.config import settings

DATABASE_URL = settings.DATABASE_URL

Base = declarative_base()


def build_engine(url: str):
    # SQLite is used for local runs and tests; connections are shared across threads there
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=False, **kwargs)
    return create_engine(url, echo=False, pool_pre_ping=True)


# Analytics is optional: without DATABASE_URL there is no engine and no session factory
engine = build_engine(DATABASE_URL) if DATABASE_URL else None
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine) if engine is not None else None


def is_database_available() -> bool:
    return SessionLocal is not None
