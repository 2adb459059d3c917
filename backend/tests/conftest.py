import os

# Environment must be in place before portfolio.config is imported
os.environ["DATABASE_URL"] = ""
os.environ["DISABLE_SCHEDULER"] = "true"
os.environ["ALLOWED_ADMIN_EMAILS"] = "owner@example.com"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["GOOGLE_CLIENT_ID"] = ""
os.environ["GOOGLE_CLIENT_SECRET"] = ""

from datetime import date
from typing import List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from portfolio import models  # noqa: F401
from portfolio.core.security import AdminIdentity
from portfolio.database import Base, get_db
from portfolio.database.postgresql import build_engine
from portfolio.main import app
from portfolio.services.chat_service import ChatGateway
from portfolio.services.geolocation import GeoResolver
from portfolio.services.llm_client import CompletionResult
from portfolio.services.rate_limiter import DailyRequestCounter
from portfolio.utils.dependencies import (
    get_chat_gateway,
    get_current_admin,
    get_geo_resolver,
    get_rate_limiter,
)

ADMIN = AdminIdentity(id="google-123", email="owner@example.com", display_name="Owner")

GEO_SUCCESS = {
    "status": "success",
    "country": "Israel",
    "countryCode": "IL",
    "regionName": "Tel Aviv",
    "city": "Tel Aviv",
}


class FakeLLMClient:
    """Stands in for OpenAIChatClient; records every request it receives."""

    def __init__(self, reply: Optional[str] = "Hi, I'm happy to help.", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.calls: List[dict] = []

    async def chat_completion(self, messages, model=None, temperature=0.7, max_completion_tokens=300):
        self.calls.append({
            "messages": messages,
            "model": model,
            "temperature": temperature,
            "max_completion_tokens": max_completion_tokens,
        })
        if self.error is not None:
            raise self.error
        if self.reply is None:
            return None
        return CompletionResult(content=self.reply, prompt_tokens=120, completion_tokens=12)


class GeoService:
    """httpx.MockTransport handler that counts lookups."""

    def __init__(self, payload=None, status_code: int = 200):
        self.payload = GEO_SUCCESS if payload is None else payload
        self.status_code = status_code
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.payload)

    def resolver(self) -> GeoResolver:
        return GeoResolver(transport=httpx.MockTransport(self))


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def db_session():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def geo_service():
    return GeoService()


@pytest.fixture
def geo_resolver(geo_service):
    return geo_service.resolver()


@pytest.fixture
def rate_limiter():
    return DailyRequestCounter(limit=200, today=lambda: date(2026, 10, 19))


@pytest.fixture
def llm_client():
    return FakeLLMClient()


@pytest.fixture
def chat_gateway(llm_client, rate_limiter, geo_resolver):
    return ChatGateway(
        llm_client=llm_client,
        rate_limiter=rate_limiter,
        geo_resolver=geo_resolver,
        owner_name="Roi Shikler",
        biography="Born in July 1993. Product manager in Tel Aviv.",
        model="test-model",
    )


@pytest.fixture
def client(db_session, rate_limiter, geo_resolver, chat_gateway):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter
    app.dependency_overrides[get_geo_resolver] = lambda: geo_resolver
    app.dependency_overrides[get_chat_gateway] = lambda: chat_gateway
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def no_db_client(client):
    """Same app, but as if DATABASE_URL were unset."""
    def override_get_db():
        yield None

    app.dependency_overrides[get_db] = override_get_db
    return client


@pytest.fixture
def admin_client(client):
    app.dependency_overrides[get_current_admin] = lambda: ADMIN
    return client
