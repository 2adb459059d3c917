from contextlib import asynccontextmanager
from datetime import timedelta
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from portfolio.config import settings
from portfolio.database import Base, engine
from portfolio import models  # noqa: F401  registers tables on Base
from portfolio.routers import admin, analytics, auth, chat, health
from portfolio.services.chat_service import ChatGateway
from portfolio.services.geolocation import GeoResolver
from portfolio.services.llm_client import OpenAIChatClient
from portfolio.services.persona import load_biography
from portfolio.services.rate_limiter import DailyRequestCounter
from portfolio.services.scheduler import start_scheduler, stop_scheduler
from portfolio.utils.exceptions import AppException, app_exception_handler
from portfolio.utils.logger import app_logger
from portfolio.utils.time_utils import local_today


def build_components(app: FastAPI) -> None:
    """Process-wide components, shared by every request through app.state."""
    rate_limiter = DailyRequestCounter(
        limit=settings.CHAT_DAILY_LIMIT,
        today=lambda: local_today(settings.timezone_name),
    )
    geo_resolver = GeoResolver(
        lookup_url=settings.GEO_LOOKUP_URL,
        cache_ttl=timedelta(hours=settings.GEO_CACHE_TTL_HOURS),
        timeout=settings.GEO_LOOKUP_TIMEOUT,
    )
    chat_gateway = ChatGateway(
        llm_client=OpenAIChatClient(),
        rate_limiter=rate_limiter,
        geo_resolver=geo_resolver,
        owner_name=settings.OWNER_NAME,
        biography=load_biography(settings.BIOGRAPHY_PATH or None),
        model=settings.OPENAI_MODEL,
        temperature=settings.CHAT_TEMPERATURE,
        max_completion_tokens=settings.CHAT_MAX_COMPLETION_TOKENS,
        history_limit=settings.CHAT_HISTORY_LIMIT,
    )

    app.state.rate_limiter = rate_limiter
    app.state.geo_resolver = geo_resolver
    app.state.chat_gateway = chat_gateway


@asynccontextmanager
async def lifespan(app: FastAPI):
    if engine is not None:
        Base.metadata.create_all(bind=engine)
        app_logger.info("Database tables ready")
    else:
        app_logger.warning("DATABASE_URL not set - analytics and chat history will not be stored")

    build_components(app)
    start_scheduler(app.state.geo_resolver, settings.GEO_CACHE_PRUNE_MINUTES)
    yield
    stop_scheduler()


app = FastAPI(
    title="Portfolio API",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(AppException, app_exception_handler)

app.include_router(health.router, prefix="/api")
app.include_router(analytics.router, prefix="/api")
app.include_router(chat.router, prefix="/api")
app.include_router(auth.router, prefix="/api")
app.include_router(admin.router, prefix="/api")


@app.get("/")
async def root():
    return {
        "message": "Portfolio API",
        "version": "1.0.0",
        "docs": "/docs",
    }
