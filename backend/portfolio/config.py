import os
from typing import List, Optional
from dotenv import load_dotenv
from pydantic_settings import BaseSettings

load_dotenv()

class Settings(BaseSettings):
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Analytics storage (empty disables visit/click/chat persistence)
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")

    # Chat completion
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_BASE_URL: str = os.getenv("OPENAI_BASE_URL", "")
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-5.1")
    CHAT_DAILY_LIMIT: int = int(os.getenv("CHAT_DAILY_LIMIT", "200"))
    CHAT_TEMPERATURE: float = float(os.getenv("CHAT_TEMPERATURE", "0.7"))
    CHAT_MAX_COMPLETION_TOKENS: int = int(os.getenv("CHAT_MAX_COMPLETION_TOKENS", "300"))
    CHAT_HISTORY_LIMIT: int = int(os.getenv("CHAT_HISTORY_LIMIT", "20"))

    # Persona
    OWNER_NAME: str = os.getenv("OWNER_NAME", "Roi Shikler")
    BIOGRAPHY_PATH: str = os.getenv("BIOGRAPHY_PATH", "")

    # Geolocation (ip-api.com allows 45 req/min without a key)
    GEO_LOOKUP_URL: str = os.getenv(
        "GEO_LOOKUP_URL",
        "http://ip-api.com/json/{ip}?fields=status,country,countryCode,regionName,city"
    )
    GEO_LOOKUP_TIMEOUT: float = float(os.getenv("GEO_LOOKUP_TIMEOUT", "5.0"))
    GEO_CACHE_TTL_HOURS: int = int(os.getenv("GEO_CACHE_TTL_HOURS", "24"))
    GEO_CACHE_PRUNE_MINUTES: int = int(os.getenv("GEO_CACHE_PRUNE_MINUTES", "60"))

    # Calendar used for the daily chat counter and server fingerprints (empty = process local time)
    TIMEZONE: str = os.getenv("TIMEZONE", "")

    # Admin session
    SECRET_KEY: str = os.getenv("SECRET_KEY", "fallback-secret-change-in-production")
    ALGORITHM: str = "HS256"
    ADMIN_SESSION_EXPIRE_HOURS: int = int(os.getenv("ADMIN_SESSION_EXPIRE_HOURS", "24"))
    ADMIN_COOKIE_NAME: str = os.getenv("ADMIN_COOKIE_NAME", "admin_session")
    ALLOWED_ADMIN_EMAILS: str = os.getenv("ALLOWED_ADMIN_EMAILS", "")

    # Google OAuth
    GOOGLE_CLIENT_ID: str = os.getenv("GOOGLE_CLIENT_ID", "")
    GOOGLE_CLIENT_SECRET: str = os.getenv("GOOGLE_CLIENT_SECRET", "")
    GOOGLE_CALLBACK_URL: str = os.getenv(
        "GOOGLE_CALLBACK_URL", "http://localhost:3000/api/auth/google/callback"
    )

    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173")

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def allowed_admin_emails(self) -> List[str]:
        return [e.strip().lower() for e in self.ALLOWED_ADMIN_EMAILS.split(",") if e.strip()]

    @property
    def timezone_name(self) -> Optional[str]:
        return self.TIMEZONE or None

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def google_oauth_configured(self) -> bool:
        return bool(self.GOOGLE_CLIENT_ID and self.GOOGLE_CLIENT_SECRET)

settings = Settings()
