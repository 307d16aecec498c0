"""
Settings for the RichHabits Orders API, read from the environment and .env.

    DATABASE_URL            sync or async SQLAlchemy URL (sqlite file by default)
    ENVIRONMENT             development | test | production
    DEFAULT_ROLE            role assumed for users whose role column is empty
    DEFAULT_PAGE_LIMIT      page size for list endpoints without ?limit
    JWT_SECRET / JWT_ISSUER / JWT_ACCESS_TTL_MINUTES
    TEST_AUTH_ENABLED       password-less POST /auth/test-login
    CORS_ORIGINS            comma-separated allowed origins
"""
import logging
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    database_url: str = "sqlite:///./data/richhabits_orders.db"

    environment: str = "development"
    default_role: str = "sales"
    default_page_limit: int = 50

    jwt_secret: str = ""
    jwt_issuer: str = "richhabits-orders-api"
    jwt_access_ttl_minutes: int = 60

    # Issues tokens for deterministic test-<role> users; used by automated UI runs
    test_auth_enabled: bool = True

    cors_origins: str = "http://localhost:5000,http://127.0.0.1:5000,http://localhost:5173,http://127.0.0.1:5173"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def unsafe_settings(self) -> List[str]:
        """Human-readable problems that are fatal in production."""
        problems = []
        if "*" in self.cors_origins:
            problems.append("CORS_ORIGINS contains '*'; list the web client origins explicitly")
        if self.test_auth_enabled:
            problems.append("TEST_AUTH_ENABLED is on; anyone can mint a token for any role")
        if not self.jwt_secret:
            problems.append("JWT_SECRET is empty; access tokens cannot be signed or verified")
        return problems

    def validate_production_settings(self):
        """
        Startup check. In production any unsafe setting raises ValueError;
        elsewhere each one is logged as a warning.
        """
        problems = self.unsafe_settings()
        if self.is_production:
            if problems:
                raise ValueError("Refusing to start in production: " + "; ".join(problems))
            logger.info("Production settings validated")
            return
        for problem in problems:
            logger.warning(problem)


settings = Settings()
