"""Application settings and configuration.

This module defines all configuration options for the Dopelist API.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Dopelist", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    public_base_url: str = Field(default="http://localhost:5173", alias="PUBLIC_BASE_URL")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    debug: bool = Field(default=False, alias="DEBUG")

    # Database configuration
    database_url: str = Field(default="sqlite:///./dopelist.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # JWT authentication settings
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 30,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Listing lifecycle
    listing_duration_days: int = Field(default=7, alias="LISTING_DURATION_DAYS")
    expiring_soon_hours: int = Field(default=48, alias="EXPIRING_SOON_HOURS")
    comments_window_hours: int = Field(default=24 * 7, alias="COMMENTS_WINDOW_HOURS")
    max_images_on_create: int = Field(default=6, alias="MAX_IMAGES_ON_CREATE")
    max_images_on_edit: int = Field(default=10, alias="MAX_IMAGES_ON_EDIT")
    title_max_length: int = Field(default=200, alias="TITLE_MAX_LENGTH")
    description_max_length: int = Field(default=5000, alias="DESCRIPTION_MAX_LENGTH")
    comment_max_length: int = Field(default=2000, alias="COMMENT_MAX_LENGTH")

    # Payment provider (Stripe Checkout)
    stripe_secret_key: str | None = Field(default=None, alias="STRIPE_SECRET_KEY")
    stripe_api_base: str = Field(default="https://api.stripe.com", alias="STRIPE_API_BASE")
    stripe_listing_price_id: str | None = Field(default=None, alias="STRIPE_LISTING_PRICE_ID")
    stripe_http_timeout_seconds: float = Field(
        default=10.0,
        alias="STRIPE_HTTP_TIMEOUT_SECONDS",
    )
    listing_price_cents: int = Field(default=100, alias="LISTING_PRICE_CENTS")
    renewal_price_cents: int = Field(default=100, alias="RENEWAL_PRICE_CENTS")
    payment_currency: str = Field(default="usd", alias="PAYMENT_CURRENCY")
    demo_token_prefix: str = Field(default="demo_", alias="DEMO_TOKEN_PREFIX")
    checkout_intent_ttl_minutes: int = Field(default=60, alias="CHECKOUT_INTENT_TTL_MINUTES")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def payments_live(self) -> bool:
        """Return True when a real payment provider is configured."""
        return bool(self.stripe_secret_key)


settings = Settings()  # type: ignore[call-arg]
