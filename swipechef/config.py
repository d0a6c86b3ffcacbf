from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str

    # Clerk Auth
    clerk_frontend_api: str = "clerk.your-domain.com"  # e.g., "prepared-mole-42.clerk.accounts.dev"

    # AWS S3 (for recipe images)
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None
    aws_region: str = "us-east-1"
    s3_bucket_name: str | None = None
    recipe_image_prefix: str = "recipe-images"

    # Households
    household_code_length: int = 6
    household_code_attempts: int = 20
    invitation_ttl_days: int = 7

    # Session store
    # Serve the built-in sample recipes when the user's recipes can't be loaded
    sample_recipes_fallback: bool = True
    # Tear down stores idle for longer than this; 0 keeps them until sign-out
    session_idle_ttl_seconds: int = 1800

    # Sentry error monitoring
    sentry_dsn: str | None = None

    # Environment
    environment: str = "development"
    log_level: str = "INFO"

    # API Settings
    api_title: str = "SwipeChef API"
    api_version: str = "1.0.0"

    @property
    def s3_enabled(self) -> bool:
        """Check if S3 is configured."""
        return all([
            self.aws_access_key_id,
            self.aws_secret_access_key,
            self.s3_bucket_name
        ])

    @property
    def is_postgres(self) -> bool:
        return self.database_url.startswith(("postgres://", "postgresql://", "postgresql+asyncpg://"))

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def async_database_url(self) -> str:
        """Convert database URL to async format for SQLAlchemy."""
        url = self.database_url
        # Convert to asyncpg driver
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql+asyncpg://", 1)
        elif url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        # Remove sslmode parameter (handled separately by asyncpg)
        if "?sslmode=" in url:
            url = url.split("?sslmode=")[0]
        elif "&sslmode=" in url:
            url = url.replace("&sslmode=require", "").replace("&sslmode=prefer", "")
        return url


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
