from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings"""

    # Application basic settings
    APP_NAME: str = "Auction Site"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # PostgreSQL database settings
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_HOST: str = "127.0.0.1"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "auction-site"

    # Full SQLAlchemy URL, takes precedence over the POSTGRES_* fields
    # (e.g. "sqlite+aiosqlite://" for an in-memory store)
    SQLALCHEMY_DATABASE_URI: str | None = None

    # Connection pool settings (ignored for SQLite)
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 30
    DB_POOL_RECYCLE: int = 120
    DB_POOL_TIMEOUT: int = 10

    # Expired sessions are swept every 5 minutes of site time
    SESSION_SWEEP_INTERVAL_SECONDS: int = 300

    # passlib schemes, the first one hashes new passwords
    PASSWORD_SCHEMES: list[str] = ["pbkdf2_sha256"]

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    @property
    def DATABASE_URL(self) -> str:
        """Generate the async connection string (explicit URI wins)"""
        if self.SQLALCHEMY_DATABASE_URI:
            return self.SQLALCHEMY_DATABASE_URI
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )


settings = Settings()
