from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, computed_field

load_dotenv()


class Settings(BaseSettings):
    """Base settings for the application."""

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application settings
    APP_NAME: str = "Device Console"
    APP_VERSION: str = "1.0.0"
    APP_DESCRIPTION: str = "Biometric device management console API"
    APP_AUTHOR: str = "Device Console Team"

    DATABASE_URL: str = ""
    LOCAL_SQLITE_PATH: str = "sqlite+aiosqlite:///./device_console.db"

    POSTGRES_DATABASE_NAME: str = "device_console"
    POSTGRES_DATABASE_USER: str = "postgres"
    POSTGRES_DATABASE_PASSWORD: str = ""
    POSTGRES_DATABASE_HOST: str = ""
    POSTGRES_DATABASE_PORT: int = 5432

    # Session tokens
    LOCAL_AUTH_SECRET: str = "JWT_SECRET_KEY"
    LOCAL_AUTH_TOKEN_EXP_SECONDS: int = 8 * 3600

    # Bootstrap account, seeded on startup and protected from demotion/deletion
    BOOTSTRAP_ADMIN_USERNAME: str = "admin"
    BOOTSTRAP_ADMIN_PASSWORD: str = Field(default="admin", description="Initial password for the bootstrap account")

    # Optional tenant code checked at login. Empty disables the check.
    CLIENT_CODE: str = ""

    SEED_SAMPLE_DEVICES: bool = False

    AUTH_LOG_DEFAULT_PAGE_SIZE: int = 10

    CORS_ORIGINS: list[str] = ["*"]

    LOG_LEVEL: str = "INFO"
    LOGS_DIR: str = "logs"

    @computed_field
    @property
    def effective_database_url(self) -> str:
        """Resolve the database URL for the application.

        Priority:
        1. Explicit DATABASE_URL (Postgres, SQLite, etc.)
        2. Postgres URL built from POSTGRES_* components
        3. Local SQLite fallback for development: LOCAL_SQLITE_PATH
        """
        if self.DATABASE_URL and self.DATABASE_URL.strip():
            return self.DATABASE_URL.strip()
        if self.POSTGRES_DATABASE_HOST and self.POSTGRES_DATABASE_HOST.strip() and self.POSTGRES_DATABASE_PASSWORD and self.POSTGRES_DATABASE_PASSWORD.strip():
            return (
                f"postgresql://{self.POSTGRES_DATABASE_USER}:{self.POSTGRES_DATABASE_PASSWORD}@"
                f"{self.POSTGRES_DATABASE_HOST}:{self.POSTGRES_DATABASE_PORT}/{self.POSTGRES_DATABASE_NAME}"
            )
        if self.LOCAL_SQLITE_PATH and self.LOCAL_SQLITE_PATH.strip():
            return self.LOCAL_SQLITE_PATH.strip()
        return "sqlite+aiosqlite:///./device_console.db"


settings = Settings()
