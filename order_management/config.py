import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    # Database
    POSTGRES_CONNECTION_STRING: str = os.getenv("POSTGRES_CONNECTION_STRING", "")
    SQLITE_DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./orders.db")

    # API
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:5173")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Orders
    STRICT_STATUS_TRANSITIONS: bool = _env_bool("STRICT_STATUS_TRANSITIONS", True)
    REQUIRE_EXISTING_CUSTOMER: bool = _env_bool("REQUIRE_EXISTING_CUSTOMER", False)
    ORDER_NUMBER_MAX_ATTEMPTS: int = int(os.getenv("ORDER_NUMBER_MAX_ATTEMPTS", "2"))

    @property
    def DATABASE_URL(self) -> str:
        """Асинхронный URL для приложения"""
        if not self.POSTGRES_CONNECTION_STRING:
            return self.SQLITE_DATABASE_URL
        url = self.POSTGRES_CONNECTION_STRING.replace("postgres://", "postgresql://")
        return url.replace("postgresql://", "postgresql+asyncpg://")

    @property
    def SYNC_DATABASE_URL(self) -> str:
        """Синхронный URL для Alembic"""
        if not self.POSTGRES_CONNECTION_STRING:
            return self.SQLITE_DATABASE_URL.replace("sqlite+aiosqlite://", "sqlite://")
        return self.POSTGRES_CONNECTION_STRING.replace("postgres://", "postgresql://")


settings = Settings()
