from pydantic_settings import BaseSettings
from typing import List, Optional

class Settings(BaseSettings):
    # Database
    DATABASE_URL: Optional[str] = None
    PGHOST: str = "localhost"
    PGDATABASE: str = "bus_ticketing"
    PGUSER: str = "postgres"
    PGPASSWORD: str = "postgres"
    PGSSLMODE: str = "prefer"

    # Cache
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_SOCKET_TIMEOUT: float = 5.0
    WEBHOOK_DEDUP_TTL_SECONDS: int = 86400

    # Payment gateway
    PAYSTACK_SECRET_KEY: str = "sk_test_default_key"
    PAYSTACK_BASE_URL: str = "https://api.paystack.co"
    PAYSTACK_TIMEOUT_SECONDS: float = 10.0

    # Security
    SESSION_EXPIRE_HOURS: int = 24

    # Application
    PROJECT_NAME: str = "Bus Ticketing System"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql://{self.PGUSER}:{self.PGPASSWORD}@{self.PGHOST}/{self.PGDATABASE}?sslmode={self.PGSSLMODE}"

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
