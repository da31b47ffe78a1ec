import os
from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv() # Load .env file from project root if running locally

DATABASE_USER = os.getenv("POSTGRES_USER", "user")
DATABASE_PASSWORD = os.getenv("POSTGRES_PASSWORD", "password")
DATABASE_HOST = os.getenv("POSTGRES_HOST", "postgres") # Docker service name
DATABASE_PORT = os.getenv("POSTGRES_PORT", "5432")
DATABASE_NAME = os.getenv("POSTGRES_DB", "orders_db")

# Async database URL for SQLAlchemy, a full DATABASE_URL wins over the pieces
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql+asyncpg://{DATABASE_USER}:{DATABASE_PASSWORD}@{DATABASE_HOST}:{DATABASE_PORT}/{DATABASE_NAME}",
)
DATABASE_ECHO = os.getenv("DATABASE_ECHO", "false").lower() == "true"

# External stock service, unset means stock checks are unavailable
STOCK_SERVICE_URL = os.getenv("STOCK_SERVICE_URL") or None
STOCK_MAX_ATTEMPTS = int(os.getenv("STOCK_MAX_ATTEMPTS", "2"))
STOCK_RETRY_BACKOFF_SECONDS = float(os.getenv("STOCK_RETRY_BACKOFF_SECONDS", "0.1")) # Fixed, not exponential
STOCK_SERVICE_TIMEOUT_SECONDS = float(os.getenv("STOCK_SERVICE_TIMEOUT_SECONDS", "5.0"))

# Broker is optional, empty bootstrap servers means local-only delivery
KAFKA_BOOTSTRAP_SERVERS = os.getenv("KAFKA_BOOTSTRAP_SERVERS") or None
ORDER_SUBMITTED_TOPIC = os.getenv("ORDER_SUBMITTED_TOPIC", "order_submitted")

# For Uvicorn binding inside container
APP_HOST = os.getenv("APP_HOST", "0.0.0.0")
APP_PORT = int(os.getenv("APP_PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


class ServiceConfig(BaseModel):
    """Settings resolved once at startup and handed to the OrderService."""

    stock_service_url: str | None = None
    stock_max_attempts: int = Field(2, ge=1) # 1 means no retry
    stock_retry_backoff_seconds: float = Field(0.1, ge=0)
    stock_timeout_seconds: float = Field(5.0, gt=0)
    kafka_bootstrap_servers: str | None = None
    order_submitted_topic: str = "order_submitted"

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        return cls(
            stock_service_url=STOCK_SERVICE_URL,
            stock_max_attempts=STOCK_MAX_ATTEMPTS,
            stock_retry_backoff_seconds=STOCK_RETRY_BACKOFF_SECONDS,
            stock_timeout_seconds=STOCK_SERVICE_TIMEOUT_SECONDS,
            kafka_bootstrap_servers=KAFKA_BOOTSTRAP_SERVERS,
            order_submitted_topic=ORDER_SUBMITTED_TOPIC,
        )
