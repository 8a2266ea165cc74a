import os
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_CORS_ORIGINS = "http://localhost:3000,https://allmartavenue.vercel.app"


class Settings:
    """Runtime configuration read from the environment (and a local .env)."""

    def __init__(
        self,
        database_url: str = "mongodb://localhost:27017",
        database_name: str = "allmart",
        database_timeout_ms: int = 5000,
        cors_origins: Optional[List[str]] = None,
        environment: str = "development",
        log_level: Optional[str] = None,
        port: int = 8000,
    ):
        self.database_url = database_url
        self.database_name = database_name
        self.database_timeout_ms = database_timeout_ms
        self.cors_origins = cors_origins if cors_origins is not None else DEFAULT_CORS_ORIGINS.split(",")
        self.environment = environment.lower()
        self.log_level = log_level
        self.port = port

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
        return cls(
            database_url=os.getenv("DATABASE_URL", "mongodb://localhost:27017"),
            database_name=os.getenv("DATABASE_NAME", "allmart"),
            database_timeout_ms=int(os.getenv("DATABASE_TIMEOUT_MS", "5000")),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            environment=os.getenv("ENVIRONMENT", "development"),
            log_level=os.getenv("LOG_LEVEL"),
            port=int(os.getenv("PORT", "8000")),
        )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def get_settings() -> Settings:
    return Settings.from_env()
