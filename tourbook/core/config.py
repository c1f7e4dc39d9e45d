import os
from typing import List
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()  # allow local development with a .env file


class Settings:
    """Application settings read from the environment"""

    # Remote booking API
    BOOKING_API_URL: str = os.getenv("BOOKING_API_URL", "http://localhost:8000")
    BOOKING_API_TIMEOUT: float = float(os.getenv("BOOKING_API_TIMEOUT", "15"))

    # Lookups (tour detail / search) retry with a fixed delay; submissions never retry
    LOOKUP_RETRY_ATTEMPTS: int = int(os.getenv("LOOKUP_RETRY_ATTEMPTS", "3"))
    LOOKUP_RETRY_DELAY: float = float(os.getenv("LOOKUP_RETRY_DELAY", "1.0"))

    # Cart storage
    CART_DB_DSN: str = os.getenv("CART_DB_DSN", "sqlite:///./cart.db")
    CART_DB_ECHO: bool = os.getenv("CART_DB_ECHO", "false").lower() == "true"
    CART_STORAGE_KEY: str = os.getenv("CART_STORAGE_KEY", "cartBookings")

    # Calendar
    TIMEZONE: str = os.getenv("TIMEZONE", "UTC")

    # Admin
    ADMIN_API_KEY: str = os.getenv("ADMIN_API_KEY", "")

    # CORS
    CORS_ALLOW_ORIGINS: List[str] = []
    CORS_ALLOW_CREDENTIALS: bool = True

    # Rate Limiting
    RATE_LIMIT_DEFAULT: str = os.getenv("RATE_LIMIT_DEFAULT", "100/minute")

    # Business Rules
    DEFAULT_CURRENCY: str = os.getenv("DEFAULT_CURRENCY", "USD")
    CHECKOUT_TAX_RATE: float = float(os.getenv("CHECKOUT_TAX_RATE", "0.10"))

    def __init__(self):
        self._validate()
        self._parse_cors_origins()

    def _validate(self):
        """Validate required settings"""
        if not self.BOOKING_API_URL:
            raise ValueError("BOOKING_API_URL environment variable must be set")
        if self.LOOKUP_RETRY_ATTEMPTS < 1:
            raise ValueError("LOOKUP_RETRY_ATTEMPTS must be at least 1")
        if not 0 <= self.CHECKOUT_TAX_RATE < 1:
            raise ValueError("CHECKOUT_TAX_RATE must be a fraction between 0 and 1")

    def _parse_cors_origins(self):
        """Parse CORS origins from environment"""
        raw_origins = os.getenv("CORS_ALLOW_ORIGINS", "*")

        if raw_origins.strip() == "*":
            self.CORS_ALLOW_ORIGINS = ["*"]
            self.CORS_ALLOW_CREDENTIALS = False  # Security: wildcard forbids credentials
        else:
            self.CORS_ALLOW_ORIGINS = [o.strip() for o in raw_origins.split(",") if o.strip()]
            self.CORS_ALLOW_CREDENTIALS = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
