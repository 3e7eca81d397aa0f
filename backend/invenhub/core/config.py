"""
Centralised application settings
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings, read from the environment and .env"""

    # API Settings
    API_TITLE: str = "InvenHub API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Point-of-sale and inventory API for SafariFlow stores"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 5000
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = ""

    # CORS - Can be string (comma-separated) or JSON array
    # Example: "http://localhost:3000,https://yourdomain.com" or '["http://localhost:3000"]'
    ALLOWED_ORIGINS: Optional[str] = "http://localhost:5173,http://localhost:3000"

    # Auth
    AUTH_SECRET: str = ""
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12
    DEFAULT_AVATAR_URL: str = "https://github.com/shadcn.png"

    # Billing
    SALES_TAX_RATE: float = 0.08

    # Stock thresholds and auto-reorder
    DEFAULT_REORDER_LEVEL: int = 5
    AUTO_REORDER_ENABLED: bool = True
    AUTO_REORDER_INITIAL_DELAY_SECONDS: int = 10
    AUTO_REORDER_INTERVAL_SECONDS: int = 5 * 60
    AUTO_REORDER_COOLDOWN_SECONDS: int = 60 * 60
    EXPECTED_DELIVERY_DAYS: int = 7

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into list"""
        if not self.ALLOWED_ORIGINS:
            return ["http://localhost:5173"]

        # Try JSON parse first (for array format)
        import json
        try:
            origins = json.loads(self.ALLOWED_ORIGINS)
            if isinstance(origins, list):
                return origins
        except (json.JSONDecodeError, ValueError):
            pass

        # Fall back to comma-separated string
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]


settings = Settings()
