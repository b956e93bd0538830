"""Server configuration using pydantic-settings"""

from pydantic_settings import BaseSettings
from typing import Literal


class Settings(BaseSettings):
    """HTTP server settings loaded from environment variables"""

    # Environment
    env: Literal["development", "production"] = "development"
    debug: bool = True

    # Engine mode for the router built at startup
    engine_mode: Literal["mock", "live"] = "mock"

    # Optional registry override (falls back to CREATIVE_REGISTRY_PATH / packaged default)
    registry_path: str = ""

    class Config:
        env_prefix = "SERVER_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
settings = Settings()
