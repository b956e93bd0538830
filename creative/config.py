"""Runtime configuration using pydantic-settings"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Settings loaded from CREATIVE_* environment variables or .env"""

    # Registry document; packaged default when unset
    registry_path: Optional[str] = None

    # Decision defaults
    default_goal: Literal["retention", "ctr", "conversions"] = "retention"
    default_risk_tolerance: Literal["low", "medium", "high"] = "medium"
    max_strategies: int = 3

    # Router
    engine_timeout_sec: float = 300.0
    poll_interval_sec: float = 2.0
    poll_max_attempts: int = 60
    max_switch_attempts: int = 3
    batch_concurrency: int = 4

    # Engines
    engine_mode: Literal["mock", "live"] = "mock"
    ffmpeg_path: Optional[str] = None
    render_output_dir: str = "artifacts/renders"
    http_engine_api_key: str = ""
    http_engine_timeout_sec: float = 30.0

    class Config:
        env_prefix = "CREATIVE_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()
