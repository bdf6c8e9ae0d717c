"""Settings for the engine. Read from environment variables prefixed with CHESS_ (ex. CHESS_LOG_LEVEL=DEBUG)"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="CHESS_", extra="ignore")

    # time every player gets on their clock when no budget is requested
    default_time_budget_minutes: int = Field(default=5, gt=0)
    log_level: str = "INFO"


@lru_cache
def get_settings() -> EngineSettings:
    return EngineSettings()
