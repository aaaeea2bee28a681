import os
from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    openai_api_key: Optional[str] = Field(None, alias="OPENAI_API_KEY")
    planner_agent_model: str = Field("gpt-5", alias="PLANNER_AGENT_MODEL")
    planner_agent_reasoning: Literal["minimal", "low", "medium", "high"] = Field("medium", alias="PLANNER_AGENT_REASONING")
    planner_agent_enable_web: bool = Field(True, alias="PLANNER_AGENT_ENABLE_WEB")
    planner_agent_max_turns: int = Field(40, alias="PLANNER_AGENT_MAX_TURNS", ge=1)
    schedule_ttl_seconds: int = Field(30 * 60, alias="PLANNER_SCHEDULE_TTL_SECONDS", ge=1)
    default_target_credits: int = Field(128, alias="PLANNER_DEFAULT_TARGET_CREDITS", ge=1)
    debug_endpoints: bool = Field(False, alias="PLANNER_DEBUG_ENDPOINTS")
    database_url: Optional[str] = Field(None, alias="PLANNER_DATABASE_URL")
    database_pool_size: int = Field(5, alias="PLANNER_DATABASE_POOL_SIZE")
    database_max_overflow: int = Field(5, alias="PLANNER_DATABASE_MAX_OVERFLOW")
    database_echo: bool = Field(False, alias="PLANNER_DATABASE_ECHO")

    class Config:
        env_file = os.getenv("ENV_FILE", ".env")
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache
def get_settings() -> Settings:
    try:
        settings = Settings()  # type: ignore[arg-type]
        if settings.openai_api_key and not os.getenv("OPENAI_API_KEY"):
            os.environ["OPENAI_API_KEY"] = settings.openai_api_key
        return settings
    except ValidationError as exc:
        raise RuntimeError(f"Invalid planner configuration: {exc}") from exc
