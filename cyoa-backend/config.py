import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator


class StoryConfig(BaseModel):
    api_key: Optional[str] = None
    model: str = "gpt-4o-mini"
    base_url: Optional[str] = None
    final_step: int = Field(default=5, ge=1)
    allowed_origins: List[str] = ["*"]
    log_level: str = "INFO"

    @field_validator("allowed_origins", mode="before")
    def parse_allowed_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @classmethod
    def from_env(cls, env_file: Optional[str] = None, override: bool = False) -> "StoryConfig":
        """Build a config from the process environment, after loading .env."""
        load_dotenv(env_file, override=override)

        values = {
            "api_key": os.environ.get("OPENAI_API_KEY"),
            "model": os.environ.get("OPENAI_MODEL"),
            "base_url": os.environ.get("OPENAI_BASE_URL"),
            "final_step": os.environ.get("STORY_FINAL_STEP"),
            "allowed_origins": os.environ.get("ALLOWED_ORIGINS"),
            "log_level": os.environ.get("LOG_LEVEL"),
        }
        return cls(**{k: v for k, v in values.items() if v})
