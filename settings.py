from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000)

    # presence conf
    absence_timeout_secs: float = Field(
        default=10.0, gt=0
    )  # no heartbeat for this long -> participant is dropped
    sweep_interval_secs: float = Field(default=15.0, gt=0)

    broadcast_target: str = Field(default="Todos", min_length=1)
    default_history_limit: Optional[int] = Field(
        default=None, gt=0
    )  # None means the whole visible history

    cors_origins: List[str] = Field(default_factory=lambda: ["*"])  # supports JSON

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
