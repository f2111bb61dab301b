from dataclasses import dataclass
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)


@dataclass(frozen=True)
class MapsConfig:
    """Everything the map-link resolver and the Google client need to run."""

    api_key: Optional[str]
    region: str = "us"
    language: str = "en"
    timeout: float = 10.0
    max_retries: int = 1
    user_agent: str = DEFAULT_USER_AGENT
    cache_ttl_seconds: int = 86400


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "Route Planner API"
    VERSION: str = "0.1.0"
    API_V1_STR: str = "/api/v1"

    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    GOOGLE_MAPS_API_KEY: str | None = None
    MAPS_DEFAULT_REGION: str = "us"
    MAPS_LANGUAGE: str = "en"

    REQUEST_TIMEOUT: float = 10.0
    MAX_RETRIES: int = 1
    SHORT_LINK_USER_AGENT: str = DEFAULT_USER_AGENT

    REDIS_URL: str | None = None
    GEOCODING_CACHE_TTL_SECONDS: int = 86400

    ESTIMATE_PROVIDER: str = "random"
    ESTIMATE_START_TIME: str = "09:00"
    ESTIMATE_INTERVAL_MINUTES: int = 15
    PLACEHOLDER_TOTAL_DISTANCE: str = "75 km"
    PLACEHOLDER_TOTAL_TIME: str = "2 hours 15 minutes"

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    @field_validator("MAX_RETRIES")
    @classmethod
    def at_least_one_attempt(cls, v: int) -> int:
        if v < 1:
            raise ValueError("MAX_RETRIES counts attempts and must be >= 1")
        return v

    @field_validator("ESTIMATE_PROVIDER")
    @classmethod
    def known_estimate_provider(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("random", "schedule"):
            raise ValueError(f"Unknown estimate provider: {v}")
        return v

    def maps_config(self) -> MapsConfig:
        return MapsConfig(
            api_key=self.GOOGLE_MAPS_API_KEY,
            region=self.MAPS_DEFAULT_REGION,
            language=self.MAPS_LANGUAGE,
            timeout=self.REQUEST_TIMEOUT,
            max_retries=self.MAX_RETRIES,
            user_agent=self.SHORT_LINK_USER_AGENT,
            cache_ttl_seconds=self.GEOCODING_CACHE_TTL_SECONDS,
        )


settings = Settings()
