from dataclasses import dataclass
from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.core.errors import ConfigurationError


@dataclass(frozen=True)
class GeneratorConfig:
    """Credentials and endpoints the itinerary generator needs for one run."""

    llm_api_key: str
    llm_base_url: str
    llm_model: str
    llm_timeout_seconds: float


@dataclass(frozen=True)
class DataStoreConfig:
    """Admin credentials for the hosted trips database."""

    url: str
    key: str


class Settings(BaseSettings):
    project_name: str = "Trip Itinerary API"
    api_v1_prefix: str = "/api/v1"
    log_level: str = "INFO"

    llm_api_key: str = Field(default="", description="Bearer credential for the chat-completion gateway")
    llm_base_url: str = "https://ai.gateway.lovable.dev/v1"
    llm_model: str = "google/gemini-3-flash-preview"
    llm_timeout_seconds: float = 120.0

    supabase_url: str | None = None
    supabase_service_role_key: str | None = None

    use_supabase: bool = False

    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    def data_store_config(self) -> DataStoreConfig | None:
        """None selects the in-memory store."""
        if not self.use_supabase:
            return None
        if not (self.supabase_url and self.supabase_service_role_key):
            raise ConfigurationError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be configured")
        return DataStoreConfig(url=self.supabase_url, key=self.supabase_service_role_key)

    def generator_config(self) -> GeneratorConfig:
        if not self.llm_api_key:
            raise ConfigurationError("LLM_API_KEY not configured")
        # storage misconfiguration also fails before the gateway is called
        self.data_store_config()
        return GeneratorConfig(
            llm_api_key=self.llm_api_key,
            llm_base_url=self.llm_base_url,
            llm_model=self.llm_model,
            llm_timeout_seconds=self.llm_timeout_seconds,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[arg-type]


settings = get_settings()
