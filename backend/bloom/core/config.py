import tempfile
from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central settings object.
    Vercel/Render provide env vars; locally you can use backend/.env.
    Keys are NOT checked at startup: a missing key fails the outbound call instead.
    """
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # PlantNet (species identifier)
    PLANTNET_API_KEY: str = Field("", validation_alias=AliasChoices("PLANTNET_API_KEY", "PLANTNET_KEY"))
    PLANTNET_API_BASE: str = "https://my-api.plantnet.org/v2/identify"
    PLANTNET_PROJECT: str = "all"
    PLANTNET_TIMEOUT_SECONDS: float = 30.0

    # LLM provider: "openai" (any OpenAI-compatible endpoint, OpenRouter by default) or "gemini"
    LLM_PROVIDER: str = "openai"
    LLM_TIMEOUT_SECONDS: float = 60.0

    OPENAI_API_KEY: str = Field("", validation_alias=AliasChoices("OPENAI_API_KEY", "OPENAI_KEY"))
    OPENAI_BASE_URL: str = "https://openrouter.ai/api/v1"
    OPENAI_MODEL: str = "gpt-4o-mini"

    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.5-flash"

    # Uploads
    UPLOAD_DIR: str = Field(default_factory=tempfile.gettempdir)
    MAX_IMAGES: int = 5
    DEFAULT_ORGAN: str = "leaf"

    LOG_LEVEL: str = "INFO"

    # Versioning
    APP_VERSION: str = "0.1.0"
    BUILD_ID: str = "dev"


@lru_cache
def get_settings() -> Settings:
    return Settings()

