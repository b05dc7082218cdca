"""Application configuration."""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_NAME: str = Field(default="Teach Back")
    DOCS_PORT: int = Field(default=8000)

    # PostgreSQL settings
    POSTGRES_USER: str = Field(default="postgres")
    POSTGRES_PASSWORD: str = Field(default="postgres")
    POSTGRES_HOST: str = Field(default="localhost")
    POSTGRES_PORT: int = Field(default=5432)
    POSTGRES_DB: str = Field(default="documents")
    POSTGRES_SSLMODE: Optional[str] = Field(default=None)
    POSTGRES_URL: Optional[str] = Field(
        default=None
    )  # Full connection string, wins over the POSTGRES_* parts

    @property
    def DATABASE_URL(self) -> str:
        """Construct DATABASE_URL from individual PostgreSQL parameters."""
        if self.POSTGRES_URL:
            return self.POSTGRES_URL
        url = f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        if self.POSTGRES_SSLMODE:
            url += f"?sslmode={self.POSTGRES_SSLMODE}"
        return url

    # Similarity search settings
    DOCUMENTS_TABLE: str = Field(default="documents_2", pattern=r"^[A-Za-z_][A-Za-z0-9_]*$")
    SIMILARITY_THRESHOLD: float = Field(default=0.7, ge=0.7, lt=1.0)
    SIMILARITY_TOP_K: int = Field(default=5, ge=1, le=5)

    # Provider selection
    EMBEDDING_PROVIDER: str = Field(default="openai")
    MODEL_PROVIDER: str = Field(default="openai")

    # OpenAI settings
    OPENAI_API_KEY: Optional[str] = Field(default=None)
    OPENAI_EMBEDDING_MODEL: str = Field(default="text-embedding-ada-002")
    OPENAI_CHAT_MODEL: str = Field(default="gpt-4o-mini")
    STT_MODEL: str = Field(default="whisper-1")

    # AWS Bedrock settings
    BEDROCK_REGION: str = Field(default="us-east-1")
    BEDROCK_EMBEDDING: Optional[str] = Field(default="amazon.titan-embed-text-v2:0")
    BEDROCK_MODEL: Optional[str] = Field(
        default="anthropic.claude-3-haiku-20240307-v1:0"
    )

    # Model settings
    MODEL_MAX_TOKENS: Optional[int] = Field(default=None)
    MODEL_TEMPERATURE: Optional[float] = Field(default=None, ge=0, le=1)

    # Long-term memory (mem0)
    MEM0_API_KEY: Optional[str] = Field(default=None)

    # ElevenLabs settings
    ELEVENLABS_API_KEY: Optional[str] = Field(default=None)
    ELEVENLABS_VOICE_ID: str = Field(default="JBFqnCBsd6RMkjVDRZzb")
    ELEVENLABS_MODEL_ID: str = Field(default="eleven_multilingual_v2")
    ELEVENLABS_STABILITY: float = Field(default=0.5, ge=0, le=1)
    ELEVENLABS_SIMILARITY_BOOST: float = Field(default=0.5, ge=0, le=1)

    # Tracing settings
    LANGSMITH_PROJECT: Optional[str] = Field(default=None)
    TRACE_MODEL: str = Field(default="gpt-4o-mini")
    TRACE_TIMEOUT_SECONDS: float = Field(default=25.0, gt=0, le=300)

    # Admin guard for settings and conversation log screens
    ADMIN_TOKEN: str = Field(default="")

    # CORS settings
    CORS_ORIGINS: list[str] = Field(default=["*"])

    # Environment
    ENVIRONMENT: str = Field(default="development")
    LOG_LEVEL: str = Field(default="DEBUG")
    DEBUG: bool = Field(default=True)

    @field_validator("EMBEDDING_PROVIDER", "MODEL_PROVIDER")
    @classmethod
    def _normalize_provider(cls, value: str) -> str:
        return value.strip().lower()


@lru_cache()
def get_settings() -> Settings:
    return Settings()
