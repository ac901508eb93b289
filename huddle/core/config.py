"""Configuration management for Huddle."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # In sandboxed environments, .env might not be accessible
    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Supabase configuration (required)
    SUPABASE_URL: str = Field(..., description="Supabase project URL")
    SUPABASE_SERVICE_ROLE_KEY: str = Field(..., description="Supabase service role key")

    # OpenAI configuration (required, embeddings)
    OPENAI_API_KEY: str = Field(..., description="OpenAI API key")

    # Anthropic configuration (advice generation)
    ANTHROPIC_API_KEY: str = Field(default="", description="Anthropic API key")

    # Environment
    HUDDLE_ENV: str = Field(default="dev", description="Environment: dev, staging, prod")

    # Embedding configuration
    EMBEDDING_MODEL: str = Field(
        default="text-embedding-3-small", description="OpenAI embedding model"
    )
    EMBEDDING_DIM: int = Field(default=1536, description="Embedding vector dimension")
    EMBEDDING_UNIT_COST: float = Field(
        default=0.0001, description="Estimated USD cost of one player embedding"
    )

    # Advice generation
    ADVICE_MODEL: str = Field(
        default="claude-haiku-4-5-20251001", description="Model for advice generation"
    )
    ADVICE_MAX_TOKENS: int = Field(default=1000, description="Max output tokens for advice")
    ADVICE_TEMPERATURE: float = Field(default=0.7, description="Sampling temperature for advice")

    # Sleeper upstream
    SLEEPER_API_BASE: str = Field(
        default="https://api.sleeper.app/v1", description="Sleeper API base URL"
    )
    SLEEPER_TIMEOUT_SECONDS: float = Field(default=60.0, description="Sleeper request timeout")

    # Retrieval
    SIMILARITY_THRESHOLD: float = Field(
        default=0.1, description="Minimum cosine similarity for player matches"
    )
    MATCH_COUNT: int = Field(default=15, description="Max players returned by similarity search")

    # Ingestion
    SNAPSHOT_BATCH_SIZE: int = Field(
        default=1000, description="Players per snapshot upsert batch"
    )
    SNAPSHOT_BATCH_PAUSE_SECONDS: float = Field(
        default=0.1, description="Pause between snapshot upsert batches"
    )
    INGEST_BATCH_SIZE: int = Field(
        default=5, description="Embedding calls in flight per batch"
    )
    INGEST_BATCH_PAUSE_SECONDS: float = Field(
        default=2.0, description="Pause between embedding batches (provider rate limit)"
    )
    ROOKIE_SEASON: str = Field(
        default="2024", description="Season whose rookie_year marks a player as a rookie"
    )
    STALE_EMBEDDING_MAX_MISSED_RUNS: int = Field(
        default=3,
        description="Consecutive ingestion runs a player may be absent before its embedding is purged",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance

    Raises:
        ValidationError: If required environment variables are missing
    """
    return Settings()
