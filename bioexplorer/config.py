"""
Application configuration using Pydantic Settings.
Loads environment variables from .env file with validation and defaults.
"""

from pathlib import Path
from typing import Annotated

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from bioexplorer.errors import MissingCredentialError

# Load .env with override=True so project .env takes precedence
# over stale shell environment variables
load_dotenv(override=True)


class Settings(BaseSettings):
    """Central configuration for the NASA Bioscience Explorer."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── API Keys ──────────────────────────────────
    google_gemini_ai_api_key: str = ""
    google_api_key: str = ""

    # ── Publication Store ─────────────────────────
    database_url: str = "sqlite:///./data/publications.db"

    # ── ChromaDB ──────────────────────────────────
    chroma_persist_dir: str = "./data/chroma_db"
    chroma_collection_name: str = "langchain_db"

    # ── Application ───────────────────────────────
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    log_level: str = "info"

    # ── Embedding Settings ────────────────────────
    embedding_model: str = "models/text-embedding-004"
    embedding_dimensions: int = 768
    chunk_max_length: int = 7000
    embed_delay_seconds: float = 1.0

    # ── LLM Settings ─────────────────────────────
    # Ordered by preference, cheapest/fastest first
    generation_models: Annotated[list[str], NoDecode] = [
        "gemini-2.0-flash",
        "gemini-1.5-flash",
        "gemini-1.5-pro",
    ]
    llm_temperature: float = 0.2
    llm_max_retries: int = 0
    request_timeout_seconds: float = 60.0

    # ── Retrieval Settings ────────────────────────
    max_context_chars: int = 10000
    answer_result_limit: int = 5
    search_result_limit: int = 10

    @field_validator("generation_models", mode="before")
    @classmethod
    def _split_models(cls, value):
        """Accept GENERATION_MODELS as a comma-separated string."""
        if isinstance(value, str):
            return [name.strip() for name in value.split(",") if name.strip()]
        return value

    @property
    def gemini_api_key(self) -> str:
        """The Gemini credential, preferring GOOGLE_GEMINI_AI_API_KEY."""
        return self.google_gemini_ai_api_key or self.google_api_key

    def require_api_key(self) -> str:
        """
        Return the Gemini credential or fail.

        Raises:
            MissingCredentialError: If neither key variable is set.
        """
        api_key = self.gemini_api_key
        if not api_key:
            raise MissingCredentialError(
                "Missing API key. Set GOOGLE_GEMINI_AI_API_KEY or GOOGLE_API_KEY"
            )
        return api_key

    def ensure_directories(self) -> None:
        """Create required data directories if they don't exist."""
        Path(self.chroma_persist_dir).mkdir(parents=True, exist_ok=True)
        if self.database_url.startswith("sqlite:///"):
            db_path = Path(self.database_url.removeprefix("sqlite:///"))
            if str(db_path) != ":memory:":
                db_path.parent.mkdir(parents=True, exist_ok=True)


# Singleton settings instance
settings = Settings()
