import json
import logging
from pathlib import Path

from pydantic_settings import BaseSettings
from functools import lru_cache

_config_logger = logging.getLogger(__name__)

_SETTINGS_FILE = Path("data/settings.json")
_BACKEND_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _BACKEND_DIR / ".env",
    ".env",
)
_MODEL_KEYS = frozenset({
    "classification_model",
    "embedding_model",
})
_PLACEHOLDER_API_KEY = "your-openrouter-api-key-here"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "Synapse Capture API"
    app_version: str = "0.1.0"
    app_env: str = "development"
    database_url: str = "sqlite:///synapse.db"
    database_echo: bool = False
    cors_origins: list[str] = ["http://localhost:3000"]

    # OpenRouter configuration
    openrouter_api_key: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_app_name: str = "Synapse Capture"

    # Models via OpenRouter
    classification_model: str = "openai/gpt-4o-mini"
    embedding_model: str = "openai/text-embedding-ada-002"
    embedding_dimensions: int = 1536
    embedding_max_input_chars: int = 8000

    # Search tuning
    search_candidate_limit: int = 500
    search_embedding_concurrency: int = 8
    search_embedding_timeout: float = 10.0   # seconds per embedding call
    search_semantic_deadline: float = 25.0   # seconds for the whole fan-out

    # Logging: per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_sql: str = "WARNING"           # sqlalchemy.engine: SQL queries
    log_level_http: str = "WARNING"          # httpx / httpcore: outbound HTTP
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_pipeline: str = "INFO"         # CaptureService / SearchService
    log_level_openrouter: str = "INFO"       # OpenRouter chat + embeddings

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
    }

    def model_post_init(self, __context: object) -> None:
        """Merge runtime overrides from data/settings.json into model settings."""
        if _SETTINGS_FILE.exists():
            try:
                overrides = json.loads(_SETTINGS_FILE.read_text("utf-8"))
                for key in _MODEL_KEYS:
                    if key in overrides and isinstance(overrides[key], str):
                        object.__setattr__(self, key, overrides[key])
            except (OSError, ValueError) as exc:
                _config_logger.warning("Could not load settings overrides: %s", exc)

    @property
    def openrouter_configured(self) -> bool:
        """True when a real OpenRouter key is set (not empty, not the template value)."""
        key = self.openrouter_api_key.strip()
        return bool(key) and key != _PLACEHOLDER_API_KEY


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance: reads .env once."""
    return Settings()
