"""
Application configuration settings.
Loads from .env file first (overrides shell env for local dev), then pydantic reads from environment.
Production: set env vars in the platform (Docker, K8s, etc.); .env is optional.

All backend and rehearsal-client configs and constants are centralized here.
"""
from pathlib import Path

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env path: interviewai/.env (absolute path, works regardless of cwd)
_BASE_DIR = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = (_BASE_DIR / ".env").resolve()

# Load .env into environment BEFORE pydantic reads. override=True ensures .env
# values override any shell env.
# When .env doesn't exist (prod), this is a no-op; platform env vars are used.
if _ENV_FILE.exists():
    load_dotenv(_ENV_FILE, override=True)


class Settings(BaseSettings):
    """Application settings. Source: env vars (after dotenv load)."""

    # App
    app_name: str = "InterviewAI"
    app_version: str = "1.0.0"
    port: int = 5000
    environment: str = "development"

    # Database
    database_url: str = "sqlite:///./interviewai.db"

    # Auth
    secret_key: str = "your-secret-key-change-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 30
    auth_cookie_name: str = "token"
    auth_cookie_expire_days: int = 30

    # Users
    default_user_credits: int = 5

    # Rehearsal client
    api_base_url: str = "http://localhost:5000/api"
    session_cache_dir: str = ".interviewai"

    # OpenRouter (OpenAI-compatible API)
    openrouter_api_key: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_app_url: str = "http://localhost:5173"
    openrouter_app_title: str = "InterviewAI Assistant"

    # HTTP / network
    http_request_timeout: int = 30

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


settings = Settings()


# --- Constants (non-env, business config) ---

# Sessions
SESSION_TYPES: tuple[str, ...] = ("trial", "premium")
SESSION_STATUSES: tuple[str, ...] = ("active", "completed", "cancelled")
TERMINAL_STATUSES: frozenset[str] = frozenset({"completed", "cancelled"})
DEFAULT_QUESTION_CONFIDENCE: float = 0.8
PREMIUM_SESSION_CREDITS: int = 1

# Field limits
NAME_MAX_LENGTH: int = 50
PASSWORD_MIN_LENGTH: int = 6
TITLE_MAX_LENGTH: int = 100
LONG_TEXT_MAX_LENGTH: int = 1000

# Trial countdown (seconds)
TRIAL_TIME_BUDGET: int = 540

# Local session cache slot
SESSION_CACHE_SLOT: str = "trialInterviewSession"

# Screen preview defaults (pixels)
PREVIEW_DEFAULT_WIDTH: int = 800
PREVIEW_DEFAULT_HEIGHT: int = 576
PREVIEW_WIDTH_RANGE: tuple[int, int] = (600, 1200)
PREVIEW_HEIGHT_RANGE: tuple[int, int] = (300, 800)

# AI models: internal id -> OpenRouter model name
ALLOWED_AI_MODELS: tuple[str, ...] = ("gpt-4", "gpt-3.5-turbo", "claude-3.5")
DEFAULT_AI_MODEL: str = "gpt-4"
AI_MODEL_ALIASES: dict[str, str] = {"gpt-4.1": "gpt-4"}
TEXT_MODEL_MAP: dict[str, str] = {
    "gpt-4": "openai/gpt-4-turbo-preview",
    "claude-3.5": "anthropic/claude-3.5-sonnet",
    "gpt-3.5-turbo": "openai/gpt-3.5-turbo",
}
VISION_MODEL_MAP: dict[str, str] = {
    "gpt-4": "openai/gpt-4-vision-preview",
    "claude-3.5": "anthropic/claude-3.5-sonnet",
    "gpt-3.5-turbo": "openai/gpt-4-vision-preview",
}

# Completion request parameters
AI_MAX_TOKENS: int = 800
AI_TEMPERATURE: float = 0.7
AI_TOP_P: float = 0.9
AI_FREQUENCY_PENALTY: float = 0.1
AI_PRESENCE_PENALTY: float = 0.1
FALLBACK_CONFIDENCE: float = 0.5
