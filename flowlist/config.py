from pydantic import BaseModel
import os
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

# Load .env file if it exists (before reading os.getenv)
_env_path = Path(__file__).resolve().parent.parent / ".env"
if _env_path.exists():
    with open(_env_path) as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                key, _, value = line.partition("=")
                key = key.strip()
                value = value.strip()
                # Only set if not already in environment (env vars take precedence)
                if key not in os.environ:
                    os.environ[key] = value

_DEFAULT_DB_PATH = Path(__file__).resolve().parent.parent / "data" / "flowlist.db"
_WEAK_SECRET = "change-me-in-production-please"


def _sanitize_ascii(val: str) -> str:
    """Strip non-ASCII characters from config values (prevents encoding errors)"""
    return val.encode('ascii', errors='ignore').decode('ascii').strip()


class Settings(BaseModel):
    # Network
    http_host: str = os.getenv("HTTP_HOST", "0.0.0.0")
    http_port: int = int(os.getenv("HTTP_PORT", "8000"))

    # Model access (OpenAI-compatible endpoint, Groq by default)
    groq_api_key: str = _sanitize_ascii(os.getenv("GROQ_API_KEY", ""))
    llm_base_url: str = _sanitize_ascii(os.getenv("LLM_BASE_URL", "https://api.groq.com/openai/v1"))
    chat_model: str = _sanitize_ascii(os.getenv("CHAT_MODEL", "llama-3.3-70b-versatile"))
    llm_timeout_s: float = float(os.getenv("LLM_TIMEOUT_S", "60"))

    # Assistant
    assistant_toolset: str = os.getenv("ASSISTANT_TOOLSET", "basic")  # "basic" | "finance"
    max_history: int = int(os.getenv("MAX_HISTORY", "10"))

    # Auth / DB
    secret_key: str = os.getenv("SECRET_KEY", _WEAK_SECRET)
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 7)))
    database_url: str = os.getenv("DATABASE_URL", f"sqlite+aiosqlite:///{_DEFAULT_DB_PATH}")


settings = Settings()

if settings.secret_key == _WEAK_SECRET or len(settings.secret_key) < 16:
    logger.warning("SECRET_KEY is weak or default! Set a strong SECRET_KEY (>=16 chars) in .env")

# Log config for debugging
_llm_key = '***' + settings.groq_api_key[-4:] if len(settings.groq_api_key) > 4 else 'EMPTY'
logger.info(f"Config: LLM → {settings.llm_base_url} (key={_llm_key}), model={settings.chat_model}")
logger.info(f"Config: assistant toolset={settings.assistant_toolset}, history={settings.max_history}")
