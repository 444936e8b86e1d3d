import os
from pydantic import BaseModel
from functools import lru_cache
from dotenv import load_dotenv
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    APP_NAME: str = os.getenv("APP_NAME", "AI CV & Project Evaluator")
    ENV: str = os.getenv("ENV", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    EVAL_LOG_FILE: str | None = os.getenv("EVAL_LOG_FILE") or None

    STORAGE_DIR: str = os.getenv("STORAGE_DIR", "storage")
    MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))
    SQLITE_PATH: str = os.getenv("SQLITE_PATH", "app.sqlite3")

    QUEUE_NAME: str = os.getenv("QUEUE_NAME", "evaluation_queue")
    QUEUE_POLL_INTERVAL: float = float(os.getenv("QUEUE_POLL_INTERVAL", "0.2"))
    WORKER_ENABLED: bool = _env_bool("WORKER_ENABLED", True)
    WORKER_DEQUEUE_TIMEOUT: float = float(os.getenv("WORKER_DEQUEUE_TIMEOUT", "1.0"))
    JOB_TIMEOUT_SECONDS: float = float(os.getenv("JOB_TIMEOUT_SECONDS", "300"))

    QDRANT_URL: str | None = os.getenv("QDRANT_URL") or None
    QDRANT_API_KEY: str | None = os.getenv("QDRANT_API_KEY") or None
    QDRANT_COLLECTION: str = os.getenv("QDRANT_COLLECTION", "evaluation_context")
    CONTEXT_TOP_K: int = int(os.getenv("CONTEXT_TOP_K", "5"))
    EMBEDDING_DIM: int = int(os.getenv("EMBEDDING_DIM", "1536"))

    OPENAI_API_KEY: str | None = os.getenv("OPENAI_API_KEY") or None
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    OPENAI_EMBEDDING_MODEL: str = os.getenv("OPENAI_EMBEDDING_MODEL", "text-embedding-3-small")
    OPENROUTER_API_KEY: str | None = os.getenv("OPENROUTER_API_KEY") or None
    OPENROUTER_MODEL: str = os.getenv("OPENROUTER_MODEL", "openai/gpt-4o-mini")

    CV_EVAL_TIMEOUT: float = float(os.getenv("CV_EVAL_TIMEOUT", "60"))
    PROJECT_EVAL_TIMEOUT: float = float(os.getenv("PROJECT_EVAL_TIMEOUT", "60"))
    SUMMARY_TIMEOUT: float = float(os.getenv("SUMMARY_TIMEOUT", "45"))
    LLM_MAX_INPUT_CHARS: int = int(os.getenv("LLM_MAX_INPUT_CHARS", "8000"))


@lru_cache
def get_settings() -> Settings:
    return Settings()
