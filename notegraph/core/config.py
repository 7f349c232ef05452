# notegraph/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    SUPABASE_URL: str
    SUPABASE_KEY: str
    SUPABASE_NOTES_TABLE: str = "notes"
    NOTE_STORE_TIMEOUT: float = 10.0
    LIMITER_STORAGE_URI: str = "memory://"
    LOG_LEVEL: str = "INFO"
    MAX_GRAPH_SESSIONS: int = 100
    GRAPH_SESSION_TTL_SECONDS: float = 1800.0

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
