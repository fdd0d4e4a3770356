"""Application settings loaded from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Admin API authentication
    # Comma-separated list of keys accepted on the /v1 routes
    admin_api_keys: str = "dev-key-1"

    # Chat backend
    chat_provider: str = "openai"  # openai | bedrock
    upstream_base_url: str = "https://api.openai.com"
    upstream_api_key: str = ""
    chat_model: str = "gpt-4o-mini"
    bedrock_model_id: str = ""  # e.g. "anthropic.claude-3-sonnet-20240229-v1:0"
    aws_region: str = "us-east-1"
    chat_timeout_seconds: float = 60.0
    chat_temperature: float = 0.2

    # Storage
    score_db_path: str = "content_audit.sqlite3"
    config_path: str = "content_audit.json"

    # Batch analysis
    batch_chunk_size: int = 5
    candidate_exclusion: str = "valid_cache"  # valid_cache | recent
    recent_window_days: int = 7
    published_only: bool = True

    # Logging
    log_level: str = "INFO"
    audit_log_file: str = ""  # Empty = stdout only

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def api_keys_list(self) -> list[str]:
        return [k.strip() for k in self.admin_api_keys.split(",") if k.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
