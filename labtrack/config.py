from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    database_url: str = "sqlite:///./labtrack.db"
    app_env: str = "dev"
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    log_level: str = "INFO"

    allowed_origins: str = "http://localhost:3000"
    session_ttl_hours: int = 24 * 7

    openai_api_key: str | None = None
    llm_model: str = "gpt-4o-mini"
    llm_temperature: float = 0.3
    llm_enabled: bool = True

    marker_fuzzy_threshold: int = 88
    history_required_tier: str = "elite"
    max_history_analyses: int = 50


settings = Settings()
