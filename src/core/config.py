from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    app_name: str = Field("invoice-docs", alias="APP_NAME")
    app_env: str = Field("dev", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    # Database (any SQLAlchemy URL; SQLite by default)
    database_url: str = Field("sqlite:///./invoices.db", alias="DATABASE_URL")

    # LLM provider (OpenAI-compatible endpoint)
    llm_base_url: str | None = Field(default=None, alias="LLM_BASE_URL")
    llm_api_key: str | None = Field(default=None, alias="LLM_API_KEY")
    llm_text_model: str = Field("gpt-4o-mini", alias="LLM_TEXT_MODEL")
    llm_document_model: str = Field("gpt-4o", alias="LLM_DOCUMENT_MODEL")
    llm_title_model: str = Field("gpt-4o-mini", alias="LLM_TITLE_MODEL")

    # Deterministic canned outputs instead of model calls
    mock: bool = Field(False, alias="MOCK")

    # Upload constraints
    max_upload_bytes: int = Field(5 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")

    # CORS allowed origins (comma-separated list)
    cors_origins: str = Field("http://localhost:3000,http://127.0.0.1:3000", alias="CORS_ORIGINS")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

settings = Settings()
