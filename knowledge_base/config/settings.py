from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "knowledge_base"
    db_username: str = "knowledge_base"
    db_password: str = "secret"
    db_pool_max_size: int = Field(default=10, ge=1)

    blob_root: str = "/app/files"
    blob_namespace: str = "knowledge_base"

    pdf_engine: str = "pdfplumber"
    tika_url: str = "http://localhost:9998"
    tika_timeout_seconds: int = 60

    rebuild_max_workers: int = Field(default=8, ge=1)
    extraction_timeout_seconds: float = Field(default=120.0, gt=0)
    extraction_max_attempts: int = Field(default=1, ge=1)
