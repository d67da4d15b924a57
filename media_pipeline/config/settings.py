from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "practice"
    db_username: str = "practice"
    db_password: str = "secret"
    db_pool_max_size: int = Field(default=4, ge=1)
    db_connect_timeout_seconds: float = Field(default=10.0, gt=0)

    storage_backend: str = "supabase"
    storage_bucket: str = "recordings"
    storage_timeout_seconds: int = 60
    storage_path_prefix: str = "practice"

    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_access_token: str = ""

    local_storage_root: str = "/app/storage"
    local_storage_base_url: str = "http://localhost:8000/storage"
    local_user_id: str = ""

    video_max_width: int = Field(default=1280, gt=0)
    video_max_height: int = Field(default=720, gt=0)
    video_quality: float = Field(default=0.7, ge=0.0, le=1.0)
    video_max_size_mb: float = Field(default=25.0, gt=0)

    image_max_width: int = Field(default=1920, gt=0)
    image_max_height: int = Field(default=1080, gt=0)
    image_quality: float = Field(default=0.8, ge=0.0, le=1.0)
    image_max_size_mb: float = Field(default=5.0, gt=0)

    # matches the recordings bucket file_size_limit
    audio_max_size_mb: float | None = Field(default=50.0, gt=0)

    thumbnail_width: int = Field(default=300, gt=0)
    thumbnail_height: int = Field(default=200, gt=0)
    thumbnail_time_offset_seconds: float = Field(default=2.0, ge=0.0)
    thumbnail_quality: float = Field(default=0.8, ge=0.0, le=1.0)

    max_concurrent_files: int = Field(default=1, ge=1)
