from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_ignore_empty=True,
        extra="ignore",
    )

    app_env: str = Field(default="development")
    app_host: str = Field(default="0.0.0.0")
    app_port: int = Field(default=8000)

    # Cloudinary account and pre-provisioned assets
    cloudinary_cloud_name: str = Field(default="df12eghmr")
    cloudinary_upload_preset: str = Field(default="audio_merge")
    cloudinary_resource_type: str = Field(default="video")
    cloudinary_api_base_url: str = Field(default="https://api.cloudinary.com/v1_1")
    cloudinary_delivery_base_url: str = Field(default="https://res.cloudinary.com")
    base_script_public_id: str = Field(default="2025-07-15_16.55.08_oxotfl")

    # Only used for destroying the temporary greeting asset
    cloudinary_api_key: str | None = Field(default=None)
    cloudinary_api_secret: str | None = Field(default=None)

    greeting_volume: int = Field(default=85)
    greeting_fade_ms: int = Field(default=200)
    output_format: str = Field(default="mp3")

    media_http_timeout: float = Field(default=60.0)

    log_level: str = Field(default="INFO")
    log_format: str = Field(default="text") # text or json
    sentry_dsn: str | None = Field(default=None)

    @property
    def cleanup_enabled(self) -> bool:
        return bool(self.cloudinary_api_key and self.cloudinary_api_secret)


@lru_cache()
def get_settings() -> Settings:
    return Settings()
