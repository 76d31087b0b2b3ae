import os
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)

class ServerConfig(BaseModel):
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=7777, ge=1, le=65535, description="Listening port")

class ApiConfig(BaseModel):
    title: str = Field(default="TraxIt", description="API title")
    description: str = Field(default="Extract audio tracks from YouTube videos", description="API description")
    version: str = Field(default="1.0.0", description="API version")
    cors_origins: List[str] = Field(
        default=["http://localhost:5500", "http://127.0.0.1:5500"],
        description="CORS allowed origins"
    )
    debug: bool = Field(default=False, description="Enable debug mode (docs, raw error details)")

class StorageConfig(BaseModel):
    temp_dir: Optional[str] = Field(default=None, description="Explicit temp directory for request workspaces")
    production_temp_dir: str = Field(default="/tmp/traxit", description="Temp directory in production")
    development_temp_dir: str = Field(default="temp", description="Temp directory in development")

class ExtractorConfig(BaseModel):
    ytdlp_binary: str = Field(default="yt-dlp", description="yt-dlp executable for the fallback strategy")
    user_agent: str = Field(default=BROWSER_USER_AGENT, description="Browser User-Agent sent to the platform")
    referer: str = Field(default="https://www.youtube.com/", description="Referer sent by the fallback strategy")
    socket_timeout: int = Field(default=10, ge=1, description="Socket timeout for yt-dlp")
    retries: int = Field(default=3, ge=0, description="Network retries inside yt-dlp")
    info_timeout: float = Field(default=30.0, gt=0, description="Metadata extraction timeout in seconds")
    download_timeout: float = Field(default=600.0, gt=0, description="Media download timeout in seconds")
    probe_extensions: List[str] = Field(
        default=[".mp3", ".m4a", ".webm", ".mp4", ".ogg", ".opus"],
        description="Output extensions probed after the fallback audio extraction"
    )

class TranscodeConfig(BaseModel):
    ffmpeg_binary: str = Field(default="ffmpeg", description="ffmpeg executable")
    codec: str = Field(default="libmp3lame", description="Audio codec")
    sample_rate: int = Field(default=44100, description="Output sample rate in Hz")
    bitrate: str = Field(default="192k", description="Output audio bitrate")
    timeout_seconds: float = Field(default=600.0, gt=0, description="Transcode timeout in seconds")

class RedisConfig(BaseModel):
    enabled: bool = Field(default=True, description="Connect to Redis on startup")
    url: str = Field(default="redis://localhost:6379", description="Redis connection URL")
    socket_timeout: int = Field(default=5, description="Redis socket timeout in seconds")

class RateLimitConfig(BaseModel):
    enabled: bool = Field(default=True, description="Enable rate limiting")
    max_requests: int = Field(default=30, ge=1, description="Max requests per window")
    window_seconds: int = Field(default=60, ge=1, description="Rate limit window in seconds")

class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="%(message)s", description="Log format")
    enable_rich: bool = Field(default=True, description="Enable rich console logging")

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

class I18nConfig(BaseModel):
    default_locale: str = Field(default="en", description="Default locale")
    supported_locales: List[str] = Field(default=["en", "ja"], description="Supported locales")

class Config(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TRAXIT_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    environment: str = Field(default="development", description="production or development")
    server: ServerConfig = Field(default_factory=ServerConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    extractor: ExtractorConfig = Field(default_factory=ExtractorConfig)
    transcode: TranscodeConfig = Field(default_factory=TranscodeConfig)
    redis: RedisConfig = Field(default_factory=RedisConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    i18n: I18nConfig = Field(default_factory=I18nConfig)

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    def temp_root(self) -> Path:
        """Directory under which per-request workspaces are created"""
        if self.storage.temp_dir:
            return Path(self.storage.temp_dir)
        if self.is_production:
            return Path(self.storage.production_temp_dir)
        return Path(self.storage.development_temp_dir).resolve()

def load_config() -> Config:
    """Load configuration with priority: TRAXIT_* env vars > plain env vars > defaults"""
    config = Config()

    # Plain variables used by common hosting platforms
    if os.getenv("PORT") and "TRAXIT_SERVER__PORT" not in os.environ:
        config.server.port = int(os.getenv("PORT"))

    if os.getenv("APP_ENV") and "TRAXIT_ENVIRONMENT" not in os.environ:
        config.environment = os.getenv("APP_ENV")

    frontend_url = os.getenv("FRONTEND_URL")
    if frontend_url and frontend_url not in config.api.cors_origins:
        config.api.cors_origins.append(frontend_url)

    return config

config = load_config()
