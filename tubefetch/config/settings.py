import os
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class EnvSettings(BaseSettings):
    """Raw environment variables, read once at import time"""
    model_config = SettingsConfigDict(extra="ignore", case_sensitive=True, env_ignore_empty=True)

    HOST: str = "0.0.0.0"
    PORT: int = 3000
    NODE_ENV: Optional[str] = None
    APP_ENV: Optional[str] = None
    CORS_ORIGIN: Optional[str] = None
    LOG_LEVEL: Optional[str] = None
    DEBUG: bool = False

    YT_DLP_BINARY: str = "yt-dlp"
    YT_DLP_JS_RUNTIME: Optional[str] = None
    YT_DLP_PO_TOKEN: Optional[str] = None
    YT_DLP_COOKIES_FILE: Optional[str] = None
    YT_DLP_COOKIES_BROWSER: Optional[str] = None

    DOWNLOADS_DIR: Optional[str] = None
    SCRATCH_DIR: Optional[str] = None
    DOWNLOAD_TIMEOUT: Optional[float] = None
    MAX_CONCURRENT_DOWNLOADS: Optional[int] = None


class DownloadConfig(BaseModel):
    max_concurrent: Optional[int] = Field(default=None, ge=1, description="Max concurrent downloads (unset = unbounded)")
    timeout_seconds: Optional[float] = Field(default=None, gt=0, description="Per-process timeout in seconds (unset = none)")


class PathsConfig(BaseModel):
    downloads_dir: str = Field(default_factory=lambda: os.path.join(os.getcwd(), "downloads"), description="Where finished files are written")
    scratch_dir: str = Field(default_factory=lambda: os.path.join(os.getcwd(), "tmp"), description="Writable scratch area (cookie copies)")


class YtDlpConfig(BaseModel):
    binary: str = Field(default="yt-dlp", description="yt-dlp executable")
    js_runtime: Optional[str] = Field(default=None, description="JS runtime passed via --js-runtimes (e.g. deno)")
    auto_detect_runtime: bool = Field(default=True, description="Use deno from PATH when js_runtime is unset")
    po_token: Optional[str] = Field(default=None, description="PO token for the web player client")
    cookies_file: Optional[str] = Field(default=None, description="Netscape cookies.txt path")
    cookies_browser: Optional[str] = Field(default=None, description="Browser to read cookies from")


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
    supported_locales: list = Field(default=["en", "ja"], description="Supported locales")


class ApiConfig(BaseModel):
    title: str = Field(default="YouTube Downloader API", description="API title")
    version: str = Field(default="1.0.0", description="API version")
    cors_origins: list = Field(default=["*"], description="CORS allowed origins")
    debug: bool = Field(default=False, description="Enable debug mode")
    environment: str = Field(default="development", description="Deployment environment")
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=3000, description="Bind port")


class Config(BaseModel):
    download: DownloadConfig = Field(default_factory=DownloadConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    ytdlp: YtDlpConfig = Field(default_factory=YtDlpConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    i18n: I18nConfig = Field(default_factory=I18nConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)

    @classmethod
    def from_env(cls, env: Optional[EnvSettings] = None) -> "Config":
        """Build configuration from environment variables, falling back to defaults"""
        env = env or EnvSettings()
        config_data = {}

        api = {"host": env.HOST, "port": env.PORT, "debug": env.DEBUG}
        environment = env.APP_ENV or env.NODE_ENV
        if environment:
            api["environment"] = environment
        if env.CORS_ORIGIN:
            api["cors_origins"] = [o.strip() for o in env.CORS_ORIGIN.split(",") if o.strip()]
        config_data["api"] = api

        download = {}
        if env.DOWNLOAD_TIMEOUT:
            download["timeout_seconds"] = env.DOWNLOAD_TIMEOUT
        if env.MAX_CONCURRENT_DOWNLOADS:
            download["max_concurrent"] = env.MAX_CONCURRENT_DOWNLOADS
        if download:
            config_data["download"] = download

        paths = {}
        if env.DOWNLOADS_DIR:
            paths["downloads_dir"] = os.path.abspath(env.DOWNLOADS_DIR)
        if env.SCRATCH_DIR:
            paths["scratch_dir"] = os.path.abspath(env.SCRATCH_DIR)
        if paths:
            config_data["paths"] = paths

        config_data["ytdlp"] = {
            "binary": env.YT_DLP_BINARY,
            "js_runtime": env.YT_DLP_JS_RUNTIME,
            "po_token": env.YT_DLP_PO_TOKEN,
            "cookies_file": env.YT_DLP_COOKIES_FILE,
            "cookies_browser": env.YT_DLP_COOKIES_BROWSER,
        }

        if env.LOG_LEVEL:
            config_data["logging"] = {"level": env.LOG_LEVEL.upper()}

        return cls(**config_data)


config = Config.from_env()
