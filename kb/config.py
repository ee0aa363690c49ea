from pydantic_settings import BaseSettings
from pydantic import Field

class Settings(BaseSettings):
    app_name: str = "Knowledge Base"
    app_env: str = Field("dev", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    secret_key: str = Field("dev-secret-change-me", alias="SECRET_KEY")
    access_token_expire_minutes: int = Field(60 * 24 * 7, alias="ACCESS_TOKEN_EXPIRE_MINUTES")
    password_hash_rounds: int = Field(12, alias="PASSWORD_HASH_ROUNDS")
    cookie_name: str = Field("kb_token", alias="COOKIE_NAME")
    cookie_secure: bool = Field(False, alias="COOKIE_SECURE")

    database_url: str = Field("sqlite:///./kb.db", alias="DATABASE_URL")

    rate_limit_window_seconds: int = Field(60, alias="RATE_LIMIT_WINDOW_SECONDS")
    rate_limit_max_calls: int = Field(20, alias="RATE_LIMIT_MAX_CALLS")

    class Config:
        env_file = ".env"
        extra = "ignore"

settings = Settings()
